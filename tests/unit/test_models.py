# SPDX-License-Identifier: GPL-3.0-or-later
# Copyright (C) 2026 Campaignkeeper Contributors

from __future__ import annotations

import dataclasses

import pytest

from campaignkeeper.errors import InvalidEntityKindError, RelationshipValidationError
from campaignkeeper.models.base import Base, CreatedAtMixin, IntIdMixin, TimestampMixin
from campaignkeeper.models.campaign import Campaign, Npc, Organization, Pc
from campaignkeeper.models.entity import EntityKind, EntityRef
from campaignkeeper.models.relationship import EntityRelationship, RelationshipType
from tests.conftest import make_relationship


class TestEntityKind:
    def test_values_are_the_wire_tags(self) -> None:
        assert EntityKind.values() == ["npc", "pc", "organization"]

    def test_parse_accepts_tag_and_member(self) -> None:
        assert EntityKind.parse("pc") is EntityKind.PC
        assert EntityKind.parse(EntityKind.ORGANIZATION) is EntityKind.ORGANIZATION

    @pytest.mark.parametrize("bad", ["NPC", "monster", "", "org"])
    def test_parse_rejects_unknown_tags(self, bad: str) -> None:
        with pytest.raises(InvalidEntityKindError) as exc_info:
            EntityKind.parse(bad)
        assert "npc, pc, organization" in str(exc_info.value)
        assert exc_info.value.kind == bad

    def test_invalid_kind_is_a_validation_error(self) -> None:
        assert issubclass(InvalidEntityKindError, RelationshipValidationError)


class TestEntityRef:
    def test_constructor_coerces_tag(self) -> None:
        ref = EntityRef("npc", 10)  # type: ignore[arg-type]
        assert ref.kind is EntityKind.NPC
        assert ref.id == 10

    def test_constructor_rejects_unknown_kind(self) -> None:
        with pytest.raises(InvalidEntityKindError):
            EntityRef("dragon", 1)  # type: ignore[arg-type]

    def test_shortcuts(self) -> None:
        assert EntityRef.npc(1) == EntityRef.parse("npc", 1)
        assert EntityRef.pc(2) == EntityRef(EntityKind.PC, 2)
        assert EntityRef.organization(3).kind is EntityKind.ORGANIZATION

    def test_same_id_different_kind_are_distinct(self) -> None:
        assert EntityRef.npc(5) != EntityRef.pc(5)
        assert len({EntityRef.npc(5), EntityRef.pc(5), EntityRef.npc(5)}) == 2

    def test_is_immutable(self) -> None:
        ref = EntityRef.npc(1)
        with pytest.raises(dataclasses.FrozenInstanceError):
            ref.id = 2  # type: ignore[misc]

    def test_str(self) -> None:
        assert str(EntityRef.organization(7)) == "organization#7"


class TestEntityRelationshipDefaults:
    def test_relationship_fields(self) -> None:
        rel = EntityRelationship(
            **make_relationship(
                source_kind="npc",
                source_id=10,
                target_kind="pc",
                target_id=5,
                relationship_type_id=3,
                strength=7,
            )
        )
        assert rel.source == EntityRef.npc(10)
        assert rel.target == EntityRef.pc(5)
        assert rel.strength == 7
        assert rel.description is None
        assert rel.campaign_id is None

    def test_is_active_defaults_to_true(self) -> None:
        col = EntityRelationship.__table__.c["is_active"]
        assert col.default is not None
        assert col.default.arg is True
        assert col.nullable is False

    def test_optional_columns_are_nullable(self) -> None:
        table = EntityRelationship.__table__
        for name in ("description", "strength", "campaign_id"):
            assert table.c[name].nullable is True

    def test_active_edge_index_is_partial_and_unique(self) -> None:
        indexes = {ix.name: ix for ix in EntityRelationship.__table__.indexes}
        ix = indexes["uq_entity_relationships_active_edge"]
        assert ix.unique is True
        assert [c.name for c in ix.columns] == [
            "source_kind",
            "source_id",
            "target_kind",
            "target_id",
            "relationship_type_id",
        ]
        assert ix.dialect_options["postgresql"]["where"] is not None
        assert ix.dialect_options["sqlite"]["where"] is not None

    def test_lookup_indexes_exist(self) -> None:
        names = {ix.name for ix in EntityRelationship.__table__.indexes}
        assert {
            "idx_entity_relationships_source",
            "idx_entity_relationships_target",
            "idx_entity_relationships_type",
            "idx_entity_relationships_campaign",
        } <= names

    def test_check_constraints(self) -> None:
        names = {c.name for c in EntityRelationship.__table__.constraints if c.name}
        assert "ck_entity_relationships_source_kind" in names
        assert "ck_entity_relationships_target_kind" in names
        assert "ck_entity_relationships_strength" in names

    def test_type_foreign_key_restricts_delete(self) -> None:
        fk = next(iter(EntityRelationship.__table__.c["relationship_type_id"].foreign_keys))
        assert fk.ondelete == "RESTRICT"


class TestRelationshipTypeDefaults:
    def test_is_directional_defaults_to_true(self) -> None:
        col = RelationshipType.__table__.c["is_directional"]
        assert col.default is not None
        assert col.default.arg is True

    def test_name_unique_case_insensitively(self) -> None:
        indexes = {ix.name: ix for ix in RelationshipType.__table__.indexes}
        assert indexes["uq_relationship_types_name_lower"].unique is True

    def test_has_no_updated_at(self) -> None:
        assert "updated_at" not in RelationshipType.__table__.c
        assert "created_at" in RelationshipType.__table__.c


class TestOwnedRecords:
    @pytest.mark.parametrize(
        ("model", "table"),
        [(Npc, "npcs"), (Pc, "pcs"), (Organization, "organizations")],
    )
    def test_table_names(self, model: type[Base], table: str) -> None:
        assert model.__tablename__ == table
        assert {"account_id", "campaign_id", "name", "description"} <= set(
            model.__table__.c.keys()
        )

    def test_campaign_columns(self) -> None:
        assert {"account_id", "name", "description"} <= set(Campaign.__table__.c.keys())


class TestMixins:
    def test_all_tables_registered(self) -> None:
        assert {
            "accounts",
            "campaigns",
            "npcs",
            "pcs",
            "organizations",
            "relationship_types",
            "entity_relationships",
        } <= set(Base.metadata.tables)

    def test_mixins_are_plain_classes(self) -> None:
        assert issubclass(TimestampMixin, CreatedAtMixin)
        assert not issubclass(IntIdMixin, Base)
