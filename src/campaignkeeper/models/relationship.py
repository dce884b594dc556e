# SPDX-License-Identifier: GPL-3.0-or-later
# Copyright (C) 2026 Campaignkeeper Contributors

from __future__ import annotations

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    func,
    text,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from campaignkeeper.models.base import Base, CreatedAtMixin, IntIdMixin, TimestampMixin
from campaignkeeper.models.entity import EntityKind, EntityRef

STRENGTH_MIN = 1
STRENGTH_MAX = 10

_KIND_LIST = ", ".join(f"'{kind.value}'" for kind in EntityKind)


class RelationshipType(IntIdMixin, CreatedAtMixin, Base):
    __tablename__ = "relationship_types"

    name: Mapped[str] = mapped_column(String, nullable=False)
    description: Mapped[str | None] = mapped_column(Text, default=None)
    is_directional: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    inverse_type_id: Mapped[int | None] = mapped_column(
        ForeignKey("relationship_types.id", ondelete="SET NULL"),
        default=None,
    )

    inverse_type: Mapped[RelationshipType | None] = relationship(
        remote_side="[RelationshipType.id]",
        lazy="raise",
    )

    __table_args__ = (
        CheckConstraint(
            "inverse_type_id IS NULL OR (is_directional AND inverse_type_id != id)",
            name="ck_relationship_types_inverse",
        ),
    )


Index(
    "uq_relationship_types_name_lower",
    func.lower(RelationshipType.name),
    unique=True,
)


class EntityRelationship(IntIdMixin, TimestampMixin, Base):
    __tablename__ = "entity_relationships"

    source_kind: Mapped[str] = mapped_column(String, nullable=False)
    source_id: Mapped[int] = mapped_column(Integer, nullable=False)
    target_kind: Mapped[str] = mapped_column(String, nullable=False)
    target_id: Mapped[int] = mapped_column(Integer, nullable=False)
    relationship_type_id: Mapped[int] = mapped_column(
        ForeignKey("relationship_types.id", ondelete="RESTRICT"),
        nullable=False,
    )
    description: Mapped[str | None] = mapped_column(Text, default=None)
    strength: Mapped[int | None] = mapped_column(Integer, default=None)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    campaign_id: Mapped[int | None] = mapped_column(
        ForeignKey("campaigns.id", ondelete="SET NULL"),
        default=None,
    )

    relationship_type: Mapped[RelationshipType] = relationship(lazy="raise")

    __table_args__ = (
        CheckConstraint(
            f"source_kind IN ({_KIND_LIST})",
            name="ck_entity_relationships_source_kind",
        ),
        CheckConstraint(
            f"target_kind IN ({_KIND_LIST})",
            name="ck_entity_relationships_target_kind",
        ),
        CheckConstraint(
            f"strength IS NULL OR (strength >= {STRENGTH_MIN} AND strength <= {STRENGTH_MAX})",
            name="ck_entity_relationships_strength",
        ),
        Index("idx_entity_relationships_source", "source_kind", "source_id"),
        Index("idx_entity_relationships_target", "target_kind", "target_id"),
        Index("idx_entity_relationships_type", "relationship_type_id"),
        Index("idx_entity_relationships_campaign", "campaign_id"),
        # At most one active edge per exact (source, target, type) tuple.
        Index(
            "uq_entity_relationships_active_edge",
            "source_kind",
            "source_id",
            "target_kind",
            "target_id",
            "relationship_type_id",
            unique=True,
            postgresql_where=text("is_active"),
            sqlite_where=text("is_active = 1"),
        ),
    )

    @property
    def source(self) -> EntityRef:
        return EntityRef.parse(self.source_kind, self.source_id)

    @property
    def target(self) -> EntityRef:
        return EntityRef.parse(self.target_kind, self.target_id)
