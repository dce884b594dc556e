# SPDX-License-Identifier: GPL-3.0-or-later
# Copyright (C) 2026 Campaignkeeper Contributors

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

from sqlalchemy import ColumnElement, Select, and_, case, delete, exists, or_, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import aliased

from campaignkeeper.errors import RelationshipConflictError
from campaignkeeper.models.base import utcnow
from campaignkeeper.models.campaign import Campaign, Npc, Organization, Pc
from campaignkeeper.models.entity import EntityKind, EntityRef
from campaignkeeper.models.relationship import EntityRelationship
from campaignkeeper.repositories.base import BaseRepository

_ACTIVE_EDGE_INDEX = "uq_entity_relationships_active_edge"

_src_npc = aliased(Npc, name="src_npc")
_src_pc = aliased(Pc, name="src_pc")
_src_org = aliased(Organization, name="src_org")
_tgt_npc = aliased(Npc, name="tgt_npc")
_tgt_pc = aliased(Pc, name="tgt_pc")
_tgt_org = aliased(Organization, name="tgt_org")


@dataclass(frozen=True, slots=True)
class RelationshipView:
    """An edge plus read-time display fields.

    Only the raw ids are authoritative; the ``*_name`` and type fields are
    resolved per read and never stored.
    """

    id: int
    source_kind: str
    source_id: int
    target_kind: str
    target_id: int
    relationship_type_id: int
    description: str | None
    strength: int | None
    is_active: bool
    campaign_id: int | None
    created_at: datetime
    updated_at: datetime
    source_name: str | None = None
    target_name: str | None = None
    campaign_name: str | None = None
    relationship_type_name: str | None = None
    is_directional: bool | None = None
    inverse_type_name: str | None = None

    @property
    def source(self) -> EntityRef:
        return EntityRef.parse(self.source_kind, self.source_id)

    @property
    def target(self) -> EntityRef:
        return EntityRef.parse(self.target_kind, self.target_id)


def _endpoint_name(kind_column, npc, pc, org) -> ColumnElement[str | None]:  # type: ignore[no-untyped-def]
    return case(
        (kind_column == EntityKind.NPC.value, npc.name),
        (kind_column == EntityKind.PC.value, pc.name),
        (kind_column == EntityKind.ORGANIZATION.value, org.name),
        else_=None,
    )


def _joins_endpoint(kind_column, id_column, alias, kind: EntityKind):  # type: ignore[no-untyped-def]
    return and_(kind_column == kind.value, id_column == alias.id)


def _source_is(ref: EntityRef) -> ColumnElement[bool]:
    return and_(
        EntityRelationship.source_kind == ref.kind.value,
        EntityRelationship.source_id == ref.id,
    )


def _target_is(ref: EntityRef) -> ColumnElement[bool]:
    return and_(
        EntityRelationship.target_kind == ref.kind.value,
        EntityRelationship.target_id == ref.id,
    )


def _is_active_edge_violation(exc: IntegrityError) -> bool:
    message = str(exc.orig)
    # PostgreSQL names the index; SQLite lists the indexed columns.
    return _ACTIVE_EDGE_INDEX in message or (
        "UNIQUE constraint failed" in message and "entity_relationships" in message
    )


class RelationshipRepository(BaseRepository[EntityRelationship]):
    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session, EntityRelationship)

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    @staticmethod
    def _display_select() -> Select:  # type: ignore[type-arg]
        er = EntityRelationship
        return (
            select(
                er,
                _endpoint_name(er.source_kind, _src_npc, _src_pc, _src_org).label("source_name"),
                _endpoint_name(er.target_kind, _tgt_npc, _tgt_pc, _tgt_org).label("target_name"),
                Campaign.name.label("campaign_name"),
            )
            .select_from(er)
            .outerjoin(_src_npc, _joins_endpoint(er.source_kind, er.source_id, _src_npc, EntityKind.NPC))
            .outerjoin(_src_pc, _joins_endpoint(er.source_kind, er.source_id, _src_pc, EntityKind.PC))
            .outerjoin(
                _src_org,
                _joins_endpoint(er.source_kind, er.source_id, _src_org, EntityKind.ORGANIZATION),
            )
            .outerjoin(_tgt_npc, _joins_endpoint(er.target_kind, er.target_id, _tgt_npc, EntityKind.NPC))
            .outerjoin(_tgt_pc, _joins_endpoint(er.target_kind, er.target_id, _tgt_pc, EntityKind.PC))
            .outerjoin(
                _tgt_org,
                _joins_endpoint(er.target_kind, er.target_id, _tgt_org, EntityKind.ORGANIZATION),
            )
            .outerjoin(Campaign, er.campaign_id == Campaign.id)
        )

    @staticmethod
    def _to_view(row) -> RelationshipView:  # type: ignore[no-untyped-def]
        rel: EntityRelationship = row[0]
        return RelationshipView(
            id=rel.id,
            source_kind=rel.source_kind,
            source_id=rel.source_id,
            target_kind=rel.target_kind,
            target_id=rel.target_id,
            relationship_type_id=rel.relationship_type_id,
            description=rel.description,
            strength=rel.strength,
            is_active=rel.is_active,
            campaign_id=rel.campaign_id,
            created_at=rel.created_at,
            updated_at=rel.updated_at,
            source_name=row.source_name,
            target_name=row.target_name,
            campaign_name=row.campaign_name,
        )

    async def _list_views(
        self, condition: ColumnElement[bool], include_inactive: bool
    ) -> list[RelationshipView]:
        stmt = self._display_select().where(condition)
        if not include_inactive:
            stmt = stmt.where(EntityRelationship.is_active.is_(True))
        stmt = stmt.order_by(
            EntityRelationship.created_at.desc(),
            EntityRelationship.id.desc(),
        )
        result = await self.session.execute(stmt)
        return [self._to_view(row) for row in result.all()]

    async def get_view(self, relationship_id: int) -> RelationshipView | None:
        result = await self.session.execute(
            self._display_select().where(EntityRelationship.id == relationship_id)
        )
        row = result.first()
        return self._to_view(row) if row is not None else None

    async def list_for_entity(
        self, ref: EntityRef, *, include_inactive: bool = False
    ) -> list[RelationshipView]:
        return await self._list_views(or_(_source_is(ref), _target_is(ref)), include_inactive)

    async def list_from_entity(
        self, ref: EntityRef, *, include_inactive: bool = False
    ) -> list[RelationshipView]:
        return await self._list_views(_source_is(ref), include_inactive)

    async def list_to_entity(
        self, ref: EntityRef, *, include_inactive: bool = False
    ) -> list[RelationshipView]:
        return await self._list_views(_target_is(ref), include_inactive)

    async def list_by_type(
        self,
        ref: EntityRef,
        relationship_type_id: int,
        *,
        include_inactive: bool = False,
    ) -> list[RelationshipView]:
        condition = and_(
            or_(_source_is(ref), _target_is(ref)),
            EntityRelationship.relationship_type_id == relationship_type_id,
        )
        return await self._list_views(condition, include_inactive)

    async def list_by_campaign(
        self, campaign_id: int, *, include_inactive: bool = False
    ) -> list[RelationshipView]:
        return await self._list_views(
            EntityRelationship.campaign_id == campaign_id, include_inactive
        )

    async def list_for_account(
        self, account_id: int, *, include_inactive: bool = False
    ) -> list[RelationshipView]:
        """Edges with at least one endpoint owned by ``account_id``."""
        condition = or_(
            _src_npc.account_id == account_id,
            _src_pc.account_id == account_id,
            _src_org.account_id == account_id,
            _tgt_npc.account_id == account_id,
            _tgt_pc.account_id == account_id,
            _tgt_org.account_id == account_id,
        )
        return await self._list_views(condition, include_inactive)

    async def exists_exact(
        self,
        source: EntityRef,
        target: EntityRef,
        relationship_type_id: int,
        *,
        exclude_id: int | None = None,
    ) -> bool:
        condition = and_(
            _source_is(source),
            _target_is(target),
            EntityRelationship.relationship_type_id == relationship_type_id,
            EntityRelationship.is_active.is_(True),
        )
        if exclude_id is not None:
            condition = and_(condition, EntityRelationship.id != exclude_id)
        result = await self.session.execute(select(exists().where(condition)))
        return bool(result.scalar())

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    async def create(self, entity: EntityRelationship) -> EntityRelationship:
        """Insert an edge, rejecting an active exact duplicate.

        The pre-check is a fast path; the partial unique index is what makes
        the rejection atomic. On a conflict raised by the index the session
        must be rolled back by the caller.
        """
        if entity.is_active is not False and await self.exists_exact(
            entity.source, entity.target, entity.relationship_type_id
        ):
            raise RelationshipConflictError()
        try:
            return await super().create(entity)
        except IntegrityError as exc:
            if _is_active_edge_violation(exc):
                raise RelationshipConflictError() from exc
            raise

    async def update_content(
        self,
        relationship_id: int,
        *,
        description: str | None,
        strength: int | None,
        is_active: bool,
        campaign_id: int | None,
    ) -> EntityRelationship | None:
        relationship = await self.get_by_id(relationship_id)
        if relationship is None:
            return None
        if is_active and not relationship.is_active:
            await self._ensure_no_active_twin(relationship)
        relationship.description = description
        relationship.strength = strength
        relationship.is_active = is_active
        relationship.campaign_id = campaign_id
        relationship.updated_at = utcnow()
        await self._flush()
        return relationship

    async def set_active(
        self, relationship_id: int, is_active: bool
    ) -> EntityRelationship | None:
        relationship = await self.get_by_id(relationship_id)
        if relationship is None:
            return None
        if is_active and not relationship.is_active:
            await self._ensure_no_active_twin(relationship)
        relationship.is_active = is_active
        relationship.updated_at = utcnow()
        await self._flush()
        return relationship

    async def delete_by_id(self, relationship_id: int) -> bool:
        result = await self.session.execute(
            delete(EntityRelationship).where(EntityRelationship.id == relationship_id)
        )
        await self.session.flush()
        return bool(result.rowcount)

    async def _ensure_no_active_twin(self, relationship: EntityRelationship) -> None:
        if await self.exists_exact(
            relationship.source,
            relationship.target,
            relationship.relationship_type_id,
            exclude_id=relationship.id,
        ):
            raise RelationshipConflictError(
                "Another active relationship with the same source, target and type exists"
            )

    async def _flush(self) -> None:
        try:
            await self.session.flush()
        except IntegrityError as exc:
            if _is_active_edge_violation(exc):
                raise RelationshipConflictError() from exc
            raise
