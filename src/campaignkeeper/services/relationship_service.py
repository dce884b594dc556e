# SPDX-License-Identifier: GPL-3.0-or-later
# Copyright (C) 2026 Campaignkeeper Contributors

"""Lifecycle and query operations over the relationship graph.

Callers address endpoints with ``EntityRef`` values; raw kind strings from
the outside are parsed with ``EntityRef.parse`` before they get here. The
service flushes but never commits, so the caller owns the unit of work.
"""

from __future__ import annotations

import dataclasses
import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from campaignkeeper.errors import (
    InvalidStrengthError,
    RelationshipValidationError,
    StorageError,
    UnknownRelationshipTypeError,
)
from campaignkeeper.models.entity import EntityRef
from campaignkeeper.models.relationship import (
    STRENGTH_MAX,
    STRENGTH_MIN,
    EntityRelationship,
)
from campaignkeeper.repositories.relationship_repository import (
    RelationshipRepository,
    RelationshipView,
)
from campaignkeeper.services.relationship_catalog import (
    RelationshipCatalog,
    RelationshipTypeInfo,
)

logger = logging.getLogger(__name__)


def validate_strength(strength: int | None) -> None:
    if strength is not None and not STRENGTH_MIN <= strength <= STRENGTH_MAX:
        raise InvalidStrengthError(strength, STRENGTH_MIN, STRENGTH_MAX)


@asynccontextmanager
async def _storage_errors(operation: str) -> AsyncIterator[None]:
    try:
        yield
    except IntegrityError as exc:
        logger.warning("%s rejected by the database: %s", operation, exc.orig)
        raise RelationshipValidationError(
            f"{operation} references a record that does not exist"
        ) from exc
    except SQLAlchemyError as exc:
        logger.exception("%s failed", operation)
        raise StorageError(f"{operation} failed") from exc


class RelationshipService:
    def __init__(self, session: AsyncSession, catalog: RelationshipCatalog) -> None:
        self.session = session
        self.catalog = catalog
        self.repo = RelationshipRepository(session)

    # ------------------------------------------------------------------
    # Catalog
    # ------------------------------------------------------------------

    async def list_types(self) -> list[RelationshipTypeInfo]:
        async with _storage_errors("Listing relationship types"):
            snapshot = await self.catalog.ensure_loaded(self.session)
        return snapshot.all()

    async def get_type_by_id(self, relationship_type_id: int) -> RelationshipTypeInfo | None:
        async with _storage_errors("Loading relationship type"):
            return await self.catalog.get(self.session, relationship_type_id)

    async def get_type_by_name(self, name: str) -> RelationshipTypeInfo | None:
        async with _storage_errors("Loading relationship type"):
            return await self.catalog.find(self.session, name)

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    async def create(
        self,
        source: EntityRef,
        target: EntityRef,
        relationship_type_id: int,
        *,
        description: str | None = None,
        strength: int | None = None,
        is_active: bool = True,
        campaign_id: int | None = None,
    ) -> int:
        """Create an edge and return its id.

        Raises ``RelationshipValidationError`` (unknown kind or type, strength
        out of range) or ``RelationshipConflictError`` when an active edge with
        the same source, target and type already exists.
        """
        validate_strength(strength)
        if await self.get_type_by_id(relationship_type_id) is None:
            raise UnknownRelationshipTypeError(relationship_type_id)

        relationship = EntityRelationship(
            source_kind=source.kind.value,
            source_id=source.id,
            target_kind=target.kind.value,
            target_id=target.id,
            relationship_type_id=relationship_type_id,
            description=description,
            strength=strength,
            is_active=is_active,
            campaign_id=campaign_id,
        )
        async with _storage_errors("Creating relationship"):
            relationship = await self.repo.create(relationship)
        logger.info(
            "Created relationship %d: %s -[%d]-> %s",
            relationship.id,
            source,
            relationship_type_id,
            target,
        )
        return relationship.id

    async def get_by_id(self, relationship_id: int) -> RelationshipView | None:
        async with _storage_errors("Loading relationship"):
            view = await self.repo.get_view(relationship_id)
        if view is None:
            return None
        return (await self._annotate([view]))[0]

    async def update(
        self,
        relationship_id: int,
        *,
        description: str | None = None,
        strength: int | None = None,
        is_active: bool = True,
        campaign_id: int | None = None,
    ) -> None:
        """Overwrite the content fields of an edge.

        Source, target and type are not parameters: an edge is never
        re-pointed. Unknown ids are ignored.
        """
        validate_strength(strength)
        async with _storage_errors("Updating relationship"):
            updated = await self.repo.update_content(
                relationship_id,
                description=description,
                strength=strength,
                is_active=is_active,
                campaign_id=campaign_id,
            )
        if updated is not None:
            logger.info("Updated relationship %d", relationship_id)

    async def delete(self, relationship_id: int) -> None:
        async with _storage_errors("Deleting relationship"):
            deleted = await self.repo.delete_by_id(relationship_id)
        if deleted:
            logger.info("Deleted relationship %d", relationship_id)

    async def deactivate(self, relationship_id: int) -> None:
        async with _storage_errors("Deactivating relationship"):
            changed = await self.repo.set_active(relationship_id, False)
        if changed is not None:
            logger.info("Deactivated relationship %d", relationship_id)

    async def reactivate(self, relationship_id: int) -> None:
        async with _storage_errors("Reactivating relationship"):
            changed = await self.repo.set_active(relationship_id, True)
        if changed is not None:
            logger.info("Reactivated relationship %d", relationship_id)

    async def exists_exact(
        self, source: EntityRef, target: EntityRef, relationship_type_id: int
    ) -> bool:
        async with _storage_errors("Checking relationship"):
            return await self.repo.exists_exact(source, target, relationship_type_id)

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    async def for_entity(
        self, ref: EntityRef, *, include_inactive: bool = False
    ) -> list[RelationshipView]:
        async with _storage_errors("Listing relationships"):
            views = await self.repo.list_for_entity(ref, include_inactive=include_inactive)
        logger.debug("Retrieved %d relationships for %s", len(views), ref)
        return await self._annotate(views)

    async def from_entity(
        self, ref: EntityRef, *, include_inactive: bool = False
    ) -> list[RelationshipView]:
        async with _storage_errors("Listing relationships"):
            views = await self.repo.list_from_entity(ref, include_inactive=include_inactive)
        return await self._annotate(views)

    async def to_entity(
        self, ref: EntityRef, *, include_inactive: bool = False
    ) -> list[RelationshipView]:
        async with _storage_errors("Listing relationships"):
            views = await self.repo.list_to_entity(ref, include_inactive=include_inactive)
        return await self._annotate(views)

    async def by_type(
        self,
        ref: EntityRef,
        relationship_type_id: int,
        *,
        include_inactive: bool = False,
    ) -> list[RelationshipView]:
        async with _storage_errors("Listing relationships"):
            views = await self.repo.list_by_type(
                ref, relationship_type_id, include_inactive=include_inactive
            )
        return await self._annotate(views)

    async def by_campaign(
        self, campaign_id: int, *, include_inactive: bool = False
    ) -> list[RelationshipView]:
        async with _storage_errors("Listing relationships"):
            views = await self.repo.list_by_campaign(
                campaign_id, include_inactive=include_inactive
            )
        logger.debug("Retrieved %d relationships for campaign %d", len(views), campaign_id)
        return await self._annotate(views)

    async def for_account(
        self, account_id: int, *, include_inactive: bool = False
    ) -> list[RelationshipView]:
        async with _storage_errors("Listing relationships"):
            views = await self.repo.list_for_account(
                account_id, include_inactive=include_inactive
            )
        logger.debug("Retrieved %d relationships for account %d", len(views), account_id)
        return await self._annotate(views)

    async def _annotate(self, views: list[RelationshipView]) -> list[RelationshipView]:
        """Fill in type name, directionality and inverse name from the catalog."""
        if not views:
            return views
        async with _storage_errors("Loading relationship types"):
            snapshot = await self.catalog.ensure_loaded(self.session)
            if any(snapshot.get(v.relationship_type_id) is None for v in views):
                snapshot = await self.catalog.reload_on_miss(self.session)
        annotated = []
        for view in views:
            info = snapshot.get(view.relationship_type_id)
            if info is None:
                annotated.append(view)
                continue
            annotated.append(
                dataclasses.replace(
                    view,
                    relationship_type_name=info.name,
                    is_directional=info.is_directional,
                    inverse_type_name=info.inverse_type_name,
                )
            )
        return annotated

