# SPDX-License-Identifier: GPL-3.0-or-later
# Copyright (C) 2026 Campaignkeeper Contributors

"""Immutable, explicitly refreshed view of the relationship type catalog.

Relationship types are reference data provisioned at setup time, so the
whole table is read once into a ``CatalogSnapshot``. Readers always see a
complete snapshot; ``refresh`` builds a new one and swaps the reference.
"""

from __future__ import annotations

import asyncio
import logging
import time
from collections.abc import Mapping
from dataclasses import dataclass
from datetime import datetime
from types import MappingProxyType

from sqlalchemy.ext.asyncio import AsyncSession

from campaignkeeper.repositories.relationship_type_repository import (
    RelationshipTypeRepository,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class RelationshipTypeInfo:
    id: int
    name: str
    description: str | None
    is_directional: bool
    inverse_type_id: int | None
    inverse_type_name: str | None
    created_at: datetime


@dataclass(frozen=True)
class CatalogSnapshot:
    types_by_id: Mapping[int, RelationshipTypeInfo]
    ids_by_name: Mapping[str, int]

    @classmethod
    def build(cls, types: list[RelationshipTypeInfo]) -> CatalogSnapshot:
        return cls(
            types_by_id=MappingProxyType({t.id: t for t in types}),
            ids_by_name=MappingProxyType({t.name.lower(): t.id for t in types}),
        )

    def get(self, relationship_type_id: int) -> RelationshipTypeInfo | None:
        return self.types_by_id.get(relationship_type_id)

    def find(self, name: str) -> RelationshipTypeInfo | None:
        type_id = self.ids_by_name.get(name.lower())
        return self.types_by_id[type_id] if type_id is not None else None

    def all(self) -> list[RelationshipTypeInfo]:
        return sorted(self.types_by_id.values(), key=lambda t: t.name)

    def __len__(self) -> int:
        return len(self.types_by_id)


class RelationshipCatalog:
    """Process-wide holder of the current snapshot.

    Lookups that miss reload the catalog at most once per
    ``min_reload_interval`` seconds. ``refresh`` always reloads.
    """

    def __init__(self, min_reload_interval: float = 0.0) -> None:
        self._snapshot: CatalogSnapshot | None = None
        self._loaded_at = 0.0
        self._min_reload_interval = min_reload_interval
        self._lock = asyncio.Lock()

    @property
    def is_loaded(self) -> bool:
        return self._snapshot is not None

    async def refresh(self, session: AsyncSession) -> CatalogSnapshot:
        async with self._lock:
            rows = await RelationshipTypeRepository(session).list_with_inverse_names()
            snapshot = CatalogSnapshot.build(
                [
                    RelationshipTypeInfo(
                        id=rt.id,
                        name=rt.name,
                        description=rt.description,
                        is_directional=rt.is_directional,
                        inverse_type_id=rt.inverse_type_id,
                        inverse_type_name=inverse_name,
                        created_at=rt.created_at,
                    )
                    for rt, inverse_name in rows
                ]
            )
            self._snapshot = snapshot
            self._loaded_at = time.monotonic()
        logger.info("Loaded %d relationship types into catalog", len(snapshot))
        return snapshot

    async def ensure_loaded(self, session: AsyncSession) -> CatalogSnapshot:
        if self._snapshot is None:
            return await self.refresh(session)
        return self._snapshot

    async def reload_on_miss(self, session: AsyncSession) -> CatalogSnapshot:
        """Reload after a lookup miss unless the snapshot is still fresh."""
        if self.is_loaded and time.monotonic() - self._loaded_at < self._min_reload_interval:
            logger.debug("Catalog reloaded recently, not reloading on miss")
            return await self.ensure_loaded(session)
        return await self.refresh(session)

    async def get(
        self, session: AsyncSession, relationship_type_id: int
    ) -> RelationshipTypeInfo | None:
        """Look up by id, reloading if the snapshot does not know it."""
        snapshot = await self.ensure_loaded(session)
        info = snapshot.get(relationship_type_id)
        if info is None:
            info = (await self.reload_on_miss(session)).get(relationship_type_id)
        return info

    async def find(self, session: AsyncSession, name: str) -> RelationshipTypeInfo | None:
        snapshot = await self.ensure_loaded(session)
        info = snapshot.find(name)
        if info is None:
            info = (await self.reload_on_miss(session)).find(name)
        return info
