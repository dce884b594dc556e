# SPDX-License-Identifier: GPL-3.0-or-later
# Copyright (C) 2026 Campaignkeeper Contributors

from __future__ import annotations

import asyncio
import os

import pytest
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker

from campaignkeeper.errors import RelationshipConflictError
from campaignkeeper.models.entity import EntityRef
from campaignkeeper.services.account_seeder import seed_relationship_types
from campaignkeeper.services.relationship_catalog import RelationshipCatalog
from campaignkeeper.services.relationship_service import RelationshipService

needs_db = pytest.mark.skipif(
    "TEST_DATABASE_URL" not in os.environ,
    reason="TEST_DATABASE_URL not set; skipping integration test",
)


@needs_db
class TestConcurrentCreate:
    async def test_only_one_identical_create_wins(self, async_engine: AsyncEngine) -> None:
        session_factory = async_sessionmaker(
            async_engine, class_=AsyncSession, expire_on_commit=False
        )
        async with session_factory() as session:
            types = await seed_relationship_types(session)
            friend_id = types["Friend"].id
            await session.commit()

        catalog = RelationshipCatalog()

        async def _create() -> int | None:
            async with session_factory() as session:
                service = RelationshipService(session, catalog)
                try:
                    relationship_id = await service.create(
                        EntityRef.npc(1), EntityRef.pc(2), friend_id
                    )
                    await session.commit()
                except RelationshipConflictError:
                    await session.rollback()
                    return None
                return relationship_id

        results = await asyncio.gather(*(_create() for _ in range(5)))
        assert len([r for r in results if r is not None]) == 1

        async with session_factory() as session:
            service = RelationshipService(session, catalog)
            views = await service.for_entity(EntityRef.npc(1))
            assert len(views) == 1
