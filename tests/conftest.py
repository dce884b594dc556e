# SPDX-License-Identifier: GPL-3.0-or-later
# Copyright (C) 2026 Campaignkeeper Contributors

from __future__ import annotations

import os

# Settings are read when the application module is imported.
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("RATE_LIMIT_ENABLED", "false")

from collections.abc import AsyncIterator  # noqa: E402

import pytest  # noqa: E402
from sqlalchemy.ext.asyncio import (  # noqa: E402
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

import campaignkeeper.models  # noqa: E402, F401  (registers all tables on Base.metadata)
from campaignkeeper.models.base import Base  # noqa: E402
from campaignkeeper.models.relationship import RelationshipType  # noqa: E402
from campaignkeeper.services.account_seeder import seed_relationship_types  # noqa: E402
from campaignkeeper.services.relationship_catalog import RelationshipCatalog  # noqa: E402
from campaignkeeper.services.relationship_service import RelationshipService  # noqa: E402


def _get_test_database_url() -> str:
    """Return the test database URL from env, falling back to SQLite."""
    return os.environ.get(
        "TEST_DATABASE_URL",
        "sqlite+aiosqlite:///:memory:",
    )


@pytest.fixture
async def async_engine() -> AsyncIterator[AsyncEngine]:
    """Create an async engine for the test database."""
    url = _get_test_database_url()
    engine = create_async_engine(url, echo=False)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest.fixture
async def db_session(
    async_engine: AsyncEngine,
) -> AsyncIterator[AsyncSession]:
    """Provide a database session that rolls back after each test."""
    session_factory = async_sessionmaker(
        async_engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )
    async with session_factory() as session:
        yield session
        await session.rollback()


@pytest.fixture
async def relationship_types(db_session: AsyncSession) -> dict[str, RelationshipType]:
    """The default relationship catalog, keyed by type name."""
    return await seed_relationship_types(db_session)


@pytest.fixture
def catalog() -> RelationshipCatalog:
    return RelationshipCatalog()


@pytest.fixture
def service(db_session: AsyncSession, catalog: RelationshipCatalog) -> RelationshipService:
    return RelationshipService(db_session, catalog)


# ---------------------------------------------------------------------------
# Factory helpers for creating model instances in tests
# ---------------------------------------------------------------------------


def make_account(
    *,
    username: str = "test-gm",
    email: str | None = "gm@example.com",
) -> dict[str, object]:
    """Return kwargs suitable for constructing an Account model instance."""
    return {
        "username": username,
        "email": email,
    }


def make_campaign(
    *,
    account_id: int,
    name: str = "Test Campaign",
    description: str | None = "A test campaign",
) -> dict[str, object]:
    """Return kwargs suitable for constructing a Campaign model instance."""
    return {
        "account_id": account_id,
        "name": name,
        "description": description,
    }


def make_npc(
    *,
    account_id: int,
    name: str = "Test NPC",
    campaign_id: int | None = None,
    description: str | None = None,
) -> dict[str, object]:
    """Return kwargs suitable for constructing an Npc, Pc or Organization."""
    return {
        "account_id": account_id,
        "campaign_id": campaign_id,
        "name": name,
        "description": description,
    }


def make_relationship_type(
    *,
    name: str = "Test Type",
    description: str | None = "A test relationship type",
    is_directional: bool = True,
    inverse_type_id: int | None = None,
) -> dict[str, object]:
    """Return kwargs suitable for constructing a RelationshipType model instance."""
    return {
        "name": name,
        "description": description,
        "is_directional": is_directional,
        "inverse_type_id": inverse_type_id,
    }


def make_relationship(
    *,
    source_kind: str = "npc",
    source_id: int = 1,
    target_kind: str = "npc",
    target_id: int = 2,
    relationship_type_id: int,
    description: str | None = None,
    strength: int | None = None,
    is_active: bool = True,
    campaign_id: int | None = None,
) -> dict[str, object]:
    """Return kwargs suitable for constructing an EntityRelationship model instance."""
    return {
        "source_kind": source_kind,
        "source_id": source_id,
        "target_kind": target_kind,
        "target_id": target_id,
        "relationship_type_id": relationship_type_id,
        "description": description,
        "strength": strength,
        "is_active": is_active,
        "campaign_id": campaign_id,
    }
