# SPDX-License-Identifier: GPL-3.0-or-later
# Copyright (C) 2026 Campaignkeeper Contributors

from __future__ import annotations

from collections.abc import Iterator
from datetime import UTC, datetime
from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from sqlalchemy.ext.asyncio import AsyncSession

from campaignkeeper.models.relationship import RelationshipType
from campaignkeeper.repositories.relationship_type_repository import (
    RelationshipTypeRepository,
)
from campaignkeeper.services.relationship_catalog import (
    CatalogSnapshot,
    RelationshipCatalog,
    RelationshipTypeInfo,
)


def _info(
    type_id: int,
    name: str,
    *,
    is_directional: bool = True,
    inverse_type_id: int | None = None,
    inverse_type_name: str | None = None,
) -> RelationshipTypeInfo:
    return RelationshipTypeInfo(
        id=type_id,
        name=name,
        description=None,
        is_directional=is_directional,
        inverse_type_id=inverse_type_id,
        inverse_type_name=inverse_type_name,
        created_at=datetime(2026, 1, 1, tzinfo=UTC),
    )


@pytest.fixture
def snapshot() -> CatalogSnapshot:
    return CatalogSnapshot.build(
        [
            _info(1, "Mentor", inverse_type_id=2, inverse_type_name="Student"),
            _info(2, "Student", inverse_type_id=1, inverse_type_name="Mentor"),
            _info(3, "Enemy", is_directional=False),
        ]
    )


class TestCatalogSnapshot:
    def test_get_by_id(self, snapshot: CatalogSnapshot) -> None:
        mentor = snapshot.get(1)
        assert mentor is not None
        assert mentor.name == "Mentor"
        assert mentor.inverse_type_name == "Student"

    def test_get_unknown_id(self, snapshot: CatalogSnapshot) -> None:
        assert snapshot.get(99) is None

    def test_find_is_case_insensitive(self, snapshot: CatalogSnapshot) -> None:
        assert snapshot.find("enemy") is snapshot.get(3)
        assert snapshot.find("ENEMY") is snapshot.get(3)
        assert snapshot.find("Ally") is None

    def test_all_sorted_by_name(self, snapshot: CatalogSnapshot) -> None:
        assert [t.name for t in snapshot.all()] == ["Enemy", "Mentor", "Student"]

    def test_len(self, snapshot: CatalogSnapshot) -> None:
        assert len(snapshot) == 3
        assert len(CatalogSnapshot.build([])) == 0

    def test_mappings_are_read_only(self, snapshot: CatalogSnapshot) -> None:
        with pytest.raises(TypeError):
            snapshot.types_by_id[4] = _info(4, "Rival")  # type: ignore[index]


class TestRelationshipCatalog:
    @pytest.fixture
    def list_types(self) -> Iterator[AsyncMock]:
        rows = [
            (
                RelationshipType(
                    id=1,
                    name="Ally",
                    description=None,
                    is_directional=False,
                    inverse_type_id=None,
                    created_at=datetime(2026, 1, 1, tzinfo=UTC),
                ),
                None,
            )
        ]
        with patch.object(
            RelationshipTypeRepository,
            "list_with_inverse_names",
            AsyncMock(return_value=rows),
        ) as mock:
            yield mock

    async def test_loads_once_on_first_use(self, list_types: AsyncMock) -> None:
        catalog = RelationshipCatalog()
        session = MagicMock(spec=AsyncSession)
        assert catalog.is_loaded is False

        ally = await catalog.get(session, 1)
        assert ally is not None
        assert ally.name == "Ally"
        assert await catalog.find(session, "ally") is ally
        assert catalog.is_loaded is True
        assert list_types.await_count == 1

    async def test_misses_reload_without_interval(self, list_types: AsyncMock) -> None:
        catalog = RelationshipCatalog()
        session = MagicMock(spec=AsyncSession)
        await catalog.ensure_loaded(session)

        assert await catalog.get(session, 99) is None
        assert await catalog.find(session, "Nemesis") is None
        assert list_types.await_count == 3

    async def test_misses_within_interval_do_not_reload(self, list_types: AsyncMock) -> None:
        catalog = RelationshipCatalog(min_reload_interval=60)
        session = MagicMock(spec=AsyncSession)
        await catalog.ensure_loaded(session)

        for bogus_id in range(100, 110):
            assert await catalog.get(session, bogus_id) is None
        assert await catalog.find(session, "Nemesis") is None
        assert list_types.await_count == 1

        await catalog.refresh(session)
        assert list_types.await_count == 2
