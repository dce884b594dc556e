# SPDX-License-Identifier: GPL-3.0-or-later
# Copyright (C) 2026 Campaignkeeper Contributors

from __future__ import annotations

from sqlalchemy import Select, func, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import aliased

from campaignkeeper.models.relationship import RelationshipType
from campaignkeeper.repositories.base import BaseRepository


class RelationshipTypeRepository(BaseRepository[RelationshipType]):
    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session, RelationshipType)

    @staticmethod
    def _with_inverse_name() -> Select[tuple[RelationshipType, str | None]]:
        inverse = aliased(RelationshipType)
        return select(RelationshipType, inverse.name.label("inverse_type_name")).outerjoin(
            inverse, RelationshipType.inverse_type_id == inverse.id
        )

    async def list_with_inverse_names(self) -> list[tuple[RelationshipType, str | None]]:
        stmt = self._with_inverse_name().order_by(RelationshipType.name)
        result = await self.session.execute(stmt)
        return [(row[0], row[1]) for row in result.all()]

    async def get_by_name(self, name: str) -> RelationshipType | None:
        result = await self.session.execute(
            select(RelationshipType).where(
                func.lower(RelationshipType.name) == name.lower()
            )
        )
        return result.scalar_one_or_none()
