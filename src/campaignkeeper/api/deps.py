# SPDX-License-Identifier: GPL-3.0-or-later
# Copyright (C) 2026 Campaignkeeper Contributors

from __future__ import annotations

from fastapi import Depends, HTTPException, Request
from slowapi import Limiter
from slowapi.util import get_remote_address
from sqlalchemy.ext.asyncio import AsyncSession

from campaignkeeper.config import get_settings
from campaignkeeper.db.session import get_db
from campaignkeeper.errors import InvalidEntityKindError
from campaignkeeper.models.entity import EntityRef
from campaignkeeper.services.relationship_catalog import RelationshipCatalog
from campaignkeeper.services.relationship_service import RelationshipService

limiter = Limiter(
    key_func=get_remote_address,
    enabled=get_settings().rate_limit_enabled,
)


def get_catalog(request: Request) -> RelationshipCatalog:
    """Return the application's catalog, creating it on first use."""
    catalog = getattr(request.app.state, "relationship_catalog", None)
    if catalog is None:
        catalog = RelationshipCatalog(get_settings().catalog_min_reload_seconds)
        request.app.state.relationship_catalog = catalog
    return catalog


def get_relationship_service(
    db: AsyncSession = Depends(get_db),
    catalog: RelationshipCatalog = Depends(get_catalog),
) -> RelationshipService:
    return RelationshipService(db, catalog)


def entity_ref_or_422(kind: str, entity_id: int) -> EntityRef:
    try:
        return EntityRef.parse(kind, entity_id)
    except InvalidEntityKindError as exc:
        raise HTTPException(status_code=422, detail=str(exc)) from None
