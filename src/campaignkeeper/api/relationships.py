# SPDX-License-Identifier: GPL-3.0-or-later
# Copyright (C) 2026 Campaignkeeper Contributors

from fastapi import APIRouter, Depends, HTTPException, Query, Request, Response
from sqlalchemy.ext.asyncio import AsyncSession

from campaignkeeper.api.deps import (
    entity_ref_or_422,
    get_relationship_service,
    limiter,
)
from campaignkeeper.config import get_settings
from campaignkeeper.db.session import get_db
from campaignkeeper.errors import RelationshipConflictError, RelationshipValidationError
from campaignkeeper.repositories.relationship_repository import RelationshipView
from campaignkeeper.schemas.common import ErrorResponse
from campaignkeeper.schemas.relationship import (
    RelationshipCreate,
    RelationshipCreated,
    RelationshipExists,
    RelationshipResponse,
    RelationshipTypeResponse,
    RelationshipUpdate,
)
from campaignkeeper.services.relationship_service import RelationshipService

router = APIRouter(prefix="/relationships", tags=["relationships"])


def _relationship_create_limit() -> str:
    return get_settings().relationship_create_rate_limit


def _responses(views: list[RelationshipView]) -> list[RelationshipResponse]:
    return [RelationshipResponse.model_validate(v) for v in views]


async def _require_relationship(service: RelationshipService, relationship_id: int) -> None:
    if await service.get_by_id(relationship_id) is None:
        raise HTTPException(
            status_code=404, detail=f"Relationship with ID {relationship_id} not found"
        )


# ---------------------------------------------------------------------------
# Relationship types
# ---------------------------------------------------------------------------


@router.get("/types", response_model=list[RelationshipTypeResponse])
async def list_relationship_types(
    service: RelationshipService = Depends(get_relationship_service),
) -> list[RelationshipTypeResponse]:
    types = await service.list_types()
    return [RelationshipTypeResponse.model_validate(t) for t in types]


@router.get("/types/by-name/{name}", response_model=RelationshipTypeResponse)
async def get_relationship_type_by_name(
    name: str,
    service: RelationshipService = Depends(get_relationship_service),
) -> RelationshipTypeResponse:
    rt = await service.get_type_by_name(name)
    if rt is None:
        raise HTTPException(status_code=404, detail=f"Relationship type {name!r} not found")
    return RelationshipTypeResponse.model_validate(rt)


@router.get("/types/{relationship_type_id}", response_model=RelationshipTypeResponse)
async def get_relationship_type(
    relationship_type_id: int,
    service: RelationshipService = Depends(get_relationship_service),
) -> RelationshipTypeResponse:
    rt = await service.get_type_by_id(relationship_type_id)
    if rt is None:
        raise HTTPException(
            status_code=404,
            detail=f"Relationship type with ID {relationship_type_id} not found",
        )
    return RelationshipTypeResponse.model_validate(rt)


# ---------------------------------------------------------------------------
# Entity relationships
# ---------------------------------------------------------------------------


@router.post(
    "",
    response_model=RelationshipCreated,
    status_code=201,
    responses={409: {"model": ErrorResponse}, 422: {"model": ErrorResponse}},
)
@limiter.limit(_relationship_create_limit)
async def create_relationship(
    request: Request,
    body: RelationshipCreate,
    db: AsyncSession = Depends(get_db),
    service: RelationshipService = Depends(get_relationship_service),
) -> RelationshipCreated:
    source = entity_ref_or_422(body.source_kind, body.source_id)
    target = entity_ref_or_422(body.target_kind, body.target_id)
    try:
        relationship_id = await service.create(
            source,
            target,
            body.relationship_type_id,
            description=body.description,
            strength=body.strength,
            is_active=body.is_active,
            campaign_id=body.campaign_id,
        )
        await db.commit()
    except RelationshipValidationError as exc:
        await db.rollback()
        raise HTTPException(status_code=422, detail=str(exc))
    except RelationshipConflictError as exc:
        await db.rollback()
        raise HTTPException(status_code=409, detail=str(exc))
    return RelationshipCreated(id=relationship_id)


@router.get("/exists", response_model=RelationshipExists)
async def relationship_exists(
    source_kind: str = Query(...),
    source_id: int = Query(...),
    target_kind: str = Query(...),
    target_id: int = Query(...),
    relationship_type_id: int = Query(...),
    service: RelationshipService = Depends(get_relationship_service),
) -> RelationshipExists:
    source = entity_ref_or_422(source_kind, source_id)
    target = entity_ref_or_422(target_kind, target_id)
    exists = await service.exists_exact(source, target, relationship_type_id)
    return RelationshipExists(exists=exists)


@router.get("/entity/{entity_kind}/{entity_id}", response_model=list[RelationshipResponse])
async def list_entity_relationships(
    entity_kind: str,
    entity_id: int,
    include_inactive: bool = Query(False),
    service: RelationshipService = Depends(get_relationship_service),
) -> list[RelationshipResponse]:
    ref = entity_ref_or_422(entity_kind, entity_id)
    return _responses(await service.for_entity(ref, include_inactive=include_inactive))


@router.get(
    "/entity/{entity_kind}/{entity_id}/type/{relationship_type_id}",
    response_model=list[RelationshipResponse],
)
async def list_entity_relationships_by_type(
    entity_kind: str,
    entity_id: int,
    relationship_type_id: int,
    include_inactive: bool = Query(False),
    service: RelationshipService = Depends(get_relationship_service),
) -> list[RelationshipResponse]:
    ref = entity_ref_or_422(entity_kind, entity_id)
    views = await service.by_type(ref, relationship_type_id, include_inactive=include_inactive)
    return _responses(views)


@router.get("/from/{entity_kind}/{entity_id}", response_model=list[RelationshipResponse])
async def list_relationships_from(
    entity_kind: str,
    entity_id: int,
    include_inactive: bool = Query(False),
    service: RelationshipService = Depends(get_relationship_service),
) -> list[RelationshipResponse]:
    ref = entity_ref_or_422(entity_kind, entity_id)
    return _responses(await service.from_entity(ref, include_inactive=include_inactive))


@router.get("/to/{entity_kind}/{entity_id}", response_model=list[RelationshipResponse])
async def list_relationships_to(
    entity_kind: str,
    entity_id: int,
    include_inactive: bool = Query(False),
    service: RelationshipService = Depends(get_relationship_service),
) -> list[RelationshipResponse]:
    ref = entity_ref_or_422(entity_kind, entity_id)
    return _responses(await service.to_entity(ref, include_inactive=include_inactive))


@router.get("/campaign/{campaign_id}", response_model=list[RelationshipResponse])
async def list_campaign_relationships(
    campaign_id: int,
    include_inactive: bool = Query(False),
    service: RelationshipService = Depends(get_relationship_service),
) -> list[RelationshipResponse]:
    return _responses(await service.by_campaign(campaign_id, include_inactive=include_inactive))


@router.get("/account/{account_id}", response_model=list[RelationshipResponse])
async def list_account_relationships(
    account_id: int,
    include_inactive: bool = Query(False),
    service: RelationshipService = Depends(get_relationship_service),
) -> list[RelationshipResponse]:
    return _responses(await service.for_account(account_id, include_inactive=include_inactive))


@router.get(
    "/{relationship_id}",
    response_model=RelationshipResponse,
    responses={404: {"model": ErrorResponse}},
)
async def get_relationship(
    relationship_id: int,
    service: RelationshipService = Depends(get_relationship_service),
) -> RelationshipResponse:
    view = await service.get_by_id(relationship_id)
    if view is None:
        raise HTTPException(
            status_code=404, detail=f"Relationship with ID {relationship_id} not found"
        )
    return RelationshipResponse.model_validate(view)


@router.put("/{relationship_id}", status_code=204)
async def update_relationship(
    relationship_id: int,
    body: RelationshipUpdate,
    db: AsyncSession = Depends(get_db),
    service: RelationshipService = Depends(get_relationship_service),
) -> Response:
    await _require_relationship(service, relationship_id)
    try:
        await service.update(
            relationship_id,
            description=body.description,
            strength=body.strength,
            is_active=body.is_active,
            campaign_id=body.campaign_id,
        )
        await db.commit()
    except RelationshipValidationError as exc:
        await db.rollback()
        raise HTTPException(status_code=422, detail=str(exc))
    except RelationshipConflictError as exc:
        await db.rollback()
        raise HTTPException(status_code=409, detail=str(exc))
    return Response(status_code=204)


@router.delete("/{relationship_id}", status_code=204)
async def delete_relationship(
    relationship_id: int,
    db: AsyncSession = Depends(get_db),
    service: RelationshipService = Depends(get_relationship_service),
) -> Response:
    await _require_relationship(service, relationship_id)
    await service.delete(relationship_id)
    await db.commit()
    return Response(status_code=204)


@router.post("/{relationship_id}/deactivate", status_code=204)
async def deactivate_relationship(
    relationship_id: int,
    db: AsyncSession = Depends(get_db),
    service: RelationshipService = Depends(get_relationship_service),
) -> Response:
    await _require_relationship(service, relationship_id)
    await service.deactivate(relationship_id)
    await db.commit()
    return Response(status_code=204)


@router.post(
    "/{relationship_id}/reactivate",
    status_code=204,
    responses={404: {"model": ErrorResponse}, 409: {"model": ErrorResponse}},
)
async def reactivate_relationship(
    relationship_id: int,
    db: AsyncSession = Depends(get_db),
    service: RelationshipService = Depends(get_relationship_service),
) -> Response:
    await _require_relationship(service, relationship_id)
    try:
        await service.reactivate(relationship_id)
        await db.commit()
    except RelationshipConflictError as exc:
        await db.rollback()
        raise HTTPException(status_code=409, detail=str(exc))
    return Response(status_code=204)
