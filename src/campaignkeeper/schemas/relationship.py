# SPDX-License-Identifier: GPL-3.0-or-later
# Copyright (C) 2026 Campaignkeeper Contributors

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from campaignkeeper.models.relationship import STRENGTH_MAX, STRENGTH_MIN


class RelationshipTypeResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    description: str | None
    is_directional: bool
    inverse_type_id: int | None
    inverse_type_name: str | None
    created_at: datetime


class RelationshipCreate(BaseModel):
    # Kinds stay plain strings here so an unknown tag is reported by the
    # entity-kind check rather than as a generic schema error.
    source_kind: str
    source_id: int
    target_kind: str
    target_id: int
    relationship_type_id: int
    description: str | None = None
    strength: int | None = Field(None, ge=STRENGTH_MIN, le=STRENGTH_MAX)
    is_active: bool = True
    campaign_id: int | None = None


class RelationshipUpdate(BaseModel):
    """Content fields only. Identity fields sent by a client are dropped."""

    model_config = ConfigDict(extra="ignore")

    description: str | None = None
    strength: int | None = Field(None, ge=STRENGTH_MIN, le=STRENGTH_MAX)
    is_active: bool = True
    campaign_id: int | None = None


class RelationshipCreated(BaseModel):
    id: int


class RelationshipExists(BaseModel):
    exists: bool


class RelationshipResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

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
