# SPDX-License-Identifier: GPL-3.0-or-later
# Copyright (C) 2026 Campaignkeeper Contributors

from campaignkeeper.models.base import Base, CreatedAtMixin, IntIdMixin, TimestampMixin
from campaignkeeper.models.campaign import Account, Campaign, Npc, Organization, Pc
from campaignkeeper.models.entity import EntityKind, EntityRef
from campaignkeeper.models.relationship import (
    STRENGTH_MAX,
    STRENGTH_MIN,
    EntityRelationship,
    RelationshipType,
)

__all__ = [
    "Account",
    "Base",
    "Campaign",
    "CreatedAtMixin",
    "EntityKind",
    "EntityRef",
    "EntityRelationship",
    "IntIdMixin",
    "Npc",
    "Organization",
    "Pc",
    "RelationshipType",
    "STRENGTH_MAX",
    "STRENGTH_MIN",
    "TimestampMixin",
]
