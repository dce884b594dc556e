# SPDX-License-Identifier: GPL-3.0-or-later
# Copyright (C) 2026 Campaignkeeper Contributors

from campaignkeeper.repositories.base import BaseRepository
from campaignkeeper.repositories.relationship_repository import (
    RelationshipRepository,
    RelationshipView,
)
from campaignkeeper.repositories.relationship_type_repository import (
    RelationshipTypeRepository,
)

__all__ = [
    "BaseRepository",
    "RelationshipRepository",
    "RelationshipTypeRepository",
    "RelationshipView",
]
