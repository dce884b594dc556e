# SPDX-License-Identifier: GPL-3.0-or-later
# Copyright (C) 2026 Campaignkeeper Contributors

"""Error taxonomy for the relationship engine.

Lookups that miss return ``None`` rather than raising; everything else a
caller can reasonably branch on has its own exception class here.
"""

from __future__ import annotations


class CampaignKeeperError(Exception):
    """Base class for all errors raised by campaignkeeper."""


class RelationshipValidationError(CampaignKeeperError):
    """Input was rejected before reaching the store."""


class InvalidEntityKindError(RelationshipValidationError):
    def __init__(self, kind: object, allowed: list[str]) -> None:
        super().__init__(
            f"Invalid entity type {kind!r}. Must be one of: {', '.join(allowed)}"
        )
        self.kind = kind


class UnknownRelationshipTypeError(RelationshipValidationError):
    def __init__(self, relationship_type_id: int) -> None:
        super().__init__(f"Relationship type with ID {relationship_type_id} not found")
        self.relationship_type_id = relationship_type_id


class InvalidStrengthError(RelationshipValidationError):
    def __init__(self, strength: int, minimum: int, maximum: int) -> None:
        super().__init__(f"Strength must be between {minimum} and {maximum}, got {strength}")
        self.strength = strength


class RelationshipConflictError(CampaignKeeperError):
    """An active relationship with the same source, target and type already exists."""

    def __init__(self, message: str = "This relationship already exists") -> None:
        super().__init__(message)


class StorageError(CampaignKeeperError):
    """Unclassified persistence failure. Never retried internally."""


class SeedingError(CampaignKeeperError):
    """Default data for a new account could not be provisioned."""
