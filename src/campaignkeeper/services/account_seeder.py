# SPDX-License-Identifier: GPL-3.0-or-later
# Copyright (C) 2026 Campaignkeeper Contributors

"""Provisioning of reference data and starter content.

``seed_relationship_types`` is the setup step that fills the catalog.
``seed_new_account`` gives a fresh account a campaign, two NPCs and an
alliance between them. It raises ``SeedingError`` rather than leaving a
half-seeded account behind; the caller rolls the session back.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from sqlalchemy.ext.asyncio import AsyncSession

from campaignkeeper.errors import SeedingError
from campaignkeeper.models.campaign import Campaign, Npc
from campaignkeeper.models.entity import EntityRef
from campaignkeeper.models.relationship import RelationshipType
from campaignkeeper.repositories.relationship_type_repository import (
    RelationshipTypeRepository,
)
from campaignkeeper.services.relationship_service import RelationshipService

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TypeSeed:
    name: str
    description: str
    is_directional: bool
    inverse: str | None = None


DEFAULT_RELATIONSHIP_TYPES: tuple[TypeSeed, ...] = (
    TypeSeed("Friend", "A friendly, trusting bond", False),
    TypeSeed("Ally", "Cooperates toward shared goals", False),
    TypeSeed("Enemy", "Openly hostile", False),
    TypeSeed("Rival", "Competes for the same prize", False),
    TypeSeed("Mentor", "Teaches and guides the target", True, "Student"),
    TypeSeed("Student", "Learns from the target", True, "Mentor"),
    TypeSeed("Parent", "Parent of the target", True, "Child"),
    TypeSeed("Child", "Child of the target", True, "Parent"),
    TypeSeed("Leader", "Leads the target", True, "Follower"),
    TypeSeed("Follower", "Follows the target", True, "Leader"),
    TypeSeed("Member", "Belongs to the target organization", True),
)

DEFAULT_CAMPAIGN_NAME = "The Heroes Adventure"


async def seed_relationship_types(
    session: AsyncSession,
    seeds: tuple[TypeSeed, ...] = DEFAULT_RELATIONSHIP_TYPES,
) -> dict[str, RelationshipType]:
    """Insert missing relationship types and link inverse pairs.

    Existing types (matched case-insensitively by name) are left alone apart
    from filling in a missing inverse link.
    """
    repo = RelationshipTypeRepository(session)
    by_name: dict[str, RelationshipType] = {}
    created = 0
    for seed in seeds:
        existing = await repo.get_by_name(seed.name)
        if existing is None:
            existing = await repo.create(
                RelationshipType(
                    name=seed.name,
                    description=seed.description,
                    is_directional=seed.is_directional,
                )
            )
            created += 1
        by_name[seed.name] = existing

    for seed in seeds:
        if seed.inverse is None:
            continue
        if not seed.is_directional:
            raise SeedingError(f"Non-directional type {seed.name!r} cannot have an inverse")
        inverse = by_name.get(seed.inverse) or await repo.get_by_name(seed.inverse)
        if inverse is None or inverse.name.lower() == seed.name.lower():
            raise SeedingError(f"Inverse {seed.inverse!r} of {seed.name!r} is not a distinct type")
        rt = by_name[seed.name]
        if rt.inverse_type_id is None:
            rt.inverse_type_id = inverse.id
    await session.flush()

    logger.info("Seeded %d new relationship types (%d total)", created, len(by_name))
    return by_name


@dataclass(frozen=True)
class SeededAccount:
    campaign_id: int
    npc_ids: tuple[int, int]
    relationship_id: int


async def seed_new_account(
    session: AsyncSession, account_id: int, service: RelationshipService
) -> SeededAccount:
    logger.info("Seeding default data for new account %d", account_id)

    campaign = Campaign(
        account_id=account_id,
        name=DEFAULT_CAMPAIGN_NAME,
        description="A beginner-friendly adventure to get you started",
    )
    session.add(campaign)
    await session.flush()

    gorath = Npc(
        account_id=account_id,
        campaign_id=campaign.id,
        name="Gorath the Brave",
        description="A fearless warrior from the northern tribes",
    )
    lathel = Npc(
        account_id=account_id,
        campaign_id=campaign.id,
        name="Lathel Spellbinder",
        description="An intelligent elf wizard from the forests of Eldoria",
    )
    session.add_all([gorath, lathel])
    await session.flush()

    ally = await service.get_type_by_name("Ally")
    if ally is None:
        logger.error(
            "Relationship type 'Ally' not found. Aborting seeding for account %d.",
            account_id,
        )
        raise SeedingError("Ally relationship type not found")

    relationship_id = await service.create(
        EntityRef.npc(gorath.id),
        EntityRef.npc(lathel.id),
        ally.id,
        description="Gorath and Lathel have formed a strong alliance to face the challenges ahead.",
        strength=8,
        campaign_id=campaign.id,
    )
    return SeededAccount(
        campaign_id=campaign.id,
        npc_ids=(gorath.id, lathel.id),
        relationship_id=relationship_id,
    )
