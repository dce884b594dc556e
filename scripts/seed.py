#!/usr/bin/env python3
# SPDX-License-Identifier: GPL-3.0-or-later
# Copyright (C) 2026 Campaignkeeper Contributors
"""Seed the Campaignkeeper database with the relationship catalog and a demo account.

Usage:
    DATABASE_URL=postgresql+asyncpg://... python scripts/seed.py
    python scripts/seed.py --account demo-gm              # also seed a starter account
    python scripts/seed.py --check-api http://localhost:8000
"""

from __future__ import annotations

import argparse
import asyncio
import sys

import httpx
from sqlalchemy import select

from campaignkeeper.db.session import get_engine, get_session_factory
from campaignkeeper.errors import SeedingError
from campaignkeeper.models.campaign import Account
from campaignkeeper.services.account_seeder import (
    seed_new_account,
    seed_relationship_types,
)
from campaignkeeper.services.relationship_catalog import RelationshipCatalog
from campaignkeeper.services.relationship_service import RelationshipService

TIMEOUT = 30.0


async def seed(account_username: str | None) -> int:
    async with get_session_factory()() as session:
        # ── 1. Relationship catalog ────────────────────────────────────
        print("=== Seeding relationship types ===")
        types = await seed_relationship_types(session)
        for name, rt in types.items():
            inverse = f" (inverse #{rt.inverse_type_id})" if rt.inverse_type_id else ""
            print(f"  {name}: #{rt.id}{inverse}")
        await session.commit()

        if account_username is None:
            print("\n=== Seed complete ===")
            return 0

        # ── 2. Starter account ─────────────────────────────────────────
        print(f"\n=== Seeding account {account_username!r} ===")
        result = await session.execute(
            select(Account).where(Account.username == account_username)
        )
        account = result.scalar_one_or_none()
        if account is None:
            account = Account(username=account_username)
            session.add(account)
            await session.flush()
            print(f"  Created account #{account.id}")
        else:
            print(f"  Account #{account.id} (exists)")

        service = RelationshipService(session, RelationshipCatalog())
        try:
            seeded = await seed_new_account(session, account.id, service)
        except SeedingError as exc:
            await session.rollback()
            print(f"  ERROR: {exc}", file=sys.stderr)
            return 1
        await session.commit()
        print(f"  Campaign:     #{seeded.campaign_id}")
        print(f"  NPCs:         {', '.join(f'#{i}' for i in seeded.npc_ids)}")
        print(f"  Relationship: #{seeded.relationship_id}")

    await get_engine().dispose()
    print("\n=== Seed complete ===")
    return 0


def check_api(base_url: str) -> int:
    """List the relationship catalog through a running API."""
    with httpx.Client(timeout=TIMEOUT) as client:
        r = client.get(f"{base_url}/v1/relationships/types")
        if r.status_code >= 400:
            print(f"  ERROR {r.status_code}: {r.text[:200]}", file=sys.stderr)
            return 1
        for rt in r.json():
            inverse = f" <-> {rt['inverse_type_name']}" if rt["inverse_type_name"] else ""
            kind = "directional" if rt["is_directional"] else "symmetric"
            print(f"  {rt['name']} ({kind}){inverse}")
    return 0


# ---------------------------------------------------------------------------
# CLI
# ---------------------------------------------------------------------------

if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Seed Campaignkeeper reference data")
    parser.add_argument(
        "--account",
        default=None,
        help="Username of an account to create (if missing) and fill with starter content",
    )
    parser.add_argument(
        "--check-api",
        metavar="BASE_URL",
        default=None,
        help="Instead of seeding, list relationship types from a running API",
    )
    args = parser.parse_args()
    if args.check_api:
        sys.exit(check_api(args.check_api))
    sys.exit(asyncio.run(seed(args.account)))
