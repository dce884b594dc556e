# SPDX-License-Identifier: GPL-3.0-or-later
# Copyright (C) 2026 Campaignkeeper Contributors

"""Initial schema: owned records, relationship catalog and entity relationships.

Also provisions the default relationship type catalog, including the
inverse links between directional pairs.

Revision ID: 001
Revises:
Create Date: 2026-10-18
"""

from __future__ import annotations

import sqlalchemy as sa
from alembic import op

revision: str = "001"
down_revision: str | None = None
branch_labels: tuple[str, ...] | None = None
depends_on: tuple[str, ...] | None = None

_KINDS = "'npc', 'pc', 'organization'"

# (name, description, is_directional, inverse name)
_DEFAULT_TYPES = [
    ("Friend", "A friendly, trusting bond", False, None),
    ("Ally", "Cooperates toward shared goals", False, None),
    ("Enemy", "Openly hostile", False, None),
    ("Rival", "Competes for the same prize", False, None),
    ("Mentor", "Teaches and guides the target", True, "Student"),
    ("Student", "Learns from the target", True, "Mentor"),
    ("Parent", "Parent of the target", True, "Child"),
    ("Child", "Child of the target", True, "Parent"),
    ("Leader", "Leads the target", True, "Follower"),
    ("Follower", "Follows the target", True, "Leader"),
    ("Member", "Belongs to the target organization", True, None),
]


def _timestamps(*, updated: bool = True) -> list[sa.Column]:
    columns = [
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.func.now(),
        )
    ]
    if updated:
        columns.append(
            sa.Column(
                "updated_at",
                sa.DateTime(timezone=True),
                nullable=False,
                server_default=sa.func.now(),
            )
        )
    return columns


def _owned_record(table: str) -> None:
    op.create_table(
        table,
        sa.Column("id", sa.Integer(), primary_key=True),
        *_timestamps(),
        sa.Column(
            "account_id",
            sa.Integer(),
            sa.ForeignKey("accounts.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column(
            "campaign_id",
            sa.Integer(),
            sa.ForeignKey("campaigns.id", ondelete="SET NULL"),
            nullable=True,
        ),
        sa.Column("name", sa.String(), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
    )
    op.create_index(f"ix_{table}_account_id", table, ["account_id"])


def upgrade() -> None:
    # ------------------------------------------------------------------
    # 1. Account-owned records (read for display names only)
    # ------------------------------------------------------------------
    op.create_table(
        "accounts",
        sa.Column("id", sa.Integer(), primary_key=True),
        *_timestamps(),
        sa.Column("username", sa.String(), nullable=False, unique=True),
        sa.Column("email", sa.String(), nullable=True),
    )
    op.create_table(
        "campaigns",
        sa.Column("id", sa.Integer(), primary_key=True),
        *_timestamps(),
        sa.Column(
            "account_id",
            sa.Integer(),
            sa.ForeignKey("accounts.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("name", sa.String(), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
    )
    op.create_index("idx_campaigns_account", "campaigns", ["account_id"])
    for table in ("npcs", "pcs", "organizations"):
        _owned_record(table)

    # ------------------------------------------------------------------
    # 2. Relationship type catalog
    # ------------------------------------------------------------------
    relationship_types = op.create_table(
        "relationship_types",
        sa.Column("id", sa.Integer(), primary_key=True),
        *_timestamps(updated=False),
        sa.Column("name", sa.String(), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("is_directional", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column(
            "inverse_type_id",
            sa.Integer(),
            sa.ForeignKey("relationship_types.id", ondelete="SET NULL"),
            nullable=True,
        ),
        sa.CheckConstraint(
            "inverse_type_id IS NULL OR (is_directional AND inverse_type_id != id)",
            name="ck_relationship_types_inverse",
        ),
    )
    op.create_index(
        "uq_relationship_types_name_lower",
        "relationship_types",
        [sa.text("lower(name)")],
        unique=True,
    )

    # ------------------------------------------------------------------
    # 3. Entity relationships
    # ------------------------------------------------------------------
    op.create_table(
        "entity_relationships",
        sa.Column("id", sa.Integer(), primary_key=True),
        *_timestamps(),
        sa.Column("source_kind", sa.String(), nullable=False),
        sa.Column("source_id", sa.Integer(), nullable=False),
        sa.Column("target_kind", sa.String(), nullable=False),
        sa.Column("target_id", sa.Integer(), nullable=False),
        sa.Column(
            "relationship_type_id",
            sa.Integer(),
            sa.ForeignKey("relationship_types.id", ondelete="RESTRICT"),
            nullable=False,
        ),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("strength", sa.Integer(), nullable=True),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column(
            "campaign_id",
            sa.Integer(),
            sa.ForeignKey("campaigns.id", ondelete="SET NULL"),
            nullable=True,
        ),
        sa.CheckConstraint(
            f"source_kind IN ({_KINDS})", name="ck_entity_relationships_source_kind"
        ),
        sa.CheckConstraint(
            f"target_kind IN ({_KINDS})", name="ck_entity_relationships_target_kind"
        ),
        sa.CheckConstraint(
            "strength IS NULL OR (strength >= 1 AND strength <= 10)",
            name="ck_entity_relationships_strength",
        ),
    )
    op.create_index(
        "idx_entity_relationships_source",
        "entity_relationships",
        ["source_kind", "source_id"],
    )
    op.create_index(
        "idx_entity_relationships_target",
        "entity_relationships",
        ["target_kind", "target_id"],
    )
    op.create_index(
        "idx_entity_relationships_type", "entity_relationships", ["relationship_type_id"]
    )
    op.create_index(
        "idx_entity_relationships_campaign", "entity_relationships", ["campaign_id"]
    )
    op.create_index(
        "uq_entity_relationships_active_edge",
        "entity_relationships",
        ["source_kind", "source_id", "target_kind", "target_id", "relationship_type_id"],
        unique=True,
        postgresql_where=sa.text("is_active"),
        sqlite_where=sa.text("is_active = 1"),
    )

    # ------------------------------------------------------------------
    # 4. Default catalog
    # ------------------------------------------------------------------
    op.bulk_insert(
        relationship_types,
        [
            {"name": name, "description": description, "is_directional": directional}
            for name, description, directional, _inverse in _DEFAULT_TYPES
        ],
    )
    for name, _description, _directional, inverse in _DEFAULT_TYPES:
        if inverse is None:
            continue
        op.execute(
            sa.text(
                "UPDATE relationship_types SET inverse_type_id = "
                "(SELECT id FROM relationship_types WHERE name = :inverse) "
                "WHERE name = :name"
            ).bindparams(name=name, inverse=inverse)
        )


def downgrade() -> None:
    op.drop_table("entity_relationships")
    op.drop_index("uq_relationship_types_name_lower", table_name="relationship_types")
    op.drop_table("relationship_types")
    for table in ("organizations", "pcs", "npcs"):
        op.drop_table(table)
    op.drop_table("campaigns")
    op.drop_table("accounts")
