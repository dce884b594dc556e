# SPDX-License-Identifier: GPL-3.0-or-later
# Copyright (C) 2026 Campaignkeeper Contributors

"""Records owned by an account.

The relationship engine only reads these to resolve display names; their
CRUD lives outside this package.
"""

from __future__ import annotations

from sqlalchemy import ForeignKey, Index, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from campaignkeeper.models.base import Base, IntIdMixin, TimestampMixin


class Account(IntIdMixin, TimestampMixin, Base):
    __tablename__ = "accounts"

    username: Mapped[str] = mapped_column(String, nullable=False, unique=True)
    email: Mapped[str | None] = mapped_column(String, default=None)


class Campaign(IntIdMixin, TimestampMixin, Base):
    __tablename__ = "campaigns"

    account_id: Mapped[int] = mapped_column(
        ForeignKey("accounts.id", ondelete="CASCADE"),
        nullable=False,
    )
    name: Mapped[str] = mapped_column(String, nullable=False)
    description: Mapped[str | None] = mapped_column(Text, default=None)

    __table_args__ = (Index("idx_campaigns_account", "account_id"),)


class _OwnedRecordMixin:
    account_id: Mapped[int] = mapped_column(
        ForeignKey("accounts.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    campaign_id: Mapped[int | None] = mapped_column(
        ForeignKey("campaigns.id", ondelete="SET NULL"),
        default=None,
    )
    name: Mapped[str] = mapped_column(String, nullable=False)
    description: Mapped[str | None] = mapped_column(Text, default=None)


class Npc(IntIdMixin, _OwnedRecordMixin, TimestampMixin, Base):
    __tablename__ = "npcs"


class Pc(IntIdMixin, _OwnedRecordMixin, TimestampMixin, Base):
    __tablename__ = "pcs"


class Organization(IntIdMixin, _OwnedRecordMixin, TimestampMixin, Base):
    __tablename__ = "organizations"
