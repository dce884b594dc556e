# SPDX-License-Identifier: GPL-3.0-or-later
# Copyright (C) 2026 Campaignkeeper Contributors

"""Polymorphic addressing of relationship endpoints.

An endpoint is stored as a kind tag plus an integer id. In code it is an
``EntityRef``, whose kind is always a member of the closed ``EntityKind`` set.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass

from campaignkeeper.errors import InvalidEntityKindError


class EntityKind(str, enum.Enum):
    NPC = "npc"
    PC = "pc"
    ORGANIZATION = "organization"

    @classmethod
    def values(cls) -> list[str]:
        return [kind.value for kind in cls]

    @classmethod
    def parse(cls, value: str | EntityKind) -> EntityKind:
        """Return the matching kind or raise ``InvalidEntityKindError``."""
        if isinstance(value, cls):
            return value
        try:
            return cls(value)
        except ValueError:
            raise InvalidEntityKindError(value, cls.values()) from None


@dataclass(frozen=True, slots=True)
class EntityRef:
    kind: EntityKind
    id: int

    def __post_init__(self) -> None:
        # Accept the wire tag as well as the enum member; reject anything else.
        object.__setattr__(self, "kind", EntityKind.parse(self.kind))

    @classmethod
    def parse(cls, kind: str | EntityKind, entity_id: int) -> EntityRef:
        return cls(EntityKind.parse(kind), entity_id)

    @classmethod
    def npc(cls, entity_id: int) -> EntityRef:
        return cls(EntityKind.NPC, entity_id)

    @classmethod
    def pc(cls, entity_id: int) -> EntityRef:
        return cls(EntityKind.PC, entity_id)

    @classmethod
    def organization(cls, entity_id: int) -> EntityRef:
        return cls(EntityKind.ORGANIZATION, entity_id)

    def __str__(self) -> str:
        return f"{self.kind.value}#{self.id}"
