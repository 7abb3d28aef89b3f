"""
Factions and unit instances.

A Unit carries only its mutable state (health, faction, spent flag); all of
its static stats come from the shared UnitKind it references.
"""

import math
from dataclasses import dataclass
from enum import Enum
from typing import Optional

from .catalog import UnitKind

MAX_HEALTH = 10


class Faction(Enum):
    RED = "red"
    BLUE = "blue"
    GREEN = "green"
    YELLOW = "yellow"

    @classmethod
    def from_code(cls, code: int) -> Optional["Faction"]:
        """Decode the faction number used in level files (0 = no faction)."""
        if code == 0:
            return None
        members = list(cls)
        if not 1 <= code <= len(members):
            raise ValueError(f"unrecognized faction with code {code}")
        return members[code - 1]


@dataclass(eq=False)
class Unit:
    """A unit on the board. Compared by identity."""
    kind: UnitKind
    faction: Faction
    health: int = MAX_HEALTH
    spent: bool = False

    @property
    def destroyed(self) -> bool:
        return self.health == 0

    def is_ally(self, other: "Unit") -> bool:
        return self.faction == other.faction

    def can_attack(self, other: "Unit") -> bool:
        return not self.is_ally(other)

    def can_move_through(self, other: "Unit") -> bool:
        return self.is_ally(other)

    def can_spear_through(self, other: "Unit") -> bool:
        return self.is_ally(other)

    def receive_damage(self, amount: float) -> bool:
        """Apply damage rounded half-up. Returns True if the unit is destroyed."""
        if amount < 0:
            raise ValueError(f"negative damage {amount}")
        self.health = max(0, self.health - math.floor(amount + 0.5))
        return self.destroyed

    def capture_power(self) -> int:
        """Capture progress this unit adds per action at its current health."""
        return self.kind.capture * self.health // MAX_HEALTH

    def __repr__(self) -> str:
        spent = ", spent" if self.spent else ""
        return f"Unit({self.kind.name}, {self.faction.value}, hp={self.health}{spent})"
