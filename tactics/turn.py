"""
Turn sequencing: faction rotation, per-turn action budget and elimination.
"""

import logging
from dataclasses import dataclass
from typing import Iterable, Optional

from .units import Faction, Unit

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class FactionDefeated:
    faction: Faction


@dataclass(frozen=True)
class FactionWins:
    faction: Faction


class TurnInfo:
    """Tracks whose turn it is and how many actions they have left."""

    def __init__(self, factions: Iterable[Faction], action_limit: int):
        self.factions: list[Faction] = list(factions)
        if not self.factions:
            raise ValueError("at least one faction is required")
        if action_limit < 1:
            raise ValueError(f"action limit must be positive, got {action_limit}")
        self.action_limit = action_limit
        self.actions_left = action_limit
        self.current = 0
        self.turn = 1

    def current_faction(self) -> Faction:
        return self.factions[self.current]

    def is_active(self, unit: Unit) -> bool:
        """Whether the unit may act right now."""
        return (
            unit.faction == self.current_faction()
            and self.actions_left > 0
            and not unit.spent
        )

    def spend_action(self):
        if self.actions_left == 0:
            raise RuntimeError("a unit was spent with no actions left")
        self.actions_left -= 1

    def end_turn(self) -> Faction:
        """Pass the turn to the next faction in rotation and refill its budget."""
        self.current = (self.current + 1) % len(self.factions)
        self.actions_left = self.action_limit
        self.turn += 1
        logger.debug(f"Turn {self.turn}: {self.current_faction().value} to play")
        return self.current_faction()

    def remove_faction(self, faction: Faction) -> list:
        """
        Drop every rotation entry of a defeated faction.

        If another faction is playing it keeps the turn. If the defeated
        faction was playing, the entry that followed it takes over with a
        fresh action budget.
        """
        if faction not in self.factions:
            raise ValueError(f"faction {faction.value} is not in the rotation")
        remaining = [f for f in self.factions if f != faction]
        if not remaining:
            raise ValueError(f"cannot remove {faction.value}, the last faction in play")

        was_current = self.factions[self.current] == faction
        removed_before = sum(1 for f in self.factions[:self.current] if f == faction)
        self.factions = remaining
        self.current = (self.current - removed_before) % len(remaining)
        if was_current:
            self.actions_left = self.action_limit

        logger.info(f"Faction defeated! {faction.value}")
        events: list = [FactionDefeated(faction)]
        winner = self.winner()
        if winner is not None:
            logger.info(f"Faction wins! {winner.value}")
            events.append(FactionWins(winner))
        return events

    def winner(self) -> Optional[Faction]:
        """The last faction standing, if only one remains."""
        first = self.factions[0]
        if all(f == first for f in self.factions):
            return first
        return None

    def is_over(self) -> bool:
        return self.winner() is not None
