"""
Headless match session.

Drives one match the way the board UI does: select a unit, move it, then
attack, capture or wait. Each action spends one unit and one action from
the current faction's budget. Faction eliminations are queued as events
for the caller to poll.
"""

import logging
import random
from dataclasses import dataclass
from typing import Optional

from .attack_range import attackable_from
from .catalog import Catalog
from .combat import CaptureResult, CombatReport, CombatResolver
from .config import MatchConfig
from .grid import Grid, Pos
from .pathfinding import PathFinder
from .turn import FactionDefeated, FactionWins, TurnInfo
from .units import Unit

logger = logging.getLogger(__name__)

ATTACK = "Attack"
CAPTURE = "Capture"
WAIT = "Wait"


@dataclass
class PendingMove:
    """A unit that has moved and must now choose an action."""
    origin: Pos
    dest: Pos


class Match:
    """One match on one grid."""

    def __init__(self, catalog: Catalog, grid: Grid, config: Optional[MatchConfig] = None):
        self.catalog = catalog
        self.grid = grid
        self.config = config or MatchConfig()
        self.rng = random.Random(self.config.rng_seed)

        factions = self.config.factions or grid.factions_present()
        missing = [f for f in grid.factions_present() if f not in factions]
        if missing:
            raise ValueError(
                f"factions on the grid but not in the rotation: {[f.value for f in missing]}"
            )
        self.turn = TurnInfo(factions, self.config.action_limit)
        self.resolver = CombatResolver(grid)

        self.selected: Optional[Pos] = None
        self.paths: Optional[PathFinder] = None
        self.pending: Optional[PendingMove] = None
        self.events: list = []
        self.winner = None

        # Factions in the rotation with nothing on the grid are out from the start.
        for faction in dict.fromkeys(self.turn.factions):
            if self.over:
                break
            if not grid.has_units(faction):
                self._faction_defeated(FactionDefeated(faction))
        if not self.over and self.turn.is_over():
            self.winner = self.turn.winner()
            self.events.append(FactionWins(self.winner))
            logger.info(f"Faction wins! {self.winner.value}")

    @property
    def over(self) -> bool:
        return self.winner is not None

    # Selection and movement
    def select(self, pos: Pos) -> Optional[PathFinder]:
        """Select the unit at pos if it may act; returns its movement range."""
        self._require_running()
        unit = self.grid.unit(pos)
        if unit is None:
            raise ValueError(f"cannot select unit on empty tile {pos}")
        if self.pending is not None or not self.turn.is_active(unit):
            return None
        logger.debug(f"Unit at {pos} selected")
        self.selected = pos
        self.paths = PathFinder.search(self.grid, pos)
        return self.paths

    def deselect(self):
        if self.selected is None:
            raise RuntimeError("deselect with no unit selected")
        self.selected = None
        self.paths = None

    def path_to(self, dest: Pos) -> Optional[list[Pos]]:
        """A minimal path for the selected unit, for animating its move."""
        if self.paths is None:
            raise RuntimeError("no unit selected")
        return self.paths.path(dest, self.rng)

    def move_and_act(self, origin: Pos, dest: Pos) -> Optional[list[str]]:
        """Move the selected unit and list the actions it can take there."""
        if self.selected != origin or self.paths is None:
            raise RuntimeError(f"the moved unit at {origin} is not selected")
        if not self.paths.can_move_to(dest):
            return None

        self.grid.move_unit(origin, dest)
        self.pending = PendingMove(origin, dest)
        self.selected = None
        self.paths = None

        options = []
        if attackable_from(self.grid, dest, origin):
            options.append(ATTACK)
        if self.resolver.can_capture(dest):
            options.append(CAPTURE)
        options.append(WAIT)
        return options

    def cancel_move(self) -> Optional[PathFinder]:
        """Undo the pending move and reselect the unit at its origin."""
        pending = self._require_pending()
        self.grid.move_unit(pending.dest, pending.origin)
        self.pending = None
        return self.select(pending.origin)

    # Actions
    def targets(self) -> list[Pos]:
        pending = self._require_pending()
        return [pos for pos, _ in attackable_from(self.grid, pending.dest, pending.origin)]

    def attack(self, target: Pos) -> CombatReport:
        pending = self._require_pending()
        if target not in self.targets():
            raise ValueError(f"{target} is not a valid target from {pending.dest}")
        unit = self.grid.unit(pending.dest)
        report = self.resolver.resolve_attack(pending.dest, target)
        self._spend(unit)
        for event in report.events:
            self._faction_defeated(event)
        return report

    def capture(self) -> Optional[CaptureResult]:
        pending = self._require_pending()
        result = self.resolver.capture(pending.dest)
        if result is None:
            return None
        self._spend(self.grid.unit(pending.dest))
        return result

    def wait(self):
        pending = self._require_pending()
        self._spend(self.grid.unit(pending.dest))

    def end_turn(self):
        self._require_running()
        if self.pending is not None:
            self.cancel_move()
        self.selected = None
        self.paths = None
        for _, unit in self.grid.units():
            unit.spent = False
        faction = self.turn.end_turn()
        logger.info(f"Turn {self.turn.turn}: {faction.value} to play")

    def poll_events(self) -> list:
        events, self.events = self.events, []
        return events

    # Internals
    def _spend(self, unit: Unit):
        unit.spent = True
        self.turn.spend_action()
        self.pending = None

    def _faction_defeated(self, event: FactionDefeated):
        if event.faction not in self.turn.factions:
            return
        for ev in self.turn.remove_faction(event.faction):
            self.events.append(ev)
            if isinstance(ev, FactionWins):
                self.winner = ev.faction

    def _require_pending(self) -> PendingMove:
        self._require_running()
        if self.pending is None:
            raise RuntimeError("no unit is waiting for an action")
        return self.pending

    def _require_running(self):
        if self.over:
            raise RuntimeError(f"match is over, {self.winner.value} won")
