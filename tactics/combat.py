"""
Combat and capture resolution.

Damage scales with the attacker's health and is reduced by the defender's
terrain and armour, weighted by the defender's health:

    damage * modifier * (attacker.health / 10)
           * (1 - (terrain.defense + defense) * (defender.health / 10))

A defender that survives strikes back if the attacker is within its own
range. Retaliation uses both units' health from before the exchange.
"""

import logging
import math
from dataclasses import dataclass, field
from typing import Optional

from .attack_range import AttackRange
from .catalog import Terrain
from .grid import CaptureState, Grid, Pos
from .turn import FactionDefeated
from .units import MAX_HEALTH, Faction, Unit

logger = logging.getLogger(__name__)


@dataclass
class CombatReport:
    """Outcome of one attack."""
    attacker_pos: Pos
    defender_pos: Pos
    damage: float
    defender_destroyed: bool
    retaliation: Optional[float] = None
    attacker_destroyed: bool = False
    events: list[FactionDefeated] = field(default_factory=list)


@dataclass
class CaptureResult:
    """Outcome of one capture action."""
    pos: Pos
    faction: Faction
    progress: int
    threshold: int
    captured: bool
    previous_owner: Optional[Faction] = None


def attack_damage(attacker: Unit, defender: Unit, terrain: Terrain) -> float:
    """Damage the attacker deals to a defender standing on terrain."""
    attack = attacker.kind.attack
    modifier = attack.modifier(defender.kind.defense.cls)
    defense_bonus = terrain.defense + defender.kind.defense.defense
    damage = (
        attack.damage
        * modifier
        * (attacker.health / MAX_HEALTH)
        * (1.0 - defense_bonus * (defender.health / MAX_HEALTH))
    )
    return max(0.0, damage)


class CombatResolver:
    """Applies attacks and captures to a grid."""

    def __init__(self, grid: Grid):
        self.grid = grid

    def preview(self, attacker_pos: Pos, defender_pos: Pos) -> tuple[float, Optional[float]]:
        """Expected damage and retaliation without touching the grid."""
        attacker_tile, defender_tile = self.grid.unit_pair_mut(attacker_pos, defender_pos)
        attacker, defender = self._combatants(attacker_tile.unit, defender_tile.unit,
                                              attacker_pos, defender_pos)
        damage = attack_damage(attacker, defender, defender_tile.terrain)
        retaliation = None
        if not self._would_destroy(defender, damage) and self._can_retaliate(
            defender, defender_pos, attacker_pos
        ):
            retaliation = attack_damage(defender, attacker, attacker_tile.terrain)
        return damage, retaliation

    def resolve_attack(self, attacker_pos: Pos, defender_pos: Pos) -> CombatReport:
        """Resolve an attack, retaliation included, and remove destroyed units."""
        attacker_tile, defender_tile = self.grid.unit_pair_mut(attacker_pos, defender_pos)
        attacker, defender = self._combatants(attacker_tile.unit, defender_tile.unit,
                                              attacker_pos, defender_pos)

        damage = attack_damage(attacker, defender, defender_tile.terrain)
        retaliation = attack_damage(defender, attacker, attacker_tile.terrain)
        logger.debug(
            f"Unit at {attacker_pos} ({attacker}) attacked unit at {defender_pos} "
            f"({defender}) for {damage:.2f}"
        )

        report = CombatReport(
            attacker_pos=attacker_pos,
            defender_pos=defender_pos,
            damage=damage,
            defender_destroyed=defender.receive_damage(damage),
        )

        if report.defender_destroyed:
            report.events.extend(self.destroy_unit(defender_pos))
        elif self._can_retaliate(defender, defender_pos, attacker_pos):
            logger.debug(f"Unit at {defender_pos} retaliated for {retaliation:.2f}")
            report.retaliation = retaliation
            report.attacker_destroyed = attacker.receive_damage(retaliation)
            if report.attacker_destroyed:
                report.events.extend(self.destroy_unit(attacker_pos))

        return report

    def destroy_unit(self, pos: Pos) -> list[FactionDefeated]:
        """Remove the unit at pos; report its faction if it has no units left."""
        unit = self.grid.remove_unit(pos)
        logger.info(f"Unit at {pos} destroyed! ({unit})")
        if not self.grid.has_units(unit.faction):
            return [FactionDefeated(unit.faction)]
        return []

    def capture(self, pos: Pos) -> Optional[CaptureResult]:
        """Advance the capture of the tile under the unit at pos."""
        tile = self.grid.tile_mut(pos)
        unit = tile.unit
        if unit is None:
            raise ValueError(f"no unit to capture with at {pos}")
        if not self.can_capture(pos):
            return None

        if tile.capture is None or tile.capture.faction != unit.faction:
            if tile.capture is not None:
                logger.debug(
                    f"Capture of {pos} by {tile.capture.faction.value} interrupted "
                    f"by {unit.faction.value}"
                )
            tile.capture = CaptureState(faction=unit.faction)
        tile.capture.progress += unit.capture_power()

        threshold = tile.terrain.capture
        result = CaptureResult(
            pos=pos,
            faction=unit.faction,
            progress=tile.capture.progress,
            threshold=threshold,
            captured=tile.capture.progress >= threshold,
            previous_owner=tile.owner,
        )
        if result.captured:
            tile.owner = unit.faction
            tile.capture = None
            logger.info(f"Tile {pos} captured by {unit.faction.value}")
        return result

    def can_capture(self, pos: Pos) -> bool:
        tile = self.grid.tile_mut(pos)
        unit = tile.unit
        return (
            unit is not None
            and unit.kind.capture > 0
            and tile.can_be_captured
            and tile.owner != unit.faction
        )

    def _combatants(self, attacker: Optional[Unit], defender: Optional[Unit],
                    attacker_pos: Pos, defender_pos: Pos) -> tuple[Unit, Unit]:
        if attacker is None:
            raise ValueError(f"no attacking unit at {attacker_pos}")
        if defender is None:
            raise ValueError(f"no unit to attack at {defender_pos}")
        if not attacker.can_attack(defender):
            raise ValueError(f"unit at {attacker_pos} cannot attack unit at {defender_pos}")
        return attacker, defender

    def _can_retaliate(self, defender: Unit, defender_pos: Pos, attacker_pos: Pos) -> bool:
        return attacker_pos in AttackRange.for_unit(self.grid, defender, defender_pos)

    @staticmethod
    def _would_destroy(unit: Unit, damage: float) -> bool:
        return unit.health - math.floor(damage + 0.5) <= 0
