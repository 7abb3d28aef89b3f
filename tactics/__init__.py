"""
Tactical combat core for a grid-based strategy game.

Core modules:
- catalog: Terrain, movement classes and unit kinds loaded from YAML
- units: Factions and unit state
- grid: Tile storage, occupancy and ownership
- attack_range: Melee / ranged / spear target enumeration
- pathfinding: Cost-bounded movement search
- combat: Damage, retaliation and capture
- turn: Faction rotation and action budget
- level: Level files -> starting grid
- match: Headless session wiring it all together
"""

from .catalog import (
    Catalog, CatalogError, Terrain, MovementClass, UnitKind,
    AttackInfo, DefenseInfo, MovementInfo, Sprite, Melee, Ranged, Spear,
)
from .units import Faction, Unit, MAX_HEALTH
from .grid import Grid, Tile, CaptureState
from .attack_range import AttackRange, find_attackable, attackable_from
from .pathfinding import PathFinder
from .combat import CombatResolver, CombatReport, CaptureResult, attack_damage
from .turn import TurnInfo, FactionDefeated, FactionWins
from .level import Level, LevelError
from .config import MatchConfig
from .match import Match

__all__ = [
    # Catalog
    "Catalog", "CatalogError", "Terrain", "MovementClass", "UnitKind",
    "AttackInfo", "DefenseInfo", "MovementInfo", "Sprite", "Melee", "Ranged", "Spear",
    # Units
    "Faction", "Unit", "MAX_HEALTH",
    # Grid
    "Grid", "Tile", "CaptureState",
    # Ranges and movement
    "AttackRange", "find_attackable", "attackable_from", "PathFinder",
    # Combat
    "CombatResolver", "CombatReport", "CaptureResult", "attack_damage",
    # Turn management
    "TurnInfo", "FactionDefeated", "FactionWins",
    # Loading and sessions
    "Level", "LevelError", "MatchConfig", "Match",
]
