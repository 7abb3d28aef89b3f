"""
Attack range enumeration.

An AttackRange lists every coordinate a unit could strike from a position,
before filtering by occupancy. Each range is a finite iterable that can be
iterated any number of times; every iteration starts from the beginning.

Ranged units may only attack from the tile they started the turn on, so
their post-move range is empty unless they did not move.
"""

from typing import Iterator, Optional

from .catalog import Melee, Ranged, Spear
from .grid import DIRECTIONS, Grid, Pos
from .units import Unit


class AttackRange:
    """Restartable lazy sequence of target coordinates."""

    def __init__(self, walk=None, *args):
        self._walk = walk
        self._args = args

    @classmethod
    def empty(cls) -> "AttackRange":
        return cls()

    @classmethod
    def melee(cls, grid: Grid, pos: Pos) -> "AttackRange":
        return cls(_walk_melee, grid, pos)

    @classmethod
    def ranged(cls, grid: Grid, pos: Pos, min: int, max: int) -> "AttackRange":
        if min < 1:
            raise ValueError(f"ranged minimum must be at least 1, got {min}")
        if min > max:
            raise ValueError(f"ranged minimum {min} exceeds maximum {max}")
        return cls(_walk_ranged, grid, pos, min, max)

    @classmethod
    def spear(cls, grid: Grid, unit: Unit, pos: Pos, max: int) -> "AttackRange":
        return cls(_walk_spear, grid, unit, pos, max)

    @classmethod
    def for_unit(cls, grid: Grid, unit: Unit, pos: Pos) -> "AttackRange":
        """Range of a unit attacking from where it stands."""
        kind = unit.kind.attack.range
        if isinstance(kind, Melee):
            return cls.melee(grid, pos)
        if isinstance(kind, Ranged):
            return cls.ranged(grid, pos, kind.min, kind.max)
        if isinstance(kind, Spear):
            return cls.spear(grid, unit, pos, kind.range)
        raise TypeError(f"unknown range kind {kind!r}")

    @classmethod
    def after_move(cls, grid: Grid, unit: Unit, origin: Pos, dest: Pos) -> "AttackRange":
        """Range of a unit after moving from origin to dest."""
        if isinstance(unit.kind.attack.range, Ranged) and dest != origin:
            return cls.empty()
        return cls.for_unit(grid, unit, dest)

    def __iter__(self) -> Iterator[Pos]:
        if self._walk is None:
            return iter(())
        return self._walk(*self._args)

    def __contains__(self, pos) -> bool:
        return any(p == pos for p in self)


def _walk_melee(grid: Grid, pos: Pos) -> Iterator[Pos]:
    x, y = pos
    for dx, dy in DIRECTIONS:
        target = (x + dx, y + dy)
        if grid.in_bounds(target):
            yield target


def _sign(n: int) -> int:
    return (n > 0) - (n < 0)


def _walk_ranged(grid: Grid, pos: Pos, min: int, max: int) -> Iterator[Pos]:
    # Walk each diamond ring clockwise from its north tip, then drop to the
    # next ring inward, until the ring at distance min - 1 is reached.
    x, y = pos
    dx, dy = 0, max
    stop = (0, min - 1)
    while (dx, dy) != stop:
        target = (x + dx, y + dy)

        step = (_sign(dx), _sign(dy))
        if step in ((0, 1), (1, 1)):  # N-E
            dx, dy = dx + 1, dy - 1
        elif step in ((1, 0), (1, -1)):  # E-S
            dx, dy = dx - 1, dy - 1
        elif step in ((0, -1), (-1, -1)):  # S-W
            dx, dy = dx - 1, dy + 1
        elif step in ((-1, 0), (-1, 1)):  # W-N
            dx, dy = (dx + 1, dy) if dx == -1 else (dx + 1, dy + 1)
        else:
            raise RuntimeError(f"ranged walk reached the centre from {pos}")

        if grid.in_bounds(target):
            yield target


def _walk_spear(grid: Grid, unit: Unit, pos: Pos, max: int) -> Iterator[Pos]:
    x, y = pos
    for dx, dy in DIRECTIONS:
        for dist in range(1, max + 1):
            target = (x + dx * dist, y + dy * dist)
            if not grid.in_bounds(target):
                break
            yield target
            other = grid.unit(target)
            if other is not None and not unit.can_spear_through(other):
                break


def find_attackable(
    grid: Grid, unit: Unit, attack_range: AttackRange
) -> Iterator[tuple[Pos, Unit]]:
    """Positions in range holding a unit the attacker can strike."""
    for pos in attack_range:
        target = grid.unit(pos)
        if target is not None and target is not unit and unit.can_attack(target):
            yield pos, target


def attackable_from(
    grid: Grid, pos: Pos, origin: Optional[Pos] = None
) -> list[tuple[Pos, Unit]]:
    """Valid targets for the unit at pos; origin is where it started its move."""
    unit = grid.unit(pos)
    if unit is None:
        raise ValueError(f"no unit at {pos}")
    if origin is None:
        attack_range = AttackRange.for_unit(grid, unit, pos)
    else:
        attack_range = AttackRange.after_move(grid, unit, origin, pos)
    return list(find_attackable(grid, unit, attack_range))
