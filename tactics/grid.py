"""
Square grid map for tactical matches.

Tiles are stored in a flat list addressed by (x, y) with index = y * w + x.
The grid is the single source of truth for terrain, occupancy and tile
ownership. Every access is bounds-checked; at most one unit per tile.
"""

import logging
from dataclasses import dataclass
from typing import Callable, Iterator, Optional

from .catalog import Terrain
from .units import Faction, Unit

logger = logging.getLogger(__name__)

Pos = tuple[int, int]

# Orthogonal neighbour offsets, in N, E, S, W order (north is +y).
DIRECTIONS: tuple[Pos, ...] = ((0, 1), (1, 0), (0, -1), (-1, 0))


@dataclass
class CaptureState:
    """In-progress capture of a tile."""
    faction: Faction
    progress: int = 0


@dataclass
class Tile:
    """Individual grid tile."""
    terrain: Terrain
    unit: Optional[Unit] = None
    owner: Optional[Faction] = None
    capture: Optional[CaptureState] = None

    @property
    def can_be_captured(self) -> bool:
        return self.terrain.capturable


def split_pair(items: list, i: int, j: int) -> tuple:
    """Return the items at two distinct indices of one list."""
    if i == j:
        raise ValueError(f"indices must be distinct, got {i} twice")
    return items[i], items[j]


class Grid:
    """
    Fixed-size tile grid.

    Origin (0, 0) is the bottom-left tile; x grows east and y grows north.
    """

    def __init__(self, size: Pos, make_tile: Callable[[Pos], Tile]):
        w, h = size
        if w <= 0 or h <= 0:
            raise ValueError(f"grid size must be positive, got {size}")
        self.width = w
        self.height = h
        self._tiles: list[Tile] = [make_tile((i % w, i // w)) for i in range(w * h)]

    @classmethod
    def filled(cls, size: Pos, terrain: Terrain) -> "Grid":
        """Create a grid where every tile has the same terrain."""
        return cls(size, lambda _: Tile(terrain=terrain))

    @property
    def size(self) -> Pos:
        return (self.width, self.height)

    # Coordinates
    def in_bounds(self, pos: Pos) -> bool:
        x, y = pos
        return 0 <= x < self.width and 0 <= y < self.height

    def index(self, pos: Pos) -> int:
        """Linear offset of a position."""
        if not self.in_bounds(pos):
            raise IndexError(f"position {pos} out of bounds for grid of size {self.size}")
        x, y = pos
        return y * self.width + x

    def pos(self, index: int) -> Pos:
        """Position of a linear offset."""
        if not 0 <= index < len(self._tiles):
            raise IndexError(f"index {index} out of bounds for grid of size {self.size}")
        return (index % self.width, index // self.width)

    def neighbors(self, pos: Pos) -> list[Pos]:
        """In-bounds orthogonal neighbours of a position."""
        x, y = pos
        result = []
        for dx, dy in DIRECTIONS:
            npos = (x + dx, y + dy)
            if self.in_bounds(npos):
                result.append(npos)
        return result

    # Tile access
    def tile(self, pos: Pos) -> tuple[Optional[Unit], Terrain]:
        """Unit and terrain at a position."""
        tile = self._tiles[self.index(pos)]
        return tile.unit, tile.terrain

    def tile_mut(self, pos: Pos) -> Tile:
        """The mutable tile record at a position."""
        return self._tiles[self.index(pos)]

    def unit(self, pos: Pos) -> Optional[Unit]:
        return self._tiles[self.index(pos)].unit

    def terrain(self, pos: Pos) -> Terrain:
        return self._tiles[self.index(pos)].terrain

    def tiles(self) -> Iterator[tuple[Pos, Tile]]:
        for i, tile in enumerate(self._tiles):
            yield self.pos(i), tile

    # Unit mutation
    def add_unit(self, unit: Unit, pos: Pos):
        tile = self.tile_mut(pos)
        if tile.unit is not None:
            raise ValueError(f"tile {pos} is already occupied by {tile.unit}")
        tile.unit = unit

    def remove_unit(self, pos: Pos) -> Unit:
        tile = self.tile_mut(pos)
        if tile.unit is None:
            raise ValueError(f"no unit to remove at {pos}")
        unit, tile.unit = tile.unit, None
        return unit

    def move_unit(self, src: Pos, dst: Pos):
        """Move the unit at src to the empty tile dst. Moving in place is a no-op."""
        src_tile = self.tile_mut(src)
        dst_tile = self.tile_mut(dst)
        if src_tile.unit is None:
            raise ValueError(f"no unit to move at {src}")
        if src == dst:
            return
        if dst_tile.unit is not None:
            raise ValueError(f"cannot move to occupied tile {dst}")
        dst_tile.unit, src_tile.unit = src_tile.unit, None
        logger.debug(f"Moved unit from {src} to {dst}")

    def unit_pair_mut(self, a: Pos, b: Pos) -> tuple[Tile, Tile]:
        """Both tiles of two distinct positions, e.g. attacker and defender."""
        if a == b:
            raise ValueError(f"a unit cannot be paired with itself at {a}")
        return split_pair(self._tiles, self.index(a), self.index(b))

    # Queries
    def units(self) -> Iterator[tuple[Pos, Unit]]:
        for pos, tile in self.tiles():
            if tile.unit is not None:
                yield pos, tile.unit

    def units_of(self, faction: Faction) -> list[tuple[Pos, Unit]]:
        return [(pos, u) for pos, u in self.units() if u.faction == faction]

    def has_units(self, faction: Faction) -> bool:
        return any(u.faction == faction for _, u in self.units())

    def factions_present(self) -> list[Faction]:
        """Factions with at least one unit, in turn order."""
        present = {u.faction for _, u in self.units()}
        return [f for f in Faction if f in present]

    def tiles_owned_by(self, faction: Faction) -> list[Pos]:
        return [pos for pos, tile in self.tiles() if tile.owner == faction]

    def get_stats(self) -> dict:
        """Board statistics."""
        terrain_counts: dict[str, int] = {}
        for _, tile in self.tiles():
            name = tile.terrain.name
            terrain_counts[name] = terrain_counts.get(name, 0) + 1

        return {
            "size": self.size,
            "terrain_distribution": terrain_counts,
            "units_by_faction": {
                f.value: len(self.units_of(f)) for f in self.factions_present()
            },
            "owned_tiles": {
                f.value: len(self.tiles_owned_by(f)) for f in Faction if self.tiles_owned_by(f)
            },
        }
