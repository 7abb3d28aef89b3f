"""
Level files: named layers of points used to build the starting grid.

A layer maps a tile-type name to a list of [x, y, faction_code] points.
The "terrain" layer places terrain (the code gives the initial owner) and
the "units" layer spawns units (the code gives their faction).
"""

import logging
import yaml
from dataclasses import dataclass, field
from pathlib import Path

from .catalog import Catalog
from .grid import Grid, Pos, Tile
from .units import Faction, Unit

logger = logging.getLogger(__name__)

Point = tuple[int, int, int]
Layer = dict[str, list[Point]]


class LevelError(ValueError):
    """Raised when a level cannot be turned into a grid."""


@dataclass
class Level:
    name: str
    schema: str
    layers: dict[str, Layer] = field(default_factory=dict)
    default_terrain: str = "default"

    @classmethod
    def load(cls, path: Path | str) -> "Level":
        path = Path(path)
        with open(path) as f:
            data = yaml.safe_load(f) or {}
        level = cls.from_dict(data)
        logger.info(f"Loaded level {level.name!r} from {path.name}")
        return level

    @classmethod
    def from_dict(cls, data: dict) -> "Level":
        if not isinstance(data, dict):
            raise LevelError("level must be a mapping")
        for key in ("name", "layers"):
            if key not in data:
                raise LevelError(f"missing field {key!r} in level")
        if not isinstance(data["layers"], dict):
            raise LevelError("level layers must map layer names to layers")

        layers = {}
        for layer_name, layer in data["layers"].items():
            if not isinstance(layer, dict):
                raise LevelError(f"layer {layer_name!r} must map names to points")
            layers[layer_name] = {
                name: [_parse_point(p, layer_name, name) for p in points or []]
                for name, points in layer.items()
            }

        return cls(
            name=str(data["name"]),
            schema=str(data.get("schema", "default")),
            layers=layers,
            default_terrain=str(data.get("default_terrain", "default")),
        )

    def bounds(self) -> tuple[Pos, Pos]:
        """Smallest and largest corner of all points across layers."""
        points = [p for layer in self.layers.values() for pts in layer.values() for p in pts]
        if not points:
            raise LevelError(f"level {self.name!r} has no points")
        xs = [p[0] for p in points]
        ys = [p[1] for p in points]
        return (min(xs), min(ys)), (max(xs), max(ys))

    def create_grid(self, catalog: Catalog) -> Grid:
        """Build the starting grid, spawning every unit of the units layer."""
        (min_x, min_y), (max_x, max_y) = self.bounds()
        size = (max_x - min_x + 1, max_y - min_y + 1)

        default = catalog.terrain.get(self.default_terrain)
        if default is None:
            raise LevelError(f"default terrain {self.default_terrain!r} not in catalog")

        placed: dict[Pos, Tile] = {}
        for name, points in self.layers.get("terrain", {}).items():
            terrain = catalog.terrain.get(name)
            if terrain is None:
                raise LevelError(f"terrain not in catalog: {name!r}")
            for x, y, code in points:
                owner = _faction(code)
                if owner is not None and not terrain.capturable:
                    logger.warning(
                        f"Faction {owner.value} owns tile with terrain {name!r}, "
                        f"which cannot be captured."
                    )
                placed[(x - min_x, y - min_y)] = Tile(terrain=terrain, owner=owner)

        grid = Grid(size, lambda pos: placed.get(pos) or Tile(terrain=default))

        for name, points in self.layers.get("units", {}).items():
            kind = catalog.unit_kinds.get(name)
            if kind is None:
                raise LevelError(f"unit kind not in catalog: {name!r}")
            for x, y, code in points:
                faction = _faction(code)
                if faction is None:
                    raise LevelError(f"unit {name!r} at ({x}, {y}) must belong to a faction")
                pos = (x - min_x, y - min_y)
                if grid.unit(pos) is not None:
                    raise LevelError(f"two units placed at ({x}, {y})")
                grid.add_unit(Unit(kind=kind, faction=faction), pos)

        logger.info(
            f"Level {self.name!r}: {size[0]}x{size[1]} grid, "
            f"{sum(1 for _ in grid.units())} units"
        )
        return grid


def _parse_point(point, layer: str, name: str) -> Point:
    if not isinstance(point, (list, tuple)) or len(point) not in (2, 3):
        raise LevelError(f"invalid point {point!r} for {name!r} in layer {layer!r}")
    x, y = int(point[0]), int(point[1])
    code = int(point[2]) if len(point) == 3 else 0
    return (x, y, code)


def _faction(code: int):
    try:
        return Faction.from_code(code)
    except ValueError as e:
        raise LevelError(str(e)) from e
