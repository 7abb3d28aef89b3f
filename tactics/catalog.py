"""
Static game data: terrain, movement classes and unit kinds.

The catalog is loaded once from YAML and shared by every match. All entries
are immutable; units hold a reference to their UnitKind rather than a copy.
"""

import logging
import yaml
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Optional, Union

logger = logging.getLogger(__name__)


class CatalogError(ValueError):
    """Raised when catalog data is malformed or inconsistent."""


@dataclass(frozen=True)
class Sprite:
    texture: str
    area: Optional[tuple[int, int, int, int]] = None


@dataclass(frozen=True)
class Terrain:
    """Tile type with its defense bonus and capture threshold (0 = not capturable)."""
    name: str
    defense: float
    capture: int = 0
    sprite: Optional[Sprite] = None

    @property
    def capturable(self) -> bool:
        return self.capture > 0


@dataclass(frozen=True)
class MovementClass:
    """Named terrain -> cost table shared by unit kinds."""
    name: str
    costs: dict[str, int] = field(hash=False)

    def cost(self, terrain: Terrain) -> int:
        return self.costs[terrain.name]


@dataclass(frozen=True)
class Melee:
    pass


@dataclass(frozen=True)
class Ranged:
    min: int
    max: int


@dataclass(frozen=True)
class Spear:
    range: int


RangeKind = Union[Melee, Ranged, Spear]


@dataclass(frozen=True)
class AttackInfo:
    damage: float
    range: RangeKind
    modifiers: dict[str, float] = field(default_factory=dict, hash=False)

    def modifier(self, defense_class: str) -> float:
        return self.modifiers.get(defense_class, 1.0)


@dataclass(frozen=True)
class DefenseInfo:
    defense: float
    cls: str


@dataclass(frozen=True)
class MovementInfo:
    movement: int
    cls: MovementClass


@dataclass(frozen=True)
class UnitKind:
    """Immutable unit template. One instance per kind, shared by all its units."""
    name: str
    attack: AttackInfo
    defense: DefenseInfo
    movement: MovementInfo
    sprite: Sprite
    capture: int = 0


@dataclass
class Catalog:
    """All static data a match needs."""
    terrain: dict[str, Terrain]
    movement_classes: dict[str, MovementClass]
    unit_kinds: dict[str, UnitKind]
    defense_classes: frozenset[str]

    @classmethod
    def load(cls, path: Path | str) -> "Catalog":
        """Load and validate a catalog YAML file."""
        path = Path(path)
        with open(path) as f:
            data = yaml.safe_load(f) or {}
        catalog = cls.from_dict(data)
        logger.info(
            f"Loaded catalog {path.name}: {len(catalog.terrain)} terrain types, "
            f"{len(catalog.movement_classes)} movement classes, "
            f"{len(catalog.unit_kinds)} unit kinds"
        )
        return catalog

    @classmethod
    def from_dict(cls, data: dict) -> "Catalog":
        """Build a catalog from already parsed data, validating cross references."""
        if not isinstance(data, dict):
            raise CatalogError("catalog must be a mapping")
        reader = _Reader(data)

        defense_classes = frozenset(str(c) for c in reader.require("defense_classes"))

        terrain = {}
        for name, spec in reader.require_mapping("terrain").items():
            terrain[name] = _parse_terrain(name, reader.child(spec, "terrain", name))
        if not terrain:
            raise CatalogError("catalog defines no terrain")

        movement_classes = {}
        for name, costs in reader.require_mapping("movement_classes").items():
            movement_classes[name] = _parse_movement_class(name, costs, terrain)

        unit_kinds = {}
        for name, spec in reader.require_mapping("unit_kinds").items():
            unit_kinds[name] = _parse_unit_kind(
                name,
                reader.child(spec, "unit_kinds", name),
                movement_classes,
                defense_classes,
            )

        reader.warn_unused()
        return cls(
            terrain=terrain,
            movement_classes=movement_classes,
            unit_kinds=unit_kinds,
            defense_classes=defense_classes,
        )


class _Reader:
    """Tracks which keys were consumed so leftovers can be reported."""

    def __init__(self, data: dict, path: str = ""):
        self.data = data
        self.path = path
        self.used: set[str] = set()
        self.children: list["_Reader"] = []

    def _key_path(self, key: str) -> str:
        return f"{self.path}.{key}" if self.path else key

    def require(self, key: str) -> Any:
        if key not in self.data:
            raise CatalogError(f"missing field {self._key_path(key)!r}")
        self.used.add(key)
        return self.data[key]

    def require_mapping(self, key: str) -> dict:
        value = self.require(key)
        if not isinstance(value, dict):
            raise CatalogError(f"expected a mapping at {self._key_path(key)!r}")
        return value

    def get(self, key: str, default: Any = None) -> Any:
        if key in self.data:
            self.used.add(key)
            return self.data[key]
        return default

    def child(self, data: Any, *keys: str) -> "_Reader":
        path = ".".join([self.path, *keys] if self.path else keys)
        if not isinstance(data, dict):
            raise CatalogError(f"expected a mapping at {path!r}")
        reader = _Reader(data, path)
        self.children.append(reader)
        return reader

    def warn_unused(self):
        for key in self.data:
            if key not in self.used:
                logger.warning(f"unused key in catalog: {self._key_path(key)!r}")
        for child in self.children:
            child.warn_unused()


def _parse_sprite(spec: Any, where: str) -> Sprite:
    if isinstance(spec, str):
        return Sprite(texture=spec)
    if not isinstance(spec, dict) or "texture" not in spec:
        raise CatalogError(f"missing field 'texture' for sprite of {where}")
    area = spec.get("area")
    if area is not None:
        if len(area) != 4:
            raise CatalogError(f"sprite area of {where} must have 4 values")
        area = tuple(int(v) for v in area)
    return Sprite(texture=str(spec["texture"]), area=area)


def _parse_terrain(name: str, reader: _Reader) -> Terrain:
    capture = int(reader.get("capture", 0))
    if capture < 0:
        raise CatalogError(f"negative capture threshold for terrain {name!r}")
    sprite = reader.get("sprite")
    return Terrain(
        name=name,
        defense=float(reader.require("defense")),
        capture=capture,
        sprite=_parse_sprite(sprite, f"terrain {name!r}") if sprite is not None else None,
    )


def _parse_movement_class(name: str, costs: Any, terrain: dict[str, Terrain]) -> MovementClass:
    if not isinstance(costs, dict):
        raise CatalogError(f"movement class {name!r} must map terrain to costs")

    for tname in costs:
        if tname not in terrain:
            raise CatalogError(f"unrecognized terrain {tname!r} for movement class {name!r}")
    for tname in terrain:
        if tname not in costs:
            raise CatalogError(f"movement class {name!r} is missing terrain {tname!r}")

    parsed = {}
    for tname, cost in costs.items():
        if not isinstance(cost, int) or isinstance(cost, bool) or cost < 1:
            raise CatalogError(
                f"movement class {name!r} has invalid cost {cost!r} for terrain {tname!r}"
            )
        parsed[tname] = cost
    return MovementClass(name=name, costs=parsed)


def _parse_range(reader: _Reader, where: str) -> RangeKind:
    kind = reader.require("kind")

    def positive(key: str) -> int:
        if key not in reader.data:
            raise CatalogError(f"missing field {key!r} for {kind} range of {where}")
        value = reader.require(key)
        if not isinstance(value, int) or value < 1:
            raise CatalogError(f"field {key!r} for {kind} range of {where} must be >= 1")
        return value

    if kind == "melee":
        return Melee()
    if kind == "ranged":
        lo, hi = positive("min"), positive("max")
        if lo > hi:
            raise CatalogError(f"ranged range of {where} has min {lo} > max {hi}")
        return Ranged(min=lo, max=hi)
    if kind == "spear":
        return Spear(range=positive("range"))
    raise CatalogError(f"unrecognized range kind {kind!r} for {where}")


def _parse_unit_kind(
    name: str,
    reader: _Reader,
    movement_classes: dict[str, MovementClass],
    defense_classes: frozenset[str],
) -> UnitKind:
    where = f"unit kind {name!r}"

    attack = reader.child(reader.require("attack"), "attack")
    modifiers = {str(k): float(v) for k, v in (attack.get("modifiers") or {}).items()}
    for cls in modifiers:
        if cls not in defense_classes:
            raise CatalogError(f"unrecognized defense class {cls!r} in modifiers of {where}")

    defense = reader.child(reader.require("defense"), "defense")
    defense_cls = str(defense.require("class"))
    if defense_cls not in defense_classes:
        raise CatalogError(f"unrecognized defense class {defense_cls!r} for {where}")

    movement = reader.child(reader.require("movement"), "movement")
    class_name = movement.require("class")
    if class_name not in movement_classes:
        raise CatalogError(f"unrecognized movement class {class_name!r} for {where}")
    budget = int(movement.require("movement"))
    if budget < 0:
        raise CatalogError(f"negative movement for {where}")

    capture = int(reader.get("capture", 0))
    if capture < 0:
        raise CatalogError(f"negative capture for {where}")

    return UnitKind(
        name=name,
        attack=AttackInfo(
            damage=float(attack.require("damage")),
            range=_parse_range(attack.child(attack.require("range"), "range"), where),
            modifiers=modifiers,
        ),
        defense=DefenseInfo(defense=float(defense.require("defense")), cls=defense_cls),
        movement=MovementInfo(movement=budget, cls=movement_classes[class_name]),
        sprite=_parse_sprite(reader.require("sprite"), where),
        capture=capture,
    )
