import os
import sys

import pytest

# Ensure the project root is on the path so modules can be imported in tests
ROOT = os.path.dirname(os.path.dirname(__file__))
if ROOT not in sys.path:
    sys.path.insert(0, ROOT)

from tactics import Catalog, Faction, Grid, Tile, Unit

CATALOG_DATA = {
    "defense_classes": ["infantry", "armor"],
    "terrain": {
        "grass": {"defense": 0.1},
        "forest": {"defense": 0.3},
        "city": {"defense": 0.3, "capture": 20},
    },
    "movement_classes": {
        "foot": {"grass": 1, "forest": 2, "city": 1},
        "treads": {"grass": 1, "forest": 3, "city": 1},
    },
    "unit_kinds": {
        "soldier": {
            "attack": {"damage": 5.0, "range": {"kind": "melee"}, "modifiers": {"armor": 0.5}},
            "defense": {"defense": 0.1, "class": "infantry"},
            "movement": {"movement": 3, "class": "foot"},
            "capture": 10,
            "sprite": {"texture": "soldier.png"},
        },
        "archer": {
            "attack": {"damage": 5.0, "range": {"kind": "ranged", "min": 2, "max": 3},
                       "modifiers": {}},
            "defense": {"defense": 0.0, "class": "infantry"},
            "movement": {"movement": 3, "class": "foot"},
            "sprite": {"texture": "archer.png"},
        },
        "pikeman": {
            "attack": {"damage": 5.0, "range": {"kind": "spear", "range": 2}},
            "defense": {"defense": 0.1, "class": "infantry"},
            "movement": {"movement": 3, "class": "foot"},
            "capture": 10,
            "sprite": {"texture": "pikeman.png"},
        },
        "tank": {
            "attack": {"damage": 8.0, "range": {"kind": "melee"},
                       "modifiers": {"infantry": 1.5}},
            "defense": {"defense": 0.3, "class": "armor"},
            "movement": {"movement": 5, "class": "treads"},
            "sprite": {"texture": "tank.png"},
        },
    },
}


@pytest.fixture
def catalog():
    return Catalog.from_dict(CATALOG_DATA)


@pytest.fixture
def make_grid(catalog):
    """Return a factory for all-grass grids."""
    def _make(size=(5, 5), terrain="grass"):
        return Grid(size, lambda pos: Tile(terrain=catalog.terrain[terrain]))
    return _make


@pytest.fixture
def spawn(catalog):
    """Return a helper placing a new unit on a grid."""
    def _spawn(grid, kind, pos, faction=Faction.RED, health=10):
        unit = Unit(kind=catalog.unit_kinds[kind], faction=faction, health=health)
        grid.add_unit(unit, pos)
        return unit
    return _spawn
