import copy
import logging
from pathlib import Path

import pytest

from tactics import (
    Catalog, CatalogError, Faction, Level, LevelError, Melee, MatchConfig, Ranged, Spear,
)
from conftest import CATALOG_DATA

DATA = Path(__file__).parent.parent / "data"


def edited(**changes):
    data = copy.deepcopy(CATALOG_DATA)
    for path, value in changes.items():
        node = data
        keys = path.split("__")
        for key in keys[:-1]:
            node = node[key]
        if value is None:
            del node[keys[-1]]
        else:
            node[keys[-1]] = value
    return data


def test_catalog_parses_range_kinds(catalog):
    assert catalog.unit_kinds["soldier"].attack.range == Melee()
    assert catalog.unit_kinds["archer"].attack.range == Ranged(min=2, max=3)
    assert catalog.unit_kinds["pikeman"].attack.range == Spear(range=2)
    assert catalog.unit_kinds["tank"].attack.modifier("infantry") == 1.5
    assert catalog.unit_kinds["tank"].attack.modifier("armor") == 1.0


def test_unit_kinds_share_movement_classes(catalog):
    soldier = catalog.unit_kinds["soldier"]
    archer = catalog.unit_kinds["archer"]
    assert soldier.movement.cls is archer.movement.cls
    assert soldier.movement.cls is catalog.movement_classes["foot"]


@pytest.mark.parametrize("changes,message", [
    ({"unit_kinds__soldier__attack__range": {"kind": "lance"}}, "unrecognized range kind"),
    ({"unit_kinds__archer__attack__range": {"kind": "ranged", "min": 2}}, "missing field 'max'"),
    ({"unit_kinds__archer__attack__range": {"kind": "ranged", "min": 3, "max": 2}}, "min 3 > max 2"),
    ({"unit_kinds__archer__attack__range": {"kind": "ranged", "min": 0, "max": 2}}, "must be >= 1"),
    ({"unit_kinds__pikeman__attack__range": {"kind": "spear"}}, "missing field 'range'"),
    ({"movement_classes__foot__swamp": 2}, "unrecognized terrain 'swamp'"),
    ({"movement_classes__foot__forest": None}, "missing terrain 'forest'"),
    ({"movement_classes__foot__forest": 0}, "invalid cost"),
    ({"unit_kinds__soldier__movement__class": "wings"}, "unrecognized movement class"),
    ({"unit_kinds__soldier__defense__class": "cavalry"}, "unrecognized defense class"),
    ({"unit_kinds__tank__attack__modifiers": {"cavalry": 2.0}}, "unrecognized defense class"),
    ({"unit_kinds__soldier__sprite": None}, "missing field"),
    ({"terrain__grass__defense": None}, "missing field"),
    ({"defense_classes": None}, "missing field 'defense_classes'"),
    ({"terrain": ["grass", "forest"]}, "expected a mapping at 'terrain'"),
    ({"movement_classes": ["foot"]}, "expected a mapping at 'movement_classes'"),
    ({"unit_kinds": "soldier"}, "expected a mapping at 'unit_kinds'"),
    ({"movement_classes__foot__forest": True}, "invalid cost"),
])
def test_catalog_validation_errors(changes, message):
    with pytest.raises(CatalogError, match=message):
        Catalog.from_dict(edited(**changes))


def test_catalog_warns_about_unused_keys(caplog):
    data = edited(unit_kinds__soldier__speed=4)
    with caplog.at_level(logging.WARNING):
        Catalog.from_dict(data)
    assert "unit_kinds.soldier.speed" in caplog.text


def test_bundled_data_loads():
    catalog = Catalog.load(DATA / "schema" / "catalog.yaml")
    level = Level.load(DATA / "levels" / "crossing.yaml")
    grid = level.create_grid(catalog)
    assert grid.size == (10, 8)
    assert grid.factions_present() == [Faction.RED, Faction.BLUE]
    assert grid.tile_mut((1, 1)).owner == Faction.RED


def level_data(**layers):
    return {"name": "test", "schema": "catalog", "default_terrain": "grass", "layers": layers}


def test_level_builds_grid_from_bounding_box(catalog):
    level = Level.from_dict(level_data(
        terrain={"forest": [[2, 3, 0]], "city": [[5, 4, 2]]},
        units={"soldier": [[3, 3, 1]], "tank": [[4, 4, 2]]},
    ))
    grid = level.create_grid(catalog)
    assert grid.size == (4, 2)
    assert grid.terrain((0, 0)).name == "forest"
    assert grid.terrain((1, 0)).name == "grass"
    assert grid.tile_mut((3, 1)).owner == Faction.BLUE
    assert grid.unit((1, 0)).faction == Faction.RED
    assert grid.unit((2, 1)).kind is catalog.unit_kinds["tank"]


@pytest.mark.parametrize("layers,message", [
    ({"units": {"dragon": [[0, 0, 1]]}}, "unit kind not in catalog"),
    ({"terrain": {"lava": [[0, 0, 0]]}}, "terrain not in catalog"),
    ({"units": {"soldier": [[0, 0, 0]]}}, "must belong to a faction"),
    ({"units": {"soldier": [[0, 0, 9]]}}, "unrecognized faction"),
    ({"units": {"soldier": [[0, 0, 1]], "tank": [[0, 0, 2]]}}, "two units"),
    ({}, "no points"),
])
def test_level_errors(catalog, layers, message):
    with pytest.raises(LevelError, match=message):
        Level.from_dict(level_data(**layers)).create_grid(catalog)


@pytest.mark.parametrize("data,message", [
    (["grass"], "level must be a mapping"),
    ({"name": "x", "layers": [["grass"]]}, "layers must map"),
    ({"layers": {}}, "missing field 'name'"),
])
def test_level_rejects_malformed_documents(data, message):
    with pytest.raises(LevelError, match=message):
        Level.from_dict(data)


def test_level_requires_default_terrain(catalog):
    data = level_data(units={"soldier": [[0, 0, 1]]})
    data["default_terrain"] = "void"
    with pytest.raises(LevelError, match="default terrain"):
        Level.from_dict(data).create_grid(catalog)


def test_owned_uncapturable_tile_warns(catalog, caplog):
    level = Level.from_dict(level_data(terrain={"forest": [[0, 0, 1]]}))
    with caplog.at_level(logging.WARNING):
        level.create_grid(catalog)
    assert "cannot be captured" in caplog.text


def test_match_config_from_file_and_env(tmp_path, monkeypatch):
    (tmp_path / "config.yaml").write_text(
        "match:\n  action_limit: 4\n  factions: [blue, red]\n"
    )
    monkeypatch.delenv("TACTICS_ACTION_LIMIT", raising=False)
    monkeypatch.setenv("TACTICS_RNG_SEED", "42")
    config = MatchConfig.load(tmp_path)
    assert config.action_limit == 4
    assert config.factions == [Faction.BLUE, Faction.RED]
    assert config.rng_seed == 42

    monkeypatch.setenv("TACTICS_ACTION_LIMIT", "1")
    assert MatchConfig.load(tmp_path).action_limit == 1


def test_match_config_defaults_without_file(tmp_path, monkeypatch):
    monkeypatch.delenv("TACTICS_ACTION_LIMIT", raising=False)
    monkeypatch.delenv("TACTICS_RNG_SEED", raising=False)
    config = MatchConfig.load(tmp_path)
    assert config == MatchConfig()
