import pytest

from tactics import AttackRange, Faction, find_attackable, attackable_from


def manhattan_ring(grid, pos, lo, hi):
    x, y = pos
    return {
        (tx, ty)
        for tx in range(grid.width)
        for ty in range(grid.height)
        if lo <= abs(tx - x) + abs(ty - y) <= hi
    }


def test_melee_interior_yields_four_neighbours(make_grid):
    grid = make_grid((5, 5))
    assert list(AttackRange.melee(grid, (2, 2))) == [(2, 3), (3, 2), (2, 1), (1, 2)]


def test_melee_clipped_at_corner(make_grid):
    grid = make_grid((5, 5))
    assert set(AttackRange.melee(grid, (0, 0))) == {(0, 1), (1, 0)}
    assert set(AttackRange.melee(grid, (4, 4))) == {(4, 3), (3, 4)}


def test_melee_ignores_occupancy(make_grid, spawn):
    grid = make_grid((3, 3))
    spawn(grid, "soldier", (1, 2), Faction.RED)
    spawn(grid, "soldier", (2, 1), Faction.BLUE)
    assert len(list(AttackRange.melee(grid, (1, 1)))) == 4


@pytest.mark.parametrize("lo,hi", [(1, 1), (1, 2), (2, 3), (3, 3), (1, 5), (4, 6)])
def test_ranged_matches_brute_force(make_grid, lo, hi):
    grid = make_grid((7, 6))
    for x in range(grid.width):
        for y in range(grid.height):
            tiles = list(AttackRange.ranged(grid, (x, y), lo, hi))
            assert len(tiles) == len(set(tiles))
            assert set(tiles) == manhattan_ring(grid, (x, y), lo, hi)


def test_ranged_from_corner_of_ten_by_ten(make_grid):
    grid = make_grid((10, 10))
    tiles = set(AttackRange.ranged(grid, (0, 0), 2, 3))
    assert tiles == {(x, y) for x in range(10) for y in range(10) if x + y in (2, 3)}
    assert len(tiles) == 7


def test_ranged_walk_starts_at_north_tip(make_grid):
    grid = make_grid((9, 9))
    tiles = list(AttackRange.ranged(grid, (4, 4), 1, 2))
    assert tiles[0] == (4, 6)
    assert tiles[:5] == [(4, 6), (5, 5), (6, 4), (5, 3), (4, 2)]
    assert len(tiles) == 12


@pytest.mark.parametrize("lo,hi", [(0, 2), (3, 2)])
def test_ranged_rejects_bad_bounds(make_grid, lo, hi):
    with pytest.raises(ValueError):
        AttackRange.ranged(make_grid(), (2, 2), lo, hi)


def test_ranges_are_restartable(make_grid):
    grid = make_grid((6, 6))
    attack_range = AttackRange.ranged(grid, (3, 3), 1, 2)
    assert list(attack_range) == list(attack_range)
    assert (3, 5) in attack_range
    assert (3, 3) not in attack_range


def test_empty_range(make_grid):
    assert list(AttackRange.empty()) == []


def test_spear_stops_at_first_enemy(make_grid, spawn):
    grid = make_grid((7, 7))
    pike = spawn(grid, "pikeman", (3, 3), Faction.RED)
    spawn(grid, "soldier", (3, 4), Faction.BLUE)
    tiles = list(AttackRange.spear(grid, pike, (3, 3), 3))
    assert (3, 4) in tiles
    assert (3, 5) not in tiles
    assert (3, 6) not in tiles
    # other rays run their full length
    assert {(4, 3), (5, 3), (6, 3), (3, 2), (3, 1), (3, 0), (2, 3), (1, 3), (0, 3)} <= set(tiles)


def test_spear_thrusts_through_allies(make_grid, spawn):
    grid = make_grid((7, 7))
    pike = spawn(grid, "pikeman", (3, 3), Faction.RED)
    spawn(grid, "soldier", (4, 3), Faction.RED)
    spawn(grid, "soldier", (5, 3), Faction.BLUE)
    spawn(grid, "soldier", (6, 3), Faction.BLUE)
    tiles = list(AttackRange.spear(grid, pike, (3, 3), 3))
    assert (4, 3) in tiles
    assert (5, 3) in tiles
    assert (6, 3) not in tiles


def test_spear_clipped_at_edge(make_grid, spawn):
    grid = make_grid((3, 3))
    pike = spawn(grid, "pikeman", (0, 0), Faction.RED)
    assert set(AttackRange.spear(grid, pike, (0, 0), 2)) == {(0, 1), (0, 2), (1, 0), (2, 0)}


def test_find_attackable_filters_to_enemies(make_grid, spawn):
    grid = make_grid((5, 5))
    soldier = spawn(grid, "soldier", (2, 2), Faction.RED)
    enemy = spawn(grid, "soldier", (2, 3), Faction.BLUE)
    spawn(grid, "soldier", (3, 2), Faction.RED)
    found = list(find_attackable(grid, soldier, AttackRange.melee(grid, (2, 2))))
    assert found == [((2, 3), enemy)]


def test_ranged_cannot_attack_after_moving(make_grid, spawn):
    grid = make_grid((8, 8))
    archer = spawn(grid, "archer", (2, 2), Faction.RED)
    spawn(grid, "soldier", (2, 5), Faction.BLUE)
    assert list(AttackRange.after_move(grid, archer, (2, 2), (2, 3))) == []
    assert set(AttackRange.after_move(grid, archer, (2, 2), (2, 2))) == set(
        AttackRange.for_unit(grid, archer, (2, 2))
    )


def test_melee_reroots_after_move(make_grid, spawn):
    grid = make_grid((8, 8))
    soldier = spawn(grid, "soldier", (2, 2), Faction.RED)
    assert set(AttackRange.after_move(grid, soldier, (2, 2), (5, 5))) == {
        (5, 6), (6, 5), (5, 4), (4, 5)
    }


def test_attackable_from_uses_post_move_range(make_grid, spawn):
    grid = make_grid((8, 8))
    spawn(grid, "archer", (2, 3), Faction.RED)
    spawn(grid, "soldier", (2, 5), Faction.BLUE)
    assert attackable_from(grid, (2, 3)) != []
    assert attackable_from(grid, (2, 3), origin=(2, 2)) == []
