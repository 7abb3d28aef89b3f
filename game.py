"""
Command line runner for the tactics core.

Loads a level and its catalog, prints the board, and optionally shows the
movement range and targets of one unit.
"""

import logging
import os
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

from tactics import (
    Catalog, Level, Match, MatchConfig, AttackRange, PathFinder, find_attackable,
)

load_dotenv(Path(__file__).parent / ".env")

logger = logging.getLogger(__name__)

UNIT_GLYPHS = {"soldier": "s", "pikeman": "p", "archer": "a", "tank": "t"}
TERRAIN_GLYPHS = {"default": ".", "forest": "^", "mountain": "M", "city": "C"}


def load_match(data_path: Path, level_name: str) -> Match:
    """Load a level, the catalog named by its schema, and the match config."""
    level = Level.load(data_path / "levels" / f"{level_name}.yaml")
    catalog = Catalog.load(data_path / "schema" / f"{level.schema}.yaml")
    grid = level.create_grid(catalog)
    return Match(catalog, grid, MatchConfig.load(data_path))


def render_board(match: Match, marks: Optional[dict] = None) -> str:
    """ASCII board, north at the top. Units are upper case for the first faction."""
    marks = marks or {}
    grid = match.grid
    first = match.turn.factions[0]
    lines = []
    for y in reversed(range(grid.height)):
        row = []
        for x in range(grid.width):
            unit, terrain = grid.tile((x, y))
            if (x, y) in marks:
                row.append(marks[(x, y)])
            elif unit is not None:
                glyph = UNIT_GLYPHS.get(unit.kind.name, "u")
                row.append(glyph.upper() if unit.faction == first else glyph)
            else:
                row.append(TERRAIN_GLYPHS.get(terrain.name, "?"))
        lines.append(f"{y:2d} {' '.join(row)}")
    lines.append("   " + " ".join(str(x % 10) for x in range(grid.width)))
    return "\n".join(lines)


def show_unit(match: Match, pos: tuple[int, int]):
    """Print the movement range and current targets of the unit at pos."""
    unit = match.grid.unit(pos)
    if unit is None:
        print(f"No unit at {pos}")
        return

    paths = PathFinder.search(match.grid, pos)
    targets = list(find_attackable(match.grid, unit, AttackRange.for_unit(match.grid, unit, pos)))

    marks = {p: "*" for p in paths.destinations() if p != pos}
    marks.update({p: "X" for p, _ in targets})
    print(f"\n{unit} at {pos}")
    print(render_board(match, marks))
    print(f"Reachable tiles: {len(paths.destinations())}")
    for target_pos, target in targets:
        damage, retaliation = match.resolver.preview(pos, target_pos)
        back = f", retaliation {retaliation:.1f}" if retaliation is not None else ""
        print(f"  target {target} at {target_pos}: damage {damage:.1f}{back}")


def main():
    """Inspect a level."""
    import argparse

    parser = argparse.ArgumentParser(description="Grid tactics level inspector")
    parser.add_argument("--data", default=os.getenv("TACTICS_DATA", "data"), help="Data directory path")
    parser.add_argument("--level", default="crossing", help="Level name")
    parser.add_argument("--unit", default=None, help="Show ranges of the unit at X,Y")
    parser.add_argument("--log-level", default=os.getenv("TACTICS_LOG_LEVEL", "INFO"))

    args = parser.parse_args()
    logging.basicConfig(level=args.log_level.upper())

    match = load_match(Path(args.data), args.level)
    stats = match.grid.get_stats()

    print("=" * 40)
    print(f"Board {stats['size'][0]}x{stats['size'][1]}")
    print("=" * 40)
    print(render_board(match))
    print(f"Units: {stats['units_by_faction']}")
    print(f"Owned tiles: {stats['owned_tiles']}")
    print(f"{match.turn.current_faction().value} to play, {match.turn.actions_left} actions")

    if args.unit:
        x, y = (int(v) for v in args.unit.split(","))
        show_unit(match, (x, y))


if __name__ == "__main__":
    main()
