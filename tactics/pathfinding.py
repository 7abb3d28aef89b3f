"""
Movement range search.

Computes the minimal movement cost from a unit's tile to every tile it can
reach within its movement budget, using the terrain costs of its movement
class. Tiles holding units the mover cannot pass through block movement.
"""

import heapq
import random
from typing import Optional

from .grid import Grid, Pos
from .units import Unit


class PathFinder:
    """Bounded-cost reachability result rooted at a unit's position."""

    def __init__(self, grid: Grid, origin: Pos, unit: Unit, costs: dict[Pos, int]):
        self.grid = grid
        self.origin = origin
        self.unit = unit
        self.costs = costs

    @classmethod
    def search(cls, grid: Grid, origin: Pos, budget: Optional[int] = None) -> "PathFinder":
        """Run a bounded Dijkstra from the unit standing at origin."""
        unit = grid.unit(origin)
        if unit is None:
            raise ValueError(f"no unit to move at {origin}")
        movement = unit.kind.movement
        budget = movement.movement if budget is None else budget

        costs = {origin: 0}
        frontier = [(0, origin)]
        while frontier:
            cost, pos = heapq.heappop(frontier)
            if cost > costs[pos]:
                continue  # stale entry, a cheaper route was found already
            for npos in grid.neighbors(pos):
                other, terrain = grid.tile(npos)
                if other is not None and not unit.can_move_through(other):
                    continue
                new_cost = cost + movement.cls.cost(terrain)
                if new_cost > budget:
                    continue
                if npos in costs and costs[npos] <= new_cost:
                    continue
                costs[npos] = new_cost
                heapq.heappush(frontier, (new_cost, npos))

        return cls(grid, origin, unit, costs)

    def cost(self, pos: Pos) -> Optional[int]:
        """Minimal cost to reach pos, or None when out of reach."""
        return self.costs.get(pos)

    def reachable(self) -> list[Pos]:
        return list(self.costs)

    def can_move_to(self, pos: Pos) -> bool:
        """Whether the unit can end its move on pos."""
        if pos not in self.costs:
            return False
        return pos == self.origin or self.grid.unit(pos) is None

    def destinations(self) -> list[Pos]:
        return [pos for pos in self.costs if self.can_move_to(pos)]

    def random_path_rev(self, target: Pos, rng: Optional[random.Random] = None) -> Optional[list[Pos]]:
        """
        A minimal-cost path from target back to the origin.

        Each step moves to a neighbour whose cost plus the cost of entering
        the current tile equals the current cost; ties are broken randomly.
        Returns None if target is not reachable.
        """
        if target not in self.costs:
            return None
        rng = rng or random
        cls = self.unit.kind.movement.cls

        path = [target]
        pos = target
        while pos != self.origin:
            expected = self.costs[pos] - cls.cost(self.grid.terrain(pos))
            candidates = [n for n in self.grid.neighbors(pos) if self.costs.get(n) == expected]
            if not candidates:
                raise RuntimeError(f"no cheaper neighbour on the way back from {pos}")
            pos = rng.choice(candidates)
            path.append(pos)
        return path

    def path(self, target: Pos, rng: Optional[random.Random] = None) -> Optional[list[Pos]]:
        """Same as random_path_rev, ordered from the origin to target."""
        path = self.random_path_rev(target, rng)
        if path is None:
            return None
        path.reverse()
        return path
