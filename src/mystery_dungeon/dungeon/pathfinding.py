"""Weighted A* over the dungeon grid.

Movement is 8-directional; a cardinal step costs 1 and a diagonal step
costs 2. The heuristic is the Chebyshev distance to the target, which never
overestimates under these costs.

The open set is a heap of ``(f, coordinate, parent)`` tuples, so equal
f-scores are expanded in coordinate order, then parent order. That keeps the
returned path identical across runs for the same grid.

Edge cases:
    - start == target: returns ``[]`` (nothing to walk).
    - target off-grid or impassable: returns ``None``.
    - the start tile itself is never checked for passability and never
      re-entered as a neighbor.
"""

from __future__ import annotations

import heapq
import logging
from typing import Dict, List, Optional, Tuple

from ..map.grid import DungeonGrid
from ..map.position import Coord, chebyshev_distance

logger = logging.getLogger(__name__)

CARDINAL_COST = 1
DIAGONAL_COST = 2

_OFFSETS: Tuple[Coord, ...] = (
    (-1, -1), (-1, 0), (-1, 1),
    (0, -1), (0, 1),
    (1, -1), (1, 0), (1, 1),
)


def step_cost(a: Coord, b: Coord) -> int:
    return DIAGONAL_COST if a[0] != b[0] and a[1] != b[1] else CARDINAL_COST


def path_cost(start: Coord, path: List[Coord]) -> int:
    """Cumulative cost of walking ``path`` from ``start``."""
    total = 0
    prev = start
    for point in path:
        total += step_cost(prev, point)
        prev = point
    return total


def find_path(grid: DungeonGrid, start: Coord, target: Coord) -> Optional[List[Coord]]:
    """Return the cheapest path from ``start`` (exclusive) to ``target`` (inclusive).

    Returns None when the open set empties without reaching the target.
    """
    if start == target:
        return []

    g_score: Dict[Coord, int] = {start: 0}
    came_from: Dict[Coord, Coord] = {}
    open_set: List[Tuple[int, Coord, Coord]] = [(chebyshev_distance(start, target), start, start)]
    closed: set[Coord] = set()

    while open_set:
        _, point, _parent = heapq.heappop(open_set)
        if point == target:
            return _reconstruct(came_from, start, target)
        if point in closed:
            continue
        closed.add(point)

        base = g_score[point]
        px, py = point
        for dx, dy in _OFFSETS:
            nxt = (px + dx, py + dy)
            if nxt == start or nxt in closed:
                continue
            tile = grid.get(nxt[0], nxt[1])
            if tile is None or not tile.passable:
                continue
            tentative = base + (DIAGONAL_COST if dx and dy else CARDINAL_COST)
            if tentative < g_score.get(nxt, tentative + 1):
                g_score[nxt] = tentative
                came_from[nxt] = point
                heapq.heappush(open_set, (tentative + chebyshev_distance(nxt, target), nxt, point))

    logger.debug("No path from %s to %s (%d cells explored)", start, target, len(closed))
    return None


def has_path(grid: DungeonGrid, start: Coord, target: Coord) -> bool:
    return find_path(grid, start, target) is not None


def _reconstruct(came_from: Dict[Coord, Coord], start: Coord, target: Coord) -> List[Coord]:
    path = [target]
    node = target
    while came_from[node] != start:
        node = came_from[node]
        path.append(node)
    path.reverse()
    return path


__all__ = ["find_path", "has_path", "path_cost", "step_cost", "CARDINAL_COST", "DIAGONAL_COST"]
