from __future__ import annotations

import logging
from typing import Set, Tuple

from ..map.grid import DungeonGrid
from ..map.position import Coord

logger = logging.getLogger(__name__)

DEFAULT_RADIUS = 10

# Octant transforms (xx, xy, yx, yy): map-x = x0 + dx*xx + dy*xy,
# map-y = y0 + dx*yx + dy*yy.
OCTANTS: Tuple[Tuple[int, int, int, int], ...] = (
    (1, 0, 0, 1),
    (0, 1, 1, 0),
    (0, -1, 1, 0),
    (-1, 0, 0, 1),
    (-1, 0, 0, -1),
    (0, -1, -1, 0),
    (0, 1, -1, 0),
    (1, 0, 0, -1),
)


def is_blocked(grid: DungeonGrid, x: int, y: int) -> bool:
    """Opaque for light: impassable tiles and anything off the grid."""
    tile = grid.get(x, y)
    return tile is None or not tile.passable


def cast_light(
    grid: DungeonGrid,
    origin: Coord,
    row: int,
    start: float,
    end: float,
    radius: int,
    transform: Tuple[int, int, int, int],
    lit: Set[Coord],
) -> None:
    """Light one octant from ``row`` outward within the slope window (start, end).

    Lit cells are marked SEEN on the grid and added to ``lit``. An opaque cell
    forks a child cast over the window in front of it, and the scan resumes
    past it. Recursion depth is bounded by ``radius``.
    """
    if start < end:
        return

    x0, y0 = origin
    xx, xy, yx, yy = transform
    radius_squared = radius * radius
    for j in range(row, radius + 1):
        dx, dy = -j - 1, -j
        blocked = False
        new_start = 0.0
        while dx <= 0:
            dx += 1
            mx, my = x0 + dx * xx + dy * xy, y0 + dx * yx + dy * yy
            l_slope = (dx - 0.5) / (dy + 0.5)
            r_slope = (dx + 0.5) / (dy - 0.5)
            if start < r_slope:
                continue
            if end > l_slope:
                break

            if dx * dx + dy * dy < radius_squared:
                tile = grid.get_mut(mx, my)
                if tile is not None:
                    tile.light()
                    lit.add((mx, my))

            if blocked:
                if is_blocked(grid, mx, my):
                    new_start = r_slope
                    continue
                blocked = False
                start = new_start
            elif is_blocked(grid, mx, my) and j < radius:
                blocked = True
                cast_light(grid, origin, j + 1, start, l_slope, radius, transform, lit)
                new_start = r_slope
        if blocked:
            break


class VisibilityEngine:
    """Recursive shadowcasting with fog-of-war memory on the grid's tiles.

    Each ``recompute`` first fades every SEEN tile to REVEALED, then lights
    the observer's tile and everything in line of sight within ``radius``
    (squared-Euclidean cutoff). Renderers read the result through
    ``Tile.view_status``:
      - UNEXPLORED: never seen, draw dark
      - REVEALED: remembered, draw dim
      - SEEN: currently visible, draw lit
    """

    def __init__(self, radius: int = DEFAULT_RADIUS) -> None:
        if radius < 0:
            raise ValueError("radius must be >= 0")
        self.radius = radius

    def recompute(self, grid: DungeonGrid, observer: Coord) -> Set[Coord]:
        """Refresh visibility from ``observer`` and return the coordinates lit this pass."""
        grid.degrade_visibility()
        lit: Set[Coord] = set()

        ox, oy = observer
        tile = grid.get_mut(ox, oy)
        if tile is None:
            logger.warning("Observer %s is off the %dx%d grid; nothing lit", observer, grid.width, grid.height)
            return lit
        tile.light()
        lit.add((ox, oy))

        for transform in OCTANTS:
            cast_light(grid, (ox, oy), 1, 1.0, 0.0, self.radius, transform, lit)

        logger.debug("FOV from (%d,%d) radius %d -> %d lit tiles", ox, oy, self.radius, len(lit))
        return lit


__all__ = ["VisibilityEngine", "cast_light", "is_blocked", "OCTANTS", "DEFAULT_RADIUS"]
