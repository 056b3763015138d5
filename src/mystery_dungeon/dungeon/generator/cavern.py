from __future__ import annotations

import logging
import random
from typing import List, Optional, Sequence, Set, Tuple

from ...config.settings import CavernSettings, RepairSettings
from ...errors import GenerationFailed
from ...map.grid import DungeonGrid
from ...map.position import Coord, chebyshev_distance
from ..pathfinding import has_path
from .base import Dungeon, DungeonGenerator

logger = logging.getLogger(__name__)

_STEPS: Tuple[Coord, ...] = ((0, -1), (0, 1), (-1, 0), (1, 0))
MAX_SPAWNS_PER_CAVERN = 4


class CavernGenerator(DungeonGenerator):
    """Random-walk caverns joined by target-seeking tunnels.

    Algorithm:
    - Place the first cavern center at the grid center, then sample further
      centers that keep at least ``max_cavern_dist`` (Chebyshev) from every
      center already placed.
    - Carve each cavern with ``walk_count`` random walks of ``walk_len``
      cardinal steps from its center.
    - Repair connectivity: while a cavern has no A* path from the origin
      cavern, dig a biased tunnel from it toward the nearest cavern it cannot
      reach yet.
    - The origin center is the player spawn; each cavern contributes up to
      four enemy spawns sampled from its carved cells.
    """

    def __init__(
        self,
        width: int,
        height: int,
        rng: Optional[random.Random] = None,
        repair: Optional[RepairSettings] = None,
    ) -> None:
        if width <= 0 or height <= 0:
            raise ValueError("CavernGenerator dimensions must be positive")
        self.width = width
        self.height = height
        self.rng = rng if rng is not None else random.Random()
        self.repair = repair or RepairSettings()

    def generate(self, settings: CavernSettings, grid: Optional[DungeonGrid] = None) -> Dungeon:
        if grid is None:
            grid = DungeonGrid(self.width, self.height)
        else:
            if (grid.width, grid.height) != (self.width, self.height):
                raise ValueError("grid size does not match generator size")
            self.reset(grid)

        centers = self._place_caverns(grid, settings)
        cavern_points = [self._carve_cavern(grid, c, settings.walk_count, settings.walk_len) for c in centers]
        tunnels = self._connect_caverns(grid, centers)

        origin = centers[0]
        player_spawns = [origin]
        enemy_spawns = self._pick_enemy_spawns(cavern_points, player_spawns)

        logger.info(
            "CavernGenerator: %d caverns, %d tunnels, %d floor tiles, %d enemy spawns",
            len(centers),
            tunnels,
            len(grid.passable_cells()),
            len(enemy_spawns),
        )
        return Dungeon(grid, player_spawns, enemy_spawns)

    # ---- Placement ------------------------------------------------------
    def _place_caverns(self, grid: DungeonGrid, settings: CavernSettings) -> List[Coord]:
        centers = [grid.center]
        attempts = 0
        while len(centers) < settings.cavern_count:
            if attempts >= self.repair.placement_attempts:
                logger.warning(
                    "CavernGenerator: placed %d/%d caverns after %d attempts; spacing %d too large for %dx%d",
                    len(centers),
                    settings.cavern_count,
                    attempts,
                    settings.max_cavern_dist,
                    grid.width,
                    grid.height,
                )
                break
            attempts += 1
            point = (self.rng.randrange(grid.width), self.rng.randrange(grid.height))
            if all(chebyshev_distance(point, c) >= settings.max_cavern_dist for c in centers):
                centers.append(point)
        logger.debug("Cavern centers: %s", centers)
        return centers

    # ---- Carving --------------------------------------------------------
    def _carve_cavern(self, grid: DungeonGrid, center: Coord, walk_count: int, walk_len: int) -> Set[Coord]:
        grid.carve(*center)
        points = {center}
        for _ in range(walk_count):
            points.update(self.random_walk(grid, center, walk_len))
        return points

    def random_walk(self, grid: DungeonGrid, start: Coord, walk_len: int) -> List[Coord]:
        """Carve ``walk_len`` uniform cardinal steps from ``start``, clamped to the grid."""
        x, y = start
        path: List[Coord] = []
        for _ in range(walk_len):
            dx, dy = self.rng.choice(_STEPS)
            x, y = self._clamp(grid, x + dx, y + dy)
            grid.carve(x, y)
            path.append((x, y))
        return path

    # ---- Connectivity repair -------------------------------------------
    def _connect_caverns(self, grid: DungeonGrid, centers: Sequence[Coord]) -> int:
        origin = centers[0]
        tunnels = 0
        # a completed tunnel merges two components; never allow fewer rounds than caverns
        limit = max(self.repair.max_repair_rounds, len(centers))
        for cavern in centers[1:]:
            rounds = 0
            while not has_path(grid, origin, cavern):
                if rounds >= limit:
                    raise GenerationFailed(
                        f"cavern at {cavern} still unreachable from {origin} after {rounds} tunnels",
                        cavern=cavern,
                    )
                unconnected = [c for c in centers if c != cavern and not has_path(grid, cavern, c)]
                target = min(unconnected, key=lambda c: (chebyshev_distance(cavern, c), c))
                logger.debug("Tunnelling from cavern %s toward %s", cavern, target)
                self.dig_tunnel(grid, cavern, target)
                rounds += 1
                tunnels += 1
        return tunnels

    def dig_tunnel(self, grid: DungeonGrid, start: Coord, target: Coord) -> List[Coord]:
        """Carve a biased random walk from ``start`` toward ``target``.

        Each step, a sampled direction that does not lead toward the target
        is rerolled while the reroll budget lasts. The budget shrinks as the
        tunnel grows, so early steps head for the target and later ones
        wander. Reachability is re-tested every ``path_check_interval`` steps
        and the walk stops once a path exists or it stands on the target.
        """
        repair = self.repair
        x, y = start
        path: List[Coord] = []
        for step in range(repair.max_tunnel_steps):
            toward = _directions_toward((x, y), target)
            rerolls = max(1, repair.initial_rerolls - step // max(1, repair.reroll_decay)) if toward else 0
            direction = self.rng.choice(_STEPS)
            while direction not in toward and rerolls > 0:
                rerolls -= 1
                direction = self.rng.choice(_STEPS)

            x, y = self._clamp(grid, x + direction[0], y + direction[1])
            grid.carve(x, y)
            path.append((x, y))

            if (x, y) == target:
                break
            if step % max(1, repair.path_check_interval) == 0 and has_path(grid, start, target):
                break
        else:
            logger.debug("Tunnel from %s toward %s ran out after %d steps", start, target, len(path))
        return path

    @staticmethod
    def _clamp(grid: DungeonGrid, x: int, y: int) -> Coord:
        return (max(0, min(grid.width - 1, x)), max(0, min(grid.height - 1, y)))

    # ---- Spawns ---------------------------------------------------------
    def _pick_enemy_spawns(self, cavern_points: Sequence[Set[Coord]], player_spawns: List[Coord]) -> List[Coord]:
        enemy_spawns: List[Coord] = []
        for points in cavern_points:
            ordered = sorted(points)
            attempts = self.rng.randint(0, MAX_SPAWNS_PER_CAVERN)
            for point in self.rng.sample(ordered, min(attempts, len(ordered))):
                if point not in player_spawns and point not in enemy_spawns:
                    enemy_spawns.append(point)
        return enemy_spawns


def _directions_toward(current: Coord, target: Coord) -> Tuple[Coord, ...]:
    dirs = []
    if target[0] > current[0]:
        dirs.append((1, 0))
    elif target[0] < current[0]:
        dirs.append((-1, 0))
    if target[1] > current[1]:
        dirs.append((0, 1))
    elif target[1] < current[1]:
        dirs.append((0, -1))
    return tuple(dirs)
