from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Iterator, List

from ...map.grid import DungeonGrid
from ...map.position import Coord


@dataclass
class Dungeon:
    """A generated grid with its spawn points.

    Unpacks as ``grid, player_spawns, enemy_spawns``.
    """

    grid: DungeonGrid
    player_spawns: List[Coord] = field(default_factory=list)
    enemy_spawns: List[Coord] = field(default_factory=list)

    @property
    def player_spawn(self) -> Coord:
        return self.player_spawns[0]

    def __iter__(self) -> Iterator[object]:
        return iter((self.grid, self.player_spawns, self.enemy_spawns))


class DungeonGenerator(ABC):
    """Abstract base for dungeon generators."""

    @abstractmethod
    def generate(self, settings) -> Dungeon:
        """Generate a dungeon from algorithm-specific settings."""
        raise NotImplementedError

    @staticmethod
    def reset(grid: DungeonGrid) -> None:
        """Return ``grid`` to solid, unexplored wall."""
        grid.reset()
