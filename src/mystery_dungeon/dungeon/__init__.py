from .factory import DungeonFactory
from .generator import CavernGenerator, Dungeon, DungeonGenerator
from .pathfinding import find_path, has_path

__all__ = ["DungeonFactory", "CavernGenerator", "Dungeon", "DungeonGenerator", "find_path", "has_path"]
