from .base import Dungeon, DungeonGenerator
from .cavern import CavernGenerator

__all__ = ["Dungeon", "DungeonGenerator", "CavernGenerator"]
