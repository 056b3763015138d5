from .grid import DungeonGrid
from .position import Coord, Direction, Position, PositionDelta, chebyshev_distance
from .tiles import SpriteIndex, Tile, ViewStatus

__all__ = [
    "DungeonGrid",
    "Coord",
    "Direction",
    "Position",
    "PositionDelta",
    "chebyshev_distance",
    "SpriteIndex",
    "Tile",
    "ViewStatus",
]
