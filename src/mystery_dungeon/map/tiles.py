from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, IntEnum


class ViewStatus(Enum):
    """Fog-of-war memory for a single tile.

    UNEXPLORED tiles have never been lit. SEEN tiles are lit by the current
    visibility pass. REVEALED tiles were seen before but are not lit now.
    """

    UNEXPLORED = "unexplored"
    REVEALED = "revealed"
    SEEN = "seen"


class SpriteIndex(IntEnum):
    """Indices into the renderer's tileset atlas."""

    WALL = 206
    FLOOR = 520
    PLAYER = 1648
    BAT = 1700
    OUT_OF_BOUNDS = 2499


@dataclass
class Tile:
    """Terrain state of one grid cell.

    ``passable`` is written by the generator only; ``view_status`` is written
    by the visibility engine only. The renderer reads both plus
    ``sprite_index``.
    """

    sprite_index: int = SpriteIndex.WALL
    passable: bool = False
    view_status: ViewStatus = ViewStatus.UNEXPLORED

    def carve(self) -> None:
        self.passable = True
        self.sprite_index = SpriteIndex.FLOOR

    def light(self) -> None:
        self.view_status = ViewStatus.SEEN

    def fade(self) -> None:
        """Degrade a currently lit tile to remembered; other states are kept."""
        if self.view_status is ViewStatus.SEEN:
            self.view_status = ViewStatus.REVEALED


__all__ = ["ViewStatus", "SpriteIndex", "Tile"]
