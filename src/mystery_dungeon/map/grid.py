from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Generator, Iterator, List, Optional, Sequence, Tuple

from .position import Coord
from .tiles import SpriteIndex, Tile, ViewStatus

logger = logging.getLogger(__name__)

DEFAULT_WIDTH = 500
DEFAULT_HEIGHT = 250


@dataclass(frozen=True)
class Size:
    width: int
    height: int


class DungeonGrid:
    """A safe, bounds-checked 2D tile grid.

    All tile access goes through ``get``/``get_mut``, which return None for
    any coordinate outside ``[0, width) x [0, height)``. Callers treat None as
    blocked; no accessor raises for a bad coordinate.
    """

    __slots__ = ("_w", "_h", "_tiles")

    def __init__(self, width: int = DEFAULT_WIDTH, height: int = DEFAULT_HEIGHT) -> None:
        if width <= 0 or height <= 0:
            raise ValueError("DungeonGrid dimensions must be positive")
        self._w = int(width)
        self._h = int(height)
        # tiles[y][x]
        self._tiles: List[List[Tile]] = [[Tile() for _ in range(self._w)] for _ in range(self._h)]
        logger.debug("Initialized DungeonGrid %dx%d", self._w, self._h)

    @property
    def size(self) -> Size:
        return Size(self._w, self._h)

    @property
    def width(self) -> int:
        return self._w

    @property
    def height(self) -> int:
        return self._h

    @property
    def center(self) -> Coord:
        return (self._w // 2, self._h // 2)

    def is_within(self, x: int, y: int) -> bool:
        return 0 <= x < self._w and 0 <= y < self._h

    def get(self, x: int, y: int) -> Optional[Tile]:
        """Return the tile at (x, y) for reading, or None when out of bounds."""
        if not self.is_within(x, y):
            return None
        return self._tiles[y][x]

    def get_mut(self, x: int, y: int) -> Optional[Tile]:
        """Return the live tile at (x, y) for mutation, or None when out of bounds.

        Only the generator (passability, sprite) and the visibility engine
        (view status) write through this handle.
        """
        if not self.is_within(x, y):
            return None
        return self._tiles[y][x]

    def is_passable(self, x: int, y: int) -> bool:
        tile = self.get(x, y)
        return tile is not None and tile.passable

    def carve(self, x: int, y: int) -> bool:
        """Mark (x, y) passable with the floor sprite. Returns False when out of bounds."""
        tile = self.get_mut(x, y)
        if tile is None:
            return False
        tile.carve()
        return True

    def reset(self) -> None:
        """Overwrite every tile with the default (impassable, unexplored, wall)."""
        for row in self._tiles:
            for x in range(self._w):
                row[x] = Tile()
        logger.debug("DungeonGrid %dx%d reset to walls", self._w, self._h)

    def degrade_visibility(self) -> None:
        """Turn every SEEN tile into REVEALED; REVEALED and UNEXPLORED are kept."""
        for row in self._tiles:
            for tile in row:
                tile.fade()

    def neighbors(self, x: int, y: int, diagonals: bool = False) -> Generator[Coord, None, None]:
        """Yield in-bounds neighboring coordinates."""
        if diagonals:
            offsets = (
                (-1, 0), (1, 0), (0, -1), (0, 1),
                (-1, -1), (1, -1), (-1, 1), (1, 1),
            )
        else:
            offsets = ((-1, 0), (1, 0), (0, -1), (0, 1))

        for dx, dy in offsets:
            nx, ny = x + dx, y + dy
            if self.is_within(nx, ny):
                yield (nx, ny)

    def passable_cells(self) -> List[Coord]:
        return [(x, y) for y, row in enumerate(self._tiles) for x, tile in enumerate(row) if tile.passable]

    def cells_with_status(self, status: ViewStatus) -> List[Coord]:
        return [
            (x, y)
            for y, row in enumerate(self._tiles)
            for x, tile in enumerate(row)
            if tile.view_status is status
        ]

    def __iter__(self) -> Iterator[Tuple[Coord, Tile]]:
        for y, row in enumerate(self._tiles):
            for x, tile in enumerate(row):
                yield (x, y), tile

    @classmethod
    def from_lines(cls, lines: Sequence[str], floor_chars: str = ".") -> "DungeonGrid":
        """Create a grid from an ASCII picture; ``floor_chars`` become passable.

        Row 0 of ``lines`` is y == 0.
        """
        if not lines:
            raise ValueError("lines must not be empty")
        width = len(lines[0])
        if width == 0:
            raise ValueError("line width must be positive")
        for i, row in enumerate(lines):
            if len(row) != width:
                raise ValueError(f"All rows must have equal width; row 0 has {width}, row {i} has {len(row)}")

        grid = cls(width, len(lines))
        for y, row in enumerate(lines):
            for x, ch in enumerate(row):
                if ch in floor_chars:
                    grid.carve(x, y)
        return grid

    def to_lines(self, fog: bool = False) -> List[str]:
        """ASCII picture of the grid: '.' floor, '#' wall.

        With ``fog`` enabled, unexplored tiles render as ' ' and revealed but
        not currently seen floor renders as ','.
        """
        rows: List[str] = []
        for row in self._tiles:
            chars = []
            for tile in row:
                if fog and tile.view_status is ViewStatus.UNEXPLORED:
                    chars.append(" ")
                elif fog and tile.view_status is ViewStatus.REVEALED and tile.passable:
                    chars.append(",")
                else:
                    chars.append("." if tile.passable else "#")
            rows.append("".join(chars))
        return rows

    def sprite_at(self, x: int, y: int) -> int:
        tile = self.get(x, y)
        if tile is None:
            return SpriteIndex.OUT_OF_BOUNDS
        return tile.sprite_index

    def __repr__(self) -> str:
        return f"DungeonGrid(width={self._w}, height={self._h})"


__all__ = ["DungeonGrid", "Size", "DEFAULT_WIDTH", "DEFAULT_HEIGHT"]
