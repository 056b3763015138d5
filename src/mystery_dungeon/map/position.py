from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional, Tuple

Coord = Tuple[int, int]


def chebyshev_distance(a: Coord, b: Coord) -> int:
    return max(abs(a[0] - b[0]), abs(a[1] - b[1]))


@dataclass(frozen=True)
class PositionDelta:
    dx: int
    dy: int

    @property
    def is_zero(self) -> bool:
        return self.dx == 0 and self.dy == 0


@dataclass(frozen=True, order=True)
class Position:
    """Integer grid coordinate of an agent.

    Coordinates are (x, y) with (0,0) at top-left; x grows to the right, y
    grows down. Adding a delta saturates at zero instead of going negative.
    """

    x: int
    y: int

    def __add__(self, delta: PositionDelta) -> "Position":
        if not isinstance(delta, PositionDelta):
            return NotImplemented
        return Position(max(0, self.x + delta.dx), max(0, self.y + delta.dy))

    def offset(self, delta: PositionDelta, width: Optional[int] = None, height: Optional[int] = None) -> "Position":
        """Add ``delta`` saturating at both grid edges when the size is known."""
        moved = self + delta
        x, y = moved.x, moved.y
        if width is not None:
            x = min(x, width - 1)
        if height is not None:
            y = min(y, height - 1)
        return Position(x, y)

    def as_tuple(self) -> Coord:
        return (self.x, self.y)

    @classmethod
    def of(cls, coord: Coord) -> "Position":
        return cls(int(coord[0]), int(coord[1]))


class Direction(Enum):
    """Cardinal directions accepted as player intents."""

    NORTH = PositionDelta(0, -1)
    SOUTH = PositionDelta(0, 1)
    WEST = PositionDelta(-1, 0)
    EAST = PositionDelta(1, 0)

    @property
    def delta(self) -> PositionDelta:
        return self.value

    @classmethod
    def from_key(cls, key: str) -> Optional["Direction"]:
        """Map a WASD key or a direction name to a Direction; None if unknown."""
        key = key.strip().lower()
        mapping = {
            "w": cls.NORTH,
            "s": cls.SOUTH,
            "a": cls.WEST,
            "d": cls.EAST,
        }
        if key in mapping:
            return mapping[key]
        for member in cls:
            if member.name.lower() == key:
                return member
        return None


__all__ = ["Coord", "chebyshev_distance", "Position", "PositionDelta", "Direction"]
