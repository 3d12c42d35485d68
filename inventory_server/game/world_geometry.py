"""
Map coordinates and landing-cell rules for dropped items.

Coordinates are cell indices with the origin in the top-left corner: x grows to
the right and y grows downward, so facing "U" decreases y.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any


class Facing(str, Enum):
    """Cardinal direction a player faces."""

    UP = "U"
    DOWN = "D"
    LEFT = "L"
    RIGHT = "R"

    @property
    def delta(self) -> tuple[int, int]:
        return _FACING_DELTAS[self]


_FACING_DELTAS: dict[Facing, tuple[int, int]] = {
    Facing.UP: (0, -1),
    Facing.DOWN: (0, 1),
    Facing.LEFT: (-1, 0),
    Facing.RIGHT: (1, 0),
}


@dataclass(frozen=True)
class MapSize:
    """Dimensions of a map in cells."""

    width: int
    height: int

    def contains(self, x: int, y: int) -> bool:
        return 0 <= x < self.width and 0 <= y < self.height


@dataclass(frozen=True)
class MapCoord:
    """A cell on a named map."""

    map_name: str
    x: int
    y: int

    @classmethod
    def from_dict(cls, payload: dict[str, Any]) -> MapCoord:
        return cls(map_name=str(payload["map_name"]), x=int(payload["x"]), y=int(payload["y"]))

    def to_dict(self) -> dict[str, Any]:
        return {"map_name": self.map_name, "x": self.x, "y": self.y}

    def offset(self, dx: int, dy: int) -> MapCoord:
        return MapCoord(self.map_name, self.x + dx, self.y + dy)

    def chebyshev_distance(self, other: MapCoord) -> int:
        """Grid distance where diagonal neighbours count as one step. Maps must match."""
        return max(abs(self.x - other.x), abs(self.y - other.y))

    def is_adjacent(self, other: MapCoord) -> bool:
        """True when ``other`` is on the same map and within one cell (including the same cell)."""
        return self.map_name == other.map_name and self.chebyshev_distance(other) <= 1


def landing_cell(position: MapCoord, facing: Facing, map_size: MapSize) -> MapCoord:
    """
    Cell where an item dropped by a player at ``position`` lands.

    The item lands one cell in front of the player. When that cell is off the
    map it lands one cell behind instead, and when the axis is a single cell
    wide it stays under the player.
    """
    dx, dy = facing.delta
    ahead = position.offset(dx, dy)
    if map_size.contains(ahead.x, ahead.y):
        return ahead

    behind = position.offset(-dx, -dy)
    if map_size.contains(behind.x, behind.y):
        return behind

    return position
