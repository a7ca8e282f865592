"""Anchored screen coordinates for user-interface elements."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class Anchor(Enum):
    TopLeft = 0
    TopRight = 1
    BottomLeft = 2
    BottomRight = 3
    Center = 4
    CenterLeft = 5
    CenterRight = 6
    CenterTop = 7
    CenterBottom = 8


class Units(Enum):
    Pixels = 0
    Percent = 1


# anchor -> ((origin fraction of width, of height), (x direction, y direction))
_ANCHORS: dict[Anchor, tuple[tuple[float, float], tuple[int, int]]] = {
    Anchor.TopLeft: ((0.0, 0.0), (1, 1)),
    Anchor.TopRight: ((1.0, 0.0), (-1, 1)),
    Anchor.BottomLeft: ((0.0, 1.0), (1, -1)),
    Anchor.BottomRight: ((1.0, 1.0), (-1, -1)),
    Anchor.Center: ((0.5, 0.5), (1, 1)),
    Anchor.CenterLeft: ((0.0, 0.5), (1, 1)),
    Anchor.CenterRight: ((1.0, 0.5), (1, 1)),
    Anchor.CenterTop: ((0.5, 0.0), (1, 1)),
    Anchor.CenterBottom: ((0.5, 1.0), (1, 1)),
}


@dataclass
class CoordsUI:
    """A point or extent, in pixels or percent of the screen, relative to an anchor."""

    x: float = 0.0
    y: float = 0.0
    scale: float = 1.0
    anchor: Anchor = Anchor.TopLeft
    units: Units = Units.Pixels

    def _offset(self, screen_width: int, screen_height: int) -> tuple[float, float]:
        if self.units is Units.Percent:
            return screen_width * self.x / 100.0, screen_height * self.y / 100.0
        return self.x * self.scale, self.y * self.scale

    def get_coords(self, screen_width: int, screen_height: int) -> tuple[float, float]:
        """Absolute screen position, measured from the anchor."""
        (fx, fy), (dx, dy) = _ANCHORS[self.anchor]
        off_x, off_y = self._offset(screen_width, screen_height)
        return screen_width * fx + off_x * dx, screen_height * fy + off_y * dy

    def get_top_left_coords(self, screen_width: int, screen_height: int) -> tuple[float, float]:
        """Screen position as if the anchor were the top-left corner."""
        return self._offset(screen_width, screen_height)

    def get_raw_coords(self) -> tuple[float, float]:
        """The stored x and y, unscaled."""
        return self.x, self.y