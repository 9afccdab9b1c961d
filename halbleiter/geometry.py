"""Mapping between grid cells and render coordinates.

Render space is centred on the grid with the vertical axis pointing up, so
row 0 is the top row and sits at the largest ``y``.  A cell's position is the
top-left corner of its tile.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Optional, Tuple

Cell = Tuple[int, int]
Position = Tuple[float, float]


def _round_half_away(value: float) -> int:
    return int(math.copysign(math.floor(abs(value) + 0.5), value))


def _clamp(value: int, lowest: int, highest: int) -> int:
    return max(lowest, min(highest, value))


def _ratio(offset: float, tile_size: int) -> float:
    if tile_size:
        return offset / tile_size
    if offset == 0 or math.isnan(offset):
        return math.nan
    return math.copysign(math.inf, offset)


def _nearest_index(value: float, highest: int) -> int:
    """Round ``value`` to an index in ``[0, highest]``; NaN maps to 0."""

    if math.isnan(value):
        return 0
    value = max(-1.0, min(highest + 1.0, value))
    return _clamp(_round_half_away(value), 0, highest)


@dataclass(frozen=True)
class GridGeometry:
    """Geometry helpers derived from the grid size and the tile edge length."""

    width: int
    height: int
    tile_size: int

    @classmethod
    def for_viewport(
        cls, width: int, height: int, viewport: Tuple[int, int]
    ) -> "GridGeometry":
        tile_size = min(viewport[0] // width, viewport[1] // height)
        return cls(width=width, height=height, tile_size=tile_size)

    @property
    def start_x(self) -> float:
        return -self.width / 2 * self.tile_size

    @property
    def start_y(self) -> float:
        return self.height / 2 * self.tile_size

    def cell_to_position(self, x: int, y: int) -> Optional[Position]:
        """Top-left anchor of cell ``(x, y)``, or ``None`` outside the grid."""

        if not (0 <= x < self.width and 0 <= y < self.height):
            return None
        return (
            self.start_x + x * self.tile_size,
            self.start_y - y * self.tile_size,
        )

    def _snapped(self, position: Position) -> Cell:
        column = _ratio(position[0] - self.start_x, self.tile_size)
        row = _ratio(self.start_y - position[1], self.tile_size)
        return (
            _nearest_index(column, self.width - 1),
            _nearest_index(row, self.height - 1),
        )

    def position_to_cell(self, position: Position) -> Cell:
        """Nearest cell to an anchor position, clamped onto the grid."""

        return self._snapped(position)

    def snap_to_grid(self, position: Position) -> Position:
        x, y = self._snapped(position)
        return (
            self.start_x + x * self.tile_size,
            self.start_y - y * self.tile_size,
        )

    def cell_at(self, point: Position) -> Optional[Cell]:
        """Cell whose tile covers ``point``, used for picking a tile up."""

        if self.tile_size <= 0 or not all(map(math.isfinite, point)):
            return None
        column = math.floor((point[0] - self.start_x) / self.tile_size)
        row = math.floor((self.start_y - point[1]) / self.tile_size)
        if 0 <= column < self.width and 0 <= row < self.height:
            return column, row
        return None
