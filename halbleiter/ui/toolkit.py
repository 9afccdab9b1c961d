"""Minimal pygame based UI helpers for headless testing.

Rendering is deterministic (plain fills, lines and pygame's default font) so
the wrapper can be exercised with the SDL ``dummy`` video driver.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Iterable, Optional, Tuple

from ..game import Cell, MoveResult, PuzzleSession
from . import layout

# Pygame is imported lazily in ``ensure_pygame`` so test environments can
# select the SDL drivers first.
_PYGAME = None


def ensure_pygame():
    global _PYGAME
    if _PYGAME is None:
        os.environ.setdefault("SDL_AUDIODRIVER", "dummy")
        _PYGAME = __import__("pygame")
        _PYGAME.display.init()
        _PYGAME.font.init()
    return _PYGAME


@dataclass
class DragState:
    """Tile currently held by the pointer."""

    cell: Cell
    anchor: Tuple[float, float]
    offset: Tuple[float, float]
    pointer: Tuple[float, float]

    @property
    def position(self) -> Tuple[float, float]:
        return (self.pointer[0] + self.offset[0], self.pointer[1] + self.offset[1])


class HalbleiterUI:
    """Small pygame driven wrapper translating pointer drags into moves."""

    def __init__(self, session: PuzzleSession, *, surface=None) -> None:
        pygame = ensure_pygame()
        self.session = session
        self.surface = surface or pygame.Surface(session.viewport)
        self.drag: Optional[DragState] = None
        self.last_result: Optional[MoveResult] = None
        self.font = pygame.font.Font(pygame.font.get_default_font(), 14)

    # ------------------------------------------------------------------
    # Coordinates
    def to_world(self, pixel: Tuple[int, int]) -> Tuple[float, float]:
        """Screen pixel to render space (origin at the centre, y up)."""

        width, height = self.surface.get_size()
        return (pixel[0] - width / 2, height / 2 - pixel[1])

    def to_screen(self, position: Tuple[float, float]) -> Tuple[int, int]:
        width, height = self.surface.get_size()
        return (int(round(position[0] + width / 2)), int(round(height / 2 - position[1])))

    # ------------------------------------------------------------------
    # Input handling
    def process_events(self, events: Iterable[object]) -> None:
        pygame = ensure_pygame()
        for event in events:
            if event.type == pygame.MOUSEBUTTONDOWN and event.button == 1:
                self.pick_up(event.pos)
            elif event.type == pygame.MOUSEMOTION:
                self.move_pointer(event.pos)
            elif event.type == pygame.MOUSEBUTTONUP and event.button == 1:
                self.drop(event.pos)
            elif event.type == pygame.KEYDOWN and event.key == pygame.K_r:
                self.restart()

    def pick_up(self, pixel: Tuple[int, int]) -> bool:
        geometry = self.session.geometry
        pointer = self.to_world(pixel)
        cell = geometry.cell_at(pointer)
        if cell is None or self.session.grid.get(*cell) is None:
            return False
        anchor = geometry.cell_to_position(*cell)
        self.drag = DragState(
            cell=cell,
            anchor=anchor,
            offset=(anchor[0] - pointer[0], anchor[1] - pointer[1]),
            pointer=pointer,
        )
        return True

    def move_pointer(self, pixel: Tuple[int, int]) -> None:
        if self.drag is not None:
            self.drag.pointer = self.to_world(pixel)

    def drop(self, pixel: Tuple[int, int]) -> Optional[MoveResult]:
        if self.drag is None:
            return None
        self.drag.pointer = self.to_world(pixel)
        result = self.session.attempt_drop(self.drag.anchor, self.drag.position)
        self.drag = None
        self.last_result = result
        return result

    def restart(self) -> None:
        self.drag = None
        self.session.restart()

    # ------------------------------------------------------------------
    # Rendering helpers
    def render(self):
        pygame = ensure_pygame()
        from .assets import draw_tile

        self.surface.fill(layout.BACKGROUND_COLOR)
        geometry = self.session.geometry
        size = geometry.tile_size
        for cell, tile in self.session.grid.cells():
            if tile is None:
                continue
            if self.drag is not None and self.drag.cell == cell:
                continue
            rect = pygame.Rect(self.to_screen(geometry.cell_to_position(*cell)), (size, size))
            draw_tile(self.surface, tile, rect, self.font, lit=self.session.solved)
        self._draw_grid_lines()
        if self.drag is not None:
            tile = self.session.grid.get(*self.drag.cell)
            rect = pygame.Rect(self.to_screen(self.drag.position), (size, size))
            draw_tile(self.surface, tile, rect, self.font, lit=self.session.solved)
        return self.surface

    def _draw_grid_lines(self) -> None:
        pygame = ensure_pygame()
        geometry = self.session.geometry
        left, top = self.to_screen((geometry.start_x, geometry.start_y))
        right = left + geometry.width * geometry.tile_size
        bottom = top + geometry.height * geometry.tile_size
        for column in range(geometry.width + 1):
            x = left + column * geometry.tile_size
            pygame.draw.line(self.surface, layout.GRID_LINE_COLOR, (x, top), (x, bottom), 1)
        for row in range(geometry.height + 1):
            y = top + row * geometry.tile_size
            pygame.draw.line(self.surface, layout.GRID_LINE_COLOR, (left, y), (right, y), 1)


__all__ = ["DragState", "HalbleiterUI"]
