"""Headless interaction tests for the pygame based UI wrapper.

The puzzle uses a 96x96 viewport, so every tile is 32 pixels wide and the
grid fills the whole surface: cell ``(x, y)`` covers pixels
``[32x, 32x + 32) x [32y, 32y + 32)``.
"""

from __future__ import annotations

from collections import Counter
from pathlib import Path

from halbleiter.game import Cable, PuzzleLoader, PuzzleSession, Side
from halbleiter.ui import HalbleiterUI
from halbleiter.ui import layout

PUZZLE_ROOT = Path(__file__).resolve().parents[2] / "puzzles"


def make_session() -> PuzzleSession:
    puzzle = PuzzleLoader(PUZZLE_ROOT).load("easy")
    grid = puzzle.solution_grid()
    grid.swap((0, 2), (1, 2))
    return PuzzleSession(puzzle, layout=grid, viewport=(96, 96))


def drag(pygame, ui: HalbleiterUI, start, end) -> None:
    ui.process_events(
        [
            pygame.event.Event(pygame.MOUSEBUTTONDOWN, button=1, pos=start),
            pygame.event.Event(pygame.MOUSEMOTION, pos=end, rel=(0, 0), buttons=(1, 0, 0)),
            pygame.event.Event(pygame.MOUSEBUTTONUP, button=1, pos=end),
        ]
    )


def pixel(surface, position):
    return tuple(surface.get_at(position))[:3]


def test_drag_into_hole_completes_circuit(pygame_module):
    pygame = pygame_module
    session = make_session()
    ui = HalbleiterUI(session)
    assert not session.solved

    drag(pygame, ui, (16, 80), (48, 80))

    assert ui.last_result is not None
    assert ui.last_result.accepted
    assert ui.last_result.solved
    assert session.grid.get(1, 2) == Cable(Side.TOP, Side.RIGHT)
    assert session.grid.get(0, 2) is None
    assert ui.drag is None


def test_drop_on_occupied_cell_is_rejected(pygame_module):
    pygame = pygame_module
    session = make_session()
    before = session.grid.copy()
    ui = HalbleiterUI(session)

    drag(pygame, ui, (16, 16), (48, 16))

    assert ui.last_result is not None
    assert not ui.last_result.accepted
    assert session.grid == before
    assert session.moves == 0


def test_pressing_a_hole_does_not_start_a_drag(pygame_module):
    pygame = pygame_module
    ui = HalbleiterUI(make_session())

    ui.process_events([pygame.event.Event(pygame.MOUSEBUTTONDOWN, button=1, pos=(48, 80))])

    assert ui.drag is None


def test_motion_moves_held_tile(pygame_module):
    pygame = pygame_module
    ui = HalbleiterUI(make_session())

    ui.process_events(
        [
            pygame.event.Event(pygame.MOUSEBUTTONDOWN, button=1, pos=(16, 80)),
            pygame.event.Event(pygame.MOUSEMOTION, pos=(26, 70), rel=(10, -10), buttons=(1, 0, 0)),
        ]
    )

    assert ui.drag is not None
    assert ui.drag.cell == (0, 2)
    assert ui.drag.position == (-38.0, -6.0)


def test_restart_key_reshuffles(pygame_module):
    pygame = pygame_module
    session = make_session()
    ui = HalbleiterUI(session)
    drag(pygame, ui, (16, 80), (48, 80))

    ui.process_events([pygame.event.Event(pygame.KEYDOWN, key=pygame.K_r)])

    assert session.moves == 0
    assert Counter(session.grid.tiles()) == Counter(session.puzzle.tiles)


def test_render_lights_lamp_once_solved(pygame_module):
    pygame = pygame_module
    session = make_session()
    ui = HalbleiterUI(session)

    surface = ui.render()
    assert surface.get_size() == (96, 96)
    assert pixel(surface, (35, 35)) == layout.TILE_COLORS["lamp"]
    assert pixel(surface, (35, 3)) == layout.TILE_COLORS["battery"]
    assert pixel(surface, (35, 67)) == layout.BACKGROUND_COLOR

    drag(pygame, ui, (16, 80), (48, 80))
    surface = ui.render()

    assert pixel(surface, (35, 35)) == layout.LAMP_ON_COLOR
    assert pixel(surface, (35, 67)) == layout.TILE_COLORS["cable"]
