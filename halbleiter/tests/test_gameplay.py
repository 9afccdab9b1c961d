import json
import random
import sys
from collections import Counter
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parents[2]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from halbleiter.game import (
    Battery,
    Cable,
    CellOutOfRange,
    Grid,
    Lamp,
    N,
    P,
    PuzzleFormatError,
    PuzzleLoader,
    PuzzleSession,
    Side,
    can_move,
    generate_puzzle,
    has_unobstructed_path,
    is_solved,
    new_grid,
)

LEFT, RIGHT, TOP, BOTTOM = Side.LEFT, Side.RIGHT, Side.TOP, Side.BOTTOM

EASY_LAYOUT = [
    Cable(RIGHT, BOTTOM),
    Battery(LEFT, RIGHT),
    N(),
    Cable(TOP, RIGHT),
    Lamp(LEFT, BOTTOM),
    P(),
    None,
    Cable(TOP, RIGHT),
    Cable(LEFT, TOP),
]


def fixture_path(*parts: str) -> Path:
    return Path(__file__).resolve().parents[1].joinpath(*parts)


def write_puzzle(root: Path, name: str, payload: dict) -> None:
    (root / f"{name}.json").write_text(json.dumps(payload))


def test_easy_reference_layout_is_solved():
    grid = new_grid(EASY_LAYOUT, 3)

    assert grid.width == 3
    assert grid.height == 3
    assert is_solved(grid)


def test_evaluation_is_deterministic():
    grid = new_grid(EASY_LAYOUT, 3)
    grid.swap((0, 2), (1, 2))

    results = {is_solved(grid) for _ in range(5)}
    moves = {can_move(grid, (0, 2), (1, 2)) for _ in range(5)}

    assert results == {False}
    assert moves == {True}


def test_swap_twice_restores_grid():
    grid = new_grid(EASY_LAYOUT, 3)
    original = grid.copy()

    grid.swap((0, 0), (2, 2))
    assert grid != original
    grid.swap((0, 0), (2, 2))

    assert grid == original


def test_swap_moves_holes_too():
    grid = new_grid(EASY_LAYOUT, 3)
    grid.swap((0, 2), (2, 0))

    assert grid.get(2, 0) is None
    assert grid.get(0, 2) == N()


def test_grid_requires_complete_rows():
    with pytest.raises(ValueError):
        new_grid([None, None, None, None], 3)
    with pytest.raises(ValueError):
        new_grid([], 3)


@pytest.mark.parametrize("cell", [(3, 0), (0, 3), (-1, 0), (0, -1)])
def test_out_of_range_lookup_is_a_lookup_error(cell):
    grid = new_grid(EASY_LAYOUT, 3)

    assert not grid.inside(cell)
    with pytest.raises(LookupError):
        grid.get(*cell)
    with pytest.raises(CellOutOfRange):
        grid.swap(cell, (0, 0))


def test_tile_edge_length_uses_smaller_axis():
    grid = new_grid(EASY_LAYOUT, 3)

    assert grid.tile_edge_length(1500, 720) == 240
    assert grid.tile_edge_length(100, 1000) == 33


def test_grid_without_battery_is_unsolved():
    layout = [tile if not isinstance(tile, Battery) else Cable(LEFT, RIGHT) for tile in EASY_LAYOUT]

    assert not is_solved(new_grid(layout, 3))


def test_junction_entered_from_n_side_is_unsolved():
    grid = new_grid(
        [
            Battery(RIGHT, BOTTOM), N(), P(),
            Cable(RIGHT, TOP), Lamp(RIGHT, LEFT), Cable(TOP, LEFT),
        ],
        3,
    )

    assert not is_solved(grid)


def test_junction_entered_from_p_side_is_solved():
    grid = new_grid(
        [
            Battery(RIGHT, BOTTOM), P(), N(),
            Cable(RIGHT, TOP), Lamp(RIGHT, LEFT), Cable(TOP, LEFT),
        ],
        3,
    )

    assert is_solved(grid)


def test_closed_loop_needs_a_lamp():
    without_lamp = new_grid(
        [Battery(RIGHT, BOTTOM), Cable(LEFT, BOTTOM), Cable(RIGHT, TOP), Cable(TOP, LEFT)], 2
    )
    with_lamp = new_grid(
        [Battery(RIGHT, BOTTOM), Cable(LEFT, BOTTOM), Cable(RIGHT, TOP), Lamp(TOP, LEFT)], 2
    )

    assert not is_solved(without_lamp)
    assert is_solved(with_lamp)


def test_lamp_only_conducts_from_its_entry():
    reversed_lamp = new_grid(
        [Battery(RIGHT, BOTTOM), Cable(LEFT, BOTTOM), Cable(RIGHT, TOP), Lamp(LEFT, TOP)], 2
    )

    assert not is_solved(reversed_lamp)


def test_loop_must_return_into_minus_terminal():
    grid = new_grid(
        [Battery(RIGHT, LEFT), Cable(LEFT, BOTTOM), Cable(RIGHT, TOP), Lamp(TOP, LEFT)], 2
    )

    assert not is_solved(grid)


def test_cyclic_junction_field_terminates():
    width = 20
    tiles = []
    for y in range(width):
        for x in range(width):
            tiles.append(P() if (x + y) % 2 else N())
    tiles[0] = Battery(RIGHT, BOTTOM)
    grid = new_grid(tiles, width)

    with ThreadPoolExecutor(max_workers=1) as executor:
        result = executor.submit(is_solved, grid).result(timeout=10)

    assert result is False


def cable_ring(battery: Battery):
    # Battery at (0, 0); the ring runs clockwise around the grid edge and
    # comes back into the battery from below.
    return new_grid(
        [
            battery, Cable(LEFT, RIGHT), Cable(LEFT, BOTTOM),
            Cable(BOTTOM, TOP), Cable(LEFT, RIGHT), Lamp(TOP, BOTTOM),
            Cable(RIGHT, TOP), Cable(RIGHT, LEFT), Cable(TOP, LEFT),
        ],
        3,
    )


def test_cable_ring_missing_the_minus_terminal_terminates():
    grid = cable_ring(Battery(RIGHT, LEFT))

    with ThreadPoolExecutor(max_workers=1) as executor:
        result = executor.submit(is_solved, grid).result(timeout=10)

    assert result is False
    assert is_solved(cable_ring(Battery(RIGHT, BOTTOM)))


# ----------------------------------------------------------------------
# Move validation
# ----------------------------------------------------------------------
def full_grid():
    return new_grid([Cable(LEFT, RIGHT)] * 9, 3)


@pytest.mark.parametrize(
    "start, end",
    [((1, 1), (0, 0)), ((1, 1), (2, 0)), ((1, 1), (0, 2)), ((1, 1), (2, 2)),
     ((1, 1), (1, 0)), ((1, 1), (0, 1)), ((1, 1), (2, 1)), ((1, 1), (1, 2))],
)
def test_touching_cells_are_always_connected(start, end):
    grid = full_grid()

    assert has_unobstructed_path(grid, start, end)
    assert has_unobstructed_path(grid, end, start)


def test_same_cell_is_trivially_connected():
    grid = full_grid()

    assert has_unobstructed_path(grid, (1, 1), (1, 1))
    assert not can_move(grid, (1, 1), (1, 1))


def test_move_needs_an_empty_destination():
    grid = new_grid(EASY_LAYOUT, 3)

    assert not can_move(grid, (1, 1), (1, 2))
    assert can_move(grid, (1, 2), (0, 2))
    assert can_move(grid, (1, 1), (0, 2))


def test_path_follows_holes_to_the_right():
    grid = new_grid([Cable(LEFT, RIGHT), None, None, None], 4)

    assert can_move(grid, (0, 0), (3, 0))


def test_occupied_cells_block_the_path():
    grid = new_grid([Cable(LEFT, RIGHT), Cable(LEFT, RIGHT), None, None], 4)

    assert not can_move(grid, (0, 0), (3, 0))
    assert not can_move(grid, (0, 0), (2, 0))
    assert can_move(grid, (1, 0), (3, 0))


def test_hole_chain_leading_up_and_left_is_not_followed():
    grid = new_grid(
        [
            None, None, Cable(LEFT, RIGHT),
            None, Cable(LEFT, RIGHT), Cable(LEFT, RIGHT),
            None, Cable(LEFT, RIGHT), Cable(LEFT, RIGHT),
        ],
        3,
    )

    assert not can_move(grid, (2, 0), (0, 2))


def test_out_of_range_destination_is_rejected():
    grid = new_grid(EASY_LAYOUT, 3)

    assert not can_move(grid, (1, 2), (3, 2))


# ----------------------------------------------------------------------
# Puzzle catalog
# ----------------------------------------------------------------------
def test_catalog_lists_all_difficulties():
    loader = PuzzleLoader(fixture_path("puzzles"))

    assert loader.available() == ["easy", "extreme", "hard", "medium"]


@pytest.mark.parametrize("name", ["easy", "medium", "hard", "extreme"])
def test_catalog_solutions_light_the_lamp(name: str):
    puzzle = PuzzleLoader(fixture_path("puzzles")).load(name)

    assert is_solved(puzzle.solution_grid())
    assert Counter(puzzle.solution_grid().tiles()) == Counter(puzzle.tiles)


def test_easy_catalog_entry_matches_reference_layout():
    puzzle = PuzzleLoader(fixture_path("puzzles")).load("easy")

    assert puzzle.tiles == EASY_LAYOUT
    assert puzzle.metadata == {"name": "easy", "difficulty": "Easy", "dimensions": "3x3"}


@pytest.mark.parametrize("name, solved", [("easy", True), ("extreme", True), ("medium", False), ("hard", False)])
def test_authored_order(name: str, solved: bool):
    puzzle = PuzzleLoader(fixture_path("puzzles")).load(name)

    assert is_solved(puzzle.authored_grid()) is solved


@pytest.mark.parametrize(
    "selection, expected",
    [("Easy", "easy"), ("MEDIUM", "medium"), ("hard", "hard"), ("Menu", "extreme")],
)
def test_menu_selection_picks_puzzle(selection: str, expected: str):
    loader = PuzzleLoader(fixture_path("puzzles"))

    assert loader.load_difficulty(selection).name == expected


def test_missing_puzzle_file(tmp_path: Path):
    with pytest.raises(FileNotFoundError):
        PuzzleLoader(tmp_path).load("nope")


LAMP = {"type": "lamp", "entry": "left", "exit": "right"}
BATTERY = {"type": "battery", "plus": "left", "minus": "right"}


@pytest.mark.parametrize(
    "payload",
    [
        {"width": 2, "tiles": [BATTERY, {"type": "cable", "entry": "top", "exit": "top"}, LAMP, None]},
        {"width": 2, "tiles": [BATTERY, BATTERY, LAMP, None]},
        {"width": 2, "tiles": [BATTERY, {"type": "p"}, {"type": "n"}, None]},
        {"width": 2, "tiles": [BATTERY, LAMP, None]},
        {"width": 2, "tiles": [BATTERY, LAMP, {"type": "diode"}, None]},
        {"width": 2, "tiles": [BATTERY, LAMP, {"type": "cable", "entry": "up", "exit": "left"}, None]},
        {"width": 2, "tiles": [BATTERY, LAMP, {"type": "cable", "entry": "left"}, None]},
        {"tiles": [BATTERY, LAMP]},
        {"width": 2, "tiles": 5},
        {"width": 2, "tiles": "ab"},
        {"width": 2, "tiles": [BATTERY, LAMP, None, None], "solution": 7},
        {"width": 2, "tiles": [BATTERY, LAMP, None, None], "solution": [BATTERY, LAMP, LAMP, None]},
    ],
)
def test_loader_rejects_malformed_puzzles(tmp_path: Path, payload: dict):
    write_puzzle(tmp_path, "broken", payload)

    with pytest.raises(PuzzleFormatError):
        PuzzleLoader(tmp_path).load("broken")


def test_loader_accepts_case_insensitive_sides(tmp_path: Path):
    write_puzzle(
        tmp_path,
        "tiny",
        {"width": 2, "tiles": [{"type": "Battery", "plus": "RIGHT", "minus": "Bottom"}, LAMP, None, {"type": "N"}]},
    )

    puzzle = PuzzleLoader(tmp_path).load("tiny")

    assert puzzle.name == "tiny"
    assert puzzle.difficulty == "Unknown"
    assert puzzle.tiles[0] == Battery(RIGHT, BOTTOM)
    assert puzzle.tiles[3] == N()


def test_generate_puzzle_is_seedable():
    puzzle = PuzzleLoader(fixture_path("puzzles")).load("hard")

    first = generate_puzzle(puzzle, random.Random(7))
    second = generate_puzzle(puzzle, random.Random(7))

    assert first == second
    assert Counter(first.tiles()) == Counter(puzzle.tiles)
    assert (first.width, first.height) == (3, 3)


# ----------------------------------------------------------------------
# Session
# ----------------------------------------------------------------------
def almost_solved_session(**kwargs) -> PuzzleSession:
    puzzle = PuzzleLoader(fixture_path("puzzles")).load("easy")
    grid = puzzle.solution_grid()
    grid.swap((0, 2), (1, 2))
    return PuzzleSession(puzzle, layout=grid, **kwargs)


def test_session_builds_its_own_grid_without_layout():
    puzzle = PuzzleLoader(fixture_path("puzzles")).load("hard")

    session = PuzzleSession(puzzle, rng=random.Random(4))

    assert isinstance(session.grid, Grid)
    assert Counter(session.grid.tiles()) == Counter(puzzle.tiles)
    assert session.geometry.tile_size == 240


def test_session_accepts_legal_move_and_detects_solution():
    session = almost_solved_session()
    assert not session.solved

    result = session.attempt_move((0, 2), (1, 2))

    assert result.accepted
    assert result.solved
    assert session.solved
    assert session.moves == 1
    assert session.grid.get(1, 2) == Cable(TOP, RIGHT)
    assert session.grid.get(0, 2) is None


def test_session_rejects_move_onto_tile():
    session = almost_solved_session()
    before = session.grid.copy()

    result = session.attempt_move((0, 0), (1, 0))

    assert not result.accepted
    assert session.grid == before
    assert session.moves == 0


def test_session_rejects_source_outside_grid():
    session = almost_solved_session()

    assert not session.attempt_move((5, 5), (1, 2)).accepted


def test_session_resolves_drop_positions():
    session = almost_solved_session(viewport=(96, 96))
    geometry = session.geometry
    start = geometry.cell_to_position(0, 2)

    result = session.attempt_drop(start, (start[0] + 35.0, start[1] - 4.0))

    assert geometry.tile_size == 32
    assert result.source == (0, 2)
    assert result.destination == (1, 2)
    assert result.solved


def test_session_restart_reshuffles_same_tiles():
    session = almost_solved_session(rng=random.Random(3))
    session.attempt_move((0, 2), (1, 2))

    session.restart()

    assert session.moves == 0
    assert Counter(session.grid.tiles()) == Counter(EASY_LAYOUT)
    assert session.solved == is_solved(session.grid)


def test_session_without_grid_shuffles_puzzle():
    puzzle = PuzzleLoader(fixture_path("puzzles")).load("medium")

    first = PuzzleSession(puzzle, rng=random.Random(11))
    second = PuzzleSession(puzzle, rng=random.Random(11))

    assert first.grid == second.grid
