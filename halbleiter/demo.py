"""Simple command line demo for the circuit puzzle logic."""

from __future__ import annotations

import argparse
import json
import logging
import random
from pathlib import Path
from typing import List, Optional, Sequence

from .game import (
    Battery,
    Cable,
    Grid,
    Lamp,
    PuzzleLoader,
    PuzzleSession,
    Tile,
    is_solved,
    tile_payload,
)

_SIDE_LETTERS = {"LEFT": "L", "RIGHT": "R", "TOP": "T", "BOTTOM": "B"}


def _label(tile: Optional[Tile]) -> str:
    if tile is None:
        return "."
    if isinstance(tile, (Lamp, Cable)):
        prefix = "lamp" if isinstance(tile, Lamp) else "cable"
        return f"{prefix} {_SIDE_LETTERS[tile.entry.name]}>{_SIDE_LETTERS[tile.exit.name]}"
    if isinstance(tile, Battery):
        return f"bat +{_SIDE_LETTERS[tile.plus_side.name]} -{_SIDE_LETTERS[tile.minus_side.name]}"
    return tile.kind.value.upper()


def format_grid(grid: Grid) -> str:
    """Render the grid as a fixed-width text table."""

    rows: List[str] = []
    for y in range(grid.height):
        cells = [_label(grid.get(x, y)).ljust(10) for x in range(grid.width)]
        rows.append("| " + " | ".join(cells) + " |")
    return "\n".join(rows)


def main(argv: Sequence[str] | None = None) -> None:
    parser = argparse.ArgumentParser(description="Halbleiter puzzle demo")
    parser.add_argument("--puzzle", default="easy", help="Catalog entry to show.")
    parser.add_argument("--seed", type=int, default=None, help="Seed for the shuffle.")
    parser.add_argument("--verbose", action="store_true", help="Log evaluation details.")
    parser.add_argument(
        "--dump", action="store_true", help="Print the shuffled layout as puzzle JSON."
    )
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s: %(message)s",
    )

    package_root = Path(__file__).resolve().parent
    loader = PuzzleLoader(package_root / "puzzles")
    puzzle = loader.load(args.puzzle)

    solution = puzzle.solution_grid()
    session = PuzzleSession(puzzle, rng=random.Random(args.seed))

    if args.dump:
        payload = {
            "name": f"{puzzle.name}-shuffled",
            "difficulty": puzzle.difficulty,
            "width": puzzle.width,
            "tiles": [tile_payload(tile) for tile in session.grid.tiles()],
        }
        print(json.dumps(payload, indent=2))
        return

    print("=== Halbleiter Demo ===")
    print(f"Puzzle: {puzzle.name} ({puzzle.difficulty})")
    print("Solution:")
    print(format_grid(solution))
    print(f"Lamp on: {is_solved(solution)}")
    print("Shuffled:")
    print(format_grid(session.grid))
    print(f"Lamp on: {session.solved}")


if __name__ == "__main__":
    main()
