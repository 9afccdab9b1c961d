"""Halbleiter circuit puzzle package."""

from .game import (
    Battery,
    Cable,
    Grid,
    Lamp,
    N,
    P,
    Puzzle,
    PuzzleLoader,
    PuzzleSession,
    Side,
    can_move,
    generate_puzzle,
    has_unobstructed_path,
    is_solved,
    new_grid,
)
from .geometry import GridGeometry
from .ui import HalbleiterUI

__all__ = [
    "Battery",
    "Cable",
    "Grid",
    "GridGeometry",
    "HalbleiterUI",
    "Lamp",
    "N",
    "P",
    "Puzzle",
    "PuzzleLoader",
    "PuzzleSession",
    "Side",
    "can_move",
    "generate_puzzle",
    "has_unobstructed_path",
    "is_solved",
    "new_grid",
]
