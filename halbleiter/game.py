"""Core game logic for the semiconductor circuit puzzle."""

from __future__ import annotations

import json
import logging
import random
from collections import Counter
from dataclasses import InitVar, dataclass, field
from enum import Enum
from pathlib import Path
from typing import ClassVar, Dict, Iterator, List, Optional, Sequence, Set, Tuple, Union

from .geometry import GridGeometry


logger = logging.getLogger(__name__)

Cell = Tuple[int, int]

DEFAULT_VIEWPORT: Tuple[int, int] = (1500, 720)

# Menu selections with a layout of their own; anything else plays the extreme layout.
DIFFICULTY_PUZZLES: Dict[str, str] = {
    "easy": "easy",
    "medium": "medium",
    "hard": "hard",
}
FALLBACK_PUZZLE = "extreme"


class Side(Enum):
    """Edges of a tile, carrying the unit step towards the neighbouring cell."""

    LEFT = (-1, 0)
    RIGHT = (1, 0)
    TOP = (0, -1)
    BOTTOM = (0, 1)

    @property
    def offset(self) -> Tuple[int, int]:
        return self.value

    @staticmethod
    def from_name(name: str) -> "Side":
        name = str(name).upper()
        try:
            return Side[name]
        except KeyError as exc:
            raise ValueError(f"Unknown side: {name}") from exc

    def step(self, cell: Cell) -> Cell:
        """Return the neighbour of ``cell`` across this side."""

        return cell[0] + self.value[0], cell[1] + self.value[1]


class TileKind(Enum):
    """Category tag of a tile, used to remember where current came from."""

    BATTERY = "battery"
    LAMP = "lamp"
    CABLE = "cable"
    P = "p"
    N = "n"


@dataclass(frozen=True)
class Lamp:
    """Lights up when current enters through ``entry`` and leaves via ``exit``."""

    entry: Side
    exit: Side
    kind: ClassVar[TileKind] = TileKind.LAMP


@dataclass(frozen=True)
class Battery:
    """Current source; the loop has to come back into ``minus_side``."""

    plus_side: Side
    minus_side: Side
    kind: ClassVar[TileKind] = TileKind.BATTERY


@dataclass(frozen=True)
class Cable:
    """Directional wire from ``entry`` to ``exit``."""

    entry: Side
    exit: Side
    kind: ClassVar[TileKind] = TileKind.CABLE


@dataclass(frozen=True)
class P:
    """p-doped half of the junction. Conducts towards any adjacent ``N``."""

    kind: ClassVar[TileKind] = TileKind.P


@dataclass(frozen=True)
class N:
    """n-doped half of the junction. Only accepts current coming from ``P``."""

    kind: ClassVar[TileKind] = TileKind.N


Tile = Union[Lamp, Battery, Cable, P, N]


class CellOutOfRange(LookupError):
    """Raised when a cell lies outside the grid."""

    def __init__(self, cell: Cell, width: int, height: int) -> None:
        super().__init__(f"Cell {cell} is outside the {width}x{height} grid")
        self.cell = cell


class PuzzleFormatError(ValueError):
    """Raised for puzzle files that do not describe a playable layout."""


class Grid:
    """Rectangular board of optional tiles addressed by ``(x, y)``.

    ``None`` marks a hole, the only kind of cell a tile can be moved into.
    The dimensions are fixed for the lifetime of the grid; :meth:`swap` is the
    only mutator.
    """

    def __init__(self, tiles: Sequence[Optional[Tile]], width: int):
        if width <= 0:
            raise ValueError(f"Grid width must be positive, got {width}")
        if not tiles or len(tiles) % width:
            raise ValueError(
                f"Cannot build a grid of width {width} from {len(tiles)} tiles"
            )
        self._width = width
        self._height = len(tiles) // width
        self._cells: List[Optional[Tile]] = list(tiles)

    @property
    def width(self) -> int:
        return self._width

    @property
    def height(self) -> int:
        return self._height

    def inside(self, cell: Cell) -> bool:
        x, y = cell
        return 0 <= x < self._width and 0 <= y < self._height

    def _index(self, cell: Cell) -> int:
        if not self.inside(cell):
            raise CellOutOfRange(cell, self._width, self._height)
        return cell[1] * self._width + cell[0]

    def get(self, x: int, y: int) -> Optional[Tile]:
        """Return the tile at ``(x, y)``; ``None`` for a hole."""

        return self._cells[self._index((x, y))]

    def is_hole(self, cell: Cell) -> bool:
        """True for an in-bounds empty cell."""

        return self.inside(cell) and self._cells[self._index(cell)] is None

    def swap(self, first: Cell, second: Cell) -> None:
        """Exchange the contents of two cells, holes included."""

        a = self._index(first)
        b = self._index(second)
        self._cells[a], self._cells[b] = self._cells[b], self._cells[a]

    def tile_edge_length(self, viewport_width: int, viewport_height: int) -> int:
        return min(viewport_width // self._width, viewport_height // self._height)

    def cells(self) -> Iterator[Tuple[Cell, Optional[Tile]]]:
        """Iterate over every cell in row-major order."""

        for index, tile in enumerate(self._cells):
            yield (index % self._width, index // self._width), tile

    def tiles(self) -> List[Optional[Tile]]:
        return list(self._cells)

    def find_battery(self) -> Optional[Tuple[Cell, Battery]]:
        # Column-major scan: with several batteries the left-most one wins.
        for x in range(self._width):
            for y in range(self._height):
                tile = self._cells[y * self._width + x]
                if isinstance(tile, Battery):
                    return (x, y), tile
        return None

    def copy(self) -> "Grid":
        return Grid(self._cells, self._width)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Grid):
            return NotImplemented
        return self._width == other._width and self._cells == other._cells

    def __repr__(self) -> str:
        return f"Grid(width={self._width}, height={self._height})"


def new_grid(tiles: Sequence[Optional[Tile]], width: int) -> Grid:
    """Build a grid from a flat row-major sequence of tiles."""

    return Grid(tiles, width)


# ----------------------------------------------------------------------
# Move validation
# ----------------------------------------------------------------------
def _touching(first: Cell, second: Cell) -> bool:
    return max(abs(first[0] - second[0]), abs(first[1] - second[1])) == 1


def has_unobstructed_path(grid: Grid, start: Cell, end: Cell) -> bool:
    """Check whether ``start`` and ``end`` are linked through holes.

    Neighbouring cells (diagonals included) are always linked.  Otherwise
    both ends are walked greedily through holes, trying ``x + 1`` then
    ``y + 1`` from ``start`` before ``x + 1`` then ``y + 1`` from ``end``.
    Only the first available extension is followed, so hole chains leading
    left or up are never discovered.
    """

    if start == end:
        return True
    (x1, y1), (x2, y2) = start, end
    while True:
        if _touching((x1, y1), (x2, y2)):
            return True
        if grid.is_hole((x1 + 1, y1)):
            x1 += 1
        elif grid.is_hole((x1, y1 + 1)):
            y1 += 1
        elif grid.is_hole((x2 + 1, y2)):
            x2 += 1
        elif grid.is_hole((x2, y2 + 1)):
            y2 += 1
        else:
            return False


def can_move(grid: Grid, source: Cell, destination: Cell) -> bool:
    """A tile may move into an empty cell reachable from its position."""

    if not grid.is_hole(destination):
        return False
    return has_unobstructed_path(grid, destination, source)


# ----------------------------------------------------------------------
# Circuit evaluation
# ----------------------------------------------------------------------
_TraversalState = Tuple[Cell, Cell, TileKind, bool]


def is_solved(grid: Grid) -> bool:
    """Return True when current flows from the battery through a lamp and back.

    The walk starts next to the battery's plus terminal and follows each
    tile's wiring.  Lamps and cables only conduct when entered through their
    ``entry`` side, ``P`` feeds every adjacent ``N`` and ``N`` radiates in all
    directions but only when the previous tile was a ``P``.  States are keyed
    on the previous cell and tile kind as well as the current cell, so a cell
    reached through another junction branch is still explored.
    """

    found = grid.find_battery()
    if found is None:
        logger.debug("No battery on %r, puzzle unsolved", grid)
        return False
    battery_cell, battery = found

    stack: List[_TraversalState] = [
        (battery.plus_side.step(battery_cell), battery_cell, TileKind.BATTERY, False)
    ]
    visited: Set[_TraversalState] = set()

    while stack:
        state = stack.pop()
        if state in visited:
            continue
        visited.add(state)
        cell, previous, previous_kind, found_lamp = state

        if not grid.inside(cell):
            continue
        tile = grid.get(*cell)
        if tile is None:
            continue

        if isinstance(tile, Lamp):
            if tile.entry.step(cell) != previous:
                continue
            stack.append((tile.exit.step(cell), cell, tile.kind, True))
        elif isinstance(tile, Cable):
            if tile.entry.step(cell) != previous:
                continue
            stack.append((tile.exit.step(cell), cell, tile.kind, found_lamp))
        elif isinstance(tile, Battery):
            if tile.minus_side.step(cell) != previous:
                continue
            if found_lamp:
                logger.debug("Circuit closed after %d states", len(visited))
                return True
        elif isinstance(tile, P):
            for side in Side:
                neighbour = side.step(cell)
                if grid.inside(neighbour) and isinstance(grid.get(*neighbour), N):
                    stack.append((neighbour, cell, tile.kind, found_lamp))
        elif isinstance(tile, N):
            if previous_kind is not TileKind.P:
                continue
            for side in Side:
                stack.append((side.step(cell), cell, tile.kind, found_lamp))
        else:
            raise TypeError(f"Unknown tile: {tile!r}")

    logger.debug("Circuit open after %d states", len(visited))
    return False


# ----------------------------------------------------------------------
# Puzzle catalog
# ----------------------------------------------------------------------
@dataclass
class Puzzle:
    """Fixed tile layout from the puzzle catalog."""

    name: str
    difficulty: str
    width: int
    tiles: List[Optional[Tile]]
    solution: Optional[List[Optional[Tile]]] = None

    @property
    def height(self) -> int:
        return len(self.tiles) // self.width

    @property
    def metadata(self) -> Dict[str, object]:
        return {
            "name": self.name,
            "difficulty": self.difficulty,
            "dimensions": f"{self.width}x{self.height}",
        }

    def authored_grid(self) -> Grid:
        return Grid(self.tiles, self.width)

    def solution_grid(self) -> Grid:
        return Grid(self.solution or self.tiles, self.width)


def parse_tile(data: Optional[Dict[str, object]]) -> Optional[Tile]:
    if data is None:
        return None
    if not isinstance(data, dict) or "type" not in data:
        raise PuzzleFormatError(f"Malformed tile entry: {data!r}")
    tile_type = str(data["type"]).lower()
    try:
        if tile_type == "lamp":
            tile: Tile = Lamp(Side.from_name(data["entry"]), Side.from_name(data["exit"]))
        elif tile_type == "cable":
            tile = Cable(Side.from_name(data["entry"]), Side.from_name(data["exit"]))
        elif tile_type == "battery":
            tile = Battery(Side.from_name(data["plus"]), Side.from_name(data["minus"]))
        elif tile_type == "p":
            return P()
        elif tile_type == "n":
            return N()
        else:
            raise PuzzleFormatError(f"Unknown tile type: {tile_type}")
    except KeyError as exc:
        raise PuzzleFormatError(f"Tile {data!r} is missing {exc}") from exc
    except PuzzleFormatError:
        raise
    except ValueError as exc:
        raise PuzzleFormatError(str(exc)) from exc
    return tile


def tile_payload(tile: Optional[Tile]) -> Optional[Dict[str, str]]:
    """Inverse of :func:`parse_tile`, used when dumping layouts."""

    if tile is None:
        return None
    if isinstance(tile, (Lamp, Cable)):
        return {
            "type": tile.kind.value,
            "entry": tile.entry.name.lower(),
            "exit": tile.exit.name.lower(),
        }
    if isinstance(tile, Battery):
        return {
            "type": "battery",
            "plus": tile.plus_side.name.lower(),
            "minus": tile.minus_side.name.lower(),
        }
    if isinstance(tile, (P, N)):
        return {"type": tile.kind.value}
    raise TypeError(f"Unknown tile: {tile!r}")


def _check_ports(tile: Optional[Tile]) -> None:
    if isinstance(tile, (Lamp, Cable)) and tile.entry is tile.exit:
        raise PuzzleFormatError(f"{tile!r} enters and exits on the same side")
    if isinstance(tile, Battery) and tile.plus_side is tile.minus_side:
        raise PuzzleFormatError(f"{tile!r} has both terminals on the same side")


def validate_layout(tiles: Sequence[Optional[Tile]], width: int) -> None:
    """Reject layouts the evaluator cannot meaningfully score."""

    if width <= 0 or not tiles or len(tiles) % width:
        raise PuzzleFormatError(
            f"{len(tiles)} tiles do not fill rows of width {width}"
        )
    for tile in tiles:
        _check_ports(tile)
    batteries = sum(isinstance(tile, Battery) for tile in tiles)
    if batteries != 1:
        raise PuzzleFormatError(f"Expected exactly one battery, found {batteries}")
    if not any(isinstance(tile, Lamp) for tile in tiles):
        raise PuzzleFormatError("Puzzle has no lamp")


class PuzzleLoader:
    """Load puzzle layouts stored as JSON."""

    def __init__(self, root: Path):
        self.root = Path(root)

    def available(self) -> List[str]:
        return sorted(path.stem for path in self.root.glob("*.json"))

    def load(self, name: str) -> Puzzle:
        path = self.root / f"{name}.json"
        if not path.exists():
            raise FileNotFoundError(path)
        try:
            data = json.loads(path.read_text())
        except json.JSONDecodeError as exc:
            raise PuzzleFormatError(f"{path}: {exc}") from exc
        return self._parse_puzzle(data, default_name=name)

    def load_difficulty(self, difficulty: str) -> Puzzle:
        """Pick the catalog entry behind a menu selection."""

        return self.load(DIFFICULTY_PUZZLES.get(difficulty.lower(), FALLBACK_PUZZLE))

    def _parse_puzzle(self, data: Dict, default_name: str) -> Puzzle:
        try:
            width = int(data["width"])
            raw_tiles = data["tiles"]
        except (KeyError, TypeError, ValueError) as exc:
            raise PuzzleFormatError(f"Puzzle {default_name!r} needs width and tiles") from exc
        if not isinstance(raw_tiles, list):
            raise PuzzleFormatError(f"Tiles of {default_name!r} must be a list")
        tiles = [parse_tile(entry) for entry in raw_tiles]
        validate_layout(tiles, width)

        solution = None
        if data.get("solution") is not None:
            if not isinstance(data["solution"], list):
                raise PuzzleFormatError(f"Solution of {default_name!r} must be a list")
            solution = [parse_tile(entry) for entry in data["solution"]]
            if Counter(solution) != Counter(tiles):
                raise PuzzleFormatError(
                    f"Solution of {default_name!r} is not a rearrangement of its tiles"
                )

        return Puzzle(
            name=data.get("name", default_name),
            difficulty=data.get("difficulty", "Unknown"),
            width=width,
            tiles=tiles,
            solution=solution,
        )


def generate_puzzle(puzzle: Puzzle, rng: Optional[random.Random] = None) -> Grid:
    """Place the puzzle's tiles into a random permutation of the cells."""

    rng = rng or random.Random()
    tiles = list(puzzle.tiles)
    rng.shuffle(tiles)
    return Grid(tiles, puzzle.width)


# ----------------------------------------------------------------------
# Session
# ----------------------------------------------------------------------
@dataclass(frozen=True)
class MoveResult:
    """Outcome of a single drag-and-drop attempt."""

    accepted: bool
    solved: bool
    source: Cell
    destination: Cell


@dataclass
class PuzzleSession:
    """Owns the live grid of one puzzle and applies moves one at a time."""

    puzzle: Puzzle
    rng: random.Random = field(default_factory=random.Random)
    viewport: Tuple[int, int] = DEFAULT_VIEWPORT
    layout: InitVar[Optional[Grid]] = None
    grid: Grid = field(init=False)
    moves: int = field(default=0, init=False)
    solved: bool = field(default=False, init=False)

    def __post_init__(self, layout: Optional[Grid]) -> None:
        self.grid = layout if layout is not None else generate_puzzle(self.puzzle, self.rng)
        self.solved = is_solved(self.grid)

    @property
    def geometry(self) -> GridGeometry:
        return GridGeometry.for_viewport(self.grid.width, self.grid.height, self.viewport)

    def attempt_move(self, source: Cell, destination: Cell) -> MoveResult:
        if not self.grid.inside(source) or not can_move(self.grid, source, destination):
            logger.debug("Rejected move %s -> %s", source, destination)
            return MoveResult(False, self.solved, source, destination)

        self.grid.swap(destination, source)
        self.moves += 1
        self.solved = is_solved(self.grid)
        logger.info(
            "Moved %s -> %s (move %d, solved=%s)", source, destination, self.moves, self.solved
        )
        return MoveResult(True, self.solved, source, destination)

    def attempt_drop(
        self, start_position: Tuple[float, float], drop_position: Tuple[float, float]
    ) -> MoveResult:
        """Resolve a drag in render coordinates into a move."""

        geometry = self.geometry
        return self.attempt_move(
            geometry.position_to_cell(start_position),
            geometry.position_to_cell(drop_position),
        )

    def restart(self) -> None:
        self.grid = generate_puzzle(self.puzzle, self.rng)
        self.moves = 0
        self.solved = is_solved(self.grid)
        logger.info("Restarted puzzle %s", self.puzzle.name)
