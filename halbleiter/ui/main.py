"""Interactive pygame front end for the circuit puzzle."""

from __future__ import annotations

import argparse
import logging
import os
import random
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional, Sequence, Tuple

import pygame

from ..game import Lamp, MoveResult, PuzzleLoader, PuzzleSession
from . import layout
from .assets import SoundBoard, SpriteLibrary, draw_tile, load_sprites
from .toolkit import HalbleiterUI

logger = logging.getLogger(__name__)

ASSET_ENV_VAR = "HALBLEITER_ASSET_ROOT"
PUZZLE_ENV_VAR = "HALBLEITER_PUZZLE_ROOT"


@dataclass(frozen=True)
class UIDirectories:
    """Bundle with resolved directories required by the UI."""

    asset_root: Optional[Path]
    puzzle_root: Path


def _default_asset_root() -> Path:
    return Path(__file__).resolve().parents[1] / "assets"


def _default_puzzle_root() -> Path:
    return Path(__file__).resolve().parents[1] / "puzzles"


def _read_directory(env_var: str, fallback: Path) -> Path:
    value = os.environ.get(env_var)
    if value:
        return Path(value).expanduser()
    return fallback


def resolve_directories(check_exists: bool = True) -> UIDirectories:
    """Resolve UI directories using environment variables.

    Parameters
    ----------
    check_exists:
        When *True*, raise :class:`FileNotFoundError` if the puzzle directory
        does not exist.  The asset directory is optional: when it is missing
        the UI draws tiles itself and stays silent.
    """

    asset_root: Optional[Path] = _read_directory(ASSET_ENV_VAR, _default_asset_root())
    puzzle_root = _read_directory(PUZZLE_ENV_VAR, _default_puzzle_root())

    if check_exists:
        if not puzzle_root.exists():
            raise FileNotFoundError(
                f"Required puzzle directory does not exist: {puzzle_root}"
            )
        if not asset_root.exists():
            logger.warning("Asset directory %s not found, using plain tiles", asset_root)
            asset_root = None

    return UIDirectories(asset_root=asset_root, puzzle_root=puzzle_root)


class HalbleiterApp:
    """Pygame driven application with intro, menu and play screens."""

    def __init__(
        self,
        screen_size: Tuple[int, int] = layout.WINDOW_SIZE,
        *,
        directories: Optional[UIDirectories] = None,
        seed: Optional[int] = None,
    ) -> None:
        pygame.init()
        pygame.display.set_caption(layout.WINDOW_TITLE)
        self.screen = pygame.display.set_mode(screen_size)
        self.clock = pygame.time.Clock()
        self.font = pygame.font.Font(None, 30)
        self.small_font = pygame.font.Font(None, 23)
        self.title_font = pygame.font.Font(None, 60)

        self.directories = directories or resolve_directories()
        self.loader = PuzzleLoader(self.directories.puzzle_root)
        self.rng = random.Random(seed)
        self.sounds = SoundBoard(self.directories.asset_root)

        self.mode: str = "intro"
        self.session: Optional[PuzzleSession] = None
        self.sprites = SpriteLibrary()
        self.board: Optional[HalbleiterUI] = None
        self.buttons: List[Tuple[pygame.Rect, str]] = []

    # ------------------------------------------------------------------
    # Screen transitions
    # ------------------------------------------------------------------
    def start_puzzle(self, selection: str) -> None:
        puzzle = self.loader.load_difficulty(selection)
        self.session = PuzzleSession(
            puzzle, rng=self.rng, viewport=self.screen.get_size()
        )
        self.sprites = load_sprites(
            self.directories.asset_root,
            puzzle.tiles,
            self.session.geometry.tile_size,
        )
        self.board = HalbleiterUI(self.session, surface=self.screen)
        self.mode = "play"
        logger.info("Started %s puzzle", puzzle.name)

    def restart(self) -> None:
        if self.board is not None:
            self.board.restart()

    def back_to_menu(self) -> None:
        self.session = None
        self.board = None
        self.mode = "menu"

    # ------------------------------------------------------------------
    # Coordinates
    # ------------------------------------------------------------------
    def to_screen(self, position: Tuple[float, float]) -> Tuple[int, int]:
        width, height = self.screen.get_size()
        return (int(round(position[0] + width / 2)), int(round(height / 2 - position[1])))

    # ------------------------------------------------------------------
    # Rendering
    # ------------------------------------------------------------------
    def draw(self) -> None:
        self.screen.fill(layout.BACKGROUND_COLOR)
        self.buttons = []
        if self.mode == "intro":
            self._draw_intro()
        elif self.mode == "menu":
            self._draw_menu()
        else:
            self._draw_play()
        pygame.display.flip()

    def _draw_button(
        self,
        rect: pygame.Rect,
        label: str,
        action: str,
        *,
        color: Tuple[int, int, int] = layout.BUTTON_COLOR,
        font: Optional[pygame.font.Font] = None,
    ) -> None:
        pygame.draw.rect(self.screen, color, rect, border_radius=layout.BUTTON_RADIUS)
        pygame.draw.rect(
            self.screen,
            layout.BUTTON_BORDER_COLOR,
            rect,
            width=2,
            border_radius=layout.BUTTON_RADIUS,
        )
        text = (font or self.font).render(label, True, layout.TEXT_COLOR)
        self.screen.blit(text, text.get_rect(center=rect.center))
        self.buttons.append((rect, action))

    def _draw_intro(self) -> None:
        width, height = self.screen.get_size()
        lines = layout.INTRO_TEXT.split("\n")
        line_height = self.font.get_linesize()
        y = (height - line_height * len(lines)) // 2
        for line in lines:
            text = self.font.render(line, True, layout.TEXT_COLOR)
            self.screen.blit(text, text.get_rect(midtop=(width // 2, y)))
            y += line_height
        rect = pygame.Rect(width - 150, height - 100, 100, 50)
        self._draw_button(rect, "Next", "next", font=self.small_font)

    def _draw_menu(self) -> None:
        width, height = self.screen.get_size()
        button_w, button_h = layout.BUTTON_SIZE
        entries = list(layout.MENU_ENTRIES) + [("Quit", "quit")]
        title = self.title_font.render("Main Menu", True, layout.TEXT_COLOR)
        total = title.get_height() + len(entries) * (button_h + layout.BUTTON_SPACING)
        y = (height - total) // 2
        self.screen.blit(title, title.get_rect(midtop=(width // 2, y)))
        y += title.get_height() + layout.BUTTON_SPACING
        for label, action in entries:
            rect = pygame.Rect((width - button_w) // 2, y, button_w, button_h)
            color = layout.QUIT_BUTTON_COLOR if action == "quit" else layout.BUTTON_COLOR
            self._draw_button(rect, label, action, color=color)
            y += button_h + layout.BUTTON_SPACING

    def _draw_play(self) -> None:
        if self.session is None or self.board is None:
            return
        geometry = self.session.geometry
        size = geometry.tile_size
        lit = self.session.solved
        drag = self.board.drag

        if lit:
            self._draw_glow(self.session)
        for cell, tile in self.session.grid.cells():
            if tile is None or (drag is not None and drag.cell == cell):
                continue
            self._draw_tile(tile, geometry.cell_to_position(*cell), size, lit)
        self._draw_grid_lines(self.session)
        if drag is not None:
            tile = self.session.grid.get(*drag.cell)
            self._draw_tile(tile, drag.position, size, lit)

        button_w, button_h = layout.SMALL_BUTTON_SIZE
        self._draw_button(
            pygame.Rect(20, 10, button_w, button_h), "Zurueck zum Menu", "menu",
            font=self.small_font,
        )
        self._draw_button(
            pygame.Rect(20, 10 + button_h + layout.BUTTON_SPACING, button_w, button_h),
            "Restart",
            "restart",
            font=self.small_font,
        )

    def _draw_tile(self, tile, position: Tuple[float, float], size: int, lit: bool) -> None:
        rect = pygame.Rect(self.to_screen(position), (size, size))
        sprite = self.sprites.get(tile, lit=lit)
        if sprite is not None:
            self.screen.blit(sprite, rect)
        else:
            draw_tile(self.screen, tile, rect, self.font, lit=lit)

    def _draw_glow(self, session: PuzzleSession) -> None:
        geometry = session.geometry
        size = geometry.tile_size
        glow = pygame.Surface((size * 3, size * 3), pygame.SRCALPHA)
        for step in range(6, 0, -1):
            alpha = 18 * (7 - step)
            pygame.draw.circle(
                glow,
                (*layout.GLOW_COLOR, alpha),
                (glow.get_width() // 2, glow.get_height() // 2),
                int(size * 0.25 * step),
            )
        for cell, tile in session.grid.cells():
            if not isinstance(tile, Lamp):
                continue
            left, top = self.to_screen(geometry.cell_to_position(*cell))
            self.screen.blit(glow, (left - size, top - size))

    def _draw_grid_lines(self, session: PuzzleSession) -> None:
        geometry = session.geometry
        left, top = self.to_screen((geometry.start_x, geometry.start_y))
        right = left + geometry.width * geometry.tile_size
        bottom = top + geometry.height * geometry.tile_size
        for column in range(geometry.width + 1):
            x = left + column * geometry.tile_size
            pygame.draw.line(
                self.screen, layout.GRID_LINE_COLOR, (x, top), (x, bottom), layout.GRID_LINE_WIDTH
            )
        for row in range(geometry.height + 1):
            y = top + row * geometry.tile_size
            pygame.draw.line(
                self.screen, layout.GRID_LINE_COLOR, (left, y), (right, y), layout.GRID_LINE_WIDTH
            )

    # ------------------------------------------------------------------
    # Input
    # ------------------------------------------------------------------
    def handle_event(self, event: pygame.event.Event) -> None:
        if event.type == pygame.QUIT:
            raise SystemExit
        if event.type == pygame.MOUSEBUTTONDOWN and event.button == 1:
            for rect, action in self.buttons:
                if rect.collidepoint(event.pos):
                    self._run_action(action)
                    return
        if self.mode != "play":
            if self.mode == "intro" and event.type == pygame.KEYDOWN:
                if event.key in (pygame.K_SPACE, pygame.K_RETURN):
                    self.mode = "menu"
            return

        if event.type == pygame.KEYDOWN:
            if event.key == pygame.K_r:
                self.restart()
            elif event.key == pygame.K_ESCAPE:
                self.back_to_menu()
        elif event.type == pygame.MOUSEBUTTONDOWN and event.button == 1:
            self._pick_up(event.pos)
        elif event.type == pygame.MOUSEMOTION and self.board is not None:
            self.board.move_pointer(event.pos)
        elif event.type == pygame.MOUSEBUTTONUP and event.button == 1:
            self._drop(event.pos)

    def _run_action(self, action: str) -> None:
        logger.debug("Button %s clicked", action)
        if action == "next":
            self.mode = "menu"
        elif action == "quit":
            raise SystemExit
        elif action == "menu":
            self.back_to_menu()
        elif action == "restart":
            self.restart()
        else:
            self.start_puzzle(action)

    def _pick_up(self, pixel: Tuple[int, int]) -> None:
        if self.board is not None and self.board.pick_up(pixel):
            self.sounds.play("start_drag")

    def _drop(self, pixel: Tuple[int, int]) -> None:
        if self.board is None:
            return
        was_solved = self.board.session.solved
        result: Optional[MoveResult] = self.board.drop(pixel)
        if result is None:
            return
        if not result.accepted:
            self.sounds.play("misdrop")
            return
        if result.solved and not was_solved:
            self.sounds.play("lamp_on")
        self.sounds.play("drop")

    # ------------------------------------------------------------------
    # Main loop
    # ------------------------------------------------------------------
    def run(self) -> None:
        while True:
            for event in pygame.event.get():
                try:
                    self.handle_event(event)
                except SystemExit:
                    pygame.quit()
                    return
            self.draw()
            self.clock.tick(layout.FRAME_RATE)


def bootstrap_directories() -> UIDirectories:
    """Return resolved directories and print a short bootstrap message."""

    directories = resolve_directories()
    message = (
        "Halbleiter UI bootstrap\n"
        f"  assets: {directories.asset_root or '(none, plain tiles)'}\n"
        f"  puzzles: {directories.puzzle_root}\n"
        f"Set {ASSET_ENV_VAR} or {PUZZLE_ENV_VAR} to point to custom directories."
    )
    print(message)
    return directories


def run(
    directories: Optional[UIDirectories] = None,
    *,
    puzzle: Optional[str] = None,
    seed: Optional[int] = None,
) -> None:
    """Entry point helper that instantiates and runs the UI."""

    app = HalbleiterApp(directories=directories, seed=seed)
    if puzzle:
        app.start_puzzle(puzzle)
    app.run()


def main(argv: Optional[Sequence[str]] = None) -> int:
    parser = argparse.ArgumentParser(description="Halbleiter UI launcher")
    parser.add_argument(
        "--info",
        action="store_true",
        help="Print resolved resource directories and exit without launching the UI.",
    )
    parser.add_argument(
        "--list-puzzles",
        action="store_true",
        help="List the puzzle catalog and exit.",
    )
    parser.add_argument("--puzzle", help="Skip the menu and start this difficulty.")
    parser.add_argument("--seed", type=int, help="Seed for the tile shuffle.")
    parser.add_argument("--verbose", action="store_true", help="Enable debug logging.")
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(levelname)s: %(name)s: %(message)s",
    )

    try:
        directories = bootstrap_directories()
    except FileNotFoundError as exc:
        logger.error("%s", exc)
        return 1

    if args.list_puzzles:
        loader = PuzzleLoader(directories.puzzle_root)
        print("Available puzzles:")
        for name in loader.available():
            puzzle = loader.load(name)
            print(f"  {name} ({puzzle.difficulty}, {puzzle.metadata['dimensions']})")
        return 0
    if args.info:
        return 0

    run(directories, puzzle=args.puzzle, seed=args.seed)
    return 0


if __name__ == "__main__":  # pragma: no cover - manual invocation entry point
    raise SystemExit(main())
