"""Helpers for locating and loading sprite and sound assets."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Iterable, Optional, Tuple

import pygame

from ..game import Battery, Cable, Lamp, N, P, Side, Tile
from . import layout

logger = logging.getLogger(__name__)


def _side(side: Side) -> str:
    return side.name.lower()


def sprite_name(tile: Tile, lit: bool = False) -> str:
    """Image file for a tile in its orientation.

    Raises :class:`ValueError` for a tile whose two ports share a side, since
    no artwork exists for it.
    """

    if isinstance(tile, P):
        return "p.png"
    if isinstance(tile, N):
        return "n.png"
    if isinstance(tile, Lamp):
        if tile.entry is tile.exit:
            raise ValueError(f"No sprite for {tile!r}")
        state = "on" if lit else "off"
        return f"lamp_{state}_{_side(tile.entry)}_to_{_side(tile.exit)}.png"
    if isinstance(tile, Battery):
        if tile.plus_side is tile.minus_side:
            raise ValueError(f"No sprite for {tile!r}")
        return f"battery_plus_{_side(tile.plus_side)}_minus_{_side(tile.minus_side)}.png"
    if isinstance(tile, Cable):
        if tile.entry is tile.exit:
            raise ValueError(f"No sprite for {tile!r}")
        return f"cable_{_side(tile.entry)}_to_{_side(tile.exit)}.png"
    raise TypeError(f"Unknown tile: {tile!r}")


@dataclass
class SpriteLibrary:
    """Scaled tile images keyed by file name."""

    surfaces: Dict[str, pygame.Surface] = field(default_factory=dict)

    def get(self, tile: Tile, lit: bool = False) -> Optional[pygame.Surface]:
        return self.surfaces.get(sprite_name(tile, lit))

    def __len__(self) -> int:
        return len(self.surfaces)


def load_sprites(
    asset_root: Optional[Path], tiles: Iterable[Optional[Tile]], size: int
) -> SpriteLibrary:
    """Load the sprites needed for ``tiles`` from ``asset_root/sprites``.

    Missing files are skipped so the caller can draw those tiles itself.
    """

    library = SpriteLibrary()
    if asset_root is None:
        return library
    sprite_root = Path(asset_root) / "sprites"
    names = set()
    for tile in tiles:
        if tile is None:
            continue
        names.add(sprite_name(tile))
        if isinstance(tile, Lamp):
            names.add(sprite_name(tile, lit=True))
    for name in sorted(names):
        path = sprite_root / name
        if not path.exists():
            logger.debug("Sprite %s not found, drawing tile procedurally", path)
            continue
        surface = pygame.image.load(str(path))
        if pygame.display.get_surface() is not None:
            surface = surface.convert_alpha()
        library.surfaces[name] = pygame.transform.scale(surface, (size, size))
    return library


class SoundBoard:
    """Plays the short cues of the play screen when their files exist."""

    def __init__(self, asset_root: Optional[Path]) -> None:
        self.sounds: Dict[str, "pygame.mixer.Sound"] = {}
        if asset_root is None:
            return
        try:
            if not pygame.mixer.get_init():
                pygame.mixer.init()
        except pygame.error as exc:
            logger.warning("Audio disabled: %s", exc)
            return
        for cue, (filename, volume) in layout.SOUNDS.items():
            path = Path(asset_root) / "audio" / filename
            if not path.exists():
                logger.debug("Sound %s not found", path)
                continue
            sound = pygame.mixer.Sound(str(path))
            sound.set_volume(volume)
            self.sounds[cue] = sound

    def play(self, cue: str) -> None:
        sound = self.sounds.get(cue)
        if sound is not None:
            sound.play()


def tile_ports(tile: Tile) -> Tuple[Side, ...]:
    """Sides a procedurally drawn tile connects to."""

    if isinstance(tile, (Lamp, Cable)):
        return (tile.entry, tile.exit)
    if isinstance(tile, Battery):
        return (tile.plus_side, tile.minus_side)
    if isinstance(tile, (P, N)):
        return ()
    raise TypeError(f"Unknown tile: {tile!r}")


def draw_tile(
    surface: pygame.Surface,
    tile: Tile,
    rect: pygame.Rect,
    font: pygame.font.Font,
    *,
    lit: bool = False,
) -> None:
    """Draw a tile without artwork: kind colour, port wires and a label."""

    color = layout.TILE_COLORS[tile.kind.value]
    if isinstance(tile, Lamp) and lit:
        color = layout.LAMP_ON_COLOR
    surface.fill(color, rect)

    center = rect.center
    thickness = max(2, rect.width // 12)
    for side in tile_ports(tile):
        dx, dy = side.offset
        end = (center[0] + dx * rect.width // 2, center[1] + dy * rect.height // 2)
        pygame.draw.line(surface, layout.WIRE_COLOR, center, end, thickness)

    if isinstance(tile, Battery):
        label = "+/-"
    elif isinstance(tile, Lamp):
        label = "*"
    elif isinstance(tile, Cable):
        label = ""
    else:
        label = tile.kind.value.upper()
    if label:
        text = font.render(label, True, (0, 0, 0))
        surface.blit(text, text.get_rect(center=center))
