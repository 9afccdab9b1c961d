"""Layout constants for the Halbleiter UI."""

from __future__ import annotations

from typing import Dict, Tuple

# Window metrics
WINDOW_SIZE: Tuple[int, int] = (1500, 720)
WINDOW_TITLE: str = "Halbleiter"
FRAME_RATE: int = 60

# Menu metrics
BUTTON_SIZE: Tuple[int, int] = (200, 65)
BUTTON_SPACING: int = 20
SMALL_BUTTON_SIZE: Tuple[int, int] = (180, 40)
BUTTON_RADIUS: int = 10

# Grid lines
GRID_LINE_WIDTH: int = 1

# Colors expressed as RGB tuples
BACKGROUND_COLOR: Tuple[int, int, int] = (26, 26, 26)
BUTTON_COLOR: Tuple[int, int, int] = (51, 51, 51)
QUIT_BUTTON_COLOR: Tuple[int, int, int] = (128, 26, 26)
BUTTON_BORDER_COLOR: Tuple[int, int, int] = (0, 0, 0)
TEXT_COLOR: Tuple[int, int, int] = (255, 255, 255)
GRID_LINE_COLOR: Tuple[int, int, int] = (191, 191, 191)
WIRE_COLOR: Tuple[int, int, int] = (230, 230, 230)
GLOW_COLOR: Tuple[int, int, int] = (255, 240, 120)

# Fill per tile kind, keyed by ``TileKind.value``
TILE_COLORS: Dict[str, Tuple[int, int, int]] = {
    "battery": (70, 120, 200),
    "lamp": (90, 90, 70),
    "cable": (60, 64, 80),
    "p": (200, 80, 80),
    "n": (80, 160, 110),
}
LAMP_ON_COLOR: Tuple[int, int, int] = (255, 230, 60)

# Sound cues: file name and linear volume
SOUNDS: Dict[str, Tuple[str, float]] = {
    "drop": ("drop.wav", 0.15),
    "start_drag": ("start_drag.wav", 0.25),
    "lamp_on": ("lamp_on2.wav", 1.0),
    "misdrop": ("misdrop.wav", 0.2),
}

INTRO_TEXT: str = (
    "In diesem Spiel musst du einen einfachen Stromkreis zusammenbauen.\n"
    "Dabei benutzt du ein besonderes Bauteil aus zwei Teilen: p-dotiert und n-dotiert.\n"
    "Es gibt folgende Teile:\n"
    " - Stromquelle\n"
    " - Kabel\n"
    " - Lampe\n"
    " - p- und n-dotiertes Teil\n"
    "\n"
    "Wenn p- und n-Teil zusammenkommen, entsteht zwischen ihnen eine Sperrschicht.\n"
    "Diese Sperrschicht kann den Strom blockieren oder durchlassen.\n"
    "\n"
    "Du sollst die beiden Teile richtig herum in den Stromkreis einbauen und die Lampe "
    "zum Leuchten bringen.\n"
    "Bringe Licht ins dunkle!"
)

MENU_ENTRIES: Tuple[Tuple[str, str], ...] = (
    ("EASY", "easy"),
    ("MEDIUM", "medium"),
    ("HARD", "hard"),
)
