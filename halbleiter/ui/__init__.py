"""User interface package for the circuit puzzle."""

from .main import (
    ASSET_ENV_VAR,
    PUZZLE_ENV_VAR,
    HalbleiterApp,
    UIDirectories,
    bootstrap_directories,
    main,
    resolve_directories,
    run,
)
from .toolkit import HalbleiterUI

__all__ = [
    "ASSET_ENV_VAR",
    "PUZZLE_ENV_VAR",
    "UIDirectories",
    "HalbleiterApp",
    "HalbleiterUI",
    "bootstrap_directories",
    "main",
    "resolve_directories",
    "run",
]
