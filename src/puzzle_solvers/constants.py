"""Stable constants shared across the puzzle engines."""

from __future__ import annotations

from typing import Final

# Schema version for the puzzles.toml contract.
CONFIG_SCHEMA_VERSION: Final[int] = 1

# Default root logger for the package; core modules log beneath it.
LOGGER_NAME: Final[str] = "puzzle_solvers"

DEFAULT_ROOT_RULE: Final[int] = 0
DEFAULT_DEPARTURE_PREFIX: Final[str] = "departure"

LOG_LEVELS: Final[tuple[str, ...]] = ("DEBUG", "INFO", "WARNING", "ERROR")
LOG_FORMATS: Final[tuple[str, ...]] = ("json", "text")

__all__ = [
    "CONFIG_SCHEMA_VERSION",
    "DEFAULT_DEPARTURE_PREFIX",
    "DEFAULT_ROOT_RULE",
    "LOGGER_NAME",
    "LOG_FORMATS",
    "LOG_LEVELS",
]
