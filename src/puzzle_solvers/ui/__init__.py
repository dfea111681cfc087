"""UI package exports for the CLI router and renderer."""

from puzzle_solvers.ui.cli import CLIError, build_parser, run_cli
from puzzle_solvers.ui.render import CLIRenderer, create_renderer

__all__ = [
    "CLIError",
    "CLIRenderer",
    "build_parser",
    "create_renderer",
    "run_cli",
]
