"""Utility exports for the line source and atomic writes."""

from puzzle_solvers.utils.fs import PathLike, atomic_write, read_lines

__all__ = [
    "PathLike",
    "atomic_write",
    "read_lines",
]
