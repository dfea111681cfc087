"""
puzzle-solvers — package root

File: src/puzzle_solvers/__init__.py

Purpose
- Package root for two puzzle engines: grammar rule matching (``puzzle_solvers.grammar``)
  and ticket field sorting (``puzzle_solvers.tickets``).

Functional requirements
- Must not have side effects at import time (no config loading, no logging init).
"""

__version__ = "0.1.0"

__all__ = ["__version__"]
