"""Module entrypoint for ``python -m puzzle_solvers``."""

from __future__ import annotations

from puzzle_solvers.main import cli_entrypoint

if __name__ == "__main__":
    raise SystemExit(cli_entrypoint())
