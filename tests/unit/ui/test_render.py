"""
puzzle-solvers — unit tests for CLI rendering

File: tests/unit/ui/test_render.py

Purpose
- Validate plain-text output of the CLI renderer, including tables and color suppression.
"""

from __future__ import annotations

import io

import pytest

from puzzle_solvers.ui.render import CLIRenderer


class _TTY(io.StringIO):
    def isatty(self) -> bool:
        return True


@pytest.mark.unit
def test_table_aligns_columns_and_pads_short_rows() -> None:
    out = io.StringIO()
    renderer = CLIRenderer(stream=out)

    renderer.table(("Field", "Column"), [("departure seat", 2), ("row",)], title="Fields")

    assert out.getvalue().splitlines() == [
        "",
        "Fields",
        "  Field           Column",
        "  --------------  ------",
        "  departure seat  2",
        "  row",
    ]


@pytest.mark.unit
def test_empty_table_writes_nothing() -> None:
    out = io.StringIO()

    CLIRenderer(stream=out).table(("Phase", "Seconds"), [], title="Timings")

    assert out.getvalue() == ""


@pytest.mark.unit
def test_color_only_on_terminals_without_opt_out(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("NO_COLOR", raising=False)
    colored, flagged, piped = _TTY(), _TTY(), io.StringIO()

    CLIRenderer(stream=colored).heading("tickets")
    CLIRenderer(stream=flagged, no_color=True).heading("tickets")
    CLIRenderer(stream=piped).heading("tickets")
    monkeypatch.setenv("NO_COLOR", "1")
    env_disabled = _TTY()
    CLIRenderer(stream=env_disabled).warning("empty")

    assert colored.getvalue() == "\033[1mtickets\033[0m\n"
    assert flagged.getvalue() == piped.getvalue() == "tickets\n"
    assert env_disabled.getvalue() == "  Warning: empty\n"
