"""Plain-text rendering of solver results for the ``puzzles`` CLI.

Headings are emboldened only when the stream is a terminal and neither
``NO_COLOR`` nor ``--no-color`` is set; every other line is plain text.
"""

from __future__ import annotations

import os
import sys
from typing import TYPE_CHECKING, TextIO

if TYPE_CHECKING:
    from collections.abc import Sequence

_BOLD = "\033[1m"
_YELLOW = "\033[33m"
_RESET = "\033[0m"


class CLIRenderer:
    def __init__(
        self,
        *,
        no_color: bool = False,
        verbose: bool = False,
        stream: TextIO | None = None,
    ) -> None:
        self.verbose = verbose
        self._stream = stream if stream is not None else sys.stdout
        isatty = getattr(self._stream, "isatty", None)
        self._color = (
            not no_color and not os.environ.get("NO_COLOR") and callable(isatty) and isatty()
        )

    def _line(self, text: str = "", style: str | None = None) -> None:
        if style and self._color:
            text = f"{style}{text}{_RESET}"
        self._stream.write(text + "\n")

    def heading(self, text: str) -> None:
        self._line(text, _BOLD)

    def kv(self, key: str, value: object) -> None:
        self._line(f"{key}: {value}")

    def text(self, line: str) -> None:
        self._line(line)

    def blank(self) -> None:
        self._line()

    def warning(self, text: str) -> None:
        self._line(f"  Warning: {text}", _YELLOW)

    def table(
        self,
        headers: Sequence[str],
        rows: Sequence[Sequence[object]],
        *,
        title: str | None = None,
    ) -> None:
        """Write ``rows`` as left-aligned columns under ``headers``.

        Missing trailing cells render empty; zero rows writes nothing at all.
        """
        if not rows:
            return
        cells = [[str(value) for value in row[: len(headers)]] for row in rows]
        widths = [
            max([len(header)] + [len(row[i]) for row in cells if i < len(row)])
            for i, header in enumerate(headers)
        ]

        def fmt(values: Sequence[str]) -> str:
            padded = [
                (values[i] if i < len(values) else "").ljust(width)
                for i, width in enumerate(widths)
            ]
            return "  " + "  ".join(padded).rstrip()

        if title:
            self.blank()
            self.heading(title)
        self._line(fmt(headers))
        self._line(fmt(["-" * width for width in widths]))
        for row in cells:
            self._line(fmt(row))


def create_renderer(*, no_color: bool = False, verbose: bool = False) -> CLIRenderer:
    return CLIRenderer(no_color=no_color, verbose=verbose)


__all__ = ["CLIRenderer", "create_renderer"]
