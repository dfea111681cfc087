"""Process entrypoints for ``puzzles`` and ``python -m puzzle_solvers``.

Every failure leaving the CLI is mapped to an ``ExitCode``. Expected failures
print a single ``error:`` line; anything unrecognized prints its traceback.
"""

from __future__ import annotations

import sys
import traceback
from enum import IntEnum
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Iterator, Sequence


class ExitCode(IntEnum):
    SUCCESS = 0
    UNSOLVABLE = 1
    CONFIG_ERROR = 2
    INPUT_ERROR = 3
    INTERNAL_ERROR = 4


def cli_entrypoint(argv: Sequence[str] | None = None) -> int:
    try:
        from puzzle_solvers.ui.cli import run_cli

        return _as_exit_code(run_cli(argv))
    except SystemExit as exc:
        # argparse: 0 after --help, 2 on a usage error.
        return _as_exit_code(exc.code)
    except Exception as exc:  # noqa: BLE001 - last line before the process exits.
        code = classify_failure(exc)
        if code is ExitCode.INTERNAL_ERROR:
            traceback.print_exception(exc, file=sys.stderr)
        else:
            print(f"error: {str(exc).strip() or type(exc).__name__}", file=sys.stderr)
        return int(code)


def script_entrypoint() -> None:
    raise SystemExit(cli_entrypoint())


def classify_failure(exc: BaseException) -> ExitCode:
    """Exit code for ``exc``, judged by the exception and everything that caused it."""
    from puzzle_solvers.config import ConfigLoadError, ConfigValidationError
    from puzzle_solvers.grammar import RuleParseError, RuleSetError
    from puzzle_solvers.tickets import FieldOrderError, TicketParseError

    causes = list(_causes(exc))

    def caused_by(*kinds: type[BaseException]) -> bool:
        return any(isinstance(cause, kinds) for cause in causes)

    if caused_by(ConfigLoadError, ConfigValidationError):
        return ExitCode.CONFIG_ERROR
    # RuleParseError is a RuleSetError; bad input outranks an unsolvable rule set.
    if caused_by(RuleParseError, TicketParseError, FileNotFoundError, UnicodeDecodeError):
        return ExitCode.INPUT_ERROR
    if caused_by(FieldOrderError, RuleSetError):
        return ExitCode.UNSOLVABLE
    return ExitCode.INTERNAL_ERROR


def _causes(exc: BaseException) -> Iterator[BaseException]:
    seen: set[int] = set()
    current: BaseException | None = exc
    while current is not None and id(current) not in seen:
        seen.add(id(current))
        yield current
        implicit = None if current.__suppress_context__ else current.__context__
        current = current.__cause__ or implicit


def _as_exit_code(raw: object) -> int:
    if raw is None:
        return ExitCode.SUCCESS
    if isinstance(raw, int) and raw in {code.value for code in ExitCode}:
        return raw
    if isinstance(raw, str) and raw.strip():
        print(raw.strip(), file=sys.stderr)
    return ExitCode.INTERNAL_ERROR


__all__ = ["ExitCode", "classify_failure", "cli_entrypoint", "script_entrypoint"]
