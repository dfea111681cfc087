"""Argument routing and result printing for the ``puzzles`` command.

Subcommands:

* ``messages`` counts the messages that fully match a grammar rule.
* ``tickets`` scans nearby tickets, orders the fields and multiplies the
  departure values on your ticket.
* ``config`` prints the configuration a run would use.

Handlers return an ``ExitCode``. Config and report-writing problems are
raised as ``CLIError``; solver and parse failures propagate to
``puzzle_solvers.main`` which classifies them.
"""

from __future__ import annotations

import argparse
import json
import sys
import time
import uuid
from collections.abc import Iterator, Mapping, Sequence
from contextlib import contextmanager
from pathlib import Path
from typing import Any

from puzzle_solvers.config import (
    ConfigLoadError,
    ConfigValidationError,
    effective_config,
    load_config,
)
from puzzle_solvers.grammar import count_matching, load_message_rules
from puzzle_solvers.main import ExitCode
from puzzle_solvers.observability import correlation_scope, setup_logging, shutdown_logging
from puzzle_solvers.observability.timing import SectionTiming, timed_section
from puzzle_solvers.reporting import build_messages_report, build_tickets_report, write_report
from puzzle_solvers.tickets import (
    departure_product,
    load_ticket_document,
    scan_tickets,
    sort_fields,
)
from puzzle_solvers.ui.render import CLIRenderer, create_renderer

_USAGE_EXAMPLES = """\
examples:
  puzzles messages input.txt                 count messages matching rule 0
  puzzles messages input.txt --root-rule 8   match against another rule
  puzzles tickets input.txt --report out.yaml
  puzzles config --profile debug --json
"""


class CLIError(Exception):
    def __init__(self, message: str, *, exit_code: int = ExitCode.UNSOLVABLE) -> None:
        super().__init__(message)
        self.exit_code = int(exit_code)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="puzzles",
        description="Grammar rule matching and ticket field sorting.",
        epilog=_USAGE_EXAMPLES,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    shared = argparse.ArgumentParser(add_help=False)
    shared.add_argument(
        "--config", dest="config_path", metavar="PATH", help="config file (default: ./puzzles.toml)"
    )
    shared.add_argument("--profile", help="profile overlay from the config's [profiles] table")
    shared.add_argument("-v", "--verbose", action="store_true", help="also print section timings")
    shared.add_argument(
        "--no-color", action="store_true", help="plain headings even on a terminal (see NO_COLOR)"
    )
    shared.add_argument("--json", action="store_true", help="print one JSON object instead")

    puzzle = argparse.ArgumentParser(add_help=False)
    puzzle.add_argument("input_path", metavar="INPUT", help="puzzle input file")
    puzzle.add_argument(
        "--report",
        dest="report_path",
        metavar="FILE",
        help="also save the result under paths.report_dir (.yaml/.yml writes YAML)",
    )

    commands = parser.add_subparsers(dest="command", required=True, metavar="COMMAND")

    messages = commands.add_parser(
        "messages", parents=[shared, puzzle], help="count messages matching a grammar rule"
    )
    messages.add_argument(
        "--root-rule", type=int, metavar="ID", help="rule to match (default: grammar.root_rule)"
    )
    messages.set_defaults(handler=_run_messages)

    tickets = commands.add_parser(
        "tickets", parents=[shared, puzzle], help="scan tickets and resolve the field order"
    )
    tickets.add_argument(
        "--departure-prefix",
        metavar="PREFIX",
        help="field-name prefix to multiply (default: tickets.departure_prefix)",
    )
    tickets.set_defaults(handler=_run_tickets)

    config = commands.add_parser(
        "config", parents=[shared], help="print the effective configuration"
    )
    config.set_defaults(handler=_run_config)
    return parser


def run_cli(argv: Sequence[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    try:
        return int(args.handler(args))
    except CLIError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return exc.exit_code


def _run_messages(args: argparse.Namespace) -> ExitCode:
    config = _config_for(args, {"grammar.root_rule": args.root_rule})
    root_rule = config["grammar"]["root_rule"]
    source = Path(args.input_path)

    with _run_logging(config, "messages", source) as timings:
        with _timed("parse", timings):
            document = load_message_rules(source)
        with _timed("match", timings):
            valid = count_matching(document.rules, document.messages, root_rule=root_rule)

    payload = build_messages_report(
        input_path=source.as_posix(),
        root_rule=root_rule,
        message_count=len(document.messages),
        valid_count=valid,
    )
    out = _renderer(args)
    _save_report(args, config, payload, out)
    if args.json:
        _print_json(payload)
        return ExitCode.SUCCESS

    out.heading(f"messages: {source.as_posix()}")
    out.kv("Rules", len(document.rules))
    out.kv("Root rule", root_rule)
    out.kv("Messages checked", len(document.messages))
    out.kv("Number of valid strings", valid)
    _print_timings(out, timings)
    return ExitCode.SUCCESS


def _run_tickets(args: argparse.Namespace) -> ExitCode:
    config = _config_for(args, {"tickets.departure_prefix": args.departure_prefix})
    prefix = config["tickets"]["departure_prefix"]
    source = Path(args.input_path)

    with _run_logging(config, "tickets", source) as timings:
        with _timed("parse", timings):
            document = load_ticket_document(source)
        with _timed("scan", timings):
            scan = scan_tickets(document.field_rules, document.nearby_tickets)
        with _timed("sort", timings):
            order = sort_fields(document.field_rules, scan.valid_tickets)
        product = departure_product(order, document.your_ticket, prefix=prefix)

    payload = build_tickets_report(
        input_path=source.as_posix(),
        scan=scan,
        field_order=order,
        departure_prefix=prefix,
        departure_product=product,
    )
    out = _renderer(args)
    _save_report(args, config, payload, out)
    if args.json:
        _print_json(payload)
        return ExitCode.SUCCESS

    out.heading(f"tickets: {source.as_posix()}")
    out.kv("Ticket scanning error rate", scan.error_rate)
    out.kv("Valid nearby tickets", len(scan.valid_tickets))
    out.table(
        ("Position", "Field", "Your value"),
        [(index, rule.name, document.your_ticket[index]) for index, rule in enumerate(order)],
        title="Field order:",
    )
    out.blank()
    if not any(rule.name.startswith(prefix) for rule in order):
        out.warning(f"no field names start with {prefix!r}; product defaults to 1")
    out.kv(f"Product of '{prefix}' fields", product)
    _print_timings(out, timings)
    return ExitCode.SUCCESS


def _run_config(args: argparse.Namespace) -> ExitCode:
    shown = effective_config(_config_for(args, {}))
    profile = (args.profile or "").strip() or None
    if args.json:
        _print_json({"command": "config", "active_profile": profile, "config": shown})
        return ExitCode.SUCCESS

    out = _renderer(args)
    out.kv("Active profile", profile or "(default)")
    out.text(json.dumps(shown, indent=2, sort_keys=True, ensure_ascii=False))
    return ExitCode.SUCCESS


def _config_for(args: argparse.Namespace, overrides: Mapping[str, object]) -> dict[str, Any]:
    try:
        return load_config(
            (args.config_path or "").strip() or None,
            profile=(args.profile or "").strip() or None,
            cli_overrides=overrides,
        )
    except (ConfigLoadError, ConfigValidationError) as exc:
        raise CLIError(str(exc), exit_code=ExitCode.CONFIG_ERROR) from exc


def _renderer(args: argparse.Namespace) -> CLIRenderer:
    return create_renderer(no_color=args.no_color, verbose=args.verbose)


def _print_json(payload: Mapping[str, object]) -> None:
    print(json.dumps(payload, sort_keys=True, separators=(",", ":"), ensure_ascii=False))


@contextmanager
def _run_logging(
    config: Mapping[str, Any], command: str, source: Path
) -> Iterator[list[SectionTiming]]:
    """Log one command run under a fresh run id; yields the list timings are added to."""
    run_id = f"{time.strftime('%Y%m%dT%H%M%SZ', time.gmtime())}-{uuid.uuid4().hex[:8]}"
    handle = setup_logging(config["observability"], run_id=run_id)
    timings: list[SectionTiming] = []
    try:
        with correlation_scope(command=command, input_path=source.as_posix()):
            handle.logger.info("%s started", command)
            yield timings
            handle.logger.info("%s finished", command)
    finally:
        shutdown_logging(handle)


@contextmanager
def _timed(label: str, timings: list[SectionTiming]) -> Iterator[None]:
    with timed_section(label) as timing:
        yield
    timings.append(timing)


def _print_timings(out: CLIRenderer, timings: Sequence[SectionTiming]) -> None:
    if out.verbose:
        out.table(
            ("Section", "Elapsed (ms)"),
            [(timing.label, f"{timing.elapsed_ms or 0.0:.3f}") for timing in timings],
            title="Timings:",
        )


def _save_report(
    args: argparse.Namespace,
    config: Mapping[str, Any],
    payload: Mapping[str, object],
    out: CLIRenderer,
) -> None:
    target = (args.report_path or "").strip()
    if not target:
        return
    try:
        written = write_report(target, payload, report_dir=Path(config["paths"]["report_dir"]))
    except OSError as exc:
        raise CLIError(
            f"unable to write report {target}: {exc}", exit_code=ExitCode.INPUT_ERROR
        ) from exc
    if not args.json:
        out.kv("Report", written.as_posix())


__all__ = ["CLIError", "build_parser", "run_cli"]
