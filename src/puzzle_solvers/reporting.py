"""
puzzle-solvers — result reports

File: src/puzzle_solvers/reporting.py

Purpose
- Build plain-data result payloads for the ``messages`` and ``tickets`` commands.
- Write those payloads to disk as YAML or JSON.

Functional requirements
- ``.yaml``/``.yml`` targets are rendered with ``yaml.safe_dump``; anything else is JSON.
- Relative targets resolve under the configured report directory.
- Output is deterministic for identical inputs and written atomically.
"""

from __future__ import annotations

import json
from collections.abc import Mapping, Sequence
from pathlib import Path
from typing import Any, Final

import yaml

from puzzle_solvers.tickets.models import FieldRule
from puzzle_solvers.tickets.sorting import TicketScan
from puzzle_solvers.utils.fs import PathLike, atomic_write

REPORT_SCHEMA_VERSION: Final[int] = 1
_YAML_SUFFIXES: Final[frozenset[str]] = frozenset({".yaml", ".yml"})


def build_messages_report(
    *,
    input_path: str,
    root_rule: int,
    message_count: int,
    valid_count: int,
) -> dict[str, Any]:
    return {
        "schema_version": REPORT_SCHEMA_VERSION,
        "command": "messages",
        "input": input_path,
        "root_rule": root_rule,
        "message_count": message_count,
        "valid_count": valid_count,
    }


def build_tickets_report(
    *,
    input_path: str,
    scan: TicketScan,
    field_order: Sequence[FieldRule],
    departure_prefix: str,
    departure_product: int,
) -> dict[str, Any]:
    return {
        "schema_version": REPORT_SCHEMA_VERSION,
        "command": "tickets",
        "input": input_path,
        "error_rate": scan.error_rate,
        "valid_tickets": len(scan.valid_tickets),
        "invalid_tickets": len(scan.invalid_tickets),
        "field_order": [rule.name for rule in field_order],
        "departure_prefix": departure_prefix,
        "departure_product": departure_product,
    }


def render_report(payload: Mapping[str, Any], *, fmt: str) -> str:
    """Render ``payload`` as ``"yaml"`` or ``"json"`` text ending in a newline."""

    if fmt == "yaml":
        rendered = yaml.safe_dump(
            dict(payload),
            sort_keys=False,
            default_flow_style=False,
            allow_unicode=False,
            width=120,
        )
    elif fmt == "json":
        rendered = json.dumps(dict(payload), indent=2, ensure_ascii=False)
    else:
        raise ValueError(f"unsupported report format {fmt!r}")
    if not rendered.endswith("\n"):
        rendered = rendered + "\n"
    return rendered


def resolve_report_path(target: PathLike, report_dir: PathLike) -> Path:
    path = Path(target).expanduser()
    if path.is_absolute():
        return path
    return Path(report_dir) / path


def write_report(target: PathLike, payload: Mapping[str, Any], *, report_dir: PathLike) -> Path:
    """Write ``payload`` to ``target`` and return the resolved destination."""

    destination = resolve_report_path(target, report_dir)
    fmt = "yaml" if destination.suffix.lower() in _YAML_SUFFIXES else "json"
    destination.parent.mkdir(parents=True, exist_ok=True)
    atomic_write(destination, render_report(payload, fmt=fmt))
    return destination


__all__ = [
    "REPORT_SCHEMA_VERSION",
    "build_messages_report",
    "build_tickets_report",
    "render_report",
    "resolve_report_path",
    "write_report",
]
