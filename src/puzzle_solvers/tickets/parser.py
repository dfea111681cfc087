"""
puzzle-solvers — ticket document parser

File: src/puzzle_solvers/tickets/parser.py

Purpose
- Parse field rules, your ticket, and nearby tickets from a blank-line-delimited document.

Input layout
- ``name: a-b or c-d`` rule lines.
- ``your ticket:`` header followed by one comma-separated line.
- ``nearby tickets:`` header followed by comma-separated lines.

Functional requirements
- Missing sections, malformed rules/ranges/integers, unexpected headers, and tickets whose
  length differs from the rule count fail with ``TicketParseError`` naming the line.
"""

from __future__ import annotations

import logging
import re
from pathlib import Path
from typing import TYPE_CHECKING, Final

from puzzle_solvers.tickets.models import FieldRule, Ticket, TicketDocument, ValueRange
from puzzle_solvers.utils.fs import read_lines

if TYPE_CHECKING:
    from collections.abc import Iterable

    from puzzle_solvers.utils.fs import PathLike

YOUR_TICKET_HEADER: Final[str] = "your ticket:"
NEARBY_TICKETS_HEADER: Final[str] = "nearby tickets:"

_RULE_LINE_RE: Final[re.Pattern[str]] = re.compile(
    r"^(?P<name>[^:]+?)\s*:\s*(?P<first>\S+)\s+or\s+(?P<second>\S+)\s*$"
)
_RANGE_RE: Final[re.Pattern[str]] = re.compile(r"^(?P<low>\d+)-(?P<high>\d+)$")
_VALUE_RE: Final[re.Pattern[str]] = re.compile(r"^\d+$")

_SECTION_RULES: Final[str] = "field rules"
_SECTION_YOURS: Final[str] = "your ticket"
_SECTION_NEARBY: Final[str] = "nearby tickets"

_LOGGER = logging.getLogger(__name__)


class TicketParseError(ValueError):
    """Malformed ticket document, reported with its source location."""

    source: str
    line: int
    text: str
    message: str

    def __init__(self, *, source: str, line: int, message: str, text: str = "") -> None:
        self.source = source
        self.line = line
        self.text = text
        self.message = message
        rendered = f"{source}:{line}: {message}"
        if text:
            rendered = f"{rendered}: {text!r}"
        super().__init__(rendered)


def parse_field_rule(line: str) -> FieldRule:
    """Parse ``name: a-b or c-d``; raises ``ValueError`` on malformed text."""

    match = _RULE_LINE_RE.match(line)
    if match is None:
        raise ValueError("expected 'name: a-b or c-d'")
    name = match.group("name").strip()
    if not name:
        raise ValueError("field name must not be empty")
    return FieldRule(
        name=name,
        first=_parse_range(match.group("first")),
        second=_parse_range(match.group("second")),
    )


def parse_ticket(line: str) -> Ticket:
    """Parse a comma-separated ticket line; raises ``ValueError`` on bad values."""

    values: list[int] = []
    for token in line.split(","):
        token = token.strip()
        if not _VALUE_RE.fullmatch(token):
            raise ValueError(f"failed to parse value {token!r}")
        values.append(int(token))
    return Ticket(tuple(values))


def parse_ticket_document(lines: Iterable[str], *, source: str = "<string>") -> TicketDocument:
    """Parse the three-section ticket document."""

    section = _SECTION_RULES
    expect_header = False
    rules: list[FieldRule] = []
    your_ticket: Ticket | None = None
    nearby: list[Ticket] = []
    seen_nearby_header = False

    for line_number, raw in enumerate(lines, start=1):
        line = raw.strip()

        if not line:
            if section == _SECTION_RULES and rules:
                section = _SECTION_YOURS
                expect_header = True
            elif section == _SECTION_YOURS and your_ticket is not None:
                section = _SECTION_NEARBY
                expect_header = True
            continue

        if expect_header:
            header = YOUR_TICKET_HEADER if section == _SECTION_YOURS else NEARBY_TICKETS_HEADER
            if line.lower() != header:
                raise TicketParseError(
                    source=source,
                    line=line_number,
                    message=f"expected {header!r} header",
                    text=line,
                )
            expect_header = False
            seen_nearby_header = seen_nearby_header or section == _SECTION_NEARBY
            continue

        if section == _SECTION_RULES:
            try:
                rules.append(parse_field_rule(line))
            except ValueError as exc:
                raise TicketParseError(
                    source=source, line=line_number, message=f"invalid rule: {exc}", text=line
                ) from exc
            continue

        ticket = _parse_ticket_line(line, line_number, source, expected=len(rules))
        if section == _SECTION_YOURS:
            if your_ticket is not None:
                raise TicketParseError(
                    source=source,
                    line=line_number,
                    message="your ticket section must contain exactly one ticket",
                    text=line,
                )
            your_ticket = ticket
        else:
            nearby.append(ticket)

    if not rules:
        raise TicketParseError(source=source, line=0, message="missing section: field rules")
    if your_ticket is None:
        raise TicketParseError(source=source, line=0, message="missing section: your ticket")
    if not seen_nearby_header:
        raise TicketParseError(source=source, line=0, message="missing section: nearby tickets")

    _LOGGER.debug(
        "parsed %d field rules and %d nearby tickets from %s",
        len(rules),
        len(nearby),
        source,
        extra={"rule_count": len(rules), "ticket_count": len(nearby)},
    )
    return TicketDocument(
        field_rules=tuple(rules),
        your_ticket=your_ticket,
        nearby_tickets=tuple(nearby),
    )


def load_ticket_document(path: PathLike) -> TicketDocument:
    """Read and parse a ticket document file."""

    source = Path(path).as_posix()
    try:
        lines = read_lines(path)
    except FileNotFoundError as exc:
        raise TicketParseError(source=source, line=0, message="input file does not exist") from exc
    try:
        return parse_ticket_document(lines, source=source)
    except UnicodeDecodeError as exc:
        raise TicketParseError(source=source, line=0, message=f"input is not UTF-8: {exc}") from exc


def _parse_range(text: str) -> ValueRange:
    match = _RANGE_RE.fullmatch(text)
    if match is None:
        raise ValueError(f"bad range {text!r}")
    return ValueRange(int(match.group("low")), int(match.group("high")))


def _parse_ticket_line(line: str, line_number: int, source: str, *, expected: int) -> Ticket:
    try:
        ticket = parse_ticket(line)
    except ValueError as exc:
        raise TicketParseError(
            source=source, line=line_number, message=str(exc), text=line
        ) from exc
    if len(ticket) != expected:
        raise TicketParseError(
            source=source,
            line=line_number,
            message=f"ticket has {len(ticket)} values, expected {expected}",
            text=line,
        )
    return ticket


__all__ = [
    "NEARBY_TICKETS_HEADER",
    "YOUR_TICKET_HEADER",
    "TicketParseError",
    "load_ticket_document",
    "parse_field_rule",
    "parse_ticket",
    "parse_ticket_document",
]
