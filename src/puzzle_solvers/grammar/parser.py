"""
puzzle-solvers — message rule parser

File: src/puzzle_solvers/grammar/parser.py

Purpose
- Parse ``<id>: <body>`` rule lines and the candidate messages that follow them.

Input layout
- Rule lines until the first blank line, then one candidate message per non-blank line.
- Body shapes: ``"a"`` (literal), ``N`` (reference), ``N M`` / ``N M K`` (sequence),
  ``N | M`` (alternation), ``N M | K L`` (alternation of two sequences).

Functional requirements
- Any other body shape, an unparseable rule ID, a missing literal quote, a duplicate ID,
  or a reference to an undefined rule fails with ``RuleParseError`` naming the line.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING, Final

from puzzle_solvers.grammar.rules import (
    Alternation,
    Literal,
    Reference,
    Rule,
    RuleSet,
    RuleSetError,
    Sequence,
    SequenceAlternation,
    referenced_ids,
)
from puzzle_solvers.utils.fs import read_lines

if TYPE_CHECKING:
    from collections.abc import Iterable

    from puzzle_solvers.utils.fs import PathLike

_RULE_LINE_RE: Final[re.Pattern[str]] = re.compile(r"^\s*(?P<id>[^:\s]+)\s*:\s*(?P<body>.*?)\s*$")
_RULE_ID_RE: Final[re.Pattern[str]] = re.compile(r"^\d+$")
_ALTERNATION_TOKEN: Final[str] = "|"
_QUOTE: Final[str] = '"'

_LOGGER = logging.getLogger(__name__)


class RuleParseError(RuleSetError):
    """Malformed rule text, reported with its source location."""

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


@dataclass(frozen=True, slots=True)
class MessageInput:
    """Parsed rule set plus the candidate messages to check."""

    rules: RuleSet
    messages: tuple[str, ...]


def parse_rule_body(body: str) -> Rule:
    """Parse the text after ``<id>:`` into a rule variant.

    Raises ``ValueError`` describing the problem; callers attach the location.
    """

    stripped = body.strip()
    if not stripped:
        raise ValueError("empty rule body")
    # Literals are read before tokenizing so a quoted space survives.
    if stripped.startswith(_QUOTE):
        return _parse_literal(stripped)

    tokens = stripped.split()
    if tokens.count(_ALTERNATION_TOKEN) > 1:
        raise ValueError("at most one '|' is supported")

    if _ALTERNATION_TOKEN in tokens:
        split_at = tokens.index(_ALTERNATION_TOKEN)
        left = _parse_ids(tokens[:split_at])
        right = _parse_ids(tokens[split_at + 1 :])
        if len(left) == 1 and len(right) == 1:
            return Alternation(left[0], right[0])
        if len(left) == 2 and len(right) == 2:
            return SequenceAlternation((left[0], left[1]), (right[0], right[1]))
        raise ValueError(
            f"unsupported alternation shape {len(left)} | {len(right)}; expected 1 | 1 or 2 | 2"
        )

    rule_ids = _parse_ids(tokens)
    if len(rule_ids) == 1:
        return Reference(rule_ids[0])
    if len(rule_ids) in (2, 3):
        return Sequence(rule_ids)
    raise ValueError(f"invalid number of tokens ({len(rule_ids)})")


def _parse_literal(text: str) -> Literal:
    if len(text) < 2 or not text.endswith(_QUOTE):
        raise ValueError("missing closing literal quote")
    inner = text[1:-1]
    if _QUOTE in inner:
        raise ValueError("literal rule must be a single quoted character")
    if len(inner) != 1:
        raise ValueError("literal must contain exactly one character")
    return Literal(inner)


def parse_message_rules(lines: Iterable[str], *, source: str = "<string>") -> MessageInput:
    """Parse rule lines followed by candidate messages."""

    parsed: dict[int, Rule] = {}
    rule_lines: dict[int, tuple[int, str]] = {}
    messages: list[str] = []
    reading_rules = True

    for line_number, raw in enumerate(lines, start=1):
        line = raw.rstrip("\r\n")
        if not line.strip():
            reading_rules = False
            continue
        if not reading_rules:
            messages.append(line.strip())
            continue

        match = _RULE_LINE_RE.match(line)
        if match is None:
            raise RuleParseError(
                source=source, line=line_number, message="expected '<id>: <body>'", text=line
            )
        raw_id = match.group("id")
        if not _RULE_ID_RE.fullmatch(raw_id):
            raise RuleParseError(
                source=source,
                line=line_number,
                message=f"failed to parse rule ID {raw_id!r}",
                text=line,
            )
        rule_id = int(raw_id)
        if rule_id in parsed:
            raise RuleParseError(
                source=source,
                line=line_number,
                message=f"duplicate rule ID {rule_id}",
                text=line,
            )
        try:
            parsed[rule_id] = parse_rule_body(match.group("body"))
        except (ValueError, RuleSetError) as exc:
            raise RuleParseError(
                source=source, line=line_number, message=f"bad rule: {exc}", text=line
            ) from exc
        rule_lines[rule_id] = (line_number, line)

    if not parsed:
        raise RuleParseError(source=source, line=0, message="no rules defined")

    for rule_id in sorted(parsed):
        for target in referenced_ids(parsed[rule_id]):
            if target not in parsed:
                line_number, line = rule_lines[rule_id]
                raise RuleParseError(
                    source=source,
                    line=line_number,
                    message=f"rule {rule_id} references undefined rule {target}",
                    text=line,
                )

    _LOGGER.debug(
        "parsed %d rules and %d messages from %s",
        len(parsed),
        len(messages),
        source,
        extra={"rule_count": len(parsed), "message_count": len(messages)},
    )
    return MessageInput(rules=RuleSet(parsed), messages=tuple(messages))


def load_message_rules(path: PathLike) -> MessageInput:
    """Read and parse a message rules file."""

    source = Path(path).as_posix()
    try:
        lines = read_lines(path)
    except FileNotFoundError as exc:
        raise RuleParseError(source=source, line=0, message="input file does not exist") from exc
    try:
        return parse_message_rules(lines, source=source)
    except UnicodeDecodeError as exc:
        raise RuleParseError(source=source, line=0, message=f"input is not UTF-8: {exc}") from exc


def _parse_ids(tokens: list[str]) -> tuple[int, ...]:
    rule_ids: list[int] = []
    for token in tokens:
        if not _RULE_ID_RE.fullmatch(token):
            raise ValueError(f"failed to parse rule ID {token!r}")
        rule_ids.append(int(token))
    return tuple(rule_ids)


__all__ = [
    "MessageInput",
    "RuleParseError",
    "load_message_rules",
    "parse_message_rules",
    "parse_rule_body",
]
