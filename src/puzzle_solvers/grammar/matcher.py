"""Full-string matching of messages against a rule set.

Matching is first-match-wins: an alternation returns the end offset of the
first branch that succeeds and never revisits the second branch afterwards.
A rule that is re-entered at the same offset while it is still on the active
path fails on that path, so left-recursive rule sets terminate.

Rule applications are evaluated on an explicit frame stack rather than the
interpreter call stack. Each pending ``(rule_id, offset)`` pair occupies at
most one frame, so the stack never exceeds ``len(rules) * (len(text) + 1)``
entries.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING

from puzzle_solvers.grammar.rules import (
    Alternation,
    Literal,
    Reference,
    Rule,
    RuleSet,
    Sequence,
    SequenceAlternation,
)

if TYPE_CHECKING:
    from collections.abc import Iterable

ROOT_RULE_ID = 0

_LOGGER = logging.getLogger(__name__)

_Branches = tuple[tuple[int, ...], ...]


@dataclass(slots=True)
class _Frame:
    """One in-progress rule application: which branch, which step, where."""

    key: tuple[int, int]
    branches: _Branches
    cursor: int
    branch: int = 0
    step: int = 0

    @property
    def offset(self) -> int:
        return self.key[1]

    @property
    def pending_rule(self) -> int:
        return self.branches[self.branch][self.step]


def _branches(rule: Rule) -> _Branches:
    """Alternative rule-ID sequences tried in order; the first that matches wins."""
    if isinstance(rule, Reference):
        return ((rule.rule_id,),)
    if isinstance(rule, Sequence):
        return (rule.rule_ids,)
    if isinstance(rule, Alternation):
        return ((rule.first,), (rule.second,))
    if isinstance(rule, SequenceAlternation):
        return (rule.first, rule.second)
    raise TypeError(f"unsupported rule type: {type(rule).__name__}")


class _Matcher:
    __slots__ = ("_active", "_rules", "_text")

    def __init__(self, rules: RuleSet, text: str) -> None:
        self._rules = rules
        self._text = text
        self._active: set[tuple[int, int]] = set()

    def match(self, rule_id: int, offset: int) -> int | None:
        stack: list[_Frame] = []
        done, end = self._enter(stack, rule_id, offset)
        while stack:
            frame = stack[-1]
            if not done:
                done, end = self._enter(stack, frame.pending_rule, frame.cursor)
                continue

            # The rule at frame.pending_rule finished with ``end``.
            if end is None:
                frame.branch += 1
                frame.step = 0
                frame.cursor = frame.offset
                if frame.branch < len(frame.branches):
                    done = False
                    continue
            else:
                frame.step += 1
                frame.cursor = end
                if frame.step < len(frame.branches[frame.branch]):
                    done = False
                    continue
            stack.pop()
            self._active.discard(frame.key)
        return end

    def _enter(self, stack: list[_Frame], rule_id: int, offset: int) -> tuple[bool, int | None]:
        """Resolve ``rule_id`` at ``offset`` now, or push a frame for it.

        Returns ``(True, end)`` for an immediate outcome and ``(False, None)``
        when a frame was pushed.
        """
        key = (rule_id, offset)
        if key in self._active:
            return True, None
        rule = self._rules.get(rule_id)
        if isinstance(rule, Literal):
            if offset < len(self._text) and self._text[offset] == rule.char:
                return True, offset + 1
            return True, None
        self._active.add(key)
        stack.append(_Frame(key=key, branches=_branches(rule), cursor=offset))
        return False, None


def match_rule(rules: RuleSet, rule_id: int, text: str, offset: int = 0) -> int | None:
    """Match ``rule_id`` against ``text`` starting at ``offset``.

    Returns the offset immediately after the consumed characters, or ``None``
    when the rule does not match at ``offset``.
    """

    if offset < 0 or offset > len(text):
        raise ValueError(f"offset {offset} is outside text of length {len(text)}")
    return _Matcher(rules, text).match(rule_id, offset)


def check_string(rules: RuleSet, text: str, *, root_rule: int = ROOT_RULE_ID) -> bool:
    """Return ``True`` when the root rule consumes all of ``text``."""

    end = match_rule(rules, root_rule, text)
    return end is not None and end == len(text)


def count_matching(
    rules: RuleSet,
    messages: Iterable[str],
    *,
    root_rule: int = ROOT_RULE_ID,
) -> int:
    """Count the messages fully matched by the root rule."""

    rules.get(root_rule)
    total = 0
    valid = 0
    for message in messages:
        total += 1
        if check_string(rules, message, root_rule=root_rule):
            valid += 1
    _LOGGER.debug(
        "matched %d of %d messages against rule %d",
        valid,
        total,
        root_rule,
        extra={"valid_messages": valid, "total_messages": total},
    )
    return valid


__all__ = [
    "ROOT_RULE_ID",
    "check_string",
    "count_matching",
    "match_rule",
]
