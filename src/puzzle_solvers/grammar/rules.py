"""Message grammar rule variants and immutable rule sets."""

from __future__ import annotations

from collections.abc import Iterator, Mapping
from dataclasses import dataclass


class RuleSetError(ValueError):
    """Raised when a rule set is inconsistent or a rule ID cannot be resolved."""


@dataclass(frozen=True, slots=True)
class Literal:
    """Matches exactly one input character."""

    char: str

    def __post_init__(self) -> None:
        if not isinstance(self.char, str) or len(self.char) != 1:
            raise RuleSetError(f"literal must be a single character, got {self.char!r}")


@dataclass(frozen=True, slots=True)
class Reference:
    """Delegates to another rule."""

    rule_id: int


@dataclass(frozen=True, slots=True)
class Sequence:
    """Ordered concatenation of two or three sub-rules."""

    rule_ids: tuple[int, ...]

    def __post_init__(self) -> None:
        if len(self.rule_ids) not in (2, 3):
            raise RuleSetError(
                f"sequence must have 2 or 3 elements, got {len(self.rule_ids)}"
            )


@dataclass(frozen=True, slots=True)
class Alternation:
    """First rule, else second rule, both tried from the same offset."""

    first: int
    second: int


@dataclass(frozen=True, slots=True)
class SequenceAlternation:
    """Alternation between two 2-element sequences."""

    first: tuple[int, int]
    second: tuple[int, int]

    def __post_init__(self) -> None:
        if len(self.first) != 2 or len(self.second) != 2:
            raise RuleSetError("sequence alternation branches must have exactly 2 elements")


Rule = Literal | Reference | Sequence | Alternation | SequenceAlternation


def referenced_ids(rule: Rule) -> tuple[int, ...]:
    """Rule IDs ``rule`` refers to, in evaluation order."""
    if isinstance(rule, Literal):
        return ()
    if isinstance(rule, Reference):
        return (rule.rule_id,)
    if isinstance(rule, Sequence):
        return rule.rule_ids
    if isinstance(rule, Alternation):
        return (rule.first, rule.second)
    if isinstance(rule, SequenceAlternation):
        return (*rule.first, *rule.second)
    raise TypeError(f"unsupported rule type: {type(rule).__name__}")


class RuleSet:
    """Immutable mapping from rule ID to rule with resolved references."""

    __slots__ = ("_rules",)

    def __init__(self, rules: Mapping[int, Rule]) -> None:
        materialized: dict[int, Rule] = {}
        for rule_id in sorted(rules):
            if isinstance(rule_id, bool) or not isinstance(rule_id, int) or rule_id < 0:
                raise RuleSetError(f"rule ID must be a non-negative integer, got {rule_id!r}")
            materialized[rule_id] = rules[rule_id]

        for rule_id, rule in materialized.items():
            for target in referenced_ids(rule):
                if target not in materialized:
                    raise RuleSetError(f"rule {rule_id} references undefined rule {target}")

        self._rules = materialized

    @property
    def rule_ids(self) -> tuple[int, ...]:
        """All rule IDs in ascending order."""
        return tuple(self._rules)

    def get(self, rule_id: int) -> Rule:
        """Return the rule for ``rule_id`` or raise ``RuleSetError``."""
        try:
            return self._rules[rule_id]
        except KeyError:
            raise RuleSetError(f"rule {rule_id} is not defined") from None

    def __getitem__(self, rule_id: int) -> Rule:
        return self.get(rule_id)

    def __contains__(self, rule_id: object) -> bool:
        return rule_id in self._rules

    def __iter__(self) -> Iterator[int]:
        return iter(self._rules)

    def __len__(self) -> int:
        return len(self._rules)

    def __repr__(self) -> str:
        return f"RuleSet({len(self._rules)} rules)"


__all__ = [
    "Alternation",
    "Literal",
    "Reference",
    "Rule",
    "RuleSet",
    "RuleSetError",
    "Sequence",
    "SequenceAlternation",
    "referenced_ids",
]
