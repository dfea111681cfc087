"""Ticket validity filtering and field-order resolution by constraint propagation."""

from __future__ import annotations

import logging
import math
from collections.abc import Iterable, Sequence
from dataclasses import dataclass

from puzzle_solvers.tickets.models import FieldRule, Ticket

_LOGGER = logging.getLogger(__name__)


class FieldOrderError(ValueError):
    """Raised when tickets cannot yield a field ordering."""


class AmbiguousFieldOrderError(FieldOrderError):
    """Raised when propagation stalls before every position is resolved."""

    unresolved: dict[int, tuple[str, ...]]

    def __init__(self, unresolved: dict[int, tuple[str, ...]]) -> None:
        self.unresolved = dict(unresolved)
        preview = "; ".join(
            f"position {position}: {', '.join(names)}"
            for position, names in sorted(self.unresolved.items())[:3]
        )
        suffix = "; ..." if len(self.unresolved) > 3 else ""
        super().__init__(f"field order is ambiguous ({preview}{suffix})")


@dataclass(frozen=True, slots=True)
class TicketScan:
    """Nearby tickets split by validity plus the summed invalid values."""

    valid_tickets: tuple[Ticket, ...]
    invalid_tickets: tuple[Ticket, ...]
    error_rate: int


class FieldAssignment:
    """Candidate relation between ticket positions and field rule indices.

    ``rules_by_position`` and ``positions_by_rule`` mirror each other: rule
    ``r`` is a candidate for position ``p`` iff ``p`` is a candidate for ``r``.
    The relation starts complete and only shrinks.
    """

    __slots__ = ("_positions_by_rule", "_rules_by_position")

    def __init__(self, size: int) -> None:
        if size <= 0:
            raise FieldOrderError("at least one field rule is required")
        self._rules_by_position: list[set[int]] = [set(range(size)) for _ in range(size)]
        self._positions_by_rule: list[set[int]] = [set(range(size)) for _ in range(size)]

    @property
    def size(self) -> int:
        return len(self._rules_by_position)

    def rules_for(self, position: int) -> frozenset[int]:
        return frozenset(self._rules_by_position[position])

    def positions_for(self, rule: int) -> frozenset[int]:
        return frozenset(self._positions_by_rule[rule])

    def eliminate(self, position: int, rule: int) -> bool:
        """Remove the ``position``/``rule`` pair; return whether it was present."""
        candidates = self._rules_by_position[position]
        if rule not in candidates:
            return False
        candidates.remove(rule)
        self._positions_by_rule[rule].remove(position)
        if not candidates:
            raise FieldOrderError(f"no field rule fits position {position}")
        if not self._positions_by_rule[rule]:
            raise FieldOrderError(f"field rule {rule} fits no position")
        return True

    def propagate(self) -> int:
        """Apply singleton elimination until a full pass changes nothing.

        Returns the number of passes that removed at least one candidate.
        """
        changed_passes = 0
        changed = True
        while changed:
            changed = False
            for position in range(self.size):
                candidates = self._rules_by_position[position]
                if len(candidates) != 1:
                    continue
                (rule,) = candidates
                for other in tuple(self._positions_by_rule[rule]):
                    if other != position and self.eliminate(other, rule):
                        changed = True
            for rule in range(self.size):
                positions = self._positions_by_rule[rule]
                if len(positions) != 1:
                    continue
                (position,) = positions
                for other in tuple(self._rules_by_position[position]):
                    if other != rule and self.eliminate(position, other):
                        changed = True
            if changed:
                changed_passes += 1
        return changed_passes

    @property
    def is_resolved(self) -> bool:
        return all(len(candidates) == 1 for candidates in self._rules_by_position)

    def unresolved(self) -> dict[int, tuple[int, ...]]:
        """Positions that still have more than one candidate rule."""
        return {
            position: tuple(sorted(candidates))
            for position, candidates in enumerate(self._rules_by_position)
            if len(candidates) != 1
        }

    def resolved(self) -> tuple[int, ...]:
        """Rule index for every position, or ``AmbiguousFieldOrderError``."""
        pending = self.unresolved()
        if pending:
            raise AmbiguousFieldOrderError(
                {
                    position: tuple(f"rule {rule}" for rule in candidates)
                    for position, candidates in pending.items()
                }
            )
        return tuple(next(iter(candidates)) for candidates in self._rules_by_position)


def is_valid_value(field_rules: Iterable[FieldRule], value: int) -> bool:
    """Return ``True`` when at least one rule accepts ``value``."""
    return any(rule.check_value(value) for rule in field_rules)


def scan_tickets(field_rules: Sequence[FieldRule], tickets: Iterable[Ticket]) -> TicketScan:
    """Split tickets into valid/invalid and sum every value no rule accepts."""

    valid: list[Ticket] = []
    invalid: list[Ticket] = []
    error_rate = 0
    for ticket in tickets:
        ticket_is_valid = True
        for value in ticket:
            if not is_valid_value(field_rules, value):
                error_rate += value
                ticket_is_valid = False
        if ticket_is_valid:
            valid.append(ticket)
        else:
            invalid.append(ticket)

    _LOGGER.debug(
        "scanned %d tickets: %d valid, error rate %d",
        len(valid) + len(invalid),
        len(valid),
        error_rate,
        extra={"valid_tickets": len(valid), "invalid_tickets": len(invalid)},
    )
    return TicketScan(
        valid_tickets=tuple(valid),
        invalid_tickets=tuple(invalid),
        error_rate=error_rate,
    )


def get_valid_tickets(
    field_rules: Sequence[FieldRule], tickets: Iterable[Ticket]
) -> tuple[tuple[Ticket, ...], int]:
    """Return ``(valid_tickets, error_rate)``."""

    scan = scan_tickets(field_rules, tickets)
    return scan.valid_tickets, scan.error_rate


def sort_fields(
    field_rules: Sequence[FieldRule], valid_tickets: Sequence[Ticket]
) -> tuple[FieldRule, ...]:
    """Return ``field_rules`` reordered so index ``p`` is the rule for position ``p``."""

    rules = tuple(field_rules)
    if not valid_tickets:
        raise FieldOrderError("at least one valid ticket is required to sort fields")
    for index, ticket in enumerate(valid_tickets):
        if len(ticket) != len(rules):
            raise FieldOrderError(
                f"ticket {index} has {len(ticket)} values but there are {len(rules)} field rules"
            )

    assignment = FieldAssignment(len(rules))
    for ticket in valid_tickets:
        for position, value in enumerate(ticket):
            for rule_index in tuple(assignment.rules_for(position)):
                if not rules[rule_index].check_value(value):
                    assignment.eliminate(position, rule_index)

    passes = assignment.propagate()
    pending = assignment.unresolved()
    if pending:
        raise AmbiguousFieldOrderError(
            {
                position: tuple(rules[rule_index].name for rule_index in candidates)
                for position, candidates in pending.items()
            }
        )
    order = assignment.resolved()

    _LOGGER.debug(
        "resolved %d field positions after %d propagation passes",
        len(order),
        passes,
        extra={"positions": len(order), "propagation_passes": passes},
    )
    return tuple(rules[rule_index] for rule_index in order)


def departure_product(
    ordered_rules: Sequence[FieldRule],
    ticket: Ticket,
    *,
    prefix: str = "departure",
) -> int:
    """Multiply the ticket values whose resolved field name starts with ``prefix``."""

    if len(ticket) != len(ordered_rules):
        raise FieldOrderError(
            f"ticket has {len(ticket)} values but there are {len(ordered_rules)} ordered fields"
        )
    selected = [
        value for rule, value in zip(ordered_rules, ticket) if rule.name.startswith(prefix)
    ]
    if not selected:
        _LOGGER.warning("no field names start with %r", prefix, extra={"prefix": prefix})
    return math.prod(selected)


__all__ = [
    "AmbiguousFieldOrderError",
    "FieldAssignment",
    "FieldOrderError",
    "TicketScan",
    "departure_product",
    "get_valid_tickets",
    "is_valid_value",
    "scan_tickets",
    "sort_fields",
]
