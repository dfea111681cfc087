"""Ticket field rules, tickets, and parsed ticket documents."""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class ValueRange:
    """Inclusive integer range ``low..high``."""

    low: int
    high: int

    def __post_init__(self) -> None:
        if self.low > self.high:
            raise ValueError(f"range low {self.low} must be <= high {self.high}")

    def __contains__(self, value: object) -> bool:
        if isinstance(value, bool) or not isinstance(value, int):
            return False
        return self.low <= value <= self.high

    def __str__(self) -> str:
        return f"{self.low}-{self.high}"


@dataclass(frozen=True, slots=True)
class FieldRule:
    """Named validity rule: a value is valid when it falls in either range."""

    name: str
    first: ValueRange
    second: ValueRange

    def check_value(self, value: int) -> bool:
        return value in self.first or value in self.second

    def __str__(self) -> str:
        return f"{self.name}: {self.first} or {self.second}"


@dataclass(frozen=True, slots=True)
class Ticket:
    """Ordered, unlabeled field values."""

    values: tuple[int, ...]

    def __iter__(self) -> Iterator[int]:
        return iter(self.values)

    def __len__(self) -> int:
        return len(self.values)

    def __getitem__(self, position: int) -> int:
        return self.values[position]


@dataclass(frozen=True, slots=True)
class TicketDocument:
    field_rules: tuple[FieldRule, ...]
    your_ticket: Ticket
    nearby_tickets: tuple[Ticket, ...]


__all__ = [
    "FieldRule",
    "Ticket",
    "TicketDocument",
    "ValueRange",
]
