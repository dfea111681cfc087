"""Unit tests for ticket value ranges, field rules, and tickets."""

from __future__ import annotations

import pytest

from puzzle_solvers.tickets import FieldRule, Ticket, ValueRange


@pytest.mark.unit
def test_value_range_is_inclusive_at_both_ends() -> None:
    value_range = ValueRange(1, 3)

    assert 1 in value_range
    assert 3 in value_range
    assert 0 not in value_range
    assert 4 not in value_range
    assert str(value_range) == "1-3"


@pytest.mark.unit
def test_value_range_rejects_inverted_bounds() -> None:
    with pytest.raises(ValueError, match="low 5 must be <= high 4"):
        ValueRange(5, 4)


@pytest.mark.unit
def test_single_value_range() -> None:
    assert 7 in ValueRange(7, 7)


@pytest.mark.unit
@pytest.mark.parametrize("value", [True, "2", 2.0, None])
def test_value_range_only_contains_integers(value: object) -> None:
    assert value not in ValueRange(0, 5)


@pytest.mark.unit
def test_field_rule_accepts_either_range() -> None:
    rule = FieldRule("class", ValueRange(1, 3), ValueRange(5, 7))

    assert [rule.check_value(v) for v in range(9)] == [
        False,
        True,
        True,
        True,
        False,
        True,
        True,
        True,
        False,
    ]
    assert str(rule) == "class: 1-3 or 5-7"


@pytest.mark.unit
def test_field_rule_allows_overlapping_ranges() -> None:
    rule = FieldRule("row", ValueRange(0, 10), ValueRange(5, 15))

    assert rule.check_value(7)
    assert rule.check_value(15)
    assert not rule.check_value(16)


@pytest.mark.unit
def test_field_rules_are_hashable_values() -> None:
    first = FieldRule("seat", ValueRange(13, 40), ValueRange(45, 50))
    second = FieldRule("seat", ValueRange(13, 40), ValueRange(45, 50))

    assert first == second
    assert len({first, second}) == 1


@pytest.mark.unit
def test_ticket_behaves_like_a_sequence_of_values() -> None:
    ticket = Ticket((7, 1, 14))

    assert len(ticket) == 3
    assert ticket[2] == 14
    assert list(ticket) == [7, 1, 14]
