"""Unit tests for timed solver sections."""

from __future__ import annotations

import logging
from uuid import uuid4

import pytest

from puzzle_solvers.observability import timed_section


def _logger() -> logging.Logger:
    return logging.getLogger(f"puzzle_solvers.tests.timing.{uuid4().hex}")


@pytest.mark.unit
def test_timed_section_records_elapsed_and_logs_fields(caplog: pytest.LogCaptureFixture) -> None:
    logger = _logger()

    with caplog.at_level(logging.INFO, logger=logger.name):
        with timed_section("parse", logger) as timing:
            assert timing.elapsed_ms is None

    assert timing.label == "parse"
    assert timing.elapsed_ms is not None
    assert timing.elapsed_ms >= 0.0
    records = [record for record in caplog.records if record.name == logger.name]
    assert len(records) == 1
    assert records[0].section == "parse"
    assert records[0].elapsed_ms >= 0.0
    assert records[0].getMessage().startswith("parse took ")


@pytest.mark.unit
def test_timed_section_records_timing_when_block_raises(
    caplog: pytest.LogCaptureFixture,
) -> None:
    logger = _logger()

    with caplog.at_level(logging.INFO, logger=logger.name):
        with pytest.raises(RuntimeError, match="boom"):
            with timed_section("match", logger) as timing:
                raise RuntimeError("boom")

    assert timing.elapsed_ms is not None
    assert [record.section for record in caplog.records if record.name == logger.name] == [
        "match"
    ]


@pytest.mark.unit
def test_timed_section_defaults_to_package_logger(caplog: pytest.LogCaptureFixture) -> None:
    with caplog.at_level(logging.INFO, logger="puzzle_solvers"):
        with timed_section("sort"):
            pass

    assert any(
        record.name == "puzzle_solvers" and getattr(record, "section", None) == "sort"
        for record in caplog.records
    )
