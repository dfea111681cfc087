"""Wall-clock timing for named solver sections."""

from __future__ import annotations

import logging
import time
from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass

from puzzle_solvers.constants import LOGGER_NAME


@dataclass(slots=True)
class SectionTiming:
    label: str
    elapsed_ms: float | None = None


@contextmanager
def timed_section(label: str, logger: logging.Logger | None = None) -> Iterator[SectionTiming]:
    """Time the enclosed block and log ``section``/``elapsed_ms`` when it exits.

    The timing is recorded even when the block raises; the exception propagates.
    """

    target = logger if logger is not None else logging.getLogger(LOGGER_NAME)
    timing = SectionTiming(label=label)
    started = time.perf_counter()
    try:
        yield timing
    finally:
        timing.elapsed_ms = (time.perf_counter() - started) * 1000.0
        target.info(
            "%s took %.3f ms",
            label,
            timing.elapsed_ms,
            extra={"section": label, "elapsed_ms": round(timing.elapsed_ms, 3)},
        )


__all__ = ["SectionTiming", "timed_section"]
