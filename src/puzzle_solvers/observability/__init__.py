"""Public observability primitives: run logging and section timing."""

from puzzle_solvers.observability.logging import (
    LoggingConfig,
    LoggingHandle,
    configure_logging,
    correlation_scope,
    get_correlation_context,
    setup_logging,
    shutdown_logging,
)
from puzzle_solvers.observability.timing import SectionTiming, timed_section

__all__ = [
    "LoggingConfig",
    "LoggingHandle",
    "SectionTiming",
    "configure_logging",
    "correlation_scope",
    "get_correlation_context",
    "setup_logging",
    "shutdown_logging",
    "timed_section",
]
