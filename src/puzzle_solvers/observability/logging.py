"""Per-run logging through a bounded queue, written as JSON lines or plain text.

Records are handed to a ``QueueHandler`` on the calling thread and written by
a ``QueueListener`` thread, so solver code never blocks on file I/O. Fields
bound with ``correlation_scope`` are stamped onto each record when it is
enqueued, before it leaves the calling context.
"""

from __future__ import annotations

import contextvars
import json
import logging
import logging.handlers
import queue
import sys
import threading
from collections.abc import Iterator, Mapping
from contextlib import contextmanager
from dataclasses import dataclass
from datetime import UTC, datetime
from pathlib import Path
from types import MappingProxyType
from typing import Final, Literal, cast

from puzzle_solvers.constants import LOG_FORMATS, LOGGER_NAME

LogFormat = Literal["json", "text"]

_TEXT_FORMAT: Final[str] = "%(asctime)s %(levelname)-7s %(name)s: %(message)s"

# Attributes every LogRecord carries; anything else arrived through ``extra=``.
_RECORD_ATTRIBUTES: Final[frozenset[str]] = frozenset(vars(logging.makeLogRecord({}))) | {
    "asctime",
    "correlation",
    "message",
}

_CORRELATION: contextvars.ContextVar[Mapping[str, str]] = contextvars.ContextVar(
    "puzzle_solvers_correlation", default=MappingProxyType({})
)

_active_lock = threading.Lock()
_active: LoggingHandle | None = None


@dataclass(frozen=True, slots=True)
class LoggingConfig:
    run_id: str
    base_log_dir: Path | str = Path("logs")
    logger_name: str = LOGGER_NAME
    level: int | str = "INFO"
    log_format: LogFormat = "json"
    log_to_stderr: bool = False
    queue_size: int = 4096

    @property
    def log_path(self) -> Path:
        filename = "puzzles.jsonl" if self.log_format == "json" else "puzzles.log"
        return Path(self.base_log_dir) / self.run_id / filename


class _CorrelatingQueueHandler(logging.handlers.QueueHandler):
    """Stamps the current correlation fields and counts records lost to a full queue."""

    def __init__(self, log_queue: queue.Queue[logging.LogRecord]) -> None:
        super().__init__(log_queue)
        self.dropped = 0

    def prepare(self, record: logging.LogRecord) -> logging.LogRecord:
        fields = get_correlation_context()
        if fields:
            record.correlation = fields
        return cast("logging.LogRecord", super().prepare(record))

    def enqueue(self, record: logging.LogRecord) -> None:
        try:
            self.queue.put_nowait(record)
        except queue.Full:
            self.dropped += 1


class _JsonLineFormatter(logging.Formatter):
    def __init__(self, run_id: str) -> None:
        super().__init__()
        self._run_id = run_id

    def format(self, record: logging.LogRecord) -> str:
        created = datetime.fromtimestamp(record.created, tz=UTC)
        event: dict[str, object] = {
            "timestamp": created.isoformat(timespec="milliseconds").replace("+00:00", "Z"),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "run_id": self._run_id,
        }
        event.update(getattr(record, "correlation", {}))
        extras = {
            key: value
            for key, value in vars(record).items()
            if key not in _RECORD_ATTRIBUTES and not key.startswith("_")
        }
        if extras:
            event["fields"] = extras
        if record.exc_info:
            event["exception"] = self.formatException(record.exc_info)
        return json.dumps(
            event, sort_keys=True, separators=(",", ":"), ensure_ascii=False, default=str
        )


class LoggingHandle:
    """An installed logging setup; ``shutdown`` drains the queue and closes the sinks."""

    def __init__(
        self,
        config: LoggingConfig,
        logger: logging.Logger,
        queue_handler: _CorrelatingQueueHandler,
        listener: logging.handlers.QueueListener,
    ) -> None:
        self.logger = logger
        self.run_id = config.run_id
        self.log_path = config.log_path
        self._queue_handler = queue_handler
        self._listener = listener
        self._lock = threading.Lock()
        self._closed = False

    @property
    def dropped_records(self) -> int:
        return self._queue_handler.dropped

    @property
    def is_shutdown(self) -> bool:
        return self._closed

    def shutdown(self) -> None:
        with self._lock:
            if self._closed:
                return
            self._listener.stop()
            self.logger.removeHandler(self._queue_handler)
            for sink in self._listener.handlers:
                sink.close()
            self._closed = True


def configure_logging(config: LoggingConfig) -> LoggingHandle:
    """Install queue-backed logging for one run, replacing any active setup."""
    if config.log_format not in LOG_FORMATS:
        raise ValueError(f"unsupported log format {config.log_format!r}")
    if config.queue_size <= 0:
        raise ValueError("queue_size must be > 0")
    level = _parse_level(config.level)
    shutdown_logging()

    config.log_path.parent.mkdir(parents=True, exist_ok=True)
    formatter = (
        _JsonLineFormatter(config.run_id)
        if config.log_format == "json"
        else logging.Formatter(_TEXT_FORMAT)
    )
    sinks: list[logging.Handler] = [logging.FileHandler(config.log_path, encoding="utf-8")]
    if config.log_to_stderr:
        sinks.append(logging.StreamHandler(sys.stderr))
    for sink in sinks:
        sink.setFormatter(formatter)

    logger = logging.getLogger(config.logger_name)
    logger.setLevel(level)
    logger.propagate = False
    queue_handler = _CorrelatingQueueHandler(queue.Queue(maxsize=config.queue_size))
    listener = logging.handlers.QueueListener(queue_handler.queue, *sinks)
    listener.start()
    logger.addHandler(queue_handler)

    handle = LoggingHandle(config, logger, queue_handler, listener)
    global _active
    with _active_lock:
        _active = handle
    return handle


def setup_logging(
    observability: Mapping[str, object],
    *,
    run_id: str,
    logger_name: str = LOGGER_NAME,
) -> LoggingHandle:
    """Configure logging from a validated ``[observability]`` config section."""
    return configure_logging(
        LoggingConfig(
            run_id=run_id,
            base_log_dir=str(observability.get("log_dir", "logs")),
            logger_name=logger_name,
            level=str(observability.get("log_level", "INFO")),
            log_format=cast("LogFormat", observability.get("log_format", "json")),
            log_to_stderr=bool(observability.get("log_to_stderr", False)),
        )
    )


def shutdown_logging(handle: LoggingHandle | None = None) -> None:
    """Shut down ``handle``, or the most recently configured one."""
    global _active
    with _active_lock:
        target = handle if handle is not None else _active
        if target is _active:
            _active = None
    if target is not None:
        target.shutdown()


def get_correlation_context() -> dict[str, str]:
    return dict(_CORRELATION.get())


@contextmanager
def correlation_scope(**fields: str | None) -> Iterator[None]:
    """Bind correlation fields for records logged inside the block.

    A ``None`` value unbinds a field inherited from an enclosing scope.
    """
    merged = get_correlation_context()
    for key, value in fields.items():
        if value is None:
            merged.pop(key, None)
        elif not value.strip():
            raise ValueError(f"correlation field {key!r} must not be empty")
        else:
            merged[key] = value.strip()
    token = _CORRELATION.set(merged)
    try:
        yield
    finally:
        _CORRELATION.reset(token)


def _parse_level(level: int | str) -> int:
    if isinstance(level, int):
        return level
    parsed = logging.getLevelName(level.strip().upper())
    if not isinstance(parsed, int):
        raise ValueError(f"unsupported logging level {level!r}")
    return parsed


__all__ = [
    "LogFormat",
    "LoggingConfig",
    "LoggingHandle",
    "configure_logging",
    "correlation_scope",
    "get_correlation_context",
    "setup_logging",
    "shutdown_logging",
]
