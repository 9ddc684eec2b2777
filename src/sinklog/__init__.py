"""
sinklog: leveled logging to interchangeable sinks.

Sinks:
- buffer: in-memory, for tests
- stdout / stderr: the process streams, or an explicit descriptor
- file: append-mode file with corked reopen for log rotation

A stdout ``DefaultLogger`` is created at import. The module-level level
functions (``critical``, ``errorf``, ...) dispatch to whichever logger was
last registered with :func:`init`, looked up at call time.
"""

from __future__ import annotations

import threading
from concurrent.futures import Future
from typing import Any

from .config import LoggerConfig, LoggingSettings
from .core import Logger, SelectorLogger
from .diagnostics import configure_diagnostics
from .exceptions import ConfigurationError, SinkClosedError, SinklogError, TransportError
from .formatters import EOL, LineFormatter
from .levels import LEVELS, REVERSE_LEVELS, SeverityLevel, label_of, rank_of
from .rotation import RotationState
from .sinks import BaseSink, BufferSink, FileSink, SinkKind, StreamSink

NOTHING = SeverityLevel.NOTHING
CRITICAL = SeverityLevel.CRITICAL
ERROR = SeverityLevel.ERROR
WARNING = SeverityLevel.WARNING
INFO = SeverityLevel.INFO
DEBUG = SeverityLevel.DEBUG
EVERYTHING = SeverityLevel.EVERYTHING


class _Registry:
    """Holds the logger that module-level functions write to."""

    def __init__(self, default: Logger):
        self.default = default
        self._current = default
        self._lock = threading.Lock()

    @property
    def current(self) -> Logger:
        return self._current

    def bind(self, logger: Logger) -> Logger:
        with self._lock:
            previous, self._current = self._current, logger
        return previous


# Created once, before any module-level logging call.
DefaultLogger = Logger(StreamSink.stdout())

_registry = _Registry(DefaultLogger)


def init(logger: Logger) -> Logger:
    """Register ``logger`` for the module-level functions; returns the previous one."""
    return _registry.bind(logger)


def instance() -> Logger:
    return _registry.current


def from_settings(settings: LoggingSettings | None = None) -> SelectorLogger:
    """Build a :class:`SelectorLogger` from environment settings."""
    settings = settings or LoggingSettings()
    return SelectorLogger(settings.to_config(), mirror_critical=settings.mirror_critical)


def log(rank: int, message: str) -> Future | None:
    return _registry.current.log(rank, message)


def logf(rank: int, fmt: str, *args: Any) -> Future | None:
    return _registry.current.logf(rank, fmt, *args)


def rotate() -> Future:
    return _registry.current.rotate()


def nothing(message: str) -> None:
    return _registry.current.nothing(message)


def nothingf(fmt: str, *args: Any) -> None:
    return _registry.current.nothingf(fmt, *args)


def critical(message: str) -> Future | None:
    return _registry.current.critical(message)


def criticalf(fmt: str, *args: Any) -> Future | None:
    return _registry.current.criticalf(fmt, *args)


def error(message: str) -> Future | None:
    return _registry.current.error(message)


def errorf(fmt: str, *args: Any) -> Future | None:
    return _registry.current.errorf(fmt, *args)


def warning(message: str) -> Future | None:
    return _registry.current.warning(message)


def warningf(fmt: str, *args: Any) -> Future | None:
    return _registry.current.warningf(fmt, *args)


def info(message: str) -> Future | None:
    return _registry.current.info(message)


def infof(fmt: str, *args: Any) -> Future | None:
    return _registry.current.infof(fmt, *args)


def debug(message: str) -> Future | None:
    return _registry.current.debug(message)


def debugf(fmt: str, *args: Any) -> Future | None:
    return _registry.current.debugf(fmt, *args)


def everything(message: str) -> Future | None:
    return _registry.current.everything(message)


def everythingf(fmt: str, *args: Any) -> Future | None:
    return _registry.current.everythingf(fmt, *args)


__all__ = [
    "BaseSink",
    "BufferSink",
    "ConfigurationError",
    "CRITICAL",
    "DEBUG",
    "DefaultLogger",
    "EOL",
    "ERROR",
    "EVERYTHING",
    "FileSink",
    "INFO",
    "LEVELS",
    "LineFormatter",
    "Logger",
    "LoggerConfig",
    "LoggingSettings",
    "NOTHING",
    "REVERSE_LEVELS",
    "RotationState",
    "SelectorLogger",
    "SeverityLevel",
    "SinkClosedError",
    "SinkKind",
    "SinklogError",
    "StreamSink",
    "TransportError",
    "WARNING",
    "configure_diagnostics",
    "critical",
    "criticalf",
    "debug",
    "debugf",
    "error",
    "errorf",
    "everything",
    "everythingf",
    "from_settings",
    "info",
    "infof",
    "init",
    "instance",
    "label_of",
    "log",
    "logf",
    "nothing",
    "nothingf",
    "rank_of",
    "rotate",
    "warning",
    "warningf",
]
