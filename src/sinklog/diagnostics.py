"""
Internal diagnostics for sinklog itself.

sinklog reports its own trouble (failed writes, rotation cycles, bad format
strings) through structlog, bound to stdlib loggers under the ``sinklog``
namespace. Nothing is written to the user's sinks, and with no handler
attached only warnings reach stderr through the stdlib last-resort handler.
"""

from __future__ import annotations

import logging
import sys
from datetime import datetime, timezone
from typing import Any, TextIO

import structlog
from structlog.typing import EventDict, WrappedLogger

ROOT_LOGGER_NAME = "sinklog"

_handler: logging.Handler | None = None


def add_timestamp(logger: WrappedLogger, method_name: str, event_dict: EventDict) -> EventDict:
    """Add ISO 8601 timestamp to log event."""
    event_dict["timestamp"] = datetime.now(timezone.utc).isoformat()
    return event_dict


def add_logger_name(logger: WrappedLogger, method_name: str, event_dict: EventDict) -> EventDict:
    """Add logger name to log event."""
    name = getattr(logger, "name", None)
    event_dict["logger"] = name or ROOT_LOGGER_NAME
    return event_dict


_PROCESSORS: list[Any] = [
    structlog.stdlib.filter_by_level,
    add_logger_name,
    structlog.stdlib.add_log_level,
    add_timestamp,
    structlog.processors.format_exc_info,
    structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
]


def get_logger(name: str | None = None) -> structlog.stdlib.BoundLogger:
    """Get a structured logger bound to the stdlib logger ``name``."""
    return structlog.wrap_logger(
        logging.getLogger(name or ROOT_LOGGER_NAME),
        processors=_PROCESSORS,
        wrapper_class=structlog.stdlib.BoundLogger,
    )


def configure_diagnostics(level: str = "WARNING", stream: TextIO | None = None) -> logging.Handler:
    """
    Route sinklog's internal events to ``stream`` (default: stderr).

    Args:
        level: Minimum stdlib level name (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        stream: Output stream for the rendered events

    Calling it again replaces the previously installed handler.
    """
    global _handler

    root = logging.getLogger(ROOT_LOGGER_NAME)
    if _handler is not None:
        root.removeHandler(_handler)

    handler = logging.StreamHandler(stream or sys.stderr)
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            processor=structlog.dev.ConsoleRenderer(colors=False),
        )
    )
    root.addHandler(handler)
    root.setLevel(getattr(logging, level.upper(), logging.WARNING))
    _handler = handler
    return handler
