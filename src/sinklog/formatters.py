"""
Line formatter: timestamp, severity label, message and platform line ending.
"""

from __future__ import annotations

import sys
from datetime import datetime
from typing import Any, Callable

from .diagnostics import get_logger
from .levels import label_of

_logger = get_logger("sinklog.formatters")

# Decided once per process.
EOL = "\r\n" if sys.platform == "win32" else "\n"


class LineFormatter:
    """Renders ``"<Www> <Mmm> <DD> <HH:MM:SS> <YYYY><label><message><EOL>"``.

    Args:
        clock: Callable returning the current local ``datetime``.
        eol: Line terminator, defaults to the platform :data:`EOL`.
    """

    TIMESTAMP_FORMAT = "%a %b %d %H:%M:%S %Y"

    def __init__(self, clock: Callable[[], datetime] | None = None, eol: str | None = None):
        self._clock = clock or datetime.now
        self._eol = EOL if eol is None else eol

    @property
    def eol(self) -> str:
        return self._eol

    def format(self, rank: int, message: str) -> str:
        """Build a full line, or ``""`` when there is nothing to log."""
        if not message:
            return ""
        timestamp = self._clock().strftime(self.TIMESTAMP_FORMAT)
        return "".join([timestamp, label_of(rank), message, self._eol])

    def formatf(self, rank: int, fmt: str, *args: Any) -> str:
        return self.format(rank, interpolate(fmt, args))


def interpolate(fmt: str, args: tuple[Any, ...]) -> str:
    """Apply printf-style substitution; fall back to the raw format on mismatch."""
    try:
        return fmt % args
    except (TypeError, ValueError) as exc:
        _logger.warning("format_interpolation_failed", fmt=fmt, args=repr(args), error=str(exc))
        return fmt


_default_formatter = LineFormatter()


def format_line(rank: int, message: str) -> str:
    return _default_formatter.format(rank, message)


def format_linef(rank: int, fmt: str, *args: Any) -> str:
    return _default_formatter.formatf(rank, fmt, *args)
