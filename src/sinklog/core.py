"""
Leveled loggers bound to a sink.
"""

from __future__ import annotations

from concurrent.futures import Future
from typing import Any

from .config import LoggerConfig
from .diagnostics import get_logger
from .events import Signal
from .formatters import LineFormatter
from .levels import SeverityLevel, rank_of
from .sinks import BaseSink, FileSink, SinkKind, StreamSink

_logger = get_logger("sinklog.core")


class Logger:
    """Filters messages by severity and writes formatted lines to a sink.

    A line is written when ``0 < rank <= threshold``. Critical lines are also
    copied, byte for byte, to ``error_sink`` when one is set.

    Args:
        sink: Primary destination, owned by the logger.
        threshold: Least severe rank still written (name or number).
        error_sink: Secondary destination for critical lines; not owned.
        formatter: Line renderer, mainly for pinning the clock in tests.
    """

    def __init__(
        self,
        sink: BaseSink,
        *,
        threshold: SeverityLevel | str | int = SeverityLevel.INFO,
        error_sink: BaseSink | None = None,
        formatter: LineFormatter | None = None,
    ):
        self._sink = sink
        self._threshold = rank_of(threshold)
        self._error_sink = error_sink
        self._formatter = formatter or LineFormatter()
        self.rotated = Signal("rotated")
        self._sink.rotated.connect(self._on_sink_rotated)

    @classmethod
    def from_config(cls, config: LoggerConfig, sink: BaseSink | None = None) -> "Logger":
        """Build a logger from options. Without ``sink``, a stdout sink is used."""
        return cls(
            sink or StreamSink.stdout(fd=config.fd),
            threshold=config.threshold,
            error_sink=config.error_sink,
        )

    def _on_sink_rotated(self, sink: BaseSink) -> None:
        self.rotated.send(self)

    @property
    def sink(self) -> BaseSink:
        return self._sink

    @property
    def error_sink(self) -> BaseSink | None:
        return self._error_sink

    @property
    def kind(self) -> SinkKind:
        return self._sink.kind

    # -------------------------------------------------------------------------
    # Threshold
    # -------------------------------------------------------------------------

    def set_threshold(self, level: SeverityLevel | str | int) -> None:
        self._threshold = rank_of(level)

    def get_threshold(self) -> SeverityLevel:
        return self._threshold

    threshold = property(get_threshold, set_threshold)

    def is_enabled_for(self, rank: int) -> bool:
        return SeverityLevel.NOTHING < rank <= self._threshold

    # -------------------------------------------------------------------------
    # Emit
    # -------------------------------------------------------------------------

    def log(self, rank: int, message: str) -> Future | None:
        """Write ``message`` at ``rank``; returns the primary write's future.

        Returns ``None`` when the message is filtered out or empty.
        """
        if not self.is_enabled_for(rank):
            return None
        line = self._formatter.format(rank, message)
        return self._write_line(rank, line)

    def logf(self, rank: int, fmt: str, *args: Any) -> Future | None:
        if not self.is_enabled_for(rank):
            return None
        line = self._formatter.formatf(rank, fmt, *args)
        return self._write_line(rank, line)

    def _write_line(self, rank: int, line: str) -> Future | None:
        if not line:
            return None
        data = line.encode("utf-8", errors="backslashreplace")
        future = self._sink.write(data)
        future.add_done_callback(self._check_write)
        if rank == SeverityLevel.CRITICAL and self._error_sink is not None:
            self._error_sink.write(data).add_done_callback(self._check_write)
        return future

    @staticmethod
    def _check_write(future: Future) -> None:
        error = future.exception()
        if error is not None:
            _logger.debug("log_write_failed", error=str(error))

    def nothing(self, message: str) -> None:
        """NOTHING is a threshold sentinel; nothing is ever emitted at it."""
        return None

    def nothingf(self, fmt: str, *args: Any) -> None:
        return None

    def critical(self, message: str) -> Future | None:
        return self.log(SeverityLevel.CRITICAL, message)

    def criticalf(self, fmt: str, *args: Any) -> Future | None:
        return self.logf(SeverityLevel.CRITICAL, fmt, *args)

    def error(self, message: str) -> Future | None:
        return self.log(SeverityLevel.ERROR, message)

    def errorf(self, fmt: str, *args: Any) -> Future | None:
        return self.logf(SeverityLevel.ERROR, fmt, *args)

    def warning(self, message: str) -> Future | None:
        return self.log(SeverityLevel.WARNING, message)

    def warningf(self, fmt: str, *args: Any) -> Future | None:
        return self.logf(SeverityLevel.WARNING, fmt, *args)

    def info(self, message: str) -> Future | None:
        return self.log(SeverityLevel.INFO, message)

    def infof(self, fmt: str, *args: Any) -> Future | None:
        return self.logf(SeverityLevel.INFO, fmt, *args)

    def debug(self, message: str) -> Future | None:
        return self.log(SeverityLevel.DEBUG, message)

    def debugf(self, fmt: str, *args: Any) -> Future | None:
        return self.logf(SeverityLevel.DEBUG, fmt, *args)

    def everything(self, message: str) -> Future | None:
        return self.log(SeverityLevel.EVERYTHING, message)

    def everythingf(self, fmt: str, *args: Any) -> Future | None:
        return self.logf(SeverityLevel.EVERYTHING, fmt, *args)

    # -------------------------------------------------------------------------
    # Sink delegation
    # -------------------------------------------------------------------------

    def write(self, data: bytes) -> Future:
        """Write raw bytes to the bound sink, bypassing level and formatting."""
        return self._sink.write(data)

    def rotate(self) -> Future:
        return self._sink.rotate()

    def close(self) -> Future:
        return self._sink.close()

    def __repr__(self) -> str:
        return f"{type(self).__name__}(sink={self._sink.target!r}, threshold={self._threshold.name})"


class SelectorLogger(Logger):
    """Picks a file sink when ``path`` is configured, stdout otherwise.

    The choice is made once, at construction. Critical lines are mirrored to
    stderr unless another error sink is configured or ``mirror_critical`` is
    false. Rotation requests and the ``rotated`` event pass through to the
    chosen sink.
    """

    def __init__(
        self,
        config: LoggerConfig | None = None,
        *,
        mirror_critical: bool = True,
        formatter: LineFormatter | None = None,
        **options: Any,
    ):
        if config is None:
            config = LoggerConfig(**options)
        elif options:
            # Validate aliases first, then apply only what the caller set.
            overrides = LoggerConfig(**options)
            updates = {name: getattr(overrides, name) for name in overrides.model_fields_set}
            config = config.model_copy(update=updates)

        if config.path:
            sink: BaseSink = FileSink(config.path, flags=config.flags or "a")
        else:
            sink = StreamSink.stdout(fd=config.fd)

        error_sink = config.error_sink
        if error_sink is None and mirror_critical:
            error_sink = StreamSink.stderr()

        super().__init__(sink, threshold=config.threshold, error_sink=error_sink, formatter=formatter)
        self.config = config
        _logger.debug("selector_logger_bound", sink=sink.target, threshold=config.threshold.name)

    @classmethod
    def from_config(cls, config: LoggerConfig, sink: BaseSink | None = None) -> "SelectorLogger":
        """Build from options; the sink is always selected from ``config``."""
        if sink is not None:
            raise TypeError("SelectorLogger selects its own sink")
        return cls(config)
