"""
Log sink abstractions and concrete implementations.

Every sink accepts encoded lines through ``write`` and answers each call with
a :class:`concurrent.futures.Future` (the completion signal). Writes are
serialized under the sink's lock, so futures resolve in submission order.
Transport failures are delivered through the future and never raised.
"""

from __future__ import annotations

import os
import sys
import threading
from abc import ABC, abstractmethod
from concurrent.futures import Future
from enum import Enum
from pathlib import Path
from typing import IO, Any, Callable

from .diagnostics import get_logger
from .events import Signal
from .exceptions import ConfigurationError, SinkClosedError, TransportError
from .rotation import RotationController, RotationState

_logger = get_logger("sinklog.sinks")

Opener = Callable[[Path, str], IO[bytes]]


class SinkKind(str, Enum):
    BUFFER = "buffer"
    STDOUT = "stdout"
    STDERR = "stderr"
    FILE = "file"


def resolved(value: Any = None) -> Future:
    future: Future = Future()
    future.set_result(value)
    return future


def failed(error: BaseException) -> Future:
    future: Future = Future()
    future.set_exception(error)
    return future


# =============================================================================
# Sink Abstraction
# =============================================================================


class BaseSink(ABC):
    """Abstract base class for log sinks."""

    kind: SinkKind

    def __init__(self) -> None:
        self._lock = threading.RLock()
        self._close_future: Future | None = None
        self.rotated = Signal("rotated")

    @property
    def closed(self) -> bool:
        return self._close_future is not None

    @property
    def target(self) -> str:
        """Human-readable destination, used in errors and diagnostics."""
        return self.kind.value

    @abstractmethod
    def write(self, data: bytes) -> Future:
        """Write one encoded line; resolves with the number of bytes written."""
        ...

    @abstractmethod
    def close(self) -> Future:
        """Close the sink once. Repeated calls return the first call's future."""
        ...

    def rotate(self) -> Future:
        """Reopen the underlying resource. A no-op for sinks with nothing to reopen."""
        return resolved(None)

    def _report(self, error: TransportError) -> None:
        _logger.warning("sink_transport_error", sink=self.target, code=error.code, error=str(error))


class BufferSink(BaseSink):
    """Keeps every written line in memory, in order."""

    kind = SinkKind.BUFFER

    def __init__(self) -> None:
        super().__init__()
        self.buffer: list[bytes] = []

    def write(self, data: bytes) -> Future:
        with self._lock:
            if self.closed:
                return failed(SinkClosedError(self.target))
            self.buffer.append(data)
            return resolved(len(data))

    def close(self) -> Future:
        with self._lock:
            if self._close_future is None:
                self._close_future = resolved(None)
            return self._close_future

    def clear(self) -> None:
        with self._lock:
            self.buffer.clear()

    def getvalue(self) -> bytes:
        with self._lock:
            return b"".join(self.buffer)

    def lines(self, encoding: str = "utf-8") -> list[str]:
        return [chunk.decode(encoding).rstrip("\r\n") for chunk in self.buffer]


class StreamSink(BaseSink):
    """Standard output or standard error.

    Args:
        kind: ``SinkKind.STDOUT`` or ``SinkKind.STDERR``
        fd: Explicit file descriptor. When omitted, ``sys.stdout`` /
            ``sys.stderr`` is looked up on every write so redirection is honoured.
        closefd: Close ``fd`` on ``close()``. Never applies to the process streams.
    """

    _DEFAULT_FDS = {SinkKind.STDOUT: 1, SinkKind.STDERR: 2}

    def __init__(self, kind: SinkKind = SinkKind.STDOUT, *, fd: int | None = None, closefd: bool = False):
        if kind not in self._DEFAULT_FDS:
            raise ConfigurationError(
                f"StreamSink expects stdout or stderr, got {kind.value}",
                details={"kind": kind.value},
            )
        super().__init__()
        self.kind = kind
        self._fd = fd
        self._closefd = closefd and fd is not None

    @classmethod
    def stdout(cls, fd: int | None = None) -> "StreamSink":
        return cls(SinkKind.STDOUT, fd=fd)

    @classmethod
    def stderr(cls, fd: int | None = None) -> "StreamSink":
        return cls(SinkKind.STDERR, fd=fd)

    @property
    def fd(self) -> int:
        return self._fd if self._fd is not None else self._DEFAULT_FDS[self.kind]

    @property
    def target(self) -> str:
        if self._fd is None:
            return self.kind.value
        return f"{self.kind.value}(fd={self._fd})"

    def _stream(self) -> Any:
        return sys.stdout if self.kind is SinkKind.STDOUT else sys.stderr

    def _write_fd(self, data: bytes) -> int:
        view = memoryview(data)
        while view:
            written = os.write(self.fd, view)
            view = view[written:]
        # Surfaces a descriptor that was closed underneath us.
        os.fstat(self.fd)
        return len(data)

    def _write_stream(self, data: bytes) -> int:
        stream = self._stream()
        buffer = getattr(stream, "buffer", None)
        if buffer is not None:
            stream.flush()
            buffer.write(data)
            buffer.flush()
        else:
            stream.write(data.decode(getattr(stream, "encoding", None) or "utf-8", errors="replace"))
            stream.flush()
        return len(data)

    def write(self, data: bytes) -> Future:
        with self._lock:
            if self.closed:
                return failed(SinkClosedError(self.target))
            try:
                if self._fd is not None:
                    count = self._write_fd(data)
                else:
                    count = self._write_stream(data)
            except (OSError, ValueError) as exc:
                error = TransportError.from_os_error("write", self.target, _as_os_error(exc))
                self._report(error)
                return failed(error)
            return resolved(count)

    def close(self) -> Future:
        with self._lock:
            if self._close_future is not None:
                return self._close_future
            try:
                if self._closefd:
                    os.close(self.fd)
                elif self._fd is None:
                    self._stream().flush()
            except (OSError, ValueError) as exc:
                error = TransportError.from_os_error("close", self.target, _as_os_error(exc))
                self._report(error)
                self._close_future = failed(error)
            else:
                self._close_future = resolved(None)
            return self._close_future


class FileSink(BaseSink):
    """Append-oriented file sink with corked reopen for log rotation.

    Args:
        path: Target file; parent directories are created.
        flags: Open mode for the first open, ``"a"`` or ``"w"`` (binary is implied).
            Reopens during rotation always append.
        opener: ``opener(path, mode)`` returning a binary file object.
    """

    kind = SinkKind.FILE

    def __init__(self, path: str | Path | None, flags: str = "a", opener: Opener | None = None):
        if not path:
            raise ConfigurationError("path is missing", details={"sink": self.kind.value})
        super().__init__()
        self._path = Path(path)
        self._mode = _binary_mode(flags)
        self._reopen_mode = _binary_mode("a" + flags.lstrip("aw"))
        self._opener: Opener = opener or _open
        self._rotation = RotationController()
        self._closing = False
        self._close_deferred = False
        # Fired with the sink once a (re)opened handle is installed.
        self.opened = Signal("opened")

        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            self._file: IO[bytes] | None = self._opener(self._path, self._mode)
        except OSError as exc:
            raise TransportError.from_os_error("open", str(self._path), exc) from exc

    @property
    def path(self) -> Path:
        return self._path

    @property
    def target(self) -> str:
        return str(self._path)

    @property
    def rotation_state(self) -> RotationState:
        return self._rotation.state

    @property
    def rotations(self) -> int:
        return self._rotation.completed_cycles

    def _write_now(self, data: bytes, future: Future) -> None:
        if self._file is None:
            error = TransportError(f"No open handle for {self.target}", details={"target": self.target})
            self._report(error)
            future.set_exception(error)
            return
        try:
            count = self._file.write(data)
            self._file.flush()
        except (OSError, ValueError) as exc:
            error = TransportError.from_os_error("write", self.target, _as_os_error(exc))
            self._report(error)
            future.set_exception(error)
        else:
            future.set_result(len(data) if count is None else count)

    def write(self, data: bytes) -> Future:
        future: Future = Future()
        with self._lock:
            if self._closing:
                future.set_exception(SinkClosedError(self.target))
            elif self._rotation.busy:
                self._rotation.enqueue(data, future)
            else:
                self._write_now(data, future)
        return future

    # -------------------------------------------------------------------------
    # Rotation
    # -------------------------------------------------------------------------

    def rotate(self) -> Future:
        """Close and reopen ``path``; resolves once queued writes are flushed.

        A request made while a cycle is running is deferred and runs right
        after it, with its own ``rotated`` event.
        """
        future: Future = Future()
        with self._lock:
            if self._closing:
                future.set_exception(SinkClosedError(self.target))
                return future
            if self._rotation.busy:
                self._rotation.defer(future)
                return future
            self._rotation.cork(future)

        self._run_rotation()
        return future

    def _run_rotation(self) -> None:
        _logger.debug("rotation_started", sink=self.target)
        handoff = True
        while handoff:
            # Each cycle records its own outcome; only this thread reads it.
            outcome: list[bool] = []

            def uncork(sink: "FileSink") -> None:
                outcome.append(self._uncork())

            with self._lock:
                self._rotation.reopening()
                # Listen before reopening so the completion cannot be missed.
                self.opened.once(uncork)
                stale, self._file = self._file, None

            if stale is not None:
                try:
                    stale.close()
                except (OSError, ValueError) as exc:
                    self._report(TransportError.from_os_error("close", self.target, _as_os_error(exc)))

            try:
                handle = self._opener(self._path, self._reopen_mode)
            except OSError as exc:
                self.opened.disconnect(uncork)
                error = TransportError.from_os_error("open", self.target, exc)
                self._report(error)
                with self._lock:
                    cycle, writes = self._rotation.abort()
                    handoff = self._rotation.busy
                for pending in writes:
                    pending.set_exception(error)
                cycle.set_exception(error)
            else:
                with self._lock:
                    self._file = handle
                self.opened.send(self)
                # Continue only with a deferred request handed over by this
                # cycle; a rotate() issued after it went idle drives its own.
                handoff = bool(outcome) and outcome[0]

        if self._close_deferred:
            self._finish_close()

    def _uncork(self) -> bool:
        """Flush queued writes and close out the cycle.

        Returns whether a deferred rotation was handed over to the caller.
        """
        with self._lock:
            self._rotation.uncork()
            while (item := self._rotation.next_pending()) is not None:
                data, future = item
                self._write_now(data, future)
            cycle = self._rotation.finish()
            handoff = self._rotation.busy

        _logger.debug("rotation_completed", sink=self.target, cycles=self._rotation.completed_cycles)
        self.rotated.send(self)
        cycle.set_result(None)
        return handoff

    # -------------------------------------------------------------------------
    # Close
    # -------------------------------------------------------------------------

    def close(self) -> Future:
        with self._lock:
            if self._close_future is not None:
                return self._close_future
            self._close_future = Future()
            self._closing = True
            if self._rotation.busy:
                self._close_deferred = True
                return self._close_future
        self._finish_close()
        return self._close_future

    def _finish_close(self) -> None:
        with self._lock:
            handle, self._file = self._file, None
            self._close_deferred = False
            future = self._close_future
        if future is None:
            raise RuntimeError("close() was not requested")
        if future.done():
            return
        try:
            if handle is not None:
                handle.close()
        except (OSError, ValueError) as exc:
            error = TransportError.from_os_error("close", self.target, _as_os_error(exc))
            self._report(error)
            future.set_exception(error)
        else:
            future.set_result(None)


def _open(path: Path, mode: str) -> IO[bytes]:
    return open(path, mode)


def _binary_mode(flags: str) -> str:
    mode = flags.replace("b", "").replace("t", "") or "a"
    if mode[0] not in "aw":
        raise ConfigurationError(
            f"Unsupported file flags {flags!r}, expected append or write mode",
            details={"flags": flags},
        )
    return mode[0] + "b" + mode[1:]


def _as_os_error(exc: OSError | ValueError) -> OSError:
    if isinstance(exc, OSError):
        return exc
    return OSError(str(exc))
