"""
Exception hierarchy for sinklog.

Two families:
- configuration errors, raised synchronously while a logger or sink is built
- transport errors, never raised to the emitting caller; they are delivered
  through the completion future of the write, close or rotate that failed
"""

from __future__ import annotations

from typing import Any, Dict, Optional


class SinklogError(Exception):
    """Root of all sinklog exceptions."""

    def __init__(
        self,
        message: str,
        *,
        code: str,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        super().__init__(message)
        self.code = code
        self.details = details or {}


class ConfigurationError(SinklogError):
    """Invalid construction-time options (missing path, unknown level)."""

    def __init__(self, message: str, *, details: Optional[Dict[str, Any]] = None) -> None:
        super().__init__(message, code="CONFIGURATION_ERROR", details=details)


class TransportError(SinklogError):
    """The underlying stream or file failed to open, write or close."""

    def __init__(
        self,
        message: str,
        *,
        code: str = "TRANSPORT_ERROR",
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        super().__init__(message, code=code, details=details)

    @classmethod
    def from_os_error(cls, operation: str, target: str, exc: OSError) -> "TransportError":
        error = cls(
            f"{operation} failed for {target}: {exc}",
            details={"operation": operation, "target": target, "errno": exc.errno},
        )
        error.__cause__ = exc
        return error


class SinkClosedError(TransportError):
    """A write was issued against a sink that has already been closed."""

    def __init__(self, target: str) -> None:
        super().__init__(
            f"Sink {target} is closed",
            code="SINK_CLOSED",
            details={"target": target},
        )
