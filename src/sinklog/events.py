"""
Minimal in-process signal used for completion events such as ``rotated``.
"""

from __future__ import annotations

import threading
from typing import Any, Callable

from .diagnostics import get_logger

_logger = get_logger("sinklog.events")

Listener = Callable[[Any], None]


class Signal:
    """A named event with an ordered list of listeners.

    Listeners receive the sender. One-shot listeners are dropped after their
    first delivery. A failing listener is reported and does not stop the
    remaining ones.
    """

    def __init__(self, name: str):
        self.name = name
        self._lock = threading.Lock()
        self._listeners: list[tuple[Listener, bool]] = []

    def connect(self, listener: Listener) -> Listener:
        with self._lock:
            self._listeners.append((listener, False))
        return listener

    def once(self, listener: Listener) -> Listener:
        with self._lock:
            self._listeners.append((listener, True))
        return listener

    def disconnect(self, listener: Listener) -> None:
        with self._lock:
            self._listeners = [entry for entry in self._listeners if entry[0] != listener]

    @property
    def receivers(self) -> int:
        return len(self._listeners)

    def send(self, sender: Any) -> None:
        with self._lock:
            listeners = list(self._listeners)
            self._listeners = [entry for entry in self._listeners if not entry[1]]

        for listener, _ in listeners:
            try:
                listener(sender)
            except Exception:
                _logger.exception("signal_listener_failed", signal=self.name)
