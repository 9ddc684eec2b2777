"""
Rotation state machine for file sinks.

    IDLE -> CORKING -> REOPENING -> UNCORKING -> IDLE

While the controller is not IDLE, writes are parked in a FIFO and flushed
against the new handle during UNCORKING. A rotate request that arrives
mid-cycle is deferred and starts as soon as the current cycle finishes,
without passing through IDLE, so later writes keep queueing behind it.

The controller holds no lock of its own: the owning sink calls it with its
write lock held.
"""

from __future__ import annotations

from collections import deque
from concurrent.futures import Future
from enum import Enum


class RotationState(str, Enum):
    IDLE = "idle"
    CORKING = "corking"
    REOPENING = "reopening"
    UNCORKING = "uncorking"


_TRANSITIONS: dict[RotationState, frozenset[RotationState]] = {
    RotationState.IDLE: frozenset({RotationState.CORKING}),
    RotationState.CORKING: frozenset({RotationState.REOPENING}),
    # A failed reopen ends the cycle without uncorking.
    RotationState.REOPENING: frozenset({RotationState.UNCORKING, RotationState.IDLE, RotationState.CORKING}),
    RotationState.UNCORKING: frozenset({RotationState.IDLE, RotationState.CORKING}),
}


class RotationController:
    """Tracks one file sink's rotation cycle, pending writes and deferred requests."""

    def __init__(self) -> None:
        self._state = RotationState.IDLE
        self._pending: deque[tuple[bytes, Future]] = deque()
        self._deferred: deque[Future] = deque()
        self._current: Future | None = None
        self.completed_cycles = 0

    @property
    def state(self) -> RotationState:
        return self._state

    @property
    def busy(self) -> bool:
        return self._state is not RotationState.IDLE

    @property
    def pending_writes(self) -> int:
        return len(self._pending)

    @property
    def deferred_rotations(self) -> int:
        return len(self._deferred)

    def _transition(self, target: RotationState) -> None:
        if target not in _TRANSITIONS[self._state]:
            raise RuntimeError(f"Invalid rotation transition {self._state.value} -> {target.value}")
        self._state = target

    def cork(self, future: Future) -> None:
        """Start a cycle; ``future`` resolves when it completes."""
        self._transition(RotationState.CORKING)
        self._current = future

    def defer(self, future: Future) -> None:
        """Queue a rotate request issued while a cycle is running."""
        self._deferred.append(future)

    def enqueue(self, data: bytes, future: Future) -> None:
        self._pending.append((data, future))

    def reopening(self) -> None:
        self._transition(RotationState.REOPENING)

    def uncork(self) -> None:
        self._transition(RotationState.UNCORKING)

    def next_pending(self) -> tuple[bytes, Future] | None:
        if self._state is not RotationState.UNCORKING:
            raise RuntimeError(f"Pending writes are only flushed while uncorking, not {self._state.value}")
        if not self._pending:
            return None
        return self._pending.popleft()

    def finish(self) -> Future:
        """Close out the current cycle and start the next deferred one, if any.

        Returns the future of the cycle that just completed.
        """
        if self._pending:
            raise RuntimeError("Rotation finished with pending writes still queued")
        completed = self._current
        if completed is None:
            raise RuntimeError("No rotation cycle to finish")
        self.completed_cycles += 1
        self._advance(RotationState.UNCORKING)
        return completed

    def abort(self) -> tuple[Future, list[Future]]:
        """Fail the current cycle after an unsuccessful reopen.

        Returns the failed cycle's future and the futures of every pending
        write, which the caller fails outside its lock.
        """
        failed = self._current
        if failed is None:
            raise RuntimeError("No rotation cycle to abort")
        writes = [future for _, future in self._pending]
        self._pending.clear()
        self._advance(RotationState.REOPENING)
        return failed, writes

    def _advance(self, expected: RotationState) -> None:
        if self._state is not expected:
            raise RuntimeError(f"Expected {expected.value}, rotation is {self._state.value}")
        if self._deferred:
            self._transition(RotationState.CORKING)
            self._current = self._deferred.popleft()
        else:
            self._transition(RotationState.IDLE)
            self._current = None
