"""Timestamp sources for id generation and audit fields.

The engine never reads the host clock directly; use-cases receive a
:class:`Clock` so tests and replays can control time.
"""

from __future__ import annotations

import time
from threading import Lock
from typing import Protocol


class Clock(Protocol):
    """A minimal timestamp source (integer, host-defined unit)."""

    def now(self) -> int:  # pragma: no cover
        ...


class SystemClock:
    """Wall-clock time in nanoseconds since the epoch.

    Not guaranteed to be strictly increasing between calls.
    """

    def now(self) -> int:
        return time.time_ns()


class ManualClock:
    """Clock whose value only changes when told to.

    ``step`` is added after every read, which makes consecutive calls distinct
    without having to advance the clock by hand.
    """

    def __init__(self, start: int = 1_700_000_000_000_000_000, step: int = 0):
        self._lock = Lock()
        self._value = int(start)
        self._step = int(step)

    def now(self) -> int:
        with self._lock:
            value = self._value
            self._value += self._step
            return value

    def advance(self, delta: int = 1) -> int:
        with self._lock:
            self._value += int(delta)
            return self._value

    def set(self, value: int) -> None:
        with self._lock:
            self._value = int(value)
