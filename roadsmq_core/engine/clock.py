"""RoadSMQ Clock - Authoritative Time Source.

Every scheduling comparison within one operation is made against a single
Timestamp read from the storage backend. For Redis that is the server's
TIME command, so all clients share one clock regardless of local drift.

Copyright (c) 2024-2026 BlackRoad OS, Inc. All rights reserved.
"""

from __future__ import annotations

import threading
import time
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Sequence


@dataclass(frozen=True)
class Timestamp:
    """A point in time as (epoch seconds, microsecond fraction).

    Attributes:
        seconds: Whole seconds since the epoch
        microseconds: Sub-second fraction, 0 to 999999
    """

    seconds: int
    microseconds: int = 0

    def __post_init__(self):
        if not 0 <= self.microseconds < 1_000_000:
            raise ValueError(f"Microseconds out of range: {self.microseconds}")

    @property
    def ms(self) -> int:
        """Epoch milliseconds."""
        return self.seconds * 1000 + self.microseconds // 1000

    @property
    def micro_digits(self) -> str:
        """Seconds followed by the six-digit zero-padded fraction."""
        return f"{self.seconds}{self.microseconds:06d}"

    @classmethod
    def from_redis(cls, value: Sequence[Any]) -> "Timestamp":
        """Create from a TIME reply (seconds, microseconds)."""
        return cls(seconds=int(value[0]), microseconds=int(value[1]))

    @classmethod
    def from_float(cls, value: float) -> "Timestamp":
        """Create from a float of epoch seconds."""
        micros = int(round(value * 1_000_000))
        return cls(seconds=micros // 1_000_000, microseconds=micros % 1_000_000)

    def add_seconds(self, seconds: float) -> "Timestamp":
        """Return a timestamp shifted by a number of seconds."""
        micros = self.seconds * 1_000_000 + self.microseconds + int(round(seconds * 1_000_000))
        return Timestamp(seconds=micros // 1_000_000, microseconds=micros % 1_000_000)


class Clock(ABC):
    """Abstract time source."""

    @abstractmethod
    def now(self) -> Timestamp:
        """Get the current time."""
        pass


class SystemClock(Clock):
    """Local wall clock."""

    def now(self) -> Timestamp:
        micros = time.time_ns() // 1000
        return Timestamp(seconds=micros // 1_000_000, microseconds=micros % 1_000_000)


class ManualClock(Clock):
    """Clock that only moves when told to.

    Used to drive visibility timeouts deterministically.
    """

    def __init__(self, start: float = 1_700_000_000.0):
        self._current = Timestamp.from_float(start)
        self._lock = threading.Lock()

    def now(self) -> Timestamp:
        with self._lock:
            return self._current

    def set(self, value: Timestamp) -> None:
        """Jump to a given time."""
        with self._lock:
            self._current = value

    def advance(self, seconds: float) -> Timestamp:
        """Move the clock forward.

        Returns:
            The new current time
        """
        with self._lock:
            self._current = self._current.add_seconds(seconds)
            return self._current


__all__ = ["Timestamp", "Clock", "SystemClock", "ManualClock"]
