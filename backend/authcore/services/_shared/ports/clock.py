from __future__ import annotations

import threading
from datetime import UTC, datetime, timedelta
from typing import Protocol


class Clock(Protocol):
    """Port for reading the current instant. All expiry math goes through it."""

    def now(self) -> datetime:
        """Return a timezone-aware UTC datetime."""
        ...


class SystemClock(Clock):
    """Wall-clock implementation used in production."""

    def now(self) -> datetime:
        return datetime.now(UTC)


class ManualClock(Clock):
    """
    Controllable clock for tests.

    :param start: Initial instant (naive values are labelled as UTC).
    """

    def __init__(self, start: datetime | None = None) -> None:
        start = start or datetime(2024, 1, 1, tzinfo=UTC)
        if start.tzinfo is None:
            start = start.replace(tzinfo=UTC)
        self._now = start
        self._lock = threading.Lock()

    def now(self) -> datetime:
        with self._lock:
            return self._now

    def advance(self, delta: timedelta) -> datetime:
        """Move the clock forward by ``delta`` and return the new instant."""
        with self._lock:
            self._now = self._now + delta
            return self._now

    def set(self, instant: datetime) -> None:
        with self._lock:
            self._now = instant if instant.tzinfo else instant.replace(tzinfo=UTC)
