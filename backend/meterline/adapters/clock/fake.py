"""Fake clock for testing period rollover without waiting on the wall clock."""

from datetime import datetime, timedelta, timezone
from typing import Optional

from meterline.core.protocols.clock import Clock


class FakeClock(Clock):
    """Clock pinned to a fixed instant until moved.

    Usage:
        clock = FakeClock(datetime(2024, 1, 31, 12, tzinfo=timezone.utc))
        clock.advance(days=1)
        clock.set(entry.period_end)
    """

    def __init__(self, now: Optional[datetime] = None) -> None:
        """Pin the clock to *now* (defaults to 2024-01-15 12:00 UTC)."""
        self._now = now or datetime(2024, 1, 15, 12, 0, tzinfo=timezone.utc)

    def now(self) -> datetime:
        """Return the pinned instant."""
        return self._now

    def set(self, now: datetime) -> None:
        """Move the clock to *now*."""
        self._now = now

    def advance(self, **delta: float) -> datetime:
        """Move the clock forward by ``timedelta(**delta)`` and return the new instant."""
        self._now = self._now + timedelta(**delta)
        return self._now
