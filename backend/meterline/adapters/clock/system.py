"""Wall-clock implementation of the Clock protocol."""

from datetime import datetime, timezone

from meterline.core.protocols.clock import Clock


class SystemClock(Clock):
    """Returns the current UTC time."""

    def now(self) -> datetime:
        """Current time, timezone-aware (UTC)."""
        return datetime.now(timezone.utc)
