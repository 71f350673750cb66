"""Clock protocol.

Every component that compares against "now" (period rollover, period
initialization, audit timestamps) receives a Clock instead of calling
``datetime.now()`` itself, so time can be pinned in tests.
"""

from datetime import datetime
from typing import Protocol, runtime_checkable


@runtime_checkable
class Clock(Protocol):
    """Source of the current time."""

    def now(self) -> datetime:
        """Return the current time as a timezone-aware datetime."""
        ...
