"""Clock adapters.

SystemClock reads the wall clock in UTC; FakeClock is pinned and advanced
explicitly by tests.
"""

from meterline.adapters.clock.fake import FakeClock
from meterline.adapters.clock.system import SystemClock

__all__ = ["FakeClock", "SystemClock"]
