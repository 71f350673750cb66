"""Metering period calculation.

Periods are half-open windows ``[start, end)``. Calendar windows end one
millisecond before the next natural boundary (e.g. 23:59:59.999), and are
computed in the timezone of ``now``.
"""

from datetime import datetime, timedelta

from dateutil.relativedelta import relativedelta

from meterline.domains.usage.types import ResetPolicy, TimeUnit
from meterline.schemas.resource_usage import MeteringPeriod

_ONE_MS = timedelta(milliseconds=1)

_UNIT_STEP = {
    TimeUnit.DAILY: relativedelta(days=1),
    TimeUnit.WEEKLY: relativedelta(weeks=1),
    TimeUnit.MONTHLY: relativedelta(months=1),
    TimeUnit.YEARLY: relativedelta(years=1),
}


def _calendar_start(now: datetime, unit: TimeUnit) -> datetime:
    midnight = now.replace(hour=0, minute=0, second=0, microsecond=0)
    if unit == TimeUnit.DAILY:
        return midnight
    if unit == TimeUnit.WEEKLY:
        # weeks run Sunday through Saturday; weekday() is 0 on Monday
        return midnight - timedelta(days=(now.weekday() + 1) % 7)
    if unit == TimeUnit.MONTHLY:
        return midnight.replace(day=1)
    return midnight.replace(month=1, day=1)


def calculate_period(now: datetime, unit: TimeUnit, reset_policy: ResetPolicy) -> MeteringPeriod:
    """Compute the metering window for *unit* that applies at *now*.

    Rolling windows start at *now* and last exactly one unit, using calendar
    arithmetic (Jan 31 + 1 month is the last day of February). Calendar
    windows cover the day, Sunday-based week, month or year containing *now*.

    Args:
        now: The moment the window is computed for
        unit: Length of the window
        reset_policy: Rolling or calendar alignment

    Returns:
        The window as a MeteringPeriod
    """
    unit = TimeUnit(unit)
    step = _UNIT_STEP[unit]

    if ResetPolicy(reset_policy) == ResetPolicy.ROLLING:
        return MeteringPeriod(start=now, end=now + step)

    start = _calendar_start(now, unit)
    return MeteringPeriod(start=start, end=start + step - _ONE_MS)
