"""Usage domain types and pure business logic.

Enums, constants, and pure functions used by the ledger, the limit registry,
the summary aggregator, and the API schemas. No IO; everything here is
deterministic.
"""

from enum import Enum
from typing import Optional


class ResourceType(str, Enum):
    """Metered resources a company consumes."""

    STORAGE = "storage"
    API_CALLS = "api_calls"
    USER_SEATS = "user_seats"
    DOCUMENTS = "documents"
    EXPORTS = "exports"
    IMPORTS = "imports"
    EMAIL_NOTIFICATIONS = "email_notifications"
    SMS_NOTIFICATIONS = "sms_notifications"
    AUTOMATION_EXECUTIONS = "automation_executions"
    CUSTOM_REPORTS = "custom_reports"
    AI_RECOMMENDATIONS = "ai_recommendations"
    WEBHOOKS = "webhooks"
    CALENDAR_INTEGRATIONS = "calendar_integrations"


class TimeUnit(str, Enum):
    """Granularity of a metering period."""

    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"
    YEARLY = "yearly"


class ResetPolicy(str, Enum):
    """How a period is positioned in time.

    ROLLING starts the window at the triggering moment; CALENDAR aligns it to
    the natural day/week/month/year boundary containing that moment.
    """

    ROLLING = "rolling"
    CALENDAR = "calendar"


class MeteringStatus(str, Enum):
    """Enforcement status of a ledger entry.

    Only ACTIVE entries are held to their limit. PAUSED entries keep counting
    without rejecting; STOPPED entries freeze the counter entirely.
    """

    ACTIVE = "active"
    PAUSED = "paused"
    STOPPED = "stopped"


class ResourceHealth(str, Enum):
    """Per-resource status reported in a usage summary."""

    NORMAL = "normal"
    WARNING = "warning"
    EXCEEDED = "exceeded"


class AlertKind(str, Enum):
    """Kinds of usage alerts handed to the alert dispatcher."""

    APPROACHING = "approaching"
    OVERAGE = "overage"


# Sentinel reported in place of a limit (and remaining usage) when a
# resource is unlimited.
UNLIMITED = -1

DEFAULT_WARNING_PERCENT = 80.0


def is_unlimited(max_value: float) -> bool:
    """A limit of zero or less means the resource is not capped."""
    return max_value <= 0


def percent_used(current_value: float, max_value: float) -> float:
    """Percentage of *max_value* consumed; 0 for unlimited resources."""
    if is_unlimited(max_value):
        return 0.0
    return current_value / max_value * 100


def classify_usage(
    percent: float, warning_percent: float = DEFAULT_WARNING_PERCENT
) -> ResourceHealth:
    """Map a usage percentage onto normal/warning/exceeded."""
    if percent >= 100:
        return ResourceHealth.EXCEEDED
    if percent >= warning_percent:
        return ResourceHealth.WARNING
    return ResourceHealth.NORMAL


def should_alert_approaching(
    new_value: float, max_value: float, alert_threshold: Optional[float]
) -> bool:
    """Whether an admitted call leaves usage at or above the alert threshold.

    Fires on every admitted call above the threshold, not only the one that
    crosses it.
    """
    if is_unlimited(max_value) or not alert_threshold:
        return False
    return percent_used(new_value, max_value) >= alert_threshold
