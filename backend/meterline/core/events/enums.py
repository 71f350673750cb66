"""Event type enums, the vocabulary of the event bus.

Every domain event must use one of these enums for its event_type field.
The union `EventType` constrains DomainEvent.event_type to known values.
"""

from enum import Enum


class UsageEventType(str, Enum):
    """Usage metering alert event types."""

    APPROACHING_LIMIT = "usage.approaching_limit"
    LIMIT_EXCEEDED = "usage.limit_exceeded"


# Union of all known event types.
# DomainEvent.event_type is typed to this, ensuring only known values are used.
EventType = UsageEventType
