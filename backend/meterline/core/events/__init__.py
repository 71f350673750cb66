"""Domain events for the event bus."""

from meterline.core.events.base import DomainEvent
from meterline.core.events.enums import EventType, UsageEventType
from meterline.core.events.usage import UsageAlertEvent

__all__ = [
    "DomainEvent",
    "EventType",
    "UsageAlertEvent",
    "UsageEventType",
]
