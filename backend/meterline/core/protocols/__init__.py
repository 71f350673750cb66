"""Core protocols for dependency injection.

Domain-specific protocols (repositories, the company directory, the usage
service) live in their respective domains/ directories. This module keeps
cross-cutting infrastructure protocols only.
"""

from meterline.core.protocols.alerts import AlertDispatcher
from meterline.core.protocols.clock import Clock
from meterline.core.protocols.event_bus import DomainEvent, EventBus, EventHandler, EventSubscriber
from meterline.core.protocols.reporting import UsageReportGenerator

__all__ = [
    "AlertDispatcher",
    "Clock",
    "DomainEvent",
    "EventBus",
    "EventHandler",
    "EventSubscriber",
    "UsageReportGenerator",
]
