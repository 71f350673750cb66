"""Alert dispatcher adapters.

EventBusAlertDispatcher turns alerts into domain events on the event bus;
FakeAlertDispatcher records them for assertions.
"""

from meterline.adapters.alerts.event_bus import EventBusAlertDispatcher
from meterline.adapters.alerts.fake import FakeAlertDispatcher

__all__ = ["EventBusAlertDispatcher", "FakeAlertDispatcher"]
