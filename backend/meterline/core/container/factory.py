"""Container Factory.

All construction logic lives here. The factory reads settings and builds
the container with environment-appropriate implementations.
"""

from meterline.adapters.alerts import EventBusAlertDispatcher
from meterline.adapters.clock import SystemClock
from meterline.adapters.event_bus.in_memory import InMemoryEventBus
from meterline.adapters.reporting import HttpUsageReportGenerator, NullUsageReportGenerator
from meterline.core.config import Settings
from meterline.core.container.container import Container
from meterline.core.logging import logger
from meterline.core.protocols import EventBus, UsageReportGenerator
from meterline.domains.companies.directory import CompanyDirectory
from meterline.domains.companies.repository import CompanyRepository
from meterline.domains.usage.factory import create_usage_service
from meterline.domains.usage.subscribers.alert_webhook import UsageAlertWebhookSubscriber


def create_container(settings: Settings) -> Container:
    """Build container with environment-appropriate implementations.

    This is the single source of truth for dependency wiring. It reads
    the settings and decides which adapter implementation to use for
    each protocol.

    Args:
        settings: Application settings (from core/config.py)

    Returns:
        Fully constructed Container ready for use
    """
    # -----------------------------------------------------------------
    # Event Bus
    # Fans usage alert events out to the webhook subscriber
    # -----------------------------------------------------------------
    event_bus = _create_event_bus(settings)

    # -----------------------------------------------------------------
    # External collaborators
    # -----------------------------------------------------------------
    clock = SystemClock()
    alert_dispatcher = EventBusAlertDispatcher(event_bus, clock=clock)
    report_generator = _create_report_generator(settings)
    company_directory = CompanyDirectory(CompanyRepository())

    # -----------------------------------------------------------------
    # Usage metering
    # -----------------------------------------------------------------
    usage_service = create_usage_service(
        clock=clock,
        alert_dispatcher=alert_dispatcher,
        directory=company_directory,
        report_generator=report_generator,
        warning_percent=settings.USAGE_WARNING_PERCENT,
        max_attempts=settings.USAGE_LEDGER_MAX_ATTEMPTS,
    )

    return Container(
        event_bus=event_bus,
        clock=clock,
        alert_dispatcher=alert_dispatcher,
        report_generator=report_generator,
        company_directory=company_directory,
        usage_service=usage_service,
    )


def _create_event_bus(settings: Settings) -> EventBus:
    """Create event bus with subscribers wired up.

    UsageAlertWebhookSubscriber is only attached when an alert webhook URL
    is configured; otherwise alert events are published to no one.
    """
    bus = InMemoryEventBus()

    if settings.USAGE_ALERT_WEBHOOK_URL:
        alert_subscriber = UsageAlertWebhookSubscriber(
            url=settings.USAGE_ALERT_WEBHOOK_URL,
            timeout_seconds=settings.OUTBOUND_HTTP_TIMEOUT_SECONDS,
        )
        for pattern in alert_subscriber.EVENT_PATTERNS:
            bus.subscribe(pattern, alert_subscriber.handle)
    else:
        logger.info("USAGE_ALERT_WEBHOOK_URL not set, usage alerts will not be delivered")

    return bus


def _create_report_generator(settings: Settings) -> UsageReportGenerator:
    """Create report generator: HTTP if a service URL is set, otherwise null."""
    if settings.USAGE_REPORT_SERVICE_URL:
        return HttpUsageReportGenerator(
            url=settings.USAGE_REPORT_SERVICE_URL,
            timeout=settings.USAGE_REPORT_TIMEOUT_SECONDS,
        )
    return NullUsageReportGenerator()
