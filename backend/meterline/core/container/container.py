"""Dependency Injection Container.

The container is a simple immutable dataclass that holds protocol implementations.
It has no construction logic; that belongs in the factory.
"""

from dataclasses import dataclass, replace
from typing import Any

from meterline.core.protocols import AlertDispatcher, Clock, EventBus, UsageReportGenerator
from meterline.domains.companies.protocols import CompanyDirectoryProtocol
from meterline.domains.usage.protocols import UsageMeteringServiceProtocol


@dataclass(frozen=True)
class Container:
    """Immutable container holding all protocol implementations.

    Usage:
        # Production: use the global container built by factory
        from meterline.core.container import container
        await container.usage_service.track_usage(db, company_id, ResourceType.API_CALLS)

        # Testing: construct directly with fakes (see backend/conftest.py
        # for the full test_container fixture)
        test_container = Container(event_bus=FakeEventBus(), ...)

        # FastAPI endpoints: use Inject() to pull individual protocols
        from meterline.api.deps import Inject
        async def my_endpoint(service=Inject(UsageMeteringServiceProtocol)):
            ...
    """

    # Event bus for domain event fan-out (usage alerts)
    event_bus: EventBus

    # Time source for period rollover and audit timestamps
    clock: Clock

    # Usage alerts (publishes to the event bus in production)
    alert_dispatcher: AlertDispatcher

    # External report generation job
    report_generator: UsageReportGenerator

    # Company -> tenant resolution
    company_directory: CompanyDirectoryProtocol

    # Usage metering facade, the only thing usage endpoints need
    usage_service: UsageMeteringServiceProtocol

    def replace(self, **changes: Any) -> "Container":
        """Create a new container with some dependencies replaced.

        Useful for partial overrides in tests:

            modified = container.replace(clock=FakeClock())

        Args:
            **changes: Dependency name -> new implementation

        Returns:
            New Container with specified dependencies replaced
        """
        return replace(self, **changes)
