"""Usage domain wiring.

Builds the metering service graph from its collaborators. Used by the
container factory with the database repositories and by tests with fakes.
"""

from typing import Optional

from meterline.core.protocols.alerts import AlertDispatcher
from meterline.core.protocols.clock import Clock
from meterline.core.protocols.reporting import UsageReportGenerator
from meterline.domains.companies.protocols import CompanyDirectoryProtocol
from meterline.domains.usage.ledger import UsageLedger
from meterline.domains.usage.limits import LimitRegistry
from meterline.domains.usage.recorder import UsageRecorder
from meterline.domains.usage.repository import (
    ResourceLimitRepository,
    ResourceLimitRepositoryProtocol,
    ResourceUsageRepository,
    ResourceUsageRepositoryProtocol,
    UsageRecordRepository,
    UsageRecordRepositoryProtocol,
    UsageSummaryRepository,
    UsageSummaryRepositoryProtocol,
)
from meterline.domains.usage.service import UsageMeteringService
from meterline.domains.usage.summary import SummaryAggregator
from meterline.domains.usage.types import DEFAULT_WARNING_PERCENT


def create_usage_service(
    *,
    clock: Clock,
    alert_dispatcher: AlertDispatcher,
    directory: CompanyDirectoryProtocol,
    report_generator: UsageReportGenerator,
    limit_repo: Optional[ResourceLimitRepositoryProtocol] = None,
    usage_repo: Optional[ResourceUsageRepositoryProtocol] = None,
    record_repo: Optional[UsageRecordRepositoryProtocol] = None,
    summary_repo: Optional[UsageSummaryRepositoryProtocol] = None,
    warning_percent: float = DEFAULT_WARNING_PERCENT,
    max_attempts: int = 5,
) -> UsageMeteringService:
    """Wire the limit registry, ledger, recorder and aggregator into one service.

    Repositories default to the database-backed implementations.
    """
    limit_repo = limit_repo or ResourceLimitRepository()
    usage_repo = usage_repo or ResourceUsageRepository()
    record_repo = record_repo or UsageRecordRepository()
    summary_repo = summary_repo or UsageSummaryRepository()

    limits = LimitRegistry(limit_repo, usage_repo, clock, max_attempts=max_attempts)
    recorder = UsageRecorder(record_repo)
    summaries = SummaryAggregator(usage_repo, summary_repo, clock, warning_percent=warning_percent)
    ledger = UsageLedger(
        usage_repo=usage_repo,
        limits=limits,
        recorder=recorder,
        summaries=summaries,
        alert_dispatcher=alert_dispatcher,
        directory=directory,
        clock=clock,
        max_attempts=max_attempts,
    )
    return UsageMeteringService(
        limits=limits,
        ledger=ledger,
        recorder=recorder,
        summaries=summaries,
        usage_repo=usage_repo,
        directory=directory,
        report_generator=report_generator,
    )
