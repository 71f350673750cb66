"""Usage ledger: the per-(company, resource) counter state machine.

Every trackUsage call runs one read-decide-write unit against the ledger
entry of its key:

- no entry, or a STOPPED entry: nothing to enforce, admit without writing
- period expired: open a fresh period seeded with the call's amount, admit
- ACTIVE entry with a finite limit that the call would exceed: reject
- otherwise: increment and admit

Writes are compare-and-swap on the entry's version and the unit is retried
when another writer wins. Only the decision is authoritative; the audit
record, summary refresh and alerts that follow are best-effort.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from meterline.core.logging import ContextualLogger, logger
from meterline.core.protocols.alerts import AlertDispatcher
from meterline.core.protocols.clock import Clock
from meterline.domains.companies.protocols import CompanyDirectoryProtocol
from meterline.domains.usage.exceptions import LedgerConflictError, ResourceUsageNotFoundError
from meterline.domains.usage.limits import LimitRegistry
from meterline.domains.usage.periods import calculate_period
from meterline.domains.usage.protocols import UsageLedgerProtocol
from meterline.domains.usage.recorder import UsageRecorder
from meterline.domains.usage.repository import ResourceUsageRepositoryProtocol
from meterline.domains.usage.retry import retry_on_conflict
from meterline.domains.usage.summary import SummaryAggregator
from meterline.domains.usage.types import (
    AlertKind,
    MeteringStatus,
    ResetPolicy,
    ResourceType,
    TimeUnit,
    is_unlimited,
    percent_used,
    should_alert_approaching,
)
from meterline.models.resource_usage import ResourceUsage as ResourceUsageModel
from meterline.schemas.resource_usage import ResourceUsage


class Outcome(str, Enum):
    """How a single trackUsage call was decided."""

    UNTRACKED = "untracked"
    STOPPED = "stopped"
    ROLLED_OVER = "rolled_over"
    REJECTED = "rejected"
    ADMITTED = "admitted"

    @property
    def admitted(self) -> bool:
        return self != Outcome.REJECTED

    @property
    def mutated_ledger(self) -> bool:
        return self in (Outcome.ROLLED_OVER, Outcome.REJECTED, Outcome.ADMITTED)


@dataclass(frozen=True)
class Decision:
    """Result of the read-decide-write unit."""

    outcome: Outcome
    # counter before the call; None without a ledger entry
    previous_value: Optional[float] = None
    new_value: Optional[float] = None
    max_value: Optional[float] = None


class UsageLedger(UsageLedgerProtocol):
    """Enforces limits on ledger entries and triggers the follow-up effects."""

    def __init__(
        self,
        usage_repo: ResourceUsageRepositoryProtocol,
        limits: LimitRegistry,
        recorder: UsageRecorder,
        summaries: SummaryAggregator,
        alert_dispatcher: AlertDispatcher,
        directory: CompanyDirectoryProtocol,
        clock: Clock,
        max_attempts: int = 5,
    ) -> None:
        """Initialize with collaborators and the CAS retry budget."""
        self._usage_repo = usage_repo
        self._limits = limits
        self._recorder = recorder
        self._summaries = summaries
        self._alerts = alert_dispatcher
        self._directory = directory
        self._clock = clock

        conflict_retry = retry_on_conflict(max_attempts)
        self._decide = conflict_retry(self._decide_once)
        self._set_status = conflict_retry(self._set_status_once)
        self._reset = conflict_retry(self._reset_once)

    async def track_usage(
        self,
        db: AsyncSession,
        company_id: str,
        resource_type: ResourceType,
        amount: float = 1,
        metadata: Optional[dict[str, Any]] = None,
        user_id: Optional[str] = None,
    ) -> bool:
        """Report consumption of *amount* units and return whether it was admitted.

        Raises:
            CompanyNotFoundError: the company is not in the directory
            LedgerConflictError: every CAS attempt lost a race
        """
        resource_type = ResourceType(resource_type)
        tenant_id = await self._directory.resolve_tenant_id(db, company_id)
        log = logger.with_context(company_id=company_id, resource_type=resource_type.value)

        decision = await self._decide(db, company_id, resource_type, amount)
        self._log_decision(log, decision, amount)

        record_metadata = dict(metadata or {})
        if decision.outcome == Outcome.REJECTED:
            record_metadata.update(
                limitExceeded=True,
                limit=decision.max_value,
                totalUsage=decision.previous_value + amount,
            )
        await self._recorder.record(
            db,
            company_id=company_id,
            tenant_id=tenant_id,
            resource_type=resource_type,
            value=amount,
            timestamp=self._clock.now(),
            metadata=record_metadata,
            user_id=user_id,
        )

        if not decision.outcome.mutated_ledger:
            return True

        await self._summaries.refresh(db, company_id, tenant_id)

        if decision.outcome == Outcome.REJECTED:
            await self._dispatch(
                log,
                company_id=company_id,
                tenant_id=tenant_id,
                resource_type=resource_type,
                current_value=decision.previous_value,
                max_value=decision.max_value,
                kind=AlertKind.OVERAGE,
                amount=amount,
            )
        elif decision.outcome == Outcome.ADMITTED:
            await self._maybe_alert_approaching(
                db, log, company_id, tenant_id, resource_type, decision
            )

        return decision.outcome.admitted

    async def set_metering_status(
        self,
        db: AsyncSession,
        company_id: str,
        resource_type: ResourceType,
        status: MeteringStatus,
    ) -> ResourceUsage:
        """Persist a status transition on a ledger entry.

        Raises:
            ResourceUsageNotFoundError: the resource has no ledger entry
        """
        usage = await self._set_status(db, company_id, ResourceType(resource_type), status)
        logger.with_context(company_id=company_id, resource_type=usage.resource_type.value).info(
            f"Metering status set to {usage.status.value}"
        )
        return usage

    async def reset_usage(
        self, db: AsyncSession, company_id: str, resource_type: ResourceType
    ) -> ResourceUsage:
        """Zero the counter of a resource, keeping its period.

        Raises:
            CompanyNotFoundError: the company is not in the directory
            ResourceUsageNotFoundError: the resource has no ledger entry
        """
        tenant_id = await self._directory.resolve_tenant_id(db, company_id)
        usage = await self._reset(db, company_id, ResourceType(resource_type))
        logger.with_context(company_id=company_id, resource_type=usage.resource_type.value).info(
            "Usage reset"
        )
        await self._summaries.refresh(db, company_id, tenant_id)
        return usage

    # ------------------------------------------------------------------
    # Read-decide-write units (retried on conflict)
    # ------------------------------------------------------------------

    async def _decide_once(
        self,
        db: AsyncSession,
        company_id: str,
        resource_type: ResourceType,
        amount: float,
    ) -> Decision:
        usage = await self._usage_repo.get_for_resource(
            db, company_id=company_id, resource_type=resource_type.value
        )
        if usage is None:
            return Decision(Outcome.UNTRACKED)

        status = MeteringStatus(usage.status)
        previous = usage.current_value
        if status == MeteringStatus.STOPPED:
            return Decision(Outcome.STOPPED, previous, previous, usage.max_value)

        now = self._clock.now()
        if now >= usage.period_end:
            period = calculate_period(now, TimeUnit(usage.unit), ResetPolicy(usage.reset_policy))
            await self._write(
                db,
                usage,
                current_value=amount,
                period_start=period.start,
                period_end=period.end,
                last_updated=now,
            )
            return Decision(Outcome.ROLLED_OVER, previous, amount, usage.max_value)

        new_value = previous + amount
        if (
            status == MeteringStatus.ACTIVE
            and not is_unlimited(usage.max_value)
            and new_value > usage.max_value
        ):
            return Decision(Outcome.REJECTED, previous, previous, usage.max_value)

        await self._write(db, usage, current_value=new_value, last_updated=now)
        return Decision(Outcome.ADMITTED, previous, new_value, usage.max_value)

    async def _set_status_once(
        self,
        db: AsyncSession,
        company_id: str,
        resource_type: ResourceType,
        status: MeteringStatus,
    ) -> ResourceUsage:
        status = MeteringStatus(status)
        usage = await self._get_existing(db, company_id, resource_type)
        snapshot = ResourceUsage.from_model(usage)
        await self._write(db, usage, status=status.value)
        return snapshot.model_copy(update={"status": status, "version": snapshot.version + 1})

    async def _reset_once(
        self, db: AsyncSession, company_id: str, resource_type: ResourceType
    ) -> ResourceUsage:
        usage = await self._get_existing(db, company_id, resource_type)
        snapshot = ResourceUsage.from_model(usage)
        now = self._clock.now()
        await self._write(db, usage, current_value=0, last_updated=now)
        return snapshot.model_copy(
            update={"current_value": 0, "last_updated": now, "version": snapshot.version + 1}
        )

    async def _get_existing(
        self, db: AsyncSession, company_id: str, resource_type: ResourceType
    ) -> ResourceUsageModel:
        usage = await self._usage_repo.get_for_resource(
            db, company_id=company_id, resource_type=resource_type.value
        )
        if usage is None:
            raise ResourceUsageNotFoundError(company_id, resource_type.value)
        return usage

    async def _write(self, db: AsyncSession, usage: ResourceUsageModel, **values: Any) -> None:
        if not await self._usage_repo.compare_and_set(
            db, usage_id=usage.id, expected_version=usage.version, values=values
        ):
            raise LedgerConflictError(usage.company_id, usage.resource_type)

    # ------------------------------------------------------------------
    # Side effects
    # ------------------------------------------------------------------

    async def _maybe_alert_approaching(
        self,
        db: AsyncSession,
        log: ContextualLogger,
        company_id: str,
        tenant_id: str,
        resource_type: ResourceType,
        decision: Decision,
    ) -> None:
        if is_unlimited(decision.max_value):
            return
        try:
            limit = await self._limits.get_limit(db, company_id, resource_type)
        except Exception as e:
            log.error(f"Failed to load alert threshold: {e}", exc_info=True)
            await db.rollback()
            return

        threshold = limit.alert_threshold if limit is not None else None
        if not should_alert_approaching(decision.new_value, decision.max_value, threshold):
            return

        await self._dispatch(
            log,
            company_id=company_id,
            tenant_id=tenant_id,
            resource_type=resource_type,
            current_value=decision.new_value,
            max_value=decision.max_value,
            kind=AlertKind.APPROACHING,
            percent_used=percent_used(decision.new_value, decision.max_value),
        )

    async def _dispatch(self, log: ContextualLogger, **alert: Any) -> None:
        try:
            await self._alerts.dispatch_alert(**alert)
        except Exception as e:
            log.error(f"Failed to dispatch {alert['kind'].value} alert: {e}", exc_info=True)

    @staticmethod
    def _log_decision(log: ContextualLogger, decision: Decision, amount: float) -> None:
        if decision.outcome == Outcome.UNTRACKED:
            log.warning("No usage entry for resource, admitting untracked usage")
        elif decision.outcome == Outcome.STOPPED:
            log.warning("Metering stopped for resource, admitting without counting")
        elif decision.outcome == Outcome.ROLLED_OVER:
            log.info(f"Period expired, new period seeded with {amount}")
        elif decision.outcome == Outcome.REJECTED:
            log.warning(
                f"Usage limit exceeded: {decision.previous_value} + {amount} > {decision.max_value}"
            )
        else:
            log.debug(f"Usage admitted: {decision.previous_value} -> {decision.new_value}")
