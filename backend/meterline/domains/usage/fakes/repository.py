"""Fake usage repositories for testing."""

from datetime import datetime
from typing import Any, Callable, Optional
from uuid import UUID, uuid4

from sqlalchemy import inspect as sa_inspect
from sqlalchemy.ext.asyncio import AsyncSession

from meterline.domains.usage.exceptions import LedgerConflictError
from meterline.models.resource_limit_set import ResourceLimitSet
from meterline.models.resource_usage import ResourceUsage
from meterline.models.usage_record import UsageRecord
from meterline.models.usage_summary import UsageSummary
from meterline.schemas.resource_usage import ResourceUsageCreate
from meterline.schemas.usage_record import UsageRecordCreate
from meterline.schemas.usage_summary import UsageSummaryCreate


def _key(company_id: str, resource_type: Any) -> tuple[str, str]:
    return company_id, getattr(resource_type, "value", resource_type)


def _clone(obj):
    """Detached copy of a model, like a fresh row read from the database."""
    mapper = sa_inspect(type(obj))
    return type(obj)(**{attr.key: getattr(obj, attr.key) for attr in mapper.column_attrs})


class _CallLog:
    def __init__(self) -> None:
        self._calls: list[tuple] = []

    def call_count(self, method: str) -> int:
        """Return the number of times a method was called."""
        return sum(1 for name, *_ in self._calls if name == method)


class FakeResourceLimitRepository(_CallLog):
    """In-memory fake for ResourceLimitRepositoryProtocol."""

    def __init__(self) -> None:
        """Initialize empty in-memory store."""
        super().__init__()
        self._store: dict[str, ResourceLimitSet] = {}
        self.fail_with: Optional[Exception] = None

    def seed(self, company_id: str, tenant_id: str, limits: list[dict[str, Any]]) -> None:
        """Store a limit set without going through upsert."""
        self._store[company_id] = ResourceLimitSet(
            id=uuid4(), company_id=company_id, tenant_id=tenant_id, limits=list(limits)
        )

    async def get_by_company(
        self, db: AsyncSession, *, company_id: str
    ) -> Optional[ResourceLimitSet]:
        """Get the limit set of a company."""
        self._calls.append(("get_by_company", db, company_id))
        if self.fail_with is not None:
            raise self.fail_with
        return self._store.get(company_id)

    async def upsert(
        self,
        db: AsyncSession,
        *,
        company_id: str,
        tenant_id: str,
        limits: list[dict[str, Any]],
    ) -> ResourceLimitSet:
        """Replace the limit set of a company."""
        self._calls.append(("upsert", db, company_id, tenant_id, limits))
        existing = self._store.get(company_id)
        limit_set = ResourceLimitSet(
            id=existing.id if existing else uuid4(),
            company_id=company_id,
            tenant_id=tenant_id,
            limits=list(limits),
        )
        self._store[company_id] = limit_set
        return limit_set


class FakeResourceUsageRepository(_CallLog):
    """In-memory fake for ResourceUsageRepositoryProtocol.

    Reads return detached copies and compare_and_set honours versions, so
    the ledger sees the same semantics as against the database.

    Usage:
        repo.inject_conflicts(2, on_conflict=lambda row: setattr(row, "current_value", 50))
    makes the next two writes lose a race to a writer that ran on_conflict.
    """

    def __init__(self) -> None:
        """Initialize empty in-memory store."""
        super().__init__()
        self._store: dict[tuple[str, str], ResourceUsage] = {}
        self._pending_conflicts = 0
        self._on_conflict: Optional[Callable[[ResourceUsage], None]] = None
        self.fail_writes_with: Optional[Exception] = None

    def seed(self, usage: ResourceUsage) -> ResourceUsage:
        """Store a ledger entry as-is."""
        if usage.id is None:
            usage.id = uuid4()
        if usage.version is None:
            usage.version = 0
        self._store[_key(usage.company_id, usage.resource_type)] = usage
        return usage

    def get(self, company_id: str, resource_type: str) -> Optional[ResourceUsage]:
        """Return the stored entry itself (test inspection helper)."""
        return self._store.get(_key(company_id, resource_type))

    def inject_conflicts(
        self, count: int, on_conflict: Optional[Callable[[ResourceUsage], None]] = None
    ) -> None:
        """Make the next *count* writes lose to a concurrent writer."""
        self._pending_conflicts = count
        self._on_conflict = on_conflict

    async def get_for_resource(
        self, db: AsyncSession, *, company_id: str, resource_type: str
    ) -> Optional[ResourceUsage]:
        """Get the ledger entry for (company, resource type)."""
        self._calls.append(("get_for_resource", db, company_id, resource_type))
        stored = self._store.get(_key(company_id, resource_type))
        return _clone(stored) if stored is not None else None

    async def list_for_company(self, db: AsyncSession, *, company_id: str) -> list[ResourceUsage]:
        """Get every ledger entry of a company, ordered by resource type."""
        self._calls.append(("list_for_company", db, company_id))
        keys = sorted(key for key in self._store if key[0] == company_id)
        return [_clone(self._store[key]) for key in keys]

    async def create(self, db: AsyncSession, *, obj_in: ResourceUsageCreate) -> ResourceUsage:
        """Create a ledger entry; a duplicate key is a lost race."""
        self._calls.append(("create", db, obj_in))
        if self.fail_writes_with is not None:
            raise self.fail_writes_with
        key = _key(obj_in.company_id, obj_in.resource_type)
        if key in self._store:
            raise LedgerConflictError(*key)
        usage = ResourceUsage(id=uuid4(), **obj_in.model_dump())
        self._store[key] = usage
        return _clone(usage)

    async def compare_and_set(
        self,
        db: AsyncSession,
        *,
        usage_id: UUID,
        expected_version: int,
        values: dict[str, Any],
    ) -> bool:
        """Write *values* only if the entry is still at *expected_version*."""
        self._calls.append(("compare_and_set", db, usage_id, expected_version, values))
        if self.fail_writes_with is not None:
            raise self.fail_writes_with

        stored = next((u for u in self._store.values() if u.id == usage_id), None)
        if stored is None:
            return False

        if self._pending_conflicts > 0:
            self._pending_conflicts -= 1
            if self._on_conflict is not None:
                self._on_conflict(stored)
            stored.version += 1
            return False

        if stored.version != expected_version:
            return False
        for key, value in values.items():
            setattr(stored, key, value)
        stored.version += 1
        return True


class FakeUsageRecordRepository(_CallLog):
    """In-memory fake for UsageRecordRepositoryProtocol."""

    def __init__(self) -> None:
        """Initialize with no records."""
        super().__init__()
        self.records: list[UsageRecord] = []
        self.fail_with: Optional[Exception] = None

    async def create(self, db: AsyncSession, *, obj_in: UsageRecordCreate) -> UsageRecord:
        """Append an audit record."""
        self._calls.append(("create", db, obj_in))
        if self.fail_with is not None:
            raise self.fail_with
        record = UsageRecord(id=uuid4(), **obj_in.model_dump())
        self.records.append(record)
        return record

    async def get_history(
        self,
        db: AsyncSession,
        *,
        company_id: str,
        resource_type: str,
        start_date: Optional[datetime] = None,
        end_date: Optional[datetime] = None,
        limit: Optional[int] = None,
    ) -> list[UsageRecord]:
        """Get audit records for one resource, newest first."""
        self._calls.append(("get_history", db, company_id, resource_type))
        matching = [
            r
            for r in self.records
            if r.company_id == company_id
            and r.resource_type == resource_type
            and (start_date is None or r.timestamp >= start_date)
            and (end_date is None or r.timestamp <= end_date)
        ]
        matching.sort(key=lambda r: r.timestamp, reverse=True)
        return matching[:limit] if limit is not None else matching


class FakeUsageSummaryRepository(_CallLog):
    """In-memory fake for UsageSummaryRepositoryProtocol."""

    def __init__(self) -> None:
        """Initialize empty in-memory store."""
        super().__init__()
        self._store: dict[str, UsageSummary] = {}
        self.fail_with: Optional[Exception] = None

    def get(self, company_id: str) -> Optional[UsageSummary]:
        """Return the stored summary itself (test inspection helper)."""
        return self._store.get(company_id)

    async def get_by_company(self, db: AsyncSession, *, company_id: str) -> Optional[UsageSummary]:
        """Get the stored summary of a company."""
        self._calls.append(("get_by_company", db, company_id))
        return self._store.get(company_id)

    async def upsert(self, db: AsyncSession, *, obj_in: UsageSummaryCreate) -> UsageSummary:
        """Create or overwrite the summary of a company."""
        self._calls.append(("upsert", db, obj_in))
        if self.fail_with is not None:
            raise self.fail_with
        values = obj_in.model_dump(mode="json")
        values.update(
            period_start=obj_in.period_start,
            period_end=obj_in.period_end,
            last_updated=obj_in.last_updated,
        )
        summary = UsageSummary(id=uuid4(), **values)
        self._store[obj_in.company_id] = summary
        return summary
