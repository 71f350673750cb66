"""Fake company repository for testing."""

from typing import Optional

from sqlalchemy.ext.asyncio import AsyncSession

from meterline.models.company import Company


class FakeCompanyRepository:
    """In-memory fake for CompanyRepositoryProtocol."""

    def __init__(self) -> None:
        """Initialize with empty store and call log."""
        self._store: dict[str, Company] = {}
        self._calls: list[tuple] = []

    def seed(self, company_id: str, obj: Company) -> None:
        """Populate store with test data."""
        self._store[company_id] = obj

    async def get(self, db: AsyncSession, *, company_id: str) -> Optional[Company]:
        """Get company by ID."""
        self._calls.append(("get", db, company_id))
        return self._store.get(company_id)
