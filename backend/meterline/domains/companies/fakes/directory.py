"""Fake company directory for testing."""

from sqlalchemy.ext.asyncio import AsyncSession

from meterline.domains.companies.exceptions import CompanyNotFoundError


class FakeCompanyDirectory:
    """In-memory fake for CompanyDirectoryProtocol."""

    def __init__(self) -> None:
        """Initialize with no known companies."""
        self._tenants: dict[str, str] = {}
        self._calls: list[tuple] = []

    def seed(self, company_id: str, tenant_id: str) -> None:
        """Register a company under a tenant."""
        self._tenants[company_id] = tenant_id

    def call_count(self) -> int:
        """Return the number of lookups made."""
        return len(self._calls)

    async def resolve_tenant_id(self, db: AsyncSession, company_id: str) -> str:
        """Return the seeded tenant or raise CompanyNotFoundError."""
        self._calls.append(("resolve_tenant_id", db, company_id))
        if company_id not in self._tenants:
            raise CompanyNotFoundError(company_id)
        return self._tenants[company_id]
