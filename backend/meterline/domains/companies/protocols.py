"""Company domain protocols."""

from typing import Optional, Protocol, runtime_checkable

from sqlalchemy.ext.asyncio import AsyncSession

from meterline.models.company import Company


class CompanyRepositoryProtocol(Protocol):
    """Read-only access to company records."""

    async def get(self, db: AsyncSession, *, company_id: str) -> Optional[Company]:
        """Get a company by ID."""
        ...


@runtime_checkable
class CompanyDirectoryProtocol(Protocol):
    """Resolves which tenant a company belongs to."""

    async def resolve_tenant_id(self, db: AsyncSession, company_id: str) -> str:
        """Return the tenant of *company_id*.

        Raises CompanyNotFoundError if the company does not exist.
        """
        ...
