"""Tests for CompanyDirectory."""

from unittest.mock import MagicMock

import pytest

from meterline.domains.companies.directory import CompanyDirectory
from meterline.domains.companies.exceptions import CompanyNotFoundError
from meterline.domains.companies.fakes.repository import FakeCompanyRepository
from meterline.models.company import Company


@pytest.fixture
def repo():
    return FakeCompanyRepository()


@pytest.fixture
def directory(repo):
    return CompanyDirectory(repo)


@pytest.mark.asyncio
async def test_resolves_explicit_tenant(directory, repo):
    repo.seed("acme", Company(id="acme", name="Acme", tenant_id="tenant-1"))

    assert await directory.resolve_tenant_id(MagicMock(), "acme") == "tenant-1"


@pytest.mark.asyncio
async def test_company_without_tenant_is_its_own_tenant(directory, repo):
    repo.seed("solo", Company(id="solo", name="Solo", tenant_id=None))

    assert await directory.resolve_tenant_id(MagicMock(), "solo") == "solo"


@pytest.mark.asyncio
async def test_unknown_company_raises(directory):
    with pytest.raises(CompanyNotFoundError) as exc_info:
        await directory.resolve_tenant_id(MagicMock(), "ghost")

    assert exc_info.value.company_id == "ghost"
    assert "ghost" in str(exc_info.value)
