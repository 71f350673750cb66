"""Root conftest for pytest configuration and shared fixtures.

This conftest is loaded before every colocated test directory under
meterline/, making its fixtures available to domain, adapter and API tests.
"""

import os

import pytest

# ---------------------------------------------------------------------------
# Environment variables; must be set before any meterline module import.
# Uses setdefault so real env vars (CI) are never overridden.
# ---------------------------------------------------------------------------
os.environ.setdefault("POSTGRES_HOST", "localhost")
os.environ.setdefault("POSTGRES_USER", "test_user")
os.environ.setdefault("POSTGRES_PASSWORD", "test_password")
os.environ.setdefault("POSTGRES_DB", "test_db")
os.environ.setdefault("TESTING", "true")
os.environ.setdefault("ENVIRONMENT", "test")


DEFAULT_COMPANY_ID = "acme"
DEFAULT_TENANT_ID = "tenant-1"


# ---------------------------------------------------------------------------
# Shared fake fixtures: individual protocol fakes
# ---------------------------------------------------------------------------


@pytest.fixture
def fake_event_bus():
    """Fake EventBus that records published events."""
    from meterline.adapters.event_bus.fake import FakeEventBus

    return FakeEventBus()


@pytest.fixture
def fake_clock():
    """Clock pinned to 2024-01-15 12:00 UTC."""
    from meterline.adapters.clock.fake import FakeClock

    return FakeClock()


@pytest.fixture
def fake_alert_dispatcher():
    """Fake AlertDispatcher that records dispatched alerts."""
    from meterline.adapters.alerts.fake import FakeAlertDispatcher

    return FakeAlertDispatcher()


@pytest.fixture
def fake_report_generator():
    """Fake UsageReportGenerator returning a canned report."""
    from meterline.adapters.reporting.fake import FakeUsageReportGenerator

    return FakeUsageReportGenerator()


@pytest.fixture
def fake_company_directory():
    """Fake company directory with DEFAULT_COMPANY_ID registered."""
    from meterline.domains.companies.fakes.directory import FakeCompanyDirectory

    directory = FakeCompanyDirectory()
    directory.seed(DEFAULT_COMPANY_ID, DEFAULT_TENANT_ID)
    return directory


@pytest.fixture
def fake_limit_repo():
    """In-memory limit set repository."""
    from meterline.domains.usage.fakes.repository import FakeResourceLimitRepository

    return FakeResourceLimitRepository()


@pytest.fixture
def fake_usage_repo():
    """In-memory ledger entry repository."""
    from meterline.domains.usage.fakes.repository import FakeResourceUsageRepository

    return FakeResourceUsageRepository()


@pytest.fixture
def fake_record_repo():
    """In-memory audit record repository."""
    from meterline.domains.usage.fakes.repository import FakeUsageRecordRepository

    return FakeUsageRecordRepository()


@pytest.fixture
def fake_summary_repo():
    """In-memory usage summary repository."""
    from meterline.domains.usage.fakes.repository import FakeUsageSummaryRepository

    return FakeUsageSummaryRepository()


@pytest.fixture
def usage_service(
    fake_clock,
    fake_alert_dispatcher,
    fake_company_directory,
    fake_report_generator,
    fake_limit_repo,
    fake_usage_repo,
    fake_record_repo,
    fake_summary_repo,
):
    """The real UsageMeteringService wired to in-memory fakes."""
    from meterline.domains.usage.factory import create_usage_service

    return create_usage_service(
        clock=fake_clock,
        alert_dispatcher=fake_alert_dispatcher,
        directory=fake_company_directory,
        report_generator=fake_report_generator,
        limit_repo=fake_limit_repo,
        usage_repo=fake_usage_repo,
        record_repo=fake_record_repo,
        summary_repo=fake_summary_repo,
    )


@pytest.fixture
def test_container(
    fake_event_bus,
    fake_clock,
    fake_alert_dispatcher,
    fake_report_generator,
    fake_company_directory,
    usage_service,
):
    """A Container with every external dependency replaced by fakes.

    For partial overrides, use container.replace():
        other = test_container.replace(clock=FakeClock(some_instant))
    """
    from meterline.core.container import Container

    return Container(
        event_bus=fake_event_bus,
        clock=fake_clock,
        alert_dispatcher=fake_alert_dispatcher,
        report_generator=fake_report_generator,
        company_directory=fake_company_directory,
        usage_service=usage_service,
    )
