"""Unit tests for UsageLedger: enforcement, rollover, concurrency and side effects."""

import asyncio
from datetime import datetime, timezone

import pytest

from meterline.adapters.alerts.event_bus import EventBusAlertDispatcher
from meterline.adapters.alerts.fake import FakeAlertDispatcher
from meterline.adapters.event_bus.in_memory import InMemoryEventBus
from meterline.domains.companies.exceptions import CompanyNotFoundError
from meterline.domains.usage.exceptions import LedgerConflictError, ResourceUsageNotFoundError
from meterline.domains.usage.ledger import Outcome, UsageLedger
from meterline.domains.usage.limits import LimitRegistry
from meterline.domains.usage.recorder import UsageRecorder
from meterline.domains.usage.summary import SummaryAggregator
from meterline.domains.usage.tests.conftest import (
    DEFAULT_COMPANY_ID,
    DEFAULT_TENANT_ID,
    JANUARY_END,
    NOW,
    _make_limit,
    _make_usage_model,
)
from meterline.domains.usage.types import AlertKind, MeteringStatus, ResourceType

API_CALLS = ResourceType.API_CALLS


def _build_ledger(
    *,
    usage_repo,
    limit_repo,
    record_repo,
    summary_repo,
    alerts,
    directory,
    clock,
    max_attempts: int = 3,
) -> UsageLedger:
    limits = LimitRegistry(limit_repo, usage_repo, clock, max_attempts=max_attempts)
    return UsageLedger(
        usage_repo=usage_repo,
        limits=limits,
        recorder=UsageRecorder(record_repo),
        summaries=SummaryAggregator(usage_repo, summary_repo, clock),
        alert_dispatcher=alerts,
        directory=directory,
        clock=clock,
        max_attempts=max_attempts,
    )


@pytest.fixture
def ledger(
    fake_usage_repo,
    fake_limit_repo,
    fake_record_repo,
    fake_summary_repo,
    fake_alert_dispatcher,
    fake_company_directory,
    fake_clock,
):
    return _build_ledger(
        usage_repo=fake_usage_repo,
        limit_repo=fake_limit_repo,
        record_repo=fake_record_repo,
        summary_repo=fake_summary_repo,
        alerts=fake_alert_dispatcher,
        directory=fake_company_directory,
        clock=fake_clock,
    )


def _seed_limit(limit_repo, **kwargs):
    limit_repo.seed(
        DEFAULT_COMPANY_ID, DEFAULT_TENANT_ID, [_make_limit(**kwargs).model_dump(mode="json")]
    )


# ---------------------------------------------------------------------------
# Outcome
# ---------------------------------------------------------------------------


class TestOutcome:
    def test_only_rejection_is_not_admitted(self):
        assert [o for o in Outcome if not o.admitted] == [Outcome.REJECTED]

    def test_untracked_and_stopped_leave_ledger_alone(self):
        assert not Outcome.UNTRACKED.mutated_ledger
        assert not Outcome.STOPPED.mutated_ledger
        assert Outcome.REJECTED.mutated_ledger


# ---------------------------------------------------------------------------
# track_usage: admission and rejection
# ---------------------------------------------------------------------------


class TestTrackUsageEnforcement:
    @pytest.mark.asyncio
    async def test_admits_within_limit(self, ledger, db, fake_usage_repo):
        fake_usage_repo.seed(_make_usage_model(current_value=30))

        admitted = await ledger.track_usage(db, DEFAULT_COMPANY_ID, API_CALLS, amount=20)

        assert admitted is True
        entry = fake_usage_repo.get(DEFAULT_COMPANY_ID, "api_calls")
        assert entry.current_value == 50
        assert entry.last_updated == NOW
        assert entry.version == 1

    @pytest.mark.asyncio
    async def test_admits_exactly_reaching_limit(self, ledger, db, fake_usage_repo):
        fake_usage_repo.seed(_make_usage_model(current_value=90))

        assert await ledger.track_usage(db, DEFAULT_COMPANY_ID, API_CALLS, amount=10) is True
        assert fake_usage_repo.get(DEFAULT_COMPANY_ID, "api_calls").current_value == 100

    @pytest.mark.asyncio
    async def test_rejects_over_limit_without_writing(
        self, ledger, db, fake_usage_repo, fake_record_repo
    ):
        fake_usage_repo.seed(_make_usage_model(current_value=60))

        admitted = await ledger.track_usage(db, DEFAULT_COMPANY_ID, API_CALLS, amount=50)

        assert admitted is False
        entry = fake_usage_repo.get(DEFAULT_COMPANY_ID, "api_calls")
        assert entry.current_value == 60
        assert entry.version == 0
        assert fake_usage_repo.call_count("compare_and_set") == 0

        record = fake_record_repo.records[-1]
        assert record.value == 50
        assert record.record_metadata == {"limitExceeded": True, "limit": 100, "totalUsage": 110}

    @pytest.mark.asyncio
    async def test_rejection_dispatches_overage_alert(
        self, ledger, db, fake_usage_repo, fake_alert_dispatcher
    ):
        fake_usage_repo.seed(_make_usage_model(current_value=60))

        await ledger.track_usage(db, DEFAULT_COMPANY_ID, API_CALLS, amount=50)

        [alert] = fake_alert_dispatcher.of_kind(AlertKind.OVERAGE)
        assert alert.tenant_id == DEFAULT_TENANT_ID
        assert alert.current_value == 60
        assert alert.max_value == 100
        assert alert.amount == 50

    @pytest.mark.asyncio
    async def test_unlimited_resource_never_rejects(
        self, ledger, db, fake_usage_repo, fake_alert_dispatcher
    ):
        fake_usage_repo.seed(_make_usage_model(current_value=1_000_000, max_value=0))

        assert await ledger.track_usage(db, DEFAULT_COMPANY_ID, API_CALLS, amount=5) is True
        assert fake_usage_repo.get(DEFAULT_COMPANY_ID, "api_calls").current_value == 1_000_005
        assert fake_alert_dispatcher.alerts == []

    @pytest.mark.asyncio
    async def test_paused_entry_counts_past_limit(self, ledger, db, fake_usage_repo):
        fake_usage_repo.seed(_make_usage_model(current_value=95, status=MeteringStatus.PAUSED))

        assert await ledger.track_usage(db, DEFAULT_COMPANY_ID, API_CALLS, amount=10) is True
        assert fake_usage_repo.get(DEFAULT_COMPANY_ID, "api_calls").current_value == 105

    @pytest.mark.asyncio
    async def test_zero_amount_is_admitted(self, ledger, db, fake_usage_repo):
        fake_usage_repo.seed(_make_usage_model(current_value=100))

        assert await ledger.track_usage(db, DEFAULT_COMPANY_ID, API_CALLS, amount=0) is True


# ---------------------------------------------------------------------------
# track_usage: untracked, stopped and unknown companies
# ---------------------------------------------------------------------------


class TestTrackUsagePassThrough:
    @pytest.mark.asyncio
    async def test_untracked_resource_is_admitted_and_recorded(
        self, ledger, db, fake_usage_repo, fake_record_repo, fake_summary_repo
    ):
        admitted = await ledger.track_usage(
            db, DEFAULT_COMPANY_ID, ResourceType.EXPORTS, amount=3, user_id="u-1"
        )

        assert admitted is True
        assert fake_usage_repo.call_count("compare_and_set") == 0
        assert fake_usage_repo.call_count("create") == 0
        assert len(fake_record_repo.records) == 1
        assert fake_record_repo.records[0].user_id == "u-1"
        assert fake_summary_repo.call_count("upsert") == 0

    @pytest.mark.asyncio
    async def test_stopped_entry_is_frozen(self, ledger, db, fake_usage_repo, fake_record_repo):
        fake_usage_repo.seed(_make_usage_model(current_value=100, status=MeteringStatus.STOPPED))

        assert await ledger.track_usage(db, DEFAULT_COMPANY_ID, API_CALLS, amount=50) is True
        assert fake_usage_repo.get(DEFAULT_COMPANY_ID, "api_calls").current_value == 100
        assert len(fake_record_repo.records) == 1

    @pytest.mark.asyncio
    async def test_unknown_company_raises(self, ledger, db, fake_record_repo):
        with pytest.raises(CompanyNotFoundError):
            await ledger.track_usage(db, "ghost", API_CALLS)

        assert fake_record_repo.records == []


# ---------------------------------------------------------------------------
# track_usage: period rollover
# ---------------------------------------------------------------------------


class TestTrackUsageRollover:
    @pytest.mark.asyncio
    async def test_expired_period_is_seeded_with_amount(
        self, ledger, db, fake_usage_repo, fake_clock
    ):
        fake_usage_repo.seed(_make_usage_model(current_value=100))
        fake_clock.set(datetime(2024, 2, 2, 8, 0, tzinfo=timezone.utc))

        assert await ledger.track_usage(db, DEFAULT_COMPANY_ID, API_CALLS, amount=7) is True

        entry = fake_usage_repo.get(DEFAULT_COMPANY_ID, "api_calls")
        assert entry.current_value == 7
        assert entry.period_start == datetime(2024, 2, 1, tzinfo=timezone.utc)
        assert entry.period_end == datetime(2024, 2, 29, 23, 59, 59, 999000, tzinfo=timezone.utc)

    @pytest.mark.asyncio
    async def test_rolls_over_exactly_at_period_end(self, ledger, db, fake_usage_repo, fake_clock):
        fake_usage_repo.seed(_make_usage_model(current_value=100))
        fake_clock.set(JANUARY_END)

        assert await ledger.track_usage(db, DEFAULT_COMPANY_ID, API_CALLS, amount=1) is True
        assert fake_usage_repo.get(DEFAULT_COMPANY_ID, "api_calls").current_value == 1

    @pytest.mark.asyncio
    async def test_rollover_seed_is_not_checked_against_limit(
        self, ledger, db, fake_usage_repo, fake_clock, fake_alert_dispatcher
    ):
        fake_usage_repo.seed(_make_usage_model(current_value=10))
        fake_clock.set(datetime(2024, 2, 2, tzinfo=timezone.utc))

        assert await ledger.track_usage(db, DEFAULT_COMPANY_ID, API_CALLS, amount=150) is True
        assert fake_usage_repo.get(DEFAULT_COMPANY_ID, "api_calls").current_value == 150
        assert fake_alert_dispatcher.alerts == []


# ---------------------------------------------------------------------------
# track_usage: approaching-limit alerts
# ---------------------------------------------------------------------------


class TestApproachingAlerts:
    @pytest.mark.asyncio
    async def test_alerts_at_threshold(
        self, ledger, db, fake_usage_repo, fake_limit_repo, fake_alert_dispatcher
    ):
        fake_usage_repo.seed(_make_usage_model(current_value=70))
        _seed_limit(fake_limit_repo, alert_threshold=80)

        await ledger.track_usage(db, DEFAULT_COMPANY_ID, API_CALLS, amount=10)

        [alert] = fake_alert_dispatcher.of_kind(AlertKind.APPROACHING)
        assert alert.current_value == 80
        assert alert.percent_used == pytest.approx(80)

    @pytest.mark.asyncio
    async def test_no_alert_below_threshold(
        self, ledger, db, fake_usage_repo, fake_limit_repo, fake_alert_dispatcher
    ):
        fake_usage_repo.seed(_make_usage_model(current_value=70))
        _seed_limit(fake_limit_repo, alert_threshold=80)

        await ledger.track_usage(db, DEFAULT_COMPANY_ID, API_CALLS, amount=9)

        assert fake_alert_dispatcher.alerts == []

    @pytest.mark.asyncio
    async def test_realerts_on_every_call_above_threshold(
        self, ledger, db, fake_usage_repo, fake_limit_repo, fake_alert_dispatcher
    ):
        fake_usage_repo.seed(_make_usage_model(current_value=85))
        _seed_limit(fake_limit_repo, alert_threshold=80)

        await ledger.track_usage(db, DEFAULT_COMPANY_ID, API_CALLS, amount=1)
        await ledger.track_usage(db, DEFAULT_COMPANY_ID, API_CALLS, amount=1)

        assert len(fake_alert_dispatcher.of_kind(AlertKind.APPROACHING)) == 2

    @pytest.mark.asyncio
    async def test_no_alert_without_threshold(
        self, ledger, db, fake_usage_repo, fake_limit_repo, fake_alert_dispatcher
    ):
        fake_usage_repo.seed(_make_usage_model(current_value=95))
        _seed_limit(fake_limit_repo)

        await ledger.track_usage(db, DEFAULT_COMPANY_ID, API_CALLS, amount=1)

        assert fake_alert_dispatcher.alerts == []

    @pytest.mark.asyncio
    async def test_slow_alert_subscriber_does_not_delay_admission(
        self,
        db,
        fake_usage_repo,
        fake_limit_repo,
        fake_record_repo,
        fake_summary_repo,
        fake_company_directory,
        fake_clock,
    ):
        bus = InMemoryEventBus()
        release = asyncio.Event()
        delivered = []

        async def slow_webhook(event):
            await release.wait()
            delivered.append(event)

        bus.subscribe("usage.*", slow_webhook)
        dispatcher = EventBusAlertDispatcher(bus, clock=fake_clock)
        ledger = _build_ledger(
            usage_repo=fake_usage_repo,
            limit_repo=fake_limit_repo,
            record_repo=fake_record_repo,
            summary_repo=fake_summary_repo,
            alerts=dispatcher,
            directory=fake_company_directory,
            clock=fake_clock,
        )
        fake_usage_repo.seed(_make_usage_model(current_value=85))
        _seed_limit(fake_limit_repo, alert_threshold=80)

        admitted = await asyncio.wait_for(
            ledger.track_usage(db, DEFAULT_COMPANY_ID, API_CALLS, amount=1), timeout=1
        )

        assert admitted is True
        assert fake_usage_repo.get(DEFAULT_COMPANY_ID, "api_calls").current_value == 86
        assert delivered == []

        release.set()
        await dispatcher.drain()

        [event] = delivered
        assert event.current_value == 86
        assert event.timestamp == NOW


# ---------------------------------------------------------------------------
# track_usage: concurrency
# ---------------------------------------------------------------------------


class TestTrackUsageConcurrency:
    @pytest.mark.asyncio
    async def test_retries_against_concurrent_writer(self, ledger, db, fake_usage_repo):
        fake_usage_repo.seed(_make_usage_model(current_value=0))
        fake_usage_repo.inject_conflicts(
            1, on_conflict=lambda row: setattr(row, "current_value", 50)
        )

        assert await ledger.track_usage(db, DEFAULT_COMPANY_ID, API_CALLS, amount=40) is True
        assert fake_usage_repo.get(DEFAULT_COMPANY_ID, "api_calls").current_value == 90

    @pytest.mark.asyncio
    async def test_retry_decides_on_fresh_value(self, ledger, db, fake_usage_repo):
        fake_usage_repo.seed(_make_usage_model(current_value=0))
        fake_usage_repo.inject_conflicts(
            1, on_conflict=lambda row: setattr(row, "current_value", 70)
        )

        assert await ledger.track_usage(db, DEFAULT_COMPANY_ID, API_CALLS, amount=40) is False
        assert fake_usage_repo.get(DEFAULT_COMPANY_ID, "api_calls").current_value == 70

    @pytest.mark.asyncio
    async def test_raises_after_exhausting_attempts(
        self, ledger, db, fake_usage_repo, fake_record_repo
    ):
        fake_usage_repo.seed(_make_usage_model(current_value=0))
        fake_usage_repo.inject_conflicts(10)

        with pytest.raises(LedgerConflictError):
            await ledger.track_usage(db, DEFAULT_COMPANY_ID, API_CALLS, amount=1)

        assert fake_usage_repo.call_count("compare_and_set") == 3
        assert fake_record_repo.records == []


# ---------------------------------------------------------------------------
# track_usage: best-effort side effects
# ---------------------------------------------------------------------------


class TestSideEffectFailures:
    @pytest.mark.asyncio
    async def test_record_failure_does_not_change_outcome(
        self, ledger, db, fake_usage_repo, fake_record_repo
    ):
        fake_usage_repo.seed(_make_usage_model(current_value=0))
        fake_record_repo.fail_with = RuntimeError("disk full")

        assert await ledger.track_usage(db, DEFAULT_COMPANY_ID, API_CALLS, amount=1) is True
        assert fake_usage_repo.get(DEFAULT_COMPANY_ID, "api_calls").current_value == 1
        db.rollback.assert_awaited()

    @pytest.mark.asyncio
    async def test_summary_failure_does_not_change_outcome(
        self, ledger, db, fake_usage_repo, fake_summary_repo
    ):
        fake_usage_repo.seed(_make_usage_model(current_value=0))
        fake_summary_repo.fail_with = RuntimeError("boom")

        assert await ledger.track_usage(db, DEFAULT_COMPANY_ID, API_CALLS, amount=1) is True

    @pytest.mark.asyncio
    async def test_alert_failure_does_not_change_outcome(
        self,
        db,
        fake_usage_repo,
        fake_limit_repo,
        fake_record_repo,
        fake_summary_repo,
        fake_company_directory,
        fake_clock,
    ):
        alerts = FakeAlertDispatcher(fail_with=RuntimeError("webhook down"))
        ledger = _build_ledger(
            usage_repo=fake_usage_repo,
            limit_repo=fake_limit_repo,
            record_repo=fake_record_repo,
            summary_repo=fake_summary_repo,
            alerts=alerts,
            directory=fake_company_directory,
            clock=fake_clock,
        )
        fake_usage_repo.seed(_make_usage_model(current_value=99))

        assert await ledger.track_usage(db, DEFAULT_COMPANY_ID, API_CALLS, amount=5) is False
        assert len(alerts.alerts) == 1

    @pytest.mark.asyncio
    async def test_threshold_lookup_failure_skips_alert(
        self, ledger, db, fake_usage_repo, fake_limit_repo, fake_alert_dispatcher
    ):
        fake_usage_repo.seed(_make_usage_model(current_value=90))
        fake_limit_repo.fail_with = RuntimeError("db gone")

        assert await ledger.track_usage(db, DEFAULT_COMPANY_ID, API_CALLS, amount=1) is True
        assert fake_alert_dispatcher.alerts == []

    @pytest.mark.asyncio
    async def test_ledger_write_failure_propagates(self, ledger, db, fake_usage_repo):
        fake_usage_repo.seed(_make_usage_model(current_value=0))
        fake_usage_repo.fail_writes_with = RuntimeError("connection lost")

        with pytest.raises(RuntimeError, match="connection lost"):
            await ledger.track_usage(db, DEFAULT_COMPANY_ID, API_CALLS, amount=1)

    @pytest.mark.asyncio
    async def test_summary_refreshed_after_admission(
        self, ledger, db, fake_usage_repo, fake_summary_repo
    ):
        fake_usage_repo.seed(_make_usage_model(current_value=0))

        await ledger.track_usage(db, DEFAULT_COMPANY_ID, API_CALLS, amount=25)

        summary = fake_summary_repo.get(DEFAULT_COMPANY_ID)
        assert summary.resources["api_calls"]["current_usage"] == 25
        assert summary.total_usage_percentage == 25


# ---------------------------------------------------------------------------
# set_metering_status / reset_usage
# ---------------------------------------------------------------------------


class TestStatusAndReset:
    @pytest.mark.asyncio
    async def test_set_status_persists(self, ledger, db, fake_usage_repo):
        fake_usage_repo.seed(_make_usage_model(current_value=10))

        usage = await ledger.set_metering_status(
            db, DEFAULT_COMPANY_ID, API_CALLS, MeteringStatus.STOPPED
        )

        assert usage.status == MeteringStatus.STOPPED
        assert usage.version == 1
        assert fake_usage_repo.get(DEFAULT_COMPANY_ID, "api_calls").status == "stopped"

    @pytest.mark.asyncio
    async def test_set_status_missing_entry(self, ledger, db):
        with pytest.raises(ResourceUsageNotFoundError):
            await ledger.set_metering_status(
                db, DEFAULT_COMPANY_ID, API_CALLS, MeteringStatus.PAUSED
            )

    @pytest.mark.asyncio
    async def test_reset_zeroes_counter_and_keeps_period(
        self, ledger, db, fake_usage_repo, fake_summary_repo
    ):
        fake_usage_repo.seed(_make_usage_model(current_value=100))

        usage = await ledger.reset_usage(db, DEFAULT_COMPANY_ID, API_CALLS)

        assert usage.current_value == 0
        assert usage.period.end == JANUARY_END
        entry = fake_usage_repo.get(DEFAULT_COMPANY_ID, "api_calls")
        assert entry.current_value == 0
        assert entry.last_updated == NOW
        assert fake_summary_repo.get(DEFAULT_COMPANY_ID).total_usage_percentage == 0

    @pytest.mark.asyncio
    async def test_reset_missing_entry(self, ledger, db):
        with pytest.raises(ResourceUsageNotFoundError):
            await ledger.reset_usage(db, DEFAULT_COMPANY_ID, ResourceType.STORAGE)

    @pytest.mark.asyncio
    async def test_reset_allows_usage_again(self, ledger, db, fake_usage_repo):
        fake_usage_repo.seed(_make_usage_model(current_value=100))
        assert await ledger.track_usage(db, DEFAULT_COMPANY_ID, API_CALLS, amount=1) is False

        await ledger.reset_usage(db, DEFAULT_COMPANY_ID, API_CALLS)

        assert await ledger.track_usage(db, DEFAULT_COMPANY_ID, API_CALLS, amount=1) is True
