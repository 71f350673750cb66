"""Tests for create_container: adapter selection from settings."""

from meterline.adapters.alerts import EventBusAlertDispatcher
from meterline.adapters.clock import SystemClock
from meterline.adapters.reporting import HttpUsageReportGenerator, NullUsageReportGenerator
from meterline.core.config import Settings
from meterline.core.container import Container
from meterline.core.container.factory import create_container
from meterline.domains.usage.service import UsageMeteringService


class TestCreateContainer:
    def test_defaults_to_null_report_generator(self):
        container = create_container(Settings())

        assert isinstance(container.report_generator, NullUsageReportGenerator)
        assert isinstance(container.alert_dispatcher, EventBusAlertDispatcher)
        assert isinstance(container.clock, SystemClock)
        assert isinstance(container.usage_service, UsageMeteringService)

    def test_report_service_url_selects_http_generator(self):
        container = create_container(Settings(USAGE_REPORT_SERVICE_URL="http://reports.test"))

        assert isinstance(container.report_generator, HttpUsageReportGenerator)

    def test_webhook_url_subscribes_alert_webhook(self):
        container = create_container(Settings(USAGE_ALERT_WEBHOOK_URL="http://alerts.test"))

        assert [pattern for pattern, _ in container.event_bus._subscribers] == ["usage.*"]

    def test_replace_keeps_other_fields(self, fake_clock):
        container = create_container(Settings())

        replaced = container.replace(clock=fake_clock)

        assert isinstance(replaced, Container)
        assert replaced.clock is fake_clock
        assert replaced.usage_service is container.usage_service
