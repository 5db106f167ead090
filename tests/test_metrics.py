"""Tests for the CloudWatch metrics client."""

from __future__ import annotations

from unittest.mock import MagicMock, patch

import pytest

from clinic_dashboard.services.metrics import MAX_BATCH_SIZE, NAMESPACE, MetricsClient


def _dimensions(datum: dict) -> dict[str, str]:
    return {d["Name"]: d["Value"] for d in datum["Dimensions"]}


@pytest.fixture
def disabled():
    return MetricsClient(enabled=False)


@pytest.fixture
def enabled():
    client = MetricsClient(enabled=True, background=False)
    client._cloudwatch = MagicMock()
    return client


class TestRecordCall:
    def test_success_counts_and_times_the_call(self, disabled):
        disabled.record_call("paciente", ok=True, latency_ms=84.2)
        names = [d["MetricName"] for d in disabled.pending]
        assert names == ["Webhook/Calls", "Webhook/Latency"]
        assert _dimensions(disabled.pending[0]) == {"Tag": "paciente", "Outcome": "success"}

    def test_failure_adds_an_error_point(self, disabled):
        disabled.record_call(
            "atualizar_status_atendimento", ok=False, latency_ms=310.0, error_type="http_502",
        )
        errors = [d for d in disabled.pending if d["MetricName"] == "Webhook/Errors"]
        assert len(errors) == 1
        assert _dimensions(errors[0]) == {
            "Tag": "atualizar_status_atendimento", "ErrorType": "http_502",
        }

    def test_untimed_failure_has_no_latency(self, disabled):
        disabled.record_call("aiia_ia", ok=False, error_type="ConnectError")
        names = {d["MetricName"] for d in disabled.pending}
        assert names == {"Webhook/Calls", "Webhook/Errors"}

    def test_enabled_defaults_to_environment(self):
        with patch.dict("os.environ", {"METRICS_ENABLED": "false"}):
            assert MetricsClient().enabled is False


class TestFlush:
    def test_disabled_flush_drains_without_shipping(self, disabled):
        disabled.record_call("paciente", ok=True, latency_ms=10.0)
        assert disabled.flush() == 0
        assert disabled.pending == []

    def test_enabled_flush_ships_to_namespace(self, enabled):
        enabled.record_call("paciente", ok=True, latency_ms=100.0)
        assert enabled.flush() == 2
        kwargs = enabled._cloudwatch.put_metric_data.call_args[1]
        assert kwargs["Namespace"] == NAMESPACE
        assert len(kwargs["MetricData"]) == 2

    def test_large_buffers_are_chunked(self, enabled):
        for _ in range(MAX_BATCH_SIZE):
            enabled.record_call("paciente", ok=True, latency_ms=1.0)
        assert enabled.flush() == 2 * MAX_BATCH_SIZE
        assert enabled._cloudwatch.put_metric_data.call_count == 2

    def test_shipping_error_is_logged_not_raised(self, enabled):
        enabled._cloudwatch.put_metric_data.side_effect = RuntimeError("throttled")
        enabled.record_call("paciente", ok=True, latency_ms=10.0)
        assert enabled.flush() == 0

    def test_empty_buffer(self, enabled):
        assert enabled.flush() == 0
        enabled._cloudwatch.put_metric_data.assert_not_called()
