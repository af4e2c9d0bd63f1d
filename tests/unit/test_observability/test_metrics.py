"""Tests for metrics collection."""

from lead_capture.domain.models import (
    ReconciliationReport,
    RemoteErrorKind,
    RetryResult,
)
from lead_capture.observability.metrics import MetricsCollector


class TestMetricsCollector:
    """Test metrics collector functionality."""

    def test_registries_are_isolated(self):
        """Each collector owns its registry."""
        first, second = MetricsCollector(), MetricsCollector()

        first.record_submission("success")

        assert first.sample("lead_submissions_total", {"status": "success"}) == 1.0
        assert second.sample("lead_submissions_total", {"status": "success"}) is None

    def test_create_counter_is_idempotent(self):
        collector = MetricsCollector()

        counter = collector.create_counter("custom_total", "Custom counter")

        assert collector.create_counter("custom_total", "Custom counter") is counter

    def test_record_remote_result(self):
        collector = MetricsCollector()

        collector.record_remote_result(RetryResult(success=True, attempts=1))
        collector.record_remote_result(
            RetryResult(
                success=False, error_kind=RemoteErrorKind.TRANSIENT, attempts=3
            )
        )

        assert collector.sample("remote_operations_total", {"outcome": "success"}) == 1.0
        assert collector.sample(
            "remote_operations_total", {"outcome": "transient"}
        ) == 1.0
        assert collector.sample("remote_operation_attempts_count") == 2.0
        assert collector.sample("remote_operation_attempts_sum") == 4.0

    def test_record_reconciliation(self):
        collector = MetricsCollector()

        collector.record_reconciliation(
            ReconciliationReport(synced=3, failed=1, errors=["x"]), "recovery"
        )
        collector.set_queue_depth(1)

        assert collector.sample("reconciliation_runs_total", {"trigger": "recovery"}) == 1.0
        assert collector.sample(
            "reconciliation_entries_total", {"result": "synced"}
        ) == 3.0
        assert collector.sample(
            "reconciliation_entries_total", {"result": "failed"}
        ) == 1.0
        assert collector.sample("fallback_queue_unsynced") == 1.0

    def test_render(self):
        collector = MetricsCollector()
        collector.record_queued("timeout_fallback")

        payload, content_type = collector.render()

        assert content_type.startswith("text/plain")
        assert b'lead_submissions_queued_total{source="timeout_fallback"} 1.0' in payload
