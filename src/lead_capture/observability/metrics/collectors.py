"""Metrics collectors and instrumentation."""

from prometheus_client import (
    CONTENT_TYPE_LATEST,
    Counter,
    Gauge,
    Histogram,
    generate_latest,
)
from prometheus_client.core import CollectorRegistry as PrometheusRegistry

from lead_capture.domain.models import ReconciliationReport, RetryResult

DEFAULT_BUCKETS = [0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0]


class MetricsCollector:
    """Application metrics kept in a per-application registry."""

    def __init__(self, registry: PrometheusRegistry | None = None):
        self.registry = registry or PrometheusRegistry()
        self._counters: dict[str, Counter] = {}
        self._gauges: dict[str, Gauge] = {}
        self._histograms: dict[str, Histogram] = {}

        self._setup_default_metrics()

    def _setup_default_metrics(self) -> None:
        """Setup default application metrics."""
        # HTTP request metrics
        self.http_requests_total = self.create_counter(
            "http_requests_total",
            "Total HTTP requests",
            ["method", "endpoint", "status_code"],
        )
        self.http_request_duration_seconds = self.create_histogram(
            "http_request_duration_seconds",
            "HTTP request duration in seconds",
            ["method", "endpoint"],
        )

        # Submission pipeline metrics
        self.submissions_total = self.create_counter(
            "lead_submissions_total",
            "Form submissions by outcome",
            ["status"],
        )
        self.submissions_queued_total = self.create_counter(
            "lead_submissions_queued_total",
            "Submissions written to the fallback queue",
            ["source"],
        )
        self.queue_write_failures_total = self.create_counter(
            "lead_queue_write_failures_total",
            "Fallback queue writes that failed",
        )
        self.remote_operations_total = self.create_counter(
            "remote_operations_total",
            "Remote insert sequences by outcome",
            ["outcome"],
        )
        self.remote_attempts = self.create_histogram(
            "remote_operation_attempts",
            "Attempts used per remote insert sequence",
            buckets=[1, 2, 3, 5, 10],
        )
        self.remote_healthy = self.create_gauge(
            "remote_service_healthy", "1 when the remote service looks healthy"
        )

        # Reconciliation metrics
        self.reconciliation_runs_total = self.create_counter(
            "reconciliation_runs_total", "Reconciliation passes", ["trigger"]
        )
        self.reconciliation_entries_total = self.create_counter(
            "reconciliation_entries_total",
            "Queue entries processed by reconciliation",
            ["result"],
        )
        self.queue_depth = self.create_gauge(
            "fallback_queue_unsynced", "Unsynced entries in the fallback queue"
        )

    def create_counter(
        self, name: str, documentation: str, labelnames: list[str] | None = None
    ) -> Counter:
        """Create a counter metric."""
        if name in self._counters:
            return self._counters[name]

        counter = Counter(
            name, documentation, labelnames=labelnames or [], registry=self.registry
        )
        self._counters[name] = counter
        return counter

    def create_gauge(
        self, name: str, documentation: str, labelnames: list[str] | None = None
    ) -> Gauge:
        """Create a gauge metric."""
        if name in self._gauges:
            return self._gauges[name]

        gauge = Gauge(
            name, documentation, labelnames=labelnames or [], registry=self.registry
        )
        self._gauges[name] = gauge
        return gauge

    def create_histogram(
        self,
        name: str,
        documentation: str,
        labelnames: list[str] | None = None,
        buckets: list[float] | None = None,
    ) -> Histogram:
        """Create a histogram metric."""
        if name in self._histograms:
            return self._histograms[name]

        histogram = Histogram(
            name,
            documentation,
            labelnames=labelnames or [],
            buckets=buckets or DEFAULT_BUCKETS,
            registry=self.registry,
        )
        self._histograms[name] = histogram
        return histogram

    # Domain recording helpers
    def record_submission(self, status: str) -> None:
        self.submissions_total.labels(status=status).inc()

    def record_queued(self, source: str) -> None:
        self.submissions_queued_total.labels(source=source).inc()

    def record_queue_failure(self) -> None:
        self.queue_write_failures_total.inc()

    def record_remote_result(self, result: RetryResult) -> None:
        """Count one finished remote insert sequence."""
        if result.success:
            outcome = "success"
        elif result.error_kind is not None:
            outcome = result.error_kind.value
        else:
            outcome = "error"
        self.remote_operations_total.labels(outcome=outcome).inc()
        if result.attempts:
            self.remote_attempts.observe(result.attempts)

    def record_remote_cancelled(self) -> None:
        self.remote_operations_total.labels(outcome="cancelled").inc()

    def set_remote_health(self, is_healthy: bool) -> None:
        self.remote_healthy.set(1 if is_healthy else 0)

    def record_reconciliation(
        self, report: ReconciliationReport, trigger: str = "manual"
    ) -> None:
        self.reconciliation_runs_total.labels(trigger=trigger).inc()
        if report.synced:
            self.reconciliation_entries_total.labels(result="synced").inc(
                report.synced
            )
        if report.failed:
            self.reconciliation_entries_total.labels(result="failed").inc(
                report.failed
            )

    def set_queue_depth(self, depth: int) -> None:
        self.queue_depth.set(depth)

    def sample(self, name: str, labels: dict[str, str] | None = None) -> float | None:
        """Current value of a sample in this registry."""
        return self.registry.get_sample_value(name, labels or {})

    def render(self) -> tuple[bytes, str]:
        """Exposition payload and content type."""
        return generate_latest(self.registry), CONTENT_TYPE_LATEST

