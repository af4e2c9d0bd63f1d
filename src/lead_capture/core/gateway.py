"""Remote gateway: the one place remote inserts and probes go through."""

import asyncio

import structlog

from lead_capture.domain.models import (
    InsertResult,
    RemoteErrorKind,
    RetryResult,
    SubmissionRecord,
)
from lead_capture.infrastructure.remote.base import RemoteStore
from lead_capture.observability.metrics.collectors import MetricsCollector
from lead_capture.resilience.exceptions import error_from_kind
from lead_capture.resilience.health.checker import HealthCheckResult, ProbeHealthChecker
from lead_capture.resilience.health.monitor import HealthMonitor
from lead_capture.resilience.retry.executor import RetryExecutor

logger = structlog.get_logger()


class RemoteGateway:
    """Bundles the remote transport with health tracking and retries.

    Built once per application by the dependency container and shared by
    the submission orchestrator and the reconciliation engine, so both
    paths feed the same health state.
    """

    def __init__(
        self,
        store: RemoteStore,
        health_monitor: HealthMonitor,
        retry_executor: RetryExecutor,
        metrics: MetricsCollector | None = None,
        probe_timeout: float = 5.0,
    ):
        self.store = store
        self.health_monitor = health_monitor
        self.retry_executor = retry_executor
        self.metrics = metrics
        self._checker = ProbeHealthChecker(
            health_monitor.service_name, store.probe, timeout=probe_timeout
        )

    @property
    def is_configured(self) -> bool:
        return self.store.is_configured

    async def insert(
        self,
        record: SubmissionRecord,
        max_attempts: int | None = None,
        base_delay: float | None = None,
    ) -> RetryResult:
        """Insert a record under the retry policy.

        The result's ``value`` is the stored row on success.
        """

        async def attempt() -> dict:
            result: InsertResult = await self.store.insert(record)
            if not result.success:
                raise error_from_kind(
                    result.error_message or "Remote insert failed",
                    result.error_kind or RemoteErrorKind.TRANSIENT,
                )
            return result.stored_record or {}

        try:
            result = await self.retry_executor.execute_with_retry(
                attempt, max_attempts=max_attempts, base_delay=base_delay
            )
        except asyncio.CancelledError:
            if self.metrics:
                self.metrics.record_remote_cancelled()
            raise

        if self.metrics:
            self.metrics.record_remote_result(result)
            self.metrics.set_remote_health(self.health_monitor.is_healthy())
        return result

    def record_timeout(self, timeout: float) -> None:
        """Count a remote call abandoned by the submission timer as a failure."""
        self.health_monitor.record_failure(
            f"Remote insert timed out after {timeout}s"
        )
        if self.metrics:
            self.metrics.set_remote_health(self.health_monitor.is_healthy())

    async def check_health(self) -> HealthCheckResult:
        """Run an explicit probe and fold it into the health state."""
        result = await self._checker.run_check()
        self.health_monitor.apply_probe(result)

        if self.metrics:
            self.metrics.set_remote_health(self.health_monitor.is_healthy())

        logger.info(
            "Remote health probe finished",
            status=result.status.value,
            response_time_ms=round(result.response_time_ms, 2),
        )
        return result

    async def close(self) -> None:
        await self.store.close()
