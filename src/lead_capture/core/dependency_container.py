"""Dependency injection container for managing service instances."""

import asyncio
from typing import Any

import structlog

from lead_capture.config.settings import ApplicationSettings, get_settings
from lead_capture.core.gateway import RemoteGateway
from lead_capture.core.reconciliation.scheduler import ReconciliationScheduler
from lead_capture.core.reconciliation.service import ReconciliationEngine
from lead_capture.core.submissions.service import SubmissionOrchestrator
from lead_capture.domain.exceptions import QueueIOError
from lead_capture.infrastructure.notifications.webhook import WebhookNotifier
from lead_capture.infrastructure.queue.fallback_queue import FallbackQueue
from lead_capture.infrastructure.remote.factory import (
    create_local_store,
    create_remote_store,
)
from lead_capture.observability.metrics.collectors import MetricsCollector
from lead_capture.resilience.health.monitor import HealthMonitor
from lead_capture.resilience.retry.config import RetryConfig
from lead_capture.resilience.retry.executor import RetryExecutor

logger = structlog.get_logger()


class DependencyContainer:
    """Async-safe dependency injection container."""

    def __init__(
        self,
        settings: ApplicationSettings | None = None,
        metrics: MetricsCollector | None = None,
    ) -> None:
        self.settings = settings or get_settings()
        self._metrics = metrics
        self._services: dict[str, Any] = {}
        self._lock = asyncio.Lock()
        self._initialized = False

    async def initialize(self) -> None:
        """Initialize the container and all services."""
        async with self._lock:
            if self._initialized:
                return

            try:
                self._build()
                self._initialized = True
                logger.info(
                    "Dependency container initialized successfully",
                    environment=self.settings.environment.value,
                )
            except Exception as e:
                logger.error("Failed to initialize dependency container", error=str(e))
                raise

    def _build(self) -> None:
        settings = self.settings

        metrics = self._metrics or MetricsCollector()
        health_monitor = HealthMonitor(service_name=settings.remote.table)
        retry_executor = RetryExecutor(
            health_monitor,
            config=RetryConfig(
                max_attempts=settings.submission.max_attempts,
                base_delay=settings.submission.base_delay,
            ),
            service_name=settings.remote.table,
        )
        gateway = RemoteGateway(
            create_remote_store(settings),
            health_monitor,
            retry_executor,
            metrics=metrics,
            probe_timeout=settings.observability.health_check_timeout,
        )
        queue = FallbackQueue(create_local_store(settings), settings.queue.key)

        notifier = None
        if settings.notifications.webhook_url:
            notifier = WebhookNotifier(
                settings.notifications.webhook_url,
                timeout=settings.notifications.timeout,
            )

        orchestrator = SubmissionOrchestrator(
            gateway,
            queue,
            settings=settings.submission,
            notifier=notifier,
            metrics=metrics,
        )
        engine = ReconciliationEngine(
            gateway, queue, settings=settings.reconciliation, metrics=metrics
        )
        scheduler = ReconciliationScheduler(
            engine, health_monitor, settings=settings.reconciliation
        )

        self._services.update(
            {
                "metrics": metrics,
                "health_monitor": health_monitor,
                "gateway": gateway,
                "queue": queue,
                "notifier": notifier,
                "orchestrator": orchestrator,
                "reconciliation_engine": engine,
                "reconciliation_scheduler": scheduler,
            }
        )

    async def start(self) -> None:
        """Run one-time startup work and begin background reconciliation."""
        await self.initialize()

        if self.settings.queue.migrate_legacy_on_startup:
            try:
                migrated = self.queue.migrate_legacy(self.settings.queue.legacy_keys)
            except QueueIOError as e:
                logger.error("Legacy queue migration failed", error=str(e))
            else:
                if migrated:
                    logger.info("Legacy submissions migrated", count=migrated)

        # Seed health before the settle-delayed startup pass
        if self.gateway.is_configured:
            await self.gateway.check_health()

        self.reconciliation_scheduler.start()

    def _get(self, name: str) -> Any:
        if not self._initialized:
            raise RuntimeError("Dependency container not initialized")

        service = self._services.get(name)
        if service is None:
            raise RuntimeError(f"Service not available: {name}")
        return service

    @property
    def metrics(self) -> MetricsCollector:
        return self._get("metrics")

    @property
    def health_monitor(self) -> HealthMonitor:
        return self._get("health_monitor")

    @property
    def gateway(self) -> RemoteGateway:
        return self._get("gateway")

    @property
    def queue(self) -> FallbackQueue:
        return self._get("queue")

    @property
    def orchestrator(self) -> SubmissionOrchestrator:
        return self._get("orchestrator")

    @property
    def reconciliation_engine(self) -> ReconciliationEngine:
        return self._get("reconciliation_engine")

    @property
    def reconciliation_scheduler(self) -> ReconciliationScheduler:
        return self._get("reconciliation_scheduler")

    async def shutdown(self) -> None:
        """Shutdown all services."""
        async with self._lock:
            if not self._initialized:
                return

            await self._services["reconciliation_scheduler"].stop()
            await self._services["orchestrator"].shutdown()
            await self._services["gateway"].close()
            notifier = self._services.get("notifier")
            if notifier is not None:
                await notifier.close()

            self._services.clear()
            self._initialized = False
            logger.info("Dependency container shutdown")


# Global container instance
_container: DependencyContainer | None = None


async def get_container() -> DependencyContainer:
    """Get the global dependency container."""
    global _container
    if _container is None:
        _container = DependencyContainer()
        await _container.initialize()
    return _container


def set_container(container: DependencyContainer | None) -> None:
    """Replace the global container (application startup and tests)."""
    global _container
    _container = container
