"""Triggers for reconciliation passes."""

import asyncio

import structlog

from lead_capture.config.settings import ReconciliationSettings
from lead_capture.domain.models import HealthState
from lead_capture.resilience.health.monitor import HealthMonitor

from .service import ReconciliationEngine

logger = structlog.get_logger()


class ReconciliationScheduler:
    """Runs reconciliation at startup and whenever the remote recovers.

    The startup pass waits for the settle delay first. Recovery passes are
    started from the health monitor's unhealthy to healthy transition; the
    engine itself skips a pass if one is already running.
    """

    def __init__(
        self,
        engine: ReconciliationEngine,
        health_monitor: HealthMonitor,
        settings: ReconciliationSettings | None = None,
    ):
        self.engine = engine
        self.health_monitor = health_monitor
        self.settings = settings or ReconciliationSettings()
        self._tasks: set[asyncio.Task] = set()
        self._started = False

    def start(self) -> None:
        """Schedule the startup pass and subscribe to recoveries."""
        if self._started or not self.settings.enabled:
            return

        self._started = True
        self._spawn(self._run_after(self.settings.settle_delay, "startup"))

        if self.settings.trigger_on_recovery:
            self.health_monitor.add_recovery_listener(self._on_recovery)

        logger.info(
            "Reconciliation scheduler started",
            settle_delay=self.settings.settle_delay,
            trigger_on_recovery=self.settings.trigger_on_recovery,
        )

    async def stop(self) -> None:
        """Unsubscribe and cancel pending passes."""
        if not self._started:
            return

        self.health_monitor.remove_recovery_listener(self._on_recovery)
        tasks = list(self._tasks)
        for task in tasks:
            task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)

        self._started = False
        logger.info("Reconciliation scheduler stopped")

    def _on_recovery(self, state: HealthState) -> None:
        logger.info("Remote service recovered, scheduling reconciliation")
        self._spawn(self._run_after(0, "recovery"))

    async def _run_after(self, delay: float, trigger: str) -> None:
        if delay > 0:
            await asyncio.sleep(delay)
        await self.engine.reconcile_once(trigger)

    def _spawn(self, coro) -> None:
        try:
            task = asyncio.get_running_loop().create_task(coro)
        except RuntimeError:
            coro.close()
            logger.warning("No running event loop, reconciliation not scheduled")
            return

        self._tasks.add(task)
        task.add_done_callback(self._task_done)

    def _task_done(self, task: asyncio.Task) -> None:
        self._tasks.discard(task)
        if task.cancelled():
            return
        error = task.exception()
        if error is not None:
            logger.error("Reconciliation pass raised", error=str(error))

    @property
    def pending(self) -> int:
        return len(self._tasks)

    async def wait_idle(self) -> None:
        """Wait until every scheduled pass has finished."""
        while self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)
