"""Connection health tracking for the remote data service."""

from collections.abc import Callable
from datetime import UTC, datetime

import structlog

from lead_capture.domain.models import HealthState

from .checker import HealthCheckResult, HealthStatus

logger = structlog.get_logger()

Clock = Callable[[], datetime]
RecoveryListener = Callable[[HealthState], None]


def utc_now() -> datetime:
    return datetime.now(UTC)


class HealthMonitor:
    """Tracks whether the remote service looks reachable.

    State changes come only from locally observed outcomes: the retry
    executor's reports and explicit probes. Nothing here blocks or raises.
    The service starts unhealthy until a first success is observed.
    """

    def __init__(self, clock: Clock = utc_now, service_name: str = "remote"):
        self._clock = clock
        self.service_name = service_name
        self._is_healthy = False
        self._last_checked_at: datetime | None = None
        self._consecutive_failures = 0
        self._last_error: str | None = None
        self._recovery_listeners: list[RecoveryListener] = []

    def record_success(self) -> None:
        """Mark the service healthy and reset the failure count."""
        recovered = not self._is_healthy

        self._is_healthy = True
        self._consecutive_failures = 0
        self._last_error = None
        self._last_checked_at = self._clock()

        if recovered:
            logger.info("Remote service healthy", service_name=self.service_name)
            self._notify_recovery()

    def record_failure(self, error_description: str) -> None:
        """Mark the service unhealthy and remember why."""
        self._is_healthy = False
        self._consecutive_failures += 1
        self._last_error = error_description
        self._last_checked_at = self._clock()

        logger.warning(
            "Remote service failure recorded",
            service_name=self.service_name,
            consecutive_failures=self._consecutive_failures,
            error=error_description,
        )

    def is_healthy(self) -> bool:
        return self._is_healthy

    def snapshot(self) -> HealthState:
        """Immutable copy of the current state."""
        return HealthState(
            is_healthy=self._is_healthy,
            last_checked_at=self._last_checked_at,
            consecutive_failure_count=self._consecutive_failures,
            last_error=self._last_error,
        )

    def apply_probe(self, result: HealthCheckResult) -> None:
        """Fold an explicit health probe into the tracked state."""
        if result.status == HealthStatus.HEALTHY:
            self.record_success()
        else:
            self.record_failure(result.error or result.message)

    def add_recovery_listener(self, listener: RecoveryListener) -> None:
        """Call ``listener`` on every unhealthy to healthy transition."""
        self._recovery_listeners.append(listener)

    def remove_recovery_listener(self, listener: RecoveryListener) -> None:
        if listener in self._recovery_listeners:
            self._recovery_listeners.remove(listener)

    def _notify_recovery(self) -> None:
        state = self.snapshot()
        for listener in list(self._recovery_listeners):
            try:
                listener(state)
            except Exception as e:
                logger.error(
                    "Error in health recovery listener",
                    service_name=self.service_name,
                    error=str(e),
                )
