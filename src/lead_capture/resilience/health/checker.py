"""Health probe implementation for the remote data service."""

import asyncio
import time
from abc import ABC, abstractmethod
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from datetime import UTC, datetime
from enum import Enum
from typing import Any

import structlog

logger = structlog.get_logger()


class HealthStatus(Enum):
    HEALTHY = "healthy"
    UNHEALTHY = "unhealthy"


@dataclass
class HealthCheckResult:
    """Outcome of one probe of the remote service."""

    service_name: str
    status: HealthStatus
    message: str
    timestamp: datetime
    response_time_ms: float
    error: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "service_name": self.service_name,
            "status": self.status.value,
            "message": self.message,
            "timestamp": self.timestamp.isoformat(),
            "response_time_ms": self.response_time_ms,
            "error": self.error,
        }


class HealthChecker(ABC):
    """Base for probes that must answer within ``timeout`` seconds."""

    def __init__(self, service_name: str, timeout: float = 5.0):
        self.service_name = service_name
        self.timeout = timeout

    @abstractmethod
    async def check_health(self) -> HealthCheckResult:
        """Probe the service once."""

    async def run_check(self) -> HealthCheckResult:
        """Run ``check_health`` under the timeout.

        A probe that raises or overruns is reported as unhealthy; this
        method itself does not raise.
        """
        started = time.perf_counter()

        try:
            return await asyncio.wait_for(self.check_health(), timeout=self.timeout)
        except TimeoutError:
            return self._unhealthy("Health check timed out", "Timeout", started)
        except Exception as e:
            return self._unhealthy(f"Health check failed: {e}", str(e), started)

    def _unhealthy(self, message: str, error: str, started: float) -> HealthCheckResult:
        return HealthCheckResult(
            service_name=self.service_name,
            status=HealthStatus.UNHEALTHY,
            message=message,
            timestamp=datetime.now(UTC),
            response_time_ms=(time.perf_counter() - started) * 1000,
            error=error,
        )


class ProbeHealthChecker(HealthChecker):
    """Health checker around a lightweight existence/count query."""

    def __init__(
        self,
        service_name: str,
        probe_func: Callable[[], Awaitable[bool]],
        timeout: float = 5.0,
    ):
        """
        Args:
            service_name: Name of the remote service
            probe_func: Coroutine returning True when the service answered
            timeout: Seconds before the probe counts as failed
        """
        super().__init__(service_name, timeout)
        self.probe_func = probe_func

    async def check_health(self) -> HealthCheckResult:
        started = time.perf_counter()
        answered = await self.probe_func()

        if not answered:
            logger.warning("Health probe rejected", service_name=self.service_name)
            return self._unhealthy(
                "Remote service rejected probe", "Probe rejected", started
            )

        return HealthCheckResult(
            service_name=self.service_name,
            status=HealthStatus.HEALTHY,
            message="Remote service answered probe",
            timestamp=datetime.now(UTC),
            response_time_ms=(time.perf_counter() - started) * 1000,
        )
