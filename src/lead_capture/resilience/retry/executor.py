"""Bounded retry execution with exponential backoff."""

import asyncio
from collections.abc import Awaitable, Callable
from typing import Any

import structlog
from tenacity import (
    AsyncRetrying,
    RetryCallState,
    retry_if_exception,
    stop_after_attempt,
    wait_exponential,
)

from lead_capture.domain.models import RetryResult

from ..health.monitor import HealthMonitor
from .classifier import ErrorClassifier
from .config import RetryConfig

logger = structlog.get_logger()

SleepFunc = Callable[[float], Awaitable[None]]


class RetryExecutor:
    """Runs a remote operation under a classification-aware retry policy.

    Every call ends in exactly one health report: ``record_success`` on the
    first successful attempt, ``record_failure`` once the executor gives up.
    ``execute_with_retry`` never raises; task cancellation is the only thing
    that propagates.
    """

    def __init__(
        self,
        health_monitor: HealthMonitor,
        config: RetryConfig | None = None,
        classifier: ErrorClassifier | None = None,
        sleep: SleepFunc = asyncio.sleep,
        service_name: str = "remote",
    ):
        self.health_monitor = health_monitor
        self.config = config or RetryConfig()
        self.classifier = classifier or ErrorClassifier()
        self.service_name = service_name
        self._sleep = sleep

    async def execute_with_retry(
        self,
        operation: Callable[[], Awaitable[Any]],
        max_attempts: int | None = None,
        base_delay: float | None = None,
    ) -> RetryResult:
        """Run ``operation`` until it succeeds, fails permanently or runs out.

        Args:
            operation: Zero-argument coroutine function performing one attempt
            max_attempts: Attempt limit, defaults to the configured policy
            base_delay: Delay before the second attempt, doubled afterwards

        Returns:
            RetryResult with the operation's value or the last error
        """
        config = self._resolve_config(max_attempts, base_delay)
        attempts = 0

        retrying = AsyncRetrying(
            stop=stop_after_attempt(config.max_attempts),
            wait=wait_exponential(
                multiplier=config.base_delay,
                exp_base=config.multiplier,
                max=config.max_delay,
            ),
            retry=retry_if_exception(self.classifier.is_transient),
            sleep=self._sleep,
            before_sleep=self._log_retry,
            reraise=True,
        )

        try:
            async for attempt in retrying:
                with attempt:
                    attempts = attempt.retry_state.attempt_number
                    value = await operation()
        except asyncio.CancelledError:
            logger.info(
                "Remote operation cancelled",
                service_name=self.service_name,
                attempts=attempts,
            )
            raise
        except Exception as error:
            kind = self.classifier.classify(error)
            message = str(error) or type(error).__name__
            self.health_monitor.record_failure(message)

            logger.error(
                "Remote operation failed",
                service_name=self.service_name,
                attempts=attempts,
                max_attempts=config.max_attempts,
                error_kind=kind.value,
                error_message=message,
            )
            return RetryResult(
                success=False, error=message, error_kind=kind, attempts=attempts
            )

        self.health_monitor.record_success()
        if attempts > 1:
            logger.info(
                "Remote operation succeeded after retries",
                service_name=self.service_name,
                attempts=attempts,
            )
        return RetryResult(success=True, value=value, attempts=attempts)

    def _resolve_config(
        self, max_attempts: int | None, base_delay: float | None
    ) -> RetryConfig:
        if max_attempts is None and base_delay is None:
            return self.config

        base = self.config.base_delay if base_delay is None else base_delay
        return self.config.model_copy(
            update={
                "max_attempts": max_attempts or self.config.max_attempts,
                "base_delay": base,
                "max_delay": max(self.config.max_delay, base),
            }
        )

    def _log_retry(self, retry_state: RetryCallState) -> None:
        error = retry_state.outcome.exception() if retry_state.outcome else None
        delay = retry_state.next_action.sleep if retry_state.next_action else 0.0
        logger.warning(
            "Remote operation failed, retrying",
            service_name=self.service_name,
            attempt=retry_state.attempt_number,
            delay=delay,
            error_type=type(error).__name__ if error else None,
            error_message=str(error) if error else None,
        )
