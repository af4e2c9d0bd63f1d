"""Submission orchestrator for contact form leads."""

import asyncio
from collections.abc import Mapping
from typing import Any

import structlog

from lead_capture.config.settings import SubmissionSettings
from lead_capture.core.gateway import RemoteGateway
from lead_capture.core.submissions.state import SubmissionStateMachine
from lead_capture.domain.exceptions import FormValidationException, QueueIOError
from lead_capture.domain.models import (
    SubmissionOutcome,
    SubmissionRecord,
    SubmissionSource,
    SubmissionState,
    SubmissionStatus,
)
from lead_capture.domain.validation import ContactFormValidator, FormValidator
from lead_capture.infrastructure.notifications.webhook import LeadNotifier
from lead_capture.infrastructure.queue.fallback_queue import FallbackQueue
from lead_capture.observability.logging.correlation import CorrelationContext
from lead_capture.observability.metrics.collectors import MetricsCollector

logger = structlog.get_logger()

SUCCESS_MESSAGE = "Thank you! We'll be in touch within 24 hours."
DEGRADED_MESSAGE = (
    "Thank you! We may be experiencing a delay, but your request was recorded "
    "and we'll be in touch soon."
)
REJECTED_MESSAGE = "Please correct the highlighted fields and try again."


class SubmissionOrchestrator:
    """Drives one form submission from raw fields to an outcome.

    A valid submission is always accepted: it is either confirmed by the
    remote service or written to the fallback queue. The remote attempt
    sequence is raced against a fixed timer and cancelled if the timer wins.
    """

    def __init__(
        self,
        gateway: RemoteGateway,
        queue: FallbackQueue,
        settings: SubmissionSettings | None = None,
        validator: FormValidator | None = None,
        notifier: LeadNotifier | None = None,
        metrics: MetricsCollector | None = None,
    ):
        self.gateway = gateway
        self.queue = queue
        self.settings = settings or SubmissionSettings()
        self.validator = validator or ContactFormValidator(
            self.settings.required_fields, self.settings.require_consent
        )
        self.notifier = notifier
        self.metrics = metrics
        self._background_tasks: set[asyncio.Task] = set()

    async def submit(self, fields: Mapping[str, Any]) -> SubmissionOutcome:
        """Validate and submit one form.

        Args:
            fields: Raw form fields, snake_case or camelCase

        Returns:
            Outcome with status, user message and, for rejected input,
            the field errors
        """
        machine = SubmissionStateMachine()
        machine.transition(SubmissionState.VALIDATING)

        try:
            form = self.validator.validate(fields)
        except FormValidationException as e:
            machine.transition(SubmissionState.REJECTED_INPUT)
            machine.transition(SubmissionState.IDLE)
            logger.info(
                "Submission rejected",
                fields=[error.field for error in e.field_errors],
            )
            self._record_metric(SubmissionStatus.REJECTED_INPUT)
            return SubmissionOutcome(
                status=SubmissionStatus.REJECTED_INPUT,
                user_message=REJECTED_MESSAGE,
                field_errors=e.field_errors,
                state_history=machine.history,
            )

        machine.transition(SubmissionState.SUBMITTING)
        record = SubmissionRecord(form=form)

        with CorrelationContext(str(record.id)):
            logger.info("Submitting lead", submission_id=str(record.id))

            if not self.gateway.is_configured:
                fallback_source: SubmissionSource | None = (
                    SubmissionSource.UNCONFIGURED_FALLBACK
                )
            else:
                fallback_source = await self._race_remote(record)

            if fallback_source is None:
                status = SubmissionStatus.SUCCESS
                machine.transition(SubmissionState.SUCCESS)
                stored = record
            else:
                status = SubmissionStatus.DEGRADED_SUCCESS
                stored = record.with_source(fallback_source.value)
                self._enqueue(stored)
                machine.transition(SubmissionState.DEGRADED_SUCCESS)

            logger.info(
                "Submission accepted",
                submission_id=str(record.id),
                status=status.value,
                source=stored.source,
            )

        self._record_metric(status)
        self._notify(stored, status)

        return SubmissionOutcome(
            status=status,
            user_message=(
                SUCCESS_MESSAGE
                if status == SubmissionStatus.SUCCESS
                else DEGRADED_MESSAGE
            ),
            submission_id=record.id,
            state_history=machine.history,
        )

    async def _race_remote(self, record: SubmissionRecord) -> SubmissionSource | None:
        """Race the remote attempt sequence against the submission timer.

        Returns:
            None when the remote service confirmed the record, otherwise the
            fallback source to queue it under
        """
        task = asyncio.create_task(
            self.gateway.insert(
                record,
                max_attempts=self.settings.max_attempts,
                base_delay=self.settings.base_delay,
            )
        )
        done, _ = await asyncio.wait({task}, timeout=self.settings.timeout)

        if task in done:
            result = task.result()
            if result.success:
                return None
            logger.warning(
                "Remote submission failed, queueing locally",
                submission_id=str(record.id),
                attempts=result.attempts,
                error_kind=result.error_kind.value if result.error_kind else None,
                error=result.error,
            )
            return SubmissionSource.RETRY_EXHAUSTED_FALLBACK

        task.cancel()
        try:
            await task
        except asyncio.CancelledError:
            current = asyncio.current_task()
            if current is not None and current.cancelling():
                raise

        logger.warning(
            "Remote submission timed out, queueing locally",
            submission_id=str(record.id),
            timeout=self.settings.timeout,
        )
        # The next success is then a recovery and triggers reconciliation
        self.gateway.record_timeout(self.settings.timeout)
        return SubmissionSource.TIMEOUT_FALLBACK

    def _enqueue(self, record: SubmissionRecord) -> None:
        try:
            self.queue.enqueue(record)
        except QueueIOError as e:
            # Last resort: the payload only survives in the log
            logger.error(
                "Failed to queue submission locally",
                submission_id=str(record.id),
                operation=e.operation,
                error=str(e),
                record=record.to_remote_payload(),
            )
            if self.metrics:
                self.metrics.record_queue_failure()
            return

        if self.metrics:
            self.metrics.record_queued(record.source)

    def _record_metric(self, status: SubmissionStatus) -> None:
        if self.metrics:
            self.metrics.record_submission(status.value)

    def _notify(self, record: SubmissionRecord, status: SubmissionStatus) -> None:
        if not self.notifier:
            return

        task = asyncio.create_task(self.notifier.notify(record, status))
        self._background_tasks.add(task)
        task.add_done_callback(self._notification_done)

    def _notification_done(self, task: asyncio.Task) -> None:
        self._background_tasks.discard(task)
        if task.cancelled():
            return
        error = task.exception()
        if error is not None:
            logger.error("Lead notifier raised", error=str(error))

    async def shutdown(self) -> None:
        """Wait for outstanding notifications."""
        if self._background_tasks:
            await asyncio.gather(*self._background_tasks, return_exceptions=True)
