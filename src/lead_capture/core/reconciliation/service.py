"""Reconciliation of locally queued submissions."""

import asyncio

import structlog

from lead_capture.config.settings import ReconciliationSettings
from lead_capture.core.gateway import RemoteGateway
from lead_capture.domain.exceptions import QueueIOError
from lead_capture.domain.models import (
    SYNCED_SOURCE_SUFFIX,
    QueueEntry,
    ReconciliationReport,
    RemoteErrorKind,
    SubmissionRecord,
)
from lead_capture.infrastructure.queue.fallback_queue import FallbackQueue
from lead_capture.observability.logging.correlation import CorrelationContext
from lead_capture.observability.metrics.collectors import MetricsCollector

logger = structlog.get_logger()


def synced_copy(record: SubmissionRecord) -> SubmissionRecord:
    """The record as sent by reconciliation: same id, ``_synced`` source."""
    if record.source.endswith(SYNCED_SOURCE_SUFFIX):
        return record
    return record.with_source(f"{record.source}{SYNCED_SOURCE_SUFFIX}")


class ReconciliationEngine:
    """Delivers unsynced queue entries to the remote service.

    Entries are processed oldest first. An entry is only ever marked
    synced; failures leave it in place for the next pass. Only one pass
    runs at a time.
    """

    def __init__(
        self,
        gateway: RemoteGateway,
        queue: FallbackQueue,
        settings: ReconciliationSettings | None = None,
        metrics: MetricsCollector | None = None,
    ):
        self.gateway = gateway
        self.queue = queue
        self.settings = settings or ReconciliationSettings()
        self.metrics = metrics
        self._lock = asyncio.Lock()

    @property
    def is_running(self) -> bool:
        return self._lock.locked()

    async def reconcile_once(self, trigger: str = "manual") -> ReconciliationReport:
        """Run one pass over the unsynced entries.

        Args:
            trigger: What started the pass, for logs and metrics

        Returns:
            Counts of entries synced and failed, with one message per failure
        """
        if self._lock.locked():
            logger.info("Reconciliation already running, skipping", trigger=trigger)
            return ReconciliationReport(skipped=True)

        async with self._lock:
            report = await self._run_pass(trigger)

        if self.metrics:
            self.metrics.record_reconciliation(report, trigger)
        return report

    async def _run_pass(self, trigger: str) -> ReconciliationReport:
        report = ReconciliationReport()

        if not self.gateway.is_configured:
            logger.info(
                "Remote service not configured, reconciliation skipped",
                trigger=trigger,
            )
            report.errors.append("Remote service not configured")
            return report

        try:
            entries = self.queue.list_unsynced()
        except QueueIOError as e:
            logger.error("Reconciliation could not read queue", error=str(e))
            report.errors.append(f"Queue unavailable: {e}")
            return report

        if not entries:
            logger.debug("Nothing to reconcile", trigger=trigger)
            self._update_depth(0)
            return report

        logger.info("Reconciliation started", trigger=trigger, pending=len(entries))

        for entry in entries:
            await self._reconcile_entry(entry, report)

        if self.settings.purge_after_sync and report.synced and not report.failed:
            try:
                self.queue.purge_synced()
            except QueueIOError as e:
                logger.error("Failed to purge synced entries", error=str(e))
                report.errors.append(f"Purge failed: {e}")

        self._update_depth(report.failed)
        logger.info(
            "Reconciliation finished",
            trigger=trigger,
            synced=report.synced,
            failed=report.failed,
        )
        return report

    async def _reconcile_entry(
        self, entry: QueueEntry, report: ReconciliationReport
    ) -> None:
        submission_id = str(entry.id)

        with CorrelationContext(submission_id):
            # Another path may have delivered it since the list was read
            try:
                if self.queue.is_synced(entry.id):
                    return
            except QueueIOError as e:
                report.failed += 1
                report.errors.append(f"{submission_id}: {e}")
                return

            result = await self.gateway.insert(
                synced_copy(entry.record),
                max_attempts=self.settings.max_attempts,
                base_delay=self.settings.base_delay,
            )

            if not result.success and result.error_kind != RemoteErrorKind.DUPLICATE:
                report.failed += 1
                report.errors.append(f"{submission_id}: {result.error}")
                logger.warning(
                    "Queued submission not delivered",
                    submission_id=submission_id,
                    error_kind=result.error_kind.value if result.error_kind else None,
                    error=result.error,
                )
                return

            if not result.success:
                logger.info(
                    "Queued submission already stored remotely",
                    submission_id=submission_id,
                )

            report.synced += 1
            try:
                self.queue.mark_synced(entry.id)
            except QueueIOError as e:
                # Delivered; the next pass resends and gets a duplicate
                report.errors.append(f"{submission_id}: delivered but not marked: {e}")
                logger.error(
                    "Failed to mark queue entry synced",
                    submission_id=submission_id,
                    error=str(e),
                )

    def _update_depth(self, depth: int) -> None:
        if self.metrics:
            self.metrics.set_queue_depth(depth)
