"""Tests for reconciliation of queued submissions."""

import asyncio

import pytest

from lead_capture.config.settings import ReconciliationSettings, SubmissionSettings
from lead_capture.core.gateway import RemoteGateway
from lead_capture.core.reconciliation import (
    ReconciliationEngine,
    ReconciliationScheduler,
    synced_copy,
)
from lead_capture.core.submissions import SubmissionOrchestrator
from lead_capture.domain.exceptions import QueueIOError
from lead_capture.domain.models import RemoteErrorKind, SubmissionSource
from lead_capture.infrastructure.remote.memory import InMemoryRemoteStore


class TestSyncedCopy:
    def test_suffix_added_once(self, record_factory):
        record = record_factory(source=SubmissionSource.TIMEOUT_FALLBACK.value)

        copy = synced_copy(record)

        assert copy.id == record.id
        assert copy.source == "timeout_fallback_synced"
        assert synced_copy(copy).source == "timeout_fallback_synced"


class TestReconciliationEngine:
    """Test reconciliation passes."""

    @pytest.mark.asyncio
    async def test_delivers_queued_records_in_order(
        self, engine, queue, remote_store, metrics, record_factory
    ):
        """Queued records reach the remote with a _synced source."""
        first = record_factory(email="a@example.com")
        second = record_factory(
            email="b@example.com",
            source=SubmissionSource.RETRY_EXHAUSTED_FALLBACK.value,
        )
        queue.enqueue(first)
        queue.enqueue(second)

        report = await engine.reconcile_once()

        assert report.synced == 2
        assert report.failed == 0
        assert report.errors == []
        assert report.skipped is False

        assert [r.id for r in remote_store.insert_calls] == [first.id, second.id]
        assert remote_store.rows[first.id]["source"] == "timeout_fallback_synced"
        assert remote_store.rows[second.id]["source"] == "retry_exhausted_fallback_synced"

        assert queue.list_unsynced() == []
        assert queue.size() == 2
        assert metrics.sample("reconciliation_runs_total", {"trigger": "manual"}) == 1.0
        assert metrics.sample(
            "reconciliation_entries_total", {"result": "synced"}
        ) == 2.0

    @pytest.mark.asyncio
    async def test_empty_queue(self, engine, remote_store):
        report = await engine.reconcile_once()

        assert report.synced == 0
        assert report.failed == 0
        assert remote_store.insert_calls == []

    @pytest.mark.asyncio
    async def test_duplicate_counts_as_synced(
        self, engine, queue, remote_store, record_factory
    ):
        """A record already stored remotely is marked synced."""
        record = record_factory()
        await remote_store.insert(record)
        queue.enqueue(record)

        report = await engine.reconcile_once()

        assert report.synced == 1
        assert report.failed == 0
        assert queue.is_synced(record.id) is True
        assert len(remote_store.rows) == 1

    @pytest.mark.asyncio
    async def test_failed_entries_stay_queued(
        self, engine, queue, remote_store, sleep_recorder, record_factory
    ):
        """Transient failures leave the entry for the next pass."""
        record = record_factory()
        queue.enqueue(record)
        remote_store.available = False

        report = await engine.reconcile_once()

        assert report.synced == 0
        assert report.failed == 1
        assert report.errors[0].startswith(str(record.id))
        assert [e.id for e in queue.list_unsynced()] == [record.id]
        assert sleep_recorder.delays == [1.0, 2.0]

        remote_store.available = True
        report = await engine.reconcile_once()

        assert report.synced == 1
        assert queue.list_unsynced() == []

    @pytest.mark.asyncio
    async def test_permanent_failure_not_retried(
        self, engine, queue, remote_store, record_factory
    ):
        """A rejected entry fails once and later entries still run."""
        rejected, accepted = record_factory(), record_factory(email="b@example.com")
        queue.enqueue(rejected)
        queue.enqueue(accepted)
        remote_store.fail_next("invalid input syntax", RemoteErrorKind.VALIDATION)

        report = await engine.reconcile_once()

        assert report.synced == 1
        assert report.failed == 1
        assert len(remote_store.insert_calls) == 2
        assert [e.id for e in queue.list_unsynced()] == [rejected.id]

    @pytest.mark.asyncio
    async def test_entry_synced_elsewhere_is_skipped(
        self, engine, queue, remote_store, record_factory, monkeypatch
    ):
        """Entries marked synced after the list was read are not resent."""
        first, second = record_factory(), record_factory(email="b@example.com")
        queue.enqueue(first)
        queue.enqueue(second)
        monkeypatch.setattr(queue, "is_synced", lambda submission_id: submission_id == second.id)

        report = await engine.reconcile_once()

        assert report.synced == 1
        assert [r.id for r in remote_store.insert_calls] == [first.id]

    @pytest.mark.asyncio
    async def test_mark_synced_failure(
        self, engine, queue, remote_store, record_factory, monkeypatch
    ):
        """A delivered entry that cannot be marked still counts as synced."""
        record = record_factory()
        queue.enqueue(record)

        def fail_mark(submission_id):
            raise QueueIOError("Storage quota exceeded", queue.key, "write")

        monkeypatch.setattr(queue, "mark_synced", fail_mark)

        report = await engine.reconcile_once()

        assert report.synced == 1
        assert report.failed == 0
        assert "delivered but not marked" in report.errors[0]
        assert record.id in remote_store.rows

    @pytest.mark.asyncio
    async def test_unreadable_queue(self, engine, local_store, remote_store):
        local_store.fail_reads = True

        report = await engine.reconcile_once()

        assert report.synced == 0
        assert report.errors[0].startswith("Queue unavailable")
        assert remote_store.insert_calls == []

    @pytest.mark.asyncio
    async def test_unconfigured_remote_skips_pass(
        self, health_monitor, retry_executor, queue, record_factory
    ):
        """Without credentials queued entries are left alone."""
        remote_store = InMemoryRemoteStore(configured=False)
        gateway = RemoteGateway(remote_store, health_monitor, retry_executor)
        engine = ReconciliationEngine(gateway, queue)
        record = record_factory(source=SubmissionSource.UNCONFIGURED_FALLBACK.value)
        queue.enqueue(record)

        report = await engine.reconcile_once()

        assert report.synced == 0
        assert report.failed == 0
        assert report.errors == ["Remote service not configured"]
        assert remote_store.insert_calls == []
        assert [entry.id for entry in queue.list_unsynced()] == [record.id]

    @pytest.mark.asyncio
    async def test_concurrent_pass_is_skipped(
        self, engine, queue, remote_store, record_factory
    ):
        """Only one pass runs at a time."""
        queue.enqueue(record_factory())
        remote_store.hang = True

        running = asyncio.create_task(engine.reconcile_once())
        while not remote_store.insert_calls:
            await asyncio.sleep(0)

        assert engine.is_running is True
        report = await engine.reconcile_once()
        assert report.skipped is True
        assert report.synced == 0

        running.cancel()
        with pytest.raises(asyncio.CancelledError):
            await running

        assert engine.is_running is False
        assert len(queue.list_unsynced()) == 1

    @pytest.mark.asyncio
    async def test_purge_after_sync(self, gateway, queue, record_factory):
        engine = ReconciliationEngine(
            gateway,
            queue,
            settings=ReconciliationSettings(purge_after_sync=True, base_delay=0.0),
        )
        queue.enqueue(record_factory())
        queue.enqueue(record_factory(email="b@example.com"))

        report = await engine.reconcile_once()

        assert report.synced == 2
        assert queue.size() == 0

    @pytest.mark.asyncio
    async def test_no_purge_after_partial_pass(
        self, gateway, queue, remote_store, record_factory
    ):
        engine = ReconciliationEngine(
            gateway,
            queue,
            settings=ReconciliationSettings(purge_after_sync=True, base_delay=0.0),
        )
        queue.enqueue(record_factory())
        queue.enqueue(record_factory(email="b@example.com"))
        remote_store.fail_next("permission denied", RemoteErrorKind.AUTHORIZATION)

        await engine.reconcile_once()

        assert queue.size() == 2


class TestReconciliationScheduler:
    """Test reconciliation triggers."""

    @pytest.mark.asyncio
    async def test_startup_pass(
        self, engine, health_monitor, queue, remote_store, record_factory
    ):
        record = record_factory()
        queue.enqueue(record)
        scheduler = ReconciliationScheduler(
            engine, health_monitor, ReconciliationSettings(settle_delay=0.0)
        )

        scheduler.start()
        await scheduler.wait_idle()

        assert record.id in remote_store.rows
        assert queue.list_unsynced() == []
        await scheduler.stop()

    @pytest.mark.asyncio
    async def test_recovery_triggers_pass(
        self, engine, health_monitor, queue, remote_store, record_factory
    ):
        scheduler = ReconciliationScheduler(
            engine, health_monitor, ReconciliationSettings(settle_delay=0.0)
        )
        scheduler.start()
        await scheduler.wait_idle()

        record = record_factory()
        queue.enqueue(record)
        health_monitor.record_failure("offline")
        health_monitor.record_success()

        assert scheduler.pending == 1
        await scheduler.wait_idle()

        assert record.id in remote_store.rows
        await scheduler.stop()

    @pytest.mark.asyncio
    async def test_disabled(self, engine, health_monitor):
        scheduler = ReconciliationScheduler(
            engine, health_monitor, ReconciliationSettings(enabled=False)
        )

        scheduler.start()
        health_monitor.record_success()

        assert scheduler.pending == 0

    @pytest.mark.asyncio
    async def test_stop_cancels_pending_pass(self, engine, health_monitor):
        scheduler = ReconciliationScheduler(
            engine, health_monitor, ReconciliationSettings(settle_delay=30.0)
        )
        scheduler.start()
        assert scheduler.pending == 1

        await scheduler.stop()
        health_monitor.record_success()

        assert scheduler.pending == 0

    def test_start_without_event_loop(self, engine, health_monitor):
        """Outside a running loop nothing is scheduled."""
        scheduler = ReconciliationScheduler(
            engine,
            health_monitor,
            ReconciliationSettings(trigger_on_recovery=False),
        )

        scheduler.start()

        assert scheduler.pending == 0

    @pytest.mark.asyncio
    async def test_timed_out_submission_reconciled_after_traffic(
        self, engine, gateway, health_monitor, queue, remote_store, valid_fields
    ):
        """A timeout while healthy is drained once a later submit succeeds."""
        scheduler = ReconciliationScheduler(
            engine, health_monitor, ReconciliationSettings(settle_delay=0.0)
        )
        orchestrator = SubmissionOrchestrator(
            gateway, queue, settings=SubmissionSettings(timeout=0.05)
        )
        scheduler.start()
        await scheduler.wait_idle()

        await orchestrator.submit(valid_fields)
        assert health_monitor.is_healthy() is True

        remote_store.hang = True
        timed_out = await orchestrator.submit(valid_fields)
        assert queue.list_unsynced()[0].id == timed_out.submission_id

        remote_store.hang = False
        await orchestrator.submit(valid_fields)
        await scheduler.wait_idle()

        assert queue.list_unsynced() == []
        row = remote_store.rows[timed_out.submission_id]
        assert row["source"] == "timeout_fallback_synced"
        await scheduler.stop()
