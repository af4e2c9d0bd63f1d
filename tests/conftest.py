"""Test configuration and fixtures."""

import os
from datetime import UTC, datetime, timedelta

import pytest

# Set required environment variables for tests
os.environ["ENVIRONMENT"] = "testing"

from lead_capture.config.settings import ReconciliationSettings, SubmissionSettings
from lead_capture.core.gateway import RemoteGateway
from lead_capture.core.reconciliation.service import ReconciliationEngine
from lead_capture.core.submissions.service import SubmissionOrchestrator
from lead_capture.domain.models import ContactForm, SubmissionRecord, SubmissionSource
from lead_capture.infrastructure.queue.fallback_queue import FallbackQueue
from lead_capture.infrastructure.remote.memory import InMemoryRemoteStore
from lead_capture.infrastructure.storage.memory import InMemoryLocalStore
from lead_capture.observability.metrics.collectors import MetricsCollector
from lead_capture.resilience.health.monitor import HealthMonitor
from lead_capture.resilience.retry.executor import RetryExecutor


class SleepRecorder:
    """Stand-in for asyncio.sleep that returns immediately."""

    def __init__(self):
        self.delays: list[float] = []

    async def __call__(self, delay: float) -> None:
        self.delays.append(delay)


class FixedClock:
    """Clock that advances one second per reading."""

    def __init__(self, start: datetime | None = None):
        self.now = start or datetime(2024, 1, 1, tzinfo=UTC)

    def __call__(self) -> datetime:
        self.now += timedelta(seconds=1)
        return self.now


def make_record(
    email: str = "ada@example.com",
    source: str = SubmissionSource.TIMEOUT_FALLBACK.value,
    captured_at: datetime | None = None,
) -> SubmissionRecord:
    form = ContactForm(
        first_name="Ada",
        last_name="Lovelace",
        email=email,
        company="Analytical Engines",
    )
    if captured_at is None:
        return SubmissionRecord(form=form, source=source)
    return SubmissionRecord(form=form, source=source, captured_at=captured_at)


@pytest.fixture
def record_factory():
    """Build SubmissionRecords with a complete form."""
    return make_record


@pytest.fixture
def valid_fields():
    """Complete contact form fields."""
    return {
        "first_name": "Ada",
        "last_name": "Lovelace",
        "email": "ada@example.com",
        "company": "Analytical Engines",
        "title": "Head of Lending",
        "message": "Tell me more",
    }


@pytest.fixture
def sleep_recorder():
    return SleepRecorder()


@pytest.fixture
def clock():
    return FixedClock()


@pytest.fixture
def metrics():
    return MetricsCollector()


@pytest.fixture
def remote_store():
    return InMemoryRemoteStore()


@pytest.fixture
def local_store():
    return InMemoryLocalStore()


@pytest.fixture
def queue(local_store):
    return FallbackQueue(local_store)


@pytest.fixture
def health_monitor(clock):
    return HealthMonitor(clock=clock)


@pytest.fixture
def retry_executor(health_monitor, sleep_recorder):
    return RetryExecutor(health_monitor, sleep=sleep_recorder)


@pytest.fixture
def gateway(remote_store, health_monitor, retry_executor, metrics):
    return RemoteGateway(remote_store, health_monitor, retry_executor, metrics=metrics)


@pytest.fixture
def submission_settings():
    return SubmissionSettings(timeout=5.0, max_attempts=3, base_delay=1.0)


@pytest.fixture
def orchestrator(gateway, queue, submission_settings, metrics):
    return SubmissionOrchestrator(
        gateway, queue, settings=submission_settings, metrics=metrics
    )


@pytest.fixture
def reconciliation_settings():
    return ReconciliationSettings(settle_delay=0.0, max_attempts=3, base_delay=1.0)


@pytest.fixture
def engine(gateway, queue, reconciliation_settings, metrics):
    return ReconciliationEngine(
        gateway, queue, settings=reconciliation_settings, metrics=metrics
    )
