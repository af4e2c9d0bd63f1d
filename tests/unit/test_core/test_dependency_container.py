"""Tests for the dependency container."""

import pytest

from lead_capture.config.settings import (
    RemoteBackend,
    RemoteServiceSettings,
    TestingSettings,
)
from lead_capture.core.dependency_container import DependencyContainer


class TestDependencyContainer:
    """Test container startup and shutdown."""

    @pytest.mark.asyncio
    async def test_start_seeds_health(self):
        container = DependencyContainer(TestingSettings())

        await container.start()
        try:
            state = container.health_monitor.snapshot()
            assert state.is_healthy is True
            assert state.last_checked_at is not None
        finally:
            await container.shutdown()

    @pytest.mark.asyncio
    async def test_start_seeds_unhealthy_remote(self):
        container = DependencyContainer(TestingSettings())
        await container.initialize()
        container.gateway.store.available = False

        await container.start()
        try:
            state = container.health_monitor.snapshot()
            assert state.is_healthy is False
            assert state.consecutive_failure_count == 1
            assert state.last_error == "Probe rejected"
        finally:
            await container.shutdown()

    @pytest.mark.asyncio
    async def test_start_without_credentials_skips_probe(self):
        settings = TestingSettings(
            remote=RemoteServiceSettings(backend=RemoteBackend.POSTGREST)
        )
        container = DependencyContainer(settings)

        await container.start()
        try:
            state = container.health_monitor.snapshot()
            assert state.last_checked_at is None
            assert state.consecutive_failure_count == 0
        finally:
            await container.shutdown()

    @pytest.mark.asyncio
    async def test_services_unavailable_after_shutdown(self):
        container = DependencyContainer(TestingSettings())
        await container.start()

        await container.shutdown()

        with pytest.raises(RuntimeError):
            container.gateway
