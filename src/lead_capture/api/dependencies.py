"""Shared API dependencies."""

import structlog
from fastapi import HTTPException

from lead_capture.config.settings import ApplicationSettings, get_settings
from lead_capture.core.dependency_container import DependencyContainer, get_container
from lead_capture.core.gateway import RemoteGateway
from lead_capture.core.reconciliation.service import ReconciliationEngine
from lead_capture.core.submissions.service import SubmissionOrchestrator
from lead_capture.infrastructure.queue.fallback_queue import FallbackQueue

logger = structlog.get_logger()


async def get_container_dependency() -> DependencyContainer:
    """Get the initialized dependency container."""
    try:
        return await get_container()
    except Exception as e:
        logger.error("Failed to get dependency container", error=str(e))
        raise HTTPException(status_code=500, detail="Service unavailable")


async def get_orchestrator() -> SubmissionOrchestrator:
    """Get submission orchestrator instance from dependency container."""
    container = await get_container_dependency()
    return container.orchestrator


async def get_reconciliation_engine() -> ReconciliationEngine:
    """Get reconciliation engine instance from dependency container."""
    container = await get_container_dependency()
    return container.reconciliation_engine


async def get_queue() -> FallbackQueue:
    """Get fallback queue instance from dependency container."""
    container = await get_container_dependency()
    return container.queue


async def get_gateway() -> RemoteGateway:
    """Get remote gateway instance from dependency container."""
    container = await get_container_dependency()
    return container.gateway


def get_settings_dependency() -> ApplicationSettings:
    """Get application settings dependency."""
    return get_settings()
