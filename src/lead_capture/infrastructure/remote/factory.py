"""
Factory for remote store and local store backends.

Selects implementations from configuration settings.
"""

import structlog

from lead_capture.config.settings import (
    ApplicationSettings,
    QueueBackend,
    RemoteBackend,
)
from lead_capture.infrastructure.remote.base import RemoteStore
from lead_capture.infrastructure.remote.memory import InMemoryRemoteStore
from lead_capture.infrastructure.remote.postgrest import PostgrestRemoteStore
from lead_capture.infrastructure.storage.base import LocalStore
from lead_capture.infrastructure.storage.file import FileLocalStore
from lead_capture.infrastructure.storage.memory import InMemoryLocalStore

logger = structlog.get_logger()


def create_remote_store(settings: ApplicationSettings) -> RemoteStore:
    """Create the remote transport for the configured backend."""
    remote_settings = settings.remote

    store: RemoteStore
    if remote_settings.backend == RemoteBackend.MEMORY:
        store = InMemoryRemoteStore()
    else:
        store = PostgrestRemoteStore(remote_settings)
        if not store.is_configured:
            logger.warning(
                "Remote service credentials missing, submissions will be queued locally",
                url=remote_settings.url,
            )

    logger.info(
        "Created remote store",
        backend_type=remote_settings.backend.value,
        environment=settings.environment.value,
    )
    return store


def create_local_store(settings: ApplicationSettings) -> LocalStore:
    """Create the local durable store backing the fallback queue."""
    queue_settings = settings.queue

    store: LocalStore
    if queue_settings.backend == QueueBackend.MEMORY:
        store = InMemoryLocalStore()
    else:
        store = FileLocalStore(queue_settings.directory)

    logger.info(
        "Created local store",
        backend_type=queue_settings.backend.value,
        environment=settings.environment.value,
    )
    return store
