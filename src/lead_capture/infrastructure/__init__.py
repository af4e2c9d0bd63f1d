"""Infrastructure layer for the lead capture pipeline."""

# Local durable storage
from .storage import FileLocalStore, InMemoryLocalStore, LocalStore

# Fallback queue
from .queue import FallbackQueue

# Remote data service transports
from .remote import InMemoryRemoteStore, PostgrestRemoteStore, RemoteStore

# Lead notifications
from .notifications import LeadNotifier, WebhookNotifier

__all__ = [
    # Storage
    "FileLocalStore",
    "InMemoryLocalStore",
    "LocalStore",
    # Queue
    "FallbackQueue",
    # Remote
    "InMemoryRemoteStore",
    "PostgrestRemoteStore",
    "RemoteStore",
    # Notifications
    "LeadNotifier",
    "WebhookNotifier",
]
