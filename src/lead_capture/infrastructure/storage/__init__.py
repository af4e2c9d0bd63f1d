"""Local durable storage backends."""

from .base import LocalStore, StorageError, StorageUnavailableError
from .file import FileLocalStore
from .memory import InMemoryLocalStore

__all__ = [
    "FileLocalStore",
    "InMemoryLocalStore",
    "LocalStore",
    "StorageError",
    "StorageUnavailableError",
]
