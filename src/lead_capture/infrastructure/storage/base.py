"""
Local key/value store interface for durable client-side data.

The store has no append or transaction primitive: callers read a whole
value, change it and write the whole value back.
"""

from typing import Protocol


class LocalStore(Protocol):
    """Key/value store holding serialized strings."""

    def read(self, key: str) -> str | None:
        """Return the stored value, or None if the key was never written."""
        ...

    def write(self, key: str, value: str) -> None:
        """Replace the stored value."""
        ...

    def delete(self, key: str) -> None:
        """Remove the key. Missing keys are ignored."""
        ...


class StorageError(Exception):
    """Base exception for local store operations."""

    pass


class StorageUnavailableError(StorageError):
    """Storage is disabled, full or otherwise unusable."""

    pass
