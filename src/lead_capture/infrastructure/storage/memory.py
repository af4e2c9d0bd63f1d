"""
In-memory local store for development and testing.

Values live only as long as the process. ``fail_reads`` and ``fail_writes``
simulate disabled or full storage.
"""

from lead_capture.infrastructure.storage.base import StorageUnavailableError


class InMemoryLocalStore:
    """Dictionary-backed local store."""

    def __init__(self, initial: dict[str, str] | None = None) -> None:
        self._data: dict[str, str] = dict(initial or {})
        self.fail_reads = False
        self.fail_writes = False

    def read(self, key: str) -> str | None:
        if self.fail_reads:
            raise StorageUnavailableError("Storage is disabled")
        return self._data.get(key)

    def write(self, key: str, value: str) -> None:
        if self.fail_writes:
            raise StorageUnavailableError("Storage quota exceeded")
        self._data[key] = value

    def delete(self, key: str) -> None:
        if self.fail_writes:
            raise StorageUnavailableError("Storage is disabled")
        self._data.pop(key, None)

    def keys(self) -> list[str]:
        return list(self._data)
