"""
In-memory remote store implementation for development and testing.

Stores rows keyed by record id and rejects repeats as duplicates, like a
primary key would. Failures and hangs can be scripted to simulate an
outage.
"""

import asyncio
from collections import deque
from typing import Any
from uuid import UUID

from lead_capture.domain.models import (
    InsertResult,
    RemoteErrorKind,
    SubmissionRecord,
)


class InMemoryRemoteStore:
    """Dictionary-backed RemoteStore."""

    def __init__(self, configured: bool = True):
        self.rows: dict[UUID, dict[str, Any]] = {}
        self.insert_calls: list[SubmissionRecord] = []
        self.available = True
        self.hang = False
        self._configured = configured
        self._scripted: deque[InsertResult] = deque()

    @property
    def is_configured(self) -> bool:
        return self._configured

    def fail_next(self, message: str, kind: RemoteErrorKind, times: int = 1) -> None:
        """Make the next ``times`` inserts fail with the given error."""
        for _ in range(times):
            self._scripted.append(InsertResult.failed(message, kind))

    async def insert(self, record: SubmissionRecord) -> InsertResult:
        self.insert_calls.append(record)

        if self.hang:
            # Never completes; only cancellation ends the call
            await asyncio.Event().wait()
        if self._scripted:
            return self._scripted.popleft()
        if not self.available:
            return InsertResult.failed(
                "Service unavailable", RemoteErrorKind.TRANSIENT
            )
        if record.id in self.rows:
            return InsertResult.failed(
                f'duplicate key value violates unique constraint "pkey" ({record.id})',
                RemoteErrorKind.DUPLICATE,
            )

        row = record.to_remote_payload()
        self.rows[record.id] = row
        return InsertResult.ok(row)

    async def probe(self) -> bool:
        return self.available and not self.hang

    async def close(self) -> None:
        pass
