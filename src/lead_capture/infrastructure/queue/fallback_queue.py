"""
Durable fallback queue for submissions not yet confirmed remotely.

The whole queue is one JSON list under a single key of a LocalStore. Every
mutation reads the list, changes it and writes it back; order is capture
order and is never changed. The only mutation of an existing entry is
flipping ``synced`` from false to true.
"""

import json
from uuid import UUID

import structlog
from pydantic import TypeAdapter, ValidationError

from lead_capture.domain.exceptions import QueueIOError
from lead_capture.domain.models import QueueEntry, SubmissionRecord
from lead_capture.infrastructure.queue.legacy import parse_legacy_bucket
from lead_capture.infrastructure.storage.base import LocalStore, StorageError

logger = structlog.get_logger()

_entries_adapter = TypeAdapter(list[QueueEntry])


class FallbackQueue:
    """FIFO list of QueueEntry persisted in a LocalStore."""

    def __init__(self, store: LocalStore, key: str = "lead_submission_queue"):
        self.store = store
        self.key = key

    # Storage helpers
    def _load(self) -> list[QueueEntry]:
        try:
            raw = self.store.read(self.key)
        except StorageError as e:
            raise QueueIOError(str(e), self.key, "read") from e

        if raw is None or not raw.strip():
            return []

        try:
            return _entries_adapter.validate_json(raw)
        except ValidationError as e:
            raise QueueIOError(
                f"Queue data is corrupt: {e.error_count()} errors", self.key, "parse"
            ) from e

    def _save(self, entries: list[QueueEntry]) -> None:
        payload = _entries_adapter.dump_json(entries).decode("utf-8")
        try:
            self.store.write(self.key, payload)
        except StorageError as e:
            raise QueueIOError(str(e), self.key, "write") from e

    # Queue operations
    def enqueue(self, record: SubmissionRecord) -> QueueEntry:
        """Append a record at the end of the queue.

        A record whose id is already queued is not added a second time; the
        existing entry is returned instead.
        """
        entries = self._load()

        for existing in entries:
            if existing.id == record.id:
                logger.warning("Record already queued", submission_id=str(record.id))
                return existing

        entry = QueueEntry(record=record)
        entries.append(entry)
        self._save(entries)

        logger.info(
            "Submission queued locally",
            submission_id=str(record.id),
            source=record.source,
            queue_size=len(entries),
        )
        return entry

    def list_unsynced(self) -> list[QueueEntry]:
        """Entries still waiting for delivery, oldest first."""
        return [entry for entry in self._load() if not entry.synced]

    def list_entries(self) -> list[QueueEntry]:
        """All entries, synced or not, oldest first."""
        return self._load()

    def get(self, submission_id: UUID) -> QueueEntry | None:
        for entry in self._load():
            if entry.id == submission_id:
                return entry
        return None

    def is_synced(self, submission_id: UUID) -> bool:
        entry = self.get(submission_id)
        return entry is not None and entry.synced

    def mark_synced(self, submission_id: UUID) -> None:
        """Flag an entry as delivered. Idempotent."""
        entries = self._load()

        for index, entry in enumerate(entries):
            if entry.id != submission_id:
                continue
            if entry.synced:
                return
            entries[index] = entry.model_copy(update={"synced": True})
            self._save(entries)
            logger.info("Queue entry marked synced", submission_id=str(submission_id))
            return

        logger.warning("Queue entry not found", submission_id=str(submission_id))

    def purge_synced(self) -> int:
        """Remove delivered entries and return how many were removed."""
        entries = self._load()
        remaining = [entry for entry in entries if not entry.synced]
        removed = len(entries) - len(remaining)

        if removed:
            self._save(remaining)
            logger.info("Purged synced queue entries", removed=removed)
        return removed

    def size(self) -> int:
        return len(self._load())

    def migrate_legacy(self, keys: list[str]) -> int:
        """Fold legacy buckets into this queue once.

        Unsynced legacy items are appended (oldest first) unless their
        derived id is already present. A bucket is removed after import;
        items that could not be parsed are written back to it untouched.

        Returns:
            Number of entries added to the queue
        """
        migrated = 0

        for key in keys:
            if key == self.key:
                continue
            try:
                raw = self.store.read(key)
            except StorageError as e:
                raise QueueIOError(str(e), key, "read") from e
            if raw is None:
                continue

            parsed, rejected = parse_legacy_bucket(key, raw)
            entries = self._load()
            known = {entry.id for entry in entries}
            new_entries = sorted(
                (e for e in parsed if not e.synced and e.id not in known),
                key=lambda e: e.record.captured_at,
            )

            if new_entries:
                entries.extend(new_entries)
                self._save(entries)

            try:
                if rejected:
                    self.store.write(key, json.dumps(rejected))
                else:
                    self.store.delete(key)
            except StorageError as e:
                raise QueueIOError(str(e), key, "write") from e

            migrated += len(new_entries)
            logger.info(
                "Legacy bucket migrated",
                bucket=key,
                migrated=len(new_entries),
                already_synced=sum(1 for e in parsed if e.synced),
                rejected=len(rejected),
            )

        return migrated
