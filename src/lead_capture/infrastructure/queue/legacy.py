"""
Import of legacy submission buckets.

Older clients kept unconfirmed submissions under separate keys
(``pending_submissions`` and ``contact_submissions``) as JSON lists of
``{id, timestamp, form_data, source, synced}`` objects with camelCase form
fields. Those buckets are read once and folded into the unified queue.
"""

import json
from datetime import UTC, datetime
from typing import Any
from uuid import NAMESPACE_URL, uuid5

import structlog
from pydantic import ValidationError

from lead_capture.domain.models import (
    ContactForm,
    QueueEntry,
    SubmissionRecord,
    SubmissionSource,
)

logger = structlog.get_logger()

# Legacy form keys that map onto a differently named field
LEGACY_FIELD_ALIASES = {
    "role": "title",
    "urgency": "timeline",
}


def legacy_record_id(bucket: str, legacy_id: str, timestamp: str) -> str:
    """Deterministic id so repeated imports never produce a second copy.

    Legacy ids were millisecond timestamps and can collide across buckets,
    so the bucket name is part of the seed.
    """
    return str(uuid5(NAMESPACE_URL, f"lead-capture:{bucket}:{legacy_id}:{timestamp}"))


def _parse_timestamp(value: Any) -> datetime:
    if not value:
        return datetime.now(UTC)
    parsed = datetime.fromisoformat(str(value).replace("Z", "+00:00"))
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=UTC)
    return parsed


def _form_fields(form_data: dict[str, Any]) -> dict[str, Any]:
    known = set(ContactForm.model_fields)
    aliases = {
        field.alias: name
        for name, field in ContactForm.model_fields.items()
        if field.alias
    }

    fields: dict[str, Any] = {}
    for key, value in form_data.items():
        if value in (None, ""):
            continue
        name = aliases.get(key, key)
        name = LEGACY_FIELD_ALIASES.get(name, name)
        if key == "name" or name == "name":
            fields["name"] = value
        elif name in known and name not in fields:
            fields[name] = value if name == "consent_given" else str(value)
    return fields


def parse_legacy_item(bucket: str, item: dict[str, Any]) -> QueueEntry:
    """Convert one legacy bucket item into a queue entry."""
    legacy_id = str(item["id"])
    timestamp = item.get("timestamp") or ""
    form = ContactForm.model_validate(_form_fields(dict(item.get("form_data") or {})))

    record = SubmissionRecord(
        id=legacy_record_id(bucket, legacy_id, timestamp),
        captured_at=_parse_timestamp(timestamp),
        source=item.get("source") or SubmissionSource.LEGACY_MIGRATION.value,
        form=form,
    )
    return QueueEntry(record=record, synced=bool(item.get("synced", False)))


def parse_legacy_bucket(
    bucket: str, raw: str
) -> tuple[list[QueueEntry], list[Any]]:
    """Parse a legacy bucket.

    Returns:
        Entries that converted cleanly, and the raw items that did not.
    """
    try:
        items = json.loads(raw)
    except json.JSONDecodeError as e:
        logger.error("Legacy bucket is not valid JSON", bucket=bucket, error=str(e))
        return [], [raw]

    if not isinstance(items, list):
        logger.error("Legacy bucket is not a list", bucket=bucket)
        return [], [items]

    entries: list[QueueEntry] = []
    rejected: list[Any] = []
    for item in items:
        try:
            entries.append(parse_legacy_item(bucket, item))
        except (KeyError, TypeError, ValueError, ValidationError) as e:
            logger.warning(
                "Skipping unreadable legacy submission",
                bucket=bucket,
                error=str(e),
            )
            rejected.append(item)

    return entries, rejected
