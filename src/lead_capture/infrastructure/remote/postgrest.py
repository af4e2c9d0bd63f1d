"""
PostgREST transport for the hosted contact_forms table.

Speaks the Supabase REST dialect: ``POST /rest/v1/<table>`` with the project
key in both the ``apikey`` and bearer headers. The record id is sent as the
primary key, so a repeated insert of the same record comes back as a
unique-violation.
"""

from typing import Any

import httpx
import structlog

from lead_capture.config.settings import RemoteServiceSettings
from lead_capture.domain.models import (
    InsertResult,
    RemoteErrorKind,
    SubmissionRecord,
)

logger = structlog.get_logger()

# Postgres error code for unique_violation
UNIQUE_VIOLATION = "23505"


def kind_for_response(status_code: int, body: dict[str, Any]) -> RemoteErrorKind:
    """Classify a non-2xx PostgREST response."""
    if status_code == 409 or body.get("code") == UNIQUE_VIOLATION:
        return RemoteErrorKind.DUPLICATE
    if status_code in (401, 403):
        return RemoteErrorKind.AUTHORIZATION
    if status_code in (400, 422):
        return RemoteErrorKind.VALIDATION
    return RemoteErrorKind.TRANSIENT


def _error_body(response: httpx.Response) -> dict[str, Any]:
    try:
        body = response.json()
    except ValueError:
        return {"message": response.text}
    return body if isinstance(body, dict) else {"message": str(body)}


class PostgrestRemoteStore:
    """httpx-based RemoteStore for a PostgREST endpoint."""

    def __init__(
        self,
        settings: RemoteServiceSettings,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.settings = settings
        self.table = settings.table
        self._client = httpx.AsyncClient(
            base_url=settings.url.rstrip("/"),
            timeout=settings.request_timeout,
            headers=self._default_headers(),
            transport=transport,
        )

    def _default_headers(self) -> dict[str, str]:
        return {
            "apikey": self.settings.api_key,
            "Authorization": f"Bearer {self.settings.api_key}",
            "Content-Type": "application/json",
            "X-Client-Source": self.settings.client_source,
            "X-Client-Version": self.settings.client_version,
        }

    @property
    def is_configured(self) -> bool:
        return self.settings.is_configured

    async def insert(self, record: SubmissionRecord) -> InsertResult:
        """Insert the record and return the stored row."""
        try:
            response = await self._client.post(
                f"/rest/v1/{self.table}",
                json=record.to_remote_payload(),
                headers={"Prefer": "return=representation"},
            )
        except httpx.TimeoutException as e:
            return InsertResult.failed(
                f"Request timed out: {e}", RemoteErrorKind.TRANSIENT
            )
        except httpx.TransportError as e:
            return InsertResult.failed(
                f"Network error: {e}", RemoteErrorKind.TRANSIENT
            )

        if response.is_success:
            try:
                rows = response.json() if response.content else []
            except ValueError:
                rows = []
            stored = rows[0] if isinstance(rows, list) and rows else rows
            if not isinstance(stored, dict) or not stored:
                stored = record.to_remote_payload()
            return InsertResult.ok(stored)

        body = _error_body(response)
        kind = kind_for_response(response.status_code, body)
        message = body.get("message") or f"HTTP {response.status_code}"

        logger.warning(
            "Remote insert rejected",
            table=self.table,
            submission_id=str(record.id),
            status_code=response.status_code,
            error_kind=kind.value,
            error_code=body.get("code"),
        )
        return InsertResult.failed(f"{message} (HTTP {response.status_code})", kind)

    async def probe(self) -> bool:
        """Count query against the table, no rows transferred."""
        try:
            response = await self._client.head(
                f"/rest/v1/{self.table}",
                params={"select": "id"},
                headers={"Prefer": "count=exact", "Range": "0-0"},
            )
        except httpx.HTTPError as e:
            logger.warning("Remote probe failed", table=self.table, error=str(e))
            return False
        return response.is_success

    async def close(self) -> None:
        await self._client.aclose()
