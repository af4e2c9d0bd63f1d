"""
Post-acceptance lead notifications.

A notifier is told about every accepted submission, delivered or queued.
Notification failures never affect the submission outcome.
"""

from typing import Protocol

import httpx
import structlog

from lead_capture.domain.models import SubmissionRecord, SubmissionStatus

logger = structlog.get_logger()


class LeadNotifier(Protocol):
    """Protocol for lead notification channels."""

    async def notify(self, record: SubmissionRecord, status: SubmissionStatus) -> None:
        ...


class WebhookNotifier:
    """Posts a short lead summary to a webhook."""

    def __init__(
        self,
        webhook_url: str,
        timeout: float = 5.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.webhook_url = webhook_url
        self._client = httpx.AsyncClient(timeout=timeout, transport=transport)

    async def notify(self, record: SubmissionRecord, status: SubmissionStatus) -> None:
        form = record.form
        payload = {
            "submission_id": str(record.id),
            "status": status.value,
            "source": record.source,
            "captured_at": record.captured_at.isoformat(),
            "name": " ".join(filter(None, [form.first_name, form.last_name])),
            "email": form.email,
            "company": form.company,
        }

        try:
            response = await self._client.post(self.webhook_url, json=payload)
            response.raise_for_status()
        except httpx.HTTPError as e:
            logger.warning(
                "Lead notification failed",
                submission_id=str(record.id),
                error=str(e),
            )
            return

        logger.debug("Lead notification sent", submission_id=str(record.id))

    async def close(self) -> None:
        await self._client.aclose()
