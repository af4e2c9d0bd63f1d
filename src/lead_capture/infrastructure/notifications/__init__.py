"""Lead notification channels."""

from .webhook import LeadNotifier, WebhookNotifier

__all__ = ["LeadNotifier", "WebhookNotifier"]
