"""Resilient lead submission pipeline."""

__version__ = "1.0.0"
__description__ = (
    "Contact form submission service that never loses a lead: remote "
    "persistence with retries, a durable local fallback queue and "
    "reconciliation once the remote service recovers."
)
