"""API v1 module for the lead capture service."""

from . import health, leads, reconciliation

__all__ = [
    "health",
    "leads",
    "reconciliation",
]
