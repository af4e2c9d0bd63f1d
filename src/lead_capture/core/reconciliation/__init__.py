"""Delivery of locally queued submissions after recovery."""

from .scheduler import ReconciliationScheduler
from .service import ReconciliationEngine, synced_copy

__all__ = ["ReconciliationEngine", "ReconciliationScheduler", "synced_copy"]
