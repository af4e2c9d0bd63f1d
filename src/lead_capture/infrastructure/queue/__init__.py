"""Durable fallback queue."""

from .fallback_queue import FallbackQueue
from .legacy import legacy_record_id, parse_legacy_bucket

__all__ = ["FallbackQueue", "legacy_record_id", "parse_legacy_bucket"]
