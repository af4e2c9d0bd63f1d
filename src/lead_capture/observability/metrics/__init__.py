"""Metrics collection and exposition."""

from .collectors import MetricsCollector

__all__ = ["MetricsCollector"]
