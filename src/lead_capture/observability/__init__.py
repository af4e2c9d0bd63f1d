"""Observability infrastructure for logging and metrics."""

from .logging import LogLevel, get_logger, setup_logging
from .metrics import MetricsCollector

__all__ = [
    "setup_logging",
    "get_logger",
    "LogLevel",
    "MetricsCollector",
]
