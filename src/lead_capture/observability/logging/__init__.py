"""Structured logging configuration and utilities."""

from .config import LogFormat, LogLevel, get_logger, setup_logging
from .correlation import (
    CorrelationContext,
    get_correlation_id,
    set_correlation_id,
)

__all__ = [
    "setup_logging",
    "LogLevel",
    "LogFormat",
    "get_logger",
    "CorrelationContext",
    "get_correlation_id",
    "set_correlation_id",
]
