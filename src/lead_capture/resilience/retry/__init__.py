"""Retry mechanisms for remote service calls.

This module provides bounded retries with exponential backoff and
error classification, built on the tenacity library.
"""

from .classifier import ErrorClassifier
from .config import RetryConfig
from .executor import RetryExecutor

__all__ = [
    "ErrorClassifier",
    "RetryConfig",
    "RetryExecutor",
]
