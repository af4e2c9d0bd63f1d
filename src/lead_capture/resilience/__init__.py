"""Resilience patterns for the remote data service.

This module provides health tracking and classification-aware retries used
by both the direct submission path and reconciliation.
"""

from .exceptions import (
    PermanentRemoteError,
    RemoteServiceException,
    TransientRemoteError,
    error_from_kind,
)
from .health import HealthMonitor, ProbeHealthChecker
from .retry import ErrorClassifier, RetryConfig, RetryExecutor

__all__ = [
    "ErrorClassifier",
    "HealthMonitor",
    "PermanentRemoteError",
    "ProbeHealthChecker",
    "RemoteServiceException",
    "RetryConfig",
    "RetryExecutor",
    "TransientRemoteError",
    "error_from_kind",
]
