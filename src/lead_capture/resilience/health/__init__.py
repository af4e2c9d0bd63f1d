"""Health tracking for the remote data service.

The monitor keeps a process-scoped view of remote reachability built from
observed outcomes; checkers run explicit probes that feed the same state.
"""

from .checker import HealthChecker, HealthCheckResult, HealthStatus, ProbeHealthChecker
from .monitor import HealthMonitor, utc_now

__all__ = [
    "HealthChecker",
    "HealthCheckResult",
    "HealthMonitor",
    "HealthStatus",
    "ProbeHealthChecker",
    "utc_now",
]
