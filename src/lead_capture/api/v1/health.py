"""Health check API endpoints."""

from datetime import UTC, datetime
from typing import Annotated, Any

from fastapi import APIRouter, Depends

from lead_capture import __version__
from lead_capture.api.dependencies import get_gateway
from lead_capture.core.gateway import RemoteGateway

router = APIRouter(prefix="/health", tags=["health"])


@router.get("", response_model=dict[str, Any])
async def health_check(
    gateway: Annotated[RemoteGateway, Depends(get_gateway)],
) -> dict[str, Any]:
    """Liveness plus the last observed remote service state.

    The service stays up while the remote is down; submissions are queued.
    """
    remote = gateway.health_monitor.snapshot()
    return {
        "status": "healthy",
        "timestamp": datetime.now(UTC).isoformat(),
        "version": __version__,
        "remote": {
            "configured": gateway.is_configured,
            **remote.model_dump(mode="json"),
        },
    }


@router.get("/live", response_model=dict[str, str])
async def liveness_check() -> dict[str, str]:
    """Liveness check for Kubernetes."""
    return {
        "status": "alive",
        "timestamp": datetime.now(UTC).isoformat(),
    }


@router.post("/probe", response_model=dict[str, Any])
async def probe_remote(
    gateway: Annotated[RemoteGateway, Depends(get_gateway)],
) -> dict[str, Any]:
    """Probe the remote service now and update the tracked state."""
    result = await gateway.check_health()
    return {
        "probe": result.to_dict(),
        "remote": gateway.health_monitor.snapshot().model_dump(mode="json"),
    }
