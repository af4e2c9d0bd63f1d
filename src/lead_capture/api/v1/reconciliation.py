"""Reconciliation API endpoints."""

from typing import Annotated, Any

from fastapi import APIRouter, Depends

from lead_capture.api.dependencies import get_queue, get_reconciliation_engine
from lead_capture.core.reconciliation.service import ReconciliationEngine
from lead_capture.domain.models import ReconciliationReport
from lead_capture.infrastructure.queue.fallback_queue import FallbackQueue

router = APIRouter(prefix="/reconciliation", tags=["reconciliation"])


@router.get("", response_model=dict[str, Any])
async def reconciliation_status(
    queue: Annotated[FallbackQueue, Depends(get_queue)],
    engine: Annotated[ReconciliationEngine, Depends(get_reconciliation_engine)],
) -> dict[str, Any]:
    """Queue depth and whether a pass is running."""
    entries = queue.list_entries()
    unsynced = [entry for entry in entries if not entry.synced]
    return {
        "total": len(entries),
        "unsynced": len(unsynced),
        "oldest_unsynced": (
            unsynced[0].record.captured_at.isoformat() if unsynced else None
        ),
        "running": engine.is_running,
    }


@router.post("", response_model=ReconciliationReport)
async def run_reconciliation(
    engine: Annotated[ReconciliationEngine, Depends(get_reconciliation_engine)],
) -> ReconciliationReport:
    """Deliver queued submissions now."""
    return await engine.reconcile_once("manual")


@router.delete("/synced", response_model=dict[str, int])
async def purge_synced(
    queue: Annotated[FallbackQueue, Depends(get_queue)],
) -> dict[str, int]:
    """Remove delivered entries from the local queue."""
    return {"removed": queue.purge_synced()}
