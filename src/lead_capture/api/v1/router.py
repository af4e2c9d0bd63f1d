"""Main API router that combines all v1 endpoints."""

from fastapi import APIRouter

from lead_capture.api.v1 import health, leads, reconciliation

# Create main v1 router
router = APIRouter(prefix="/api/v1")

# Include all endpoint routers
router.include_router(leads.router)
router.include_router(reconciliation.router)
router.include_router(health.router)
