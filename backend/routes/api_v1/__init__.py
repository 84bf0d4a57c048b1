"""API v1: gating and readiness endpoints."""

from fastapi import APIRouter

from .gating import router as gating_router
from .readiness import router as readiness_router

router = APIRouter(prefix="/api/v1", tags=["api_v1"])
router.include_router(gating_router)
router.include_router(readiness_router)

api_v1_router = router
