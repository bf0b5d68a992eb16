"""API v1 router aggregation.

This module combines all v1 API routers into a single router
that can be mounted on the main FastAPI application.
"""

from fastapi import APIRouter

from .accounts import router as accounts_router
from .calculators import router as calculators_router
from .catalogs import router as catalogs_router
from .health import router as health_router
from .quotes import router as quotes_router
from .sessions import router as sessions_router

# Create main v1 router
router = APIRouter(prefix="/api/v1")

router.include_router(health_router, tags=["health"])
router.include_router(catalogs_router)
router.include_router(quotes_router)
router.include_router(sessions_router)
router.include_router(accounts_router)
router.include_router(calculators_router, tags=["calculators"])


__all__ = ["router"]
