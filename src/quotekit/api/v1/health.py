"""Health check endpoint."""

from datetime import datetime, timezone

from beartype import beartype
from fastapi import APIRouter, Depends

from ... import __version__
from ...schemas.common import HealthResponse
from ..dependencies import Services, get_services

router = APIRouter()


@router.get("/health", response_model=HealthResponse)
@beartype
async def health_check(services: Services = Depends(get_services)) -> HealthResponse:
    """Report liveness and which optional integrations are configured."""
    catalogs_loaded = len(services.catalog_store)
    return HealthResponse(
        status="healthy" if catalogs_loaded else "degraded",
        timestamp=datetime.now(timezone.utc),
        version=__version__,
        catalogs_loaded=catalogs_loaded,
        email_enabled=services.settings.email_enabled,
        extraction_enabled=bool(services.settings.openai_api_key),
    )
