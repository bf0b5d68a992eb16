"""QuoteKit - Main Application Module."""

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

import uvicorn
from beartype import beartype
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from . import __version__
from .api.dependencies import Services, build_services
from .api.v1 import router as v1_router
from .core.config import get_settings
from .core.exceptions import (
    CatalogMismatchError,
    ExtractionError,
    MalformedCatalogError,
    QuotaExceededError,
    QuoteKitError,
)
from .core.logging_utils import get_logger
from .schemas.common import APIInfo, ErrorResponse

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Manage application lifecycle - startup and shutdown."""
    services: Services = app.state.services
    logger.info(
        "Starting %s in %s mode with %d catalogs",
        services.settings.app_name,
        services.settings.api_env,
        len(services.catalog_store),
    )

    yield

    logger.info("Shutting down %s", services.settings.app_name)


def _error_response(status_code: int, error: QuoteKitError) -> JSONResponse:
    body = ErrorResponse.model_validate(error.to_dict())
    return JSONResponse(
        status_code=status_code, content=body.model_dump(exclude_none=True)
    )


async def catalog_mismatch_handler(
    request: Request, exc: CatalogMismatchError
) -> JSONResponse:
    """Stale client state: the client must refetch the catalog."""
    logger.info("Catalog mismatch on %s: %s", request.url.path, exc.details)
    return _error_response(409, exc)


async def malformed_catalog_handler(
    request: Request, exc: MalformedCatalogError
) -> JSONResponse:
    """Operator error; details stay in the log."""
    logger.error("Malformed catalog %s: %s", exc.vertical, exc.details)
    return JSONResponse(
        status_code=500,
        content=ErrorResponse(
            error=exc.code, message="The calculator is temporarily unavailable"
        ).model_dump(exclude_none=True),
    )


async def quota_exceeded_handler(
    request: Request, exc: QuotaExceededError
) -> JSONResponse:
    """The calculator owner's plan is used up."""
    return _error_response(402, exc)


async def extraction_error_handler(
    request: Request, exc: ExtractionError
) -> JSONResponse:
    """Natural-language pre-fill failed; manual entry still works."""
    return _error_response(422, exc)


@beartype
def create_app(services: Services | None = None) -> FastAPI:
    """Create and configure the FastAPI application.

    Args:
        services: Pre-built services, mainly for tests. Built from the
            current settings when omitted.

    Returns:
        FastAPI: Configured application instance
    """
    if services is None:
        services = build_services(get_settings())
    settings = services.settings

    app = FastAPI(
        title="QuoteKit",
        description="Embeddable, catalog-driven quote calculators",
        version=__version__,
        docs_url="/docs" if not settings.is_production else None,
        redoc_url="/redoc" if not settings.is_production else None,
        openapi_url="/openapi.json" if not settings.is_production else None,
        lifespan=lifespan,
    )
    app.state.services = services

    # CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.api_cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    handlers = {
        CatalogMismatchError: catalog_mismatch_handler,
        MalformedCatalogError: malformed_catalog_handler,
        QuotaExceededError: quota_exceeded_handler,
        ExtractionError: extraction_error_handler,
    }
    for exc_class, handler in handlers.items():
        app.add_exception_handler(exc_class, handler)  # type: ignore[arg-type]

    # Include API routers
    app.include_router(v1_router)

    # Root endpoint
    @app.get("/")
    async def root() -> APIInfo:
        """Root endpoint returning API information."""
        return APIInfo(
            name=settings.app_name,
            version=__version__,
            status="operational",
            environment=settings.api_env,
        )

    return app


# Create the application instance
app = create_app()


@beartype
def main() -> None:
    """Run the main application entry point."""
    settings = get_settings()

    uvicorn.run(
        "quotekit.main:app",
        host=settings.api_host,
        port=settings.api_port,
        reload=settings.is_development,
        log_level="info" if not settings.is_production else "error",
    )


if __name__ == "__main__":
    main()
