"""
FastAPI backend for the PASSAGE voyage route optimizer.

Provides REST API endpoints for:
- Route optimization (direct vs. hazard-routed comparison)
- Live marine weather hazards along a track
- Health, status and Prometheus metrics

Version: 1.0.0
"""

import logging

import uvicorn
from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from slowapi.errors import RateLimitExceeded

from api.config import settings
from api.middleware import setup_middleware
from api.rate_limit import limiter
from api.routers import optimization, system
from passage import __version__
from passage.config import settings as core_settings

# Request logs are JSON lines from StructuredLogger; module loggers use
# LOG_FORMAT.
core_settings.configure_logging()
logger = logging.getLogger(__name__)


# =============================================================================
# Application Factory
# =============================================================================

def create_app() -> FastAPI:
    """
    Application factory for the PASSAGE API.

    Creates and configures the FastAPI application with middleware,
    rate limiting, error handlers and routers.

    Returns:
        FastAPI: Configured application instance
    """
    application = FastAPI(
        title="PASSAGE API",
        description="""
## Voyage Route Optimization API

Compares the direct great-circle route between two positions with a
route that detours around hazard zones and, inside the Arabian Gulf and
Gulf of Oman, stays offshore of the coastline.

### Hazard zones
Send `hazardZones` to supply your own; omit it to use the server's
configured weather source.

### Rate Limiting
Optimization requests are limited per API key or client IP.
        """,
        version=__version__,
        docs_url="/api/docs",
        redoc_url="/api/redoc",
        openapi_url="/api/openapi.json",
    )

    setup_middleware(
        application,
        debug=settings.is_development,
        enable_hsts=settings.is_production,
    )

    # Configured origins only, no wildcards
    application.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_credentials=True,
        allow_methods=["GET", "POST", "OPTIONS"],
        allow_headers=["*"],
    )

    application.state.limiter = limiter

    @application.exception_handler(RateLimitExceeded)
    async def rate_limit_handler(request: Request, exc: RateLimitExceeded):
        return JSONResponse(
            status_code=429,
            content={
                "error": "Rate limit exceeded",
                "detail": str(exc.detail),
                "retry_after": getattr(exc, 'retry_after', 60),
            },
            headers={"Retry-After": str(getattr(exc, 'retry_after', 60))},
        )

    @application.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        logger.warning(f"Validation error on {request.method} {request.url.path}: {exc.errors()}")
        return JSONResponse(status_code=422, content={"detail": jsonable_encoder(exc.errors())})

    application.include_router(system.router)
    application.include_router(optimization.router)

    return application


app = create_app()


if __name__ == "__main__":
    uvicorn.run(
        "api.main:app",
        host=settings.api_host,
        port=settings.api_port,
        reload=settings.is_development,
        log_level=settings.log_level.lower(),
    )
