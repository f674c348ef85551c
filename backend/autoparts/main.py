"""
AutoParts - automotive parts catalog API.

Run locally with ``python -m autoparts.main`` from ``backend/``.
"""

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, Response
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import ORJSONResponse

from autoparts.api.v1.router import api_router
from autoparts.core.config import settings
from autoparts.core.error_handlers import setup_exception_handlers
from autoparts.core.logging import RequestLoggingMiddleware, get_logger, setup_logging
from autoparts.db.postgres.session import dispose_engine

logger = get_logger(__name__)

API_DESCRIPTION = """
Catalog backend for an automotive parts marketplace.

- **Vehicle compatibility**: filter parts by vehicle brand, model and production year
- **Year ranges**: vehicles carry a model year or an inclusive production range
- **CSV import**: bulk-load vehicles with Turkish or English column headers
"""

OPENAPI_TAGS = [
    {"name": "Health", "description": "Liveness and readiness probes."},
    {"name": "Parts", "description": "Part listing with vehicle compatibility filters, storefront browse and filter facets."},
    {"name": "Vehicles", "description": "Vehicle search by brand, model and production year."},
    {
        "name": "Admin",
        "description": "Vehicle and part maintenance, CSV vehicle import and stock. Mount behind admin authentication.",
    },
]

SECURITY_HEADERS = {
    "X-Content-Type-Options": "nosniff",
    "X-Frame-Options": "DENY",
    "Referrer-Policy": "strict-origin-when-cross-origin",
}


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator:
    setup_logging()
    logger.info("AutoParts API starting", extra={"environment": settings.ENVIRONMENT})
    yield
    await dispose_engine()
    logger.info("AutoParts API stopped")


async def add_security_headers(request: Request, call_next) -> Response:
    response = await call_next(request)
    response.headers.update(SECURITY_HEADERS)
    if not settings.DEBUG:
        response.headers["Strict-Transport-Security"] = "max-age=31536000; includeSubDomains"
    return response


def create_application() -> FastAPI:
    """Build the app: middleware, exception handlers and the v1 router."""
    application = FastAPI(
        title=settings.PROJECT_NAME,
        description=API_DESCRIPTION,
        version=settings.VERSION,
        openapi_url=f"{settings.API_V1_PREFIX}/openapi.json",
        docs_url=f"{settings.API_V1_PREFIX}/docs",
        redoc_url=f"{settings.API_V1_PREFIX}/redoc",
        default_response_class=ORJSONResponse,
        lifespan=lifespan,
        openapi_tags=OPENAPI_TAGS,
    )

    # Part listings carry vehicle lists and get large quickly
    application.add_middleware(GZipMiddleware, minimum_size=1000)
    application.add_middleware(RequestLoggingMiddleware)
    application.add_middleware(
        CORSMiddleware,
        allow_origins=settings.BACKEND_CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "OPTIONS"],
        allow_headers=["Authorization", "Content-Type", "Accept", "X-Request-ID", "X-Correlation-ID"],
        expose_headers=["X-Request-ID", "X-Correlation-ID", "X-Response-Time"],
    )
    application.middleware("http")(add_security_headers)

    setup_exception_handlers(application)
    application.include_router(api_router, prefix=settings.API_V1_PREFIX)

    @application.get("/health", tags=["Health"])
    async def health_check():
        """Plain health check for container orchestration."""
        return {
            "status": "healthy",
            "version": settings.VERSION,
            "service": "autoparts-backend",
            "environment": settings.ENVIRONMENT,
        }

    return application


app = create_application()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "autoparts.main:app",
        host="0.0.0.0",
        port=settings.PORT,
        reload=settings.DEBUG,
        log_level=settings.LOG_LEVEL.lower(),
    )
