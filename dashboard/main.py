"""Main FastAPI application."""

import logging
from contextlib import asynccontextmanager
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.staticfiles import StaticFiles

from dashboard.config.settings import settings
from dashboard.api.errors import dashboard_error_handler
from dashboard.api.v1 import admin_settings, auth, cases, content, health, stats, users
from dashboard.middleware.logging import LoggingMiddleware
from dashboard.middleware.rate_limit import RateLimitMiddleware
from dashboard.services.exceptions import DashboardError
from dashboard.services.thehive import close_http_session
from dashboard.utils.redis_client import init_redis_pool, close_redis_pool
from dashboard.utils.colored_logging import setup_colored_logging

setup_colored_logging(settings.log_level)

logger = logging.getLogger(__name__)

# StaticFiles checks the directory when mounted
settings.thumbnail_path.mkdir(parents=True, exist_ok=True)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan manager for startup and shutdown events.

    Args:
        app: FastAPI application instance
    """
    # Startup
    logger.info("Starting Moderation Dashboard API...")
    logger.info(f"Environment: {settings.env}")
    logger.info(f"API Version: {settings.api_version}")
    logger.info(f"Uploads: {settings.upload_path}")
    logger.info(f"Default moderation provider: {settings.moderation_service}")

    init_redis_pool()

    yield

    # Shutdown
    logger.info("Shutting down Moderation Dashboard API...")
    await close_http_session()
    close_redis_pool()


# Create FastAPI application
app = FastAPI(
    title="Moderation Dashboard API",
    description="Content moderation queue with AI classification, video timelines and role-based review",
    version=settings.api_version,
    docs_url="/docs",
    redoc_url="/redoc",
    openapi_url="/openapi.json",
    lifespan=lifespan,
)

app.add_exception_handler(DashboardError, dashboard_error_handler)

# Add CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Add GZip compression middleware
app.add_middleware(GZipMiddleware, minimum_size=1000)

# Last added runs first: logging -> rate limit
app.add_middleware(RateLimitMiddleware)
app.add_middleware(LoggingMiddleware)

# Include routers
app.include_router(auth.router, prefix="/api")
app.include_router(content.router, prefix="/api")
app.include_router(cases.router, prefix="/api")
app.include_router(users.router, prefix="/api")
app.include_router(admin_settings.router, prefix="/api")
app.include_router(stats.router, prefix="/api")
app.include_router(health.router, prefix="/api", tags=["Health"])

# Uploaded media and generated thumbnails
app.mount("/uploads", StaticFiles(directory=str(settings.upload_path)), name="uploads")


@app.get("/", include_in_schema=False)
async def root():
    """Root endpoint with pointers to docs and health."""
    return {
        "message": "Moderation Dashboard API",
        "version": settings.api_version,
        "docs": "/docs",
        "health": "/api/health",
    }


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "dashboard.main:app",
        host=settings.api_host,
        port=settings.api_port,
        reload=settings.env == "development",
        log_level=settings.log_level.lower(),
    )
