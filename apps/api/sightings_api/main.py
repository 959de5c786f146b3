"""Sightings API - Main FastAPI application."""

import logging
import sys
from contextlib import asynccontextmanager

from fastapi import Depends, FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from prometheus_client import make_asgi_app
from sqlalchemy import text
from sqlalchemy.orm import Session
from starlette.exceptions import HTTPException as StarletteHTTPException

from sightings_api.db.session import get_db
from sightings_api.errors import AuthError, InternalError, SightingsError
from sightings_api.middleware.auth import CHALLENGE, AdminAuthMiddleware
from sightings_api.middleware.request_context import RequestContextMiddleware
from sightings_api.routes import admin, images, sightings
from sightings_api.settings import get_settings
from sightings_api.storage.service import StorageService, get_storage_service

# Configure logging
logging.basicConfig(
    level=get_settings().log_level,
    format='{"time": "%(asctime)s", "level": "%(levelname)s", "message": "%(message)s", "module": "%(name)s"}',
    handlers=[logging.StreamHandler(sys.stdout)],
)
logger = logging.getLogger(__name__)

settings = get_settings()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan events."""
    logger.info("Starting Sightings API...")
    try:
        settings.validate_production_settings()
    except ValueError as e:
        logger.error(f"Configuration validation failed: {e}")
        raise
    yield
    logger.info("Shutting down Sightings API...")


# Create FastAPI app
app = FastAPI(
    title="Sightings API",
    description="Anonymous sighting reports with operator moderation",
    version="0.1.0",
    lifespan=lifespan,
)

# Middleware (order matters - last added is first executed)
app.add_middleware(AdminAuthMiddleware)
app.add_middleware(RequestContextMiddleware)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_methods=settings.cors_allow_methods,
    allow_headers=settings.cors_allow_headers,
)

# Prometheus metrics
metrics_app = make_asgi_app()
app.mount("/metrics", metrics_app)

# Register routers
app.include_router(sightings.router)
app.include_router(images.router)
app.include_router(admin.router)
app.include_router(admin.ui_router)


@app.exception_handler(SightingsError)
async def sightings_error_handler(request: Request, exc: SightingsError):
    """Render service errors as ``{"error": ...}``."""
    if exc.status_code >= 500:
        logger.error(
            f"{type(exc).__name__}: {exc.message}",
            exc_info=exc,
            extra={"path": request.url.path, "correlation_id": getattr(request.state, "correlation_id", None)},
        )
    headers = CHALLENGE if isinstance(exc, AuthError) else None
    return JSONResponse(status_code=exc.status_code, content={"error": exc.response_message}, headers=headers)


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    """Malformed path or query parameters."""
    return JSONResponse(status_code=400, content={"error": "Invalid request"})


@app.exception_handler(StarletteHTTPException)
async def http_error_handler(request: Request, exc: StarletteHTTPException):
    """Routing errors (unknown path, wrong method)."""
    return JSONResponse(status_code=exc.status_code, content={"error": exc.detail}, headers=exc.headers)


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception):
    """Last resort: log and hide internals."""
    error = InternalError(f"Unhandled error: {exc}")
    logger.error(
        error.message,
        exc_info=exc,
        extra={"path": request.url.path, "correlation_id": getattr(request.state, "correlation_id", None)},
    )
    return JSONResponse(status_code=error.status_code, content={"error": error.response_message})


@app.get("/api/health")
async def health_check():
    """Health check endpoint (basic liveness)."""
    return {"ok": True}


@app.get("/api/ready")
def readiness_check(
    db: Session = Depends(get_db),
    storage: StorageService = Depends(get_storage_service),
):
    """Readiness check endpoint (verifies both stores)."""
    checks = {"database": False, "object_storage": False}

    try:
        db.execute(text("SELECT 1"))
        checks["database"] = True
    except Exception as e:
        logger.error(f"Database check failed: {e}")

    try:
        checks["object_storage"] = storage.bucket_available()
    except Exception as e:
        logger.error(f"Object storage check failed: {e}")

    ready = all(checks.values())
    return JSONResponse(
        content={"ok": ready, "checks": checks},
        status_code=200 if ready else 503,
    )
