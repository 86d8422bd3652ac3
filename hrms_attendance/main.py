"""
HRMS Attendance Service - Main Application Entry Point
"""
import logging
from urllib.parse import urlparse, urlunparse

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.exceptions import RequestValidationError
from fastapi import HTTPException
from sqlalchemy.exc import OperationalError

from hrms_attendance.api.router import api_router
from hrms_attendance.core.config import settings
from hrms_attendance.core.errors import (
    http_exception_handler,
    validation_exception_handler,
    generic_exception_handler
)
from hrms_attendance.core.exceptions import StoreUnavailable
from hrms_attendance.core.logging import setup_logging

# Setup logging first
setup_logging()
logger = logging.getLogger(__name__)


def _mask_database_url(url: str) -> str:
    """Mask password in DATABASE_URL for safe logging; show full path for sqlite."""
    try:
        parsed = urlparse(url)
        if parsed.scheme.startswith("sqlite"):
            return url  # Safe to log path
        if parsed.password:
            netloc = f"{parsed.username}:****@{parsed.hostname or ''}"
            if parsed.port:
                netloc += f":{parsed.port}"
            return urlunparse(parsed._replace(netloc=netloc))
    except ValueError:
        return "***"
    return url


# Create FastAPI app
app = FastAPI(
    title="HRMS Attendance Service",
    description="Geofenced check-in/check-out and Work From Home requests",
    version=settings.VERSION or "1.0.0"
)

# Configure CORS - must be before other middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.get_allowed_origins_list(),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
    expose_headers=["*"],
)

# Register exception handlers
app.add_exception_handler(HTTPException, http_exception_handler)
app.add_exception_handler(RequestValidationError, validation_exception_handler)
app.add_exception_handler(Exception, generic_exception_handler)

# Include all API routes under /api/v1
app.include_router(api_router, prefix="/api/v1")


@app.on_event("startup")
def startup_log_config() -> None:
    """Log DATABASE_URL at startup so it can be verified against Alembic."""
    masked = _mask_database_url(settings.DATABASE_URL)
    logger.info("DATABASE_URL (app): %s", masked)
    logger.info(
        "Attendance timezone=%s WFH timezone=%s geofence enforced on mark=%s",
        settings.ATTENDANCE_TIMEZONE, settings.WFH_TIMEZONE, settings.ENFORCE_GEOFENCE_ON_MARK,
    )


async def _handle_operational_error(request, exc: OperationalError):
    """Database errors that escape the record store (e.g. missing table) answer 503."""
    if "no such table" in str(exc).lower():
        logger.error("Record store table missing; run alembic upgrade head")
    else:
        logger.error("Database error on %s: %s", request.url.path, exc)
    return await http_exception_handler(request, StoreUnavailable())


app.add_exception_handler(OperationalError, _handle_operational_error)
