# pyright: reportMissingTypeStubs=false
"""
Clinic Agenda Backend API

A FastAPI application for the clinic's appointment agenda and its
commission billing.

Features:
- Single, recurring and pre-paid package appointments
- Per-session commission ledger and monthly commission invoices
- Post-commit notifications, email and WhatsApp messages
- Hourly appointment reminders
- PostgreSQL database with SQLAlchemy ORM
"""

import asyncio
import logging
from contextlib import asynccontextmanager

import httpx
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from api import appointments, finance, realtime
from core.config import REMINDERS_ENABLED
from core.constants import CORS_ORIGINS
from services.realtime_hub import realtime_hub
from services.reminder_service import start_reminder_scheduler, stop_reminder_scheduler

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    handlers=[logging.StreamHandler()],
)

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager for startup and shutdown events."""
    logger.info("Starting Clinic Agenda Backend API")

    # Services push realtime events from worker threads onto this loop
    realtime_hub.bind_loop(asyncio.get_running_loop())

    if REMINDERS_ENABLED:
        try:
            await start_reminder_scheduler()
            logger.info("Appointment reminder scheduler started")
        except Exception as e:
            logger.exception(f"Failed to start reminder scheduler: {e}")

    yield

    if REMINDERS_ENABLED:
        try:
            await stop_reminder_scheduler()
            logger.info("Appointment reminder scheduler stopped")
        except Exception as e:
            logger.exception(f"Error stopping reminder scheduler: {e}")

    logger.info("Shutting down Clinic Agenda Backend API")


# Create FastAPI application
app = FastAPI(
    title="Clinic Agenda Backend",
    description="Appointment series and commission billing for the clinic",
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan,
)

# CORS middleware for frontend integration
app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"],
    allow_headers=["*"],
)

# Include API routers
app.include_router(
    appointments.router,
    prefix="/api/agenda",
    tags=["agenda"],
    responses={
        400: {"description": "Bad request"},
        401: {"description": "Unauthorized"},
        403: {"description": "Forbidden"},
        404: {"description": "Resource not found"},
        409: {"description": "Conflict"},
        500: {"description": "Internal server error"},
    },
)
app.include_router(
    finance.router,
    prefix="/api/finance",
    tags=["finance"],
    responses={
        400: {"description": "Bad request"},
        401: {"description": "Unauthorized"},
        403: {"description": "Forbidden"},
        404: {"description": "Resource not found"},
        500: {"description": "Internal server error"},
    },
)
app.include_router(
    realtime.router,
    prefix="/api/realtime",
    tags=["realtime"],
)


@app.get(
    "/",
    summary="Root endpoint",
    description="Returns basic API information",
)
async def root() -> dict[str, str]:
    """Get API information."""
    return {
        "message": "Clinic Agenda Backend API",
        "version": "1.0.0",
        "status": "running"
    }


@app.get(
    "/health",
    summary="Health check",
    description="Returns the health status of the API",
)
async def health_check() -> dict[str, str]:
    """Check if the API is healthy and responding."""
    return {"status": "healthy"}


# Global exception handlers
@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    """Handle unexpected exceptions globally."""
    logger.exception(f"Unhandled exception: {exc}")
    return JSONResponse(
        status_code=500,
        content={"detail": "Internal server error", "type": "internal_error"},
    )


@app.exception_handler(ValueError)
async def value_error_handler(request: Request, exc: ValueError):
    """Handle ValueError exceptions."""
    logger.warning(f"ValueError: {exc}")
    return JSONResponse(
        status_code=400,
        content={"detail": str(exc), "type": "validation_error"},
    )


@app.exception_handler(httpx.HTTPStatusError)
async def http_status_error_handler(request: Request, exc: httpx.HTTPStatusError):
    """Handle HTTP status errors from external services."""
    logger.exception(f"External service error: {exc}")
    return JSONResponse(
        status_code=502,
        content={"detail": "External service error", "type": "external_service_error"},
    )
