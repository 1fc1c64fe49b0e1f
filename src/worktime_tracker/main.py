"""Main FastAPI application for the Work-Time Tracker."""

import time

from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, RedirectResponse
from sqlalchemy import text

from . import __version__
from .api import stats, trackers, websockets
from .api.middleware import (
    ProblemDetailsException,
    problem_details_handler,
    validation_error_handler,
)
from .api.schemas import HealthResponse
from .config import get_config
from .db.database import SessionLocal, init_db
from .utils.logging_config import get_logger

logger = get_logger('main')

config = get_config()

# Create FastAPI app
app = FastAPI(
    title=config.app.app_name,
    description=config.app.description,
    version=__version__,
    docs_url="/docs",
    redoc_url="/redoc",
)

app.add_exception_handler(ProblemDetailsException, problem_details_handler)
app.add_exception_handler(RequestValidationError, validation_error_handler)

app.add_middleware(
    CORSMiddleware,
    allow_origins=config.server.cors_origins,
    allow_credentials="*" not in config.server.cors_origins,
    allow_methods=["GET", "POST", "PATCH", "DELETE", "OPTIONS"],
    allow_headers=["Content-Type", "Accept", "Origin", "X-Requested-With"],
)

# Register API routers
app.include_router(trackers.router)
app.include_router(stats.router)
app.include_router(websockets.router)


@app.on_event("startup")
async def startup_event():
    """Create missing tables before serving requests."""
    init_db()
    logger.info(f"{config.app.app_name} {__version__} started")


@app.get("/", include_in_schema=False)
async def root():
    return RedirectResponse(url="/docs")


@app.get("/health", response_model=HealthResponse)
async def health_check():
    """Health check endpoint."""
    return HealthResponse(status="healthy", service="worktime-tracker", version=__version__)


@app.get("/ready")
async def readiness_check():
    """Readiness check endpoint that validates database connectivity."""
    start_time = time.time()
    checks = {"database": False}
    errors = []

    db = SessionLocal()
    try:
        db.execute(text("SELECT 1"))
        checks["database"] = True
    except Exception as e:
        logger.error(f"Readiness database check failed: {e}")
        errors.append(f"Database check failed: {str(e)}")
    finally:
        db.close()

    response = {
        "status": "ready" if all(checks.values()) else "not_ready",
        "service": "worktime-tracker",
        "version": __version__,
        "checks": checks,
        "response_time_ms": round((time.time() - start_time) * 1000, 2),
    }
    if errors:
        response["errors"] = errors

    return JSONResponse(content=response, status_code=200 if not errors else 503)
