"""
backend/sportsfeed/main.py

Purpose:
    FastAPI application bootstrap: database connection, aggregator and
    scheduler lifecycle, middleware and router wiring, exception handlers.

Dependencies:
    - sportsfeed.database
    - sportsfeed.services.sports_aggregator
    - sportsfeed.workers.prefetch
"""

import logging
from contextlib import asynccontextmanager

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pymongo.errors import ConnectionFailure, ServerSelectionTimeoutError

import sportsfeed.database as _db
from sportsfeed.config import settings
from sportsfeed.database import close_db, connect_db
from sportsfeed.middleware.logging import StructuredLoggingMiddleware, setup_logging
from sportsfeed.services.sports_aggregator import get_aggregator, shutdown_aggregator

logger = logging.getLogger("sportsfeed")
scheduler = AsyncIOScheduler()


def _register_jobs() -> int:
    from sportsfeed.workers.prefetch import prefetch_live_matches

    if not settings.PREFETCH_ENABLED:
        return 0
    scheduler.add_job(
        prefetch_live_matches,
        "interval",
        id="prefetch_live",
        seconds=max(15, settings.PREFETCH_INTERVAL_SECONDS),
        replace_existing=True,
        max_instances=1,
        coalesce=True,
    )
    return 1


@asynccontextmanager
async def lifespan(app: FastAPI):
    setup_logging()
    await connect_db()
    aggregator = get_aggregator()
    logger.info("Providers registered: %s", ", ".join(aggregator.registry.names()))

    jobs = _register_jobs()
    scheduler.start()
    logger.info("Background scheduler started (%d jobs)", jobs)

    yield

    if scheduler.running:
        scheduler.shutdown(wait=False)
    await shutdown_aggregator()
    await close_db()


app = FastAPI(
    title="sportsfeed",
    description="Multi-provider live sports data aggregator",
    version="0.1.0",
    lifespan=lifespan,
)

# CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.BACKEND_CORS_ORIGINS.split(","),
    allow_credentials=True,
    allow_methods=["GET", "PUT", "DELETE", "OPTIONS"],
    allow_headers=["Content-Type"],
)

# Structured logging
app.add_middleware(StructuredLoggingMiddleware)

# Routers
from sportsfeed.routers.health import admin_router
from sportsfeed.routers.health import router as health_router
from sportsfeed.routers.sports import router as sports_router

app.include_router(sports_router)
app.include_router(health_router)
app.include_router(admin_router)


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    """Return clean validation errors without leaking internal field paths."""
    errors = []
    for err in exc.errors():
        loc = err.get("loc", ())
        field = ".".join(str(l) for l in loc[1:]) if len(loc) > 1 else str(loc[-1]) if loc else "unknown"
        errors.append({"field": field, "message": err.get("msg", "Invalid value.")})
    return JSONResponse(status_code=422, content={"detail": "Validation error.", "errors": errors})


@app.exception_handler(TypeError)
@app.exception_handler(ValueError)
async def invalid_parameter_handler(request: Request, exc: Exception):
    logger.warning("%s on %s %s: %s", type(exc).__name__, request.method, request.url.path, exc)
    return JSONResponse(status_code=422, content={"detail": str(exc) or "Invalid input."})


@app.exception_handler(ServerSelectionTimeoutError)
async def db_timeout_handler(request: Request, exc: ServerSelectionTimeoutError):
    logger.error("Database timeout: %s %s", request.method, request.url.path)
    return JSONResponse(status_code=503, content={"detail": "Service temporarily unavailable."})


@app.exception_handler(ConnectionFailure)
async def db_connection_handler(request: Request, exc: ConnectionFailure):
    logger.error("Database connection failure: %s %s", request.method, request.url.path)
    return JSONResponse(status_code=503, content={"detail": "Service temporarily unavailable."})


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception):
    """Catch-all: log the real error, return a safe generic message."""
    logger.exception("Unhandled exception on %s %s", request.method, request.url.path)
    return JSONResponse(status_code=500, content={"detail": "An internal error occurred."})


@app.get("/health")
async def health():
    """Health check -- verifies DB connection and open circuits."""
    try:
        result = await _db.db.command("ping")
        db_ok = result.get("ok") == 1.0
    except Exception:
        db_ok = False

    providers = await get_aggregator().get_provider_health()
    return {
        "status": "healthy" if db_ok else "degraded",
        "db": "connected" if db_ok else "disconnected",
        "providers_open": sorted(p["provider"] for p in providers if p["disabled_until"]),
    }
