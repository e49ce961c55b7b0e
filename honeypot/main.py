"""FastAPI application entry point — wires everything together.

Usage:
    python -m honeypot.main

Every request is recorded on the activity trail on the way in; every
handler records its own outcome; whatever escapes the handlers is recorded
here as GLOBAL_ERROR or API_NOT_FOUND.
"""

from __future__ import annotations

import logging
import sys
import time
import traceback
from collections.abc import AsyncGenerator, Awaitable, Callable
from contextlib import asynccontextmanager
from datetime import UTC, datetime

import structlog
import uvicorn
from fastapi import FastAPI, Request, Response, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from honeypot.activity.context import context_from_request, system_context
from honeypot.activity.logger import ActivityLogger
from honeypot.api import cart, orders, products, users
from honeypot.config import settings
from honeypot.db.engine import check_connection, close_db, sync_models
from honeypot.schemas.activity import ActivityType, json_safe

# ── Logging setup ────────────────────────────────────────────────────

logging.basicConfig(
    level=getattr(logging, settings.log_level),
    format="%(asctime)s %(levelname)-8s %(name)s — %(message)s",
    stream=sys.stdout,
)
structlog.configure(
    processors=[
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.dev.ConsoleRenderer(),
    ],
    wrapper_class=structlog.stdlib.BoundLogger,
    context_class=dict,
    logger_factory=structlog.stdlib.LoggerFactory(),
)

logger = logging.getLogger(__name__)

# ── FastAPI lifespan ─────────────────────────────────────────────────


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application startup and shutdown lifecycle."""
    activity: ActivityLogger = app.state.activity_logger
    logger.info("Starting honeypot shop (env=%s)", settings.environment)

    # 1. Database: a failure is recorded and the server keeps serving
    try:
        await check_connection()
        activity.activity(ActivityType.SYSTEM_STARTUP, {"event": "DATABASE_CONNECTED"}, system_context())
        await sync_models()
        activity.activity(ActivityType.SYSTEM_STARTUP, {"event": "MODELS_SYNCED"}, system_context())
    except Exception as exc:
        logger.exception("Database error")
        activity.activity(
            ActivityType.SYSTEM_ERROR,
            {"event": "DATABASE_ERROR", "error": str(exc)},
            system_context("/system/error"),
        )

    # 2. Ready
    activity.activity(ActivityType.SYSTEM_STARTUP, {
        "event": "SERVER_STARTED",
        "port": settings.server.port,
        "timestamp": datetime.now(UTC).isoformat(),
    }, system_context())
    logger.info("Health check: http://localhost:%d/api/health", settings.server.port)

    try:
        yield
    finally:
        logger.info("Shutting down honeypot shop...")
        activity.activity(ActivityType.SYSTEM_SHUTDOWN, {"event": "SERVER_STOPPED"}, system_context("/system/shutdown"))
        await close_db()
        activity.close()
        logger.info("Shutdown complete")


# ── Application-level event sources ──────────────────────────────────


async def record_request(request: Request, call_next: Callable[[Request], Awaitable[Response]]) -> Response:
    """HTTP_REQUEST for every inbound request, before routing."""
    activity: ActivityLogger = request.app.state.activity_logger
    ctx = context_from_request(request)
    activity.activity(ActivityType.HTTP_REQUEST, {
        "method": request.method,
        "url": ctx.url,
        "query": dict(request.query_params),
    }, ctx)
    return await call_next(request)


async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Malformed bodies and parameters are hostile input as far as the trail is concerned."""
    errors = json_safe(jsonable_encoder(exc.errors()))
    request.app.state.activity_logger.suspicious_activity(
        "REQUEST_VALIDATION_FAILED", {"path": request.url.path, "errors": errors}, request
    )
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"detail": "Invalid request", "errors": errors},
    )


async def global_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.error("Unhandled error on %s %s", request.method, request.url.path, exc_info=exc)
    request.app.state.activity_logger.suspicious_activity("GLOBAL_ERROR", {
        "error": str(exc),
        "stack": "".join(traceback.format_exception(exc)),
    }, request)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={
            "detail": "Something went wrong!",
            "error": str(exc) if not settings.is_production else {},
        },
    )


# ── FastAPI app ──────────────────────────────────────────────────────


def create_app(activity_logger: ActivityLogger | None = None) -> FastAPI:
    """Build the application and its single ActivityLogger.

    Pass `activity_logger` to redirect the trail (tests use a tmp dir).
    """
    app = FastAPI(
        title="Honeypot Shop API",
        description="E-commerce demo backend that records every request for security analysis",
        version="0.1.0",
        lifespan=lifespan,
    )
    app.state.activity_logger = activity_logger or ActivityLogger.from_settings(settings.activity)
    app.state.started_at = time.monotonic()

    app.middleware("http")(record_request)
    app.add_exception_handler(RequestValidationError, validation_error_handler)
    app.add_exception_handler(Exception, global_error_handler)

    app.include_router(users.router)
    app.include_router(products.router)
    app.include_router(cart.router)
    app.include_router(orders.router)

    @app.get("/api/health")
    async def health_check(request: Request) -> dict[str, object]:
        """Health check endpoint."""
        request.app.state.activity_logger.api_access("/api/health", "GET", None, None, request)
        return {
            "status": "OK",
            "timestamp": datetime.now(UTC).isoformat(),
            "uptime": round(time.monotonic() - request.app.state.started_at, 3),
            "database": "SQLite" if settings.db.is_sqlite else "SQL",
        }

    # Registered last so it only sees paths no router claimed.
    @app.api_route("/api/{path:path}", methods=["GET", "POST", "PUT", "PATCH", "DELETE"], include_in_schema=False)
    async def api_not_found(request: Request) -> JSONResponse:
        request.app.state.activity_logger.suspicious_activity("API_NOT_FOUND", {"path": request.url.path}, request)
        return JSONResponse(status_code=status.HTTP_404_NOT_FOUND, content={"detail": "API route not found"})

    return app


# ── Entry point ──────────────────────────────────────────────────────

if __name__ == "__main__":
    uvicorn.run(
        "honeypot.main:create_app",
        factory=True,
        host=settings.server.host,
        port=settings.server.port,
        reload=settings.environment == "development",
        log_level=settings.log_level.lower(),
    )
