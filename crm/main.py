"""Main FastAPI application - CRM backend"""

import logging
import time
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import Response
from prometheus_client import CONTENT_TYPE_LATEST, Counter, Histogram, generate_latest
from sqlalchemy import text
from starlette.responses import JSONResponse

from crm import __version__
from crm.api import (
    activities,
    calls,
    chat,
    clients,
    credentials,
    dashboard,
    deals,
    files,
    leads,
    notifications,
    pricing,
    tasks,
    team,
    visits,
)
from crm.config import Settings, get_settings
from crm.database import Database
from crm.exceptions import CRMError

logger = logging.getLogger(__name__)

# Prometheus metrics (kept minimal; avoid high-cardinality labels).
HTTP_REQUESTS_TOTAL = Counter(
    "http_requests_total",
    "Total HTTP requests",
    ["method", "path", "status_code"],
)
HTTP_REQUEST_DURATION_SECONDS = Histogram(
    "http_request_duration_seconds",
    "HTTP request duration in seconds",
    ["method", "path"],
    buckets=(0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1, 2.5, 5, 10),
)

ROUTERS = (
    leads,
    clients,
    deals,
    tasks,
    activities,
    calls,
    visits,
    notifications,
    chat,
    pricing,
    team,
    credentials,
    files,
    dashboard,
)


def configure_logging(settings: Settings) -> None:
    logging.basicConfig(
        level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )


def init_sentry(settings: Settings) -> None:
    """Initialize Sentry if DSN is provided"""
    if not settings.SENTRY_DSN:
        logger.info("Sentry disabled (no DSN configured)")
        return

    import sentry_sdk
    from sentry_sdk.integrations.fastapi import FastApiIntegration

    sentry_sdk.init(
        dsn=settings.SENTRY_DSN,
        environment=settings.SENTRY_ENVIRONMENT,
        traces_sample_rate=settings.SENTRY_TRACES_SAMPLE_RATE,
        release=__version__,
        integrations=[
            FastApiIntegration(),
        ],
    )
    logger.info("Sentry initialized for environment: %s", settings.SENTRY_ENVIRONMENT)


def _field_errors(exc: RequestValidationError) -> list[dict[str, str]]:
    errors = []
    for error in exc.errors():
        loc = [str(part) for part in error.get("loc", ()) if part not in ("body", "query", "path", "header")]
        message = str(error.get("msg", "Invalid value"))
        if message.startswith("Value error, "):
            message = message[len("Value error, "):]
        errors.append({"field": ".".join(loc) or "body", "message": message})
    return errors


def register_exception_handlers(app: FastAPI, settings: Settings) -> None:
    @app.exception_handler(CRMError)
    async def crm_error_handler(request: Request, exc: CRMError):
        if exc.status_code >= 500:
            logger.error(f"{request.method} {request.url.path} failed: {exc.message}")
        return JSONResponse(status_code=exc.status_code, content=exc.to_dict())

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(request: Request, exc: RequestValidationError):
        return JSONResponse(
            status_code=400,
            content={"success": False, "message": "Validation failed", "errors": _field_errors(exc)},
        )

    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception):
        """Catch-all for unhandled exceptions: log, report to Sentry, clean 500."""
        logger.exception("Unhandled exception: %s %s", request.method, request.url)
        if settings.SENTRY_DSN:
            import sentry_sdk
            sentry_sdk.capture_exception(exc)

        content = {"success": False, "message": "Internal server error"}
        if settings.is_development:
            content["error"] = str(exc)
        return JSONResponse(status_code=500, content=content)


def create_app(settings: Optional[Settings] = None, database: Optional[Database] = None) -> FastAPI:
    """
    Build the application around an explicit database handle.

    Args:
        settings: Settings to use (defaults to environment settings)
        database: Prebuilt handle; built from settings when omitted
    """
    settings = settings or get_settings()
    configure_logging(settings)
    init_sentry(settings)

    database = database or Database.from_settings(settings)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info("Starting CRM API...")
        logger.info(f"Database: {database.url.split('@')[-1]}")  # Hide credentials in logs
        if settings.DB_CREATE_TABLES:
            await database.create_all()
        yield
        logger.info("Shutting down CRM API...")
        await database.dispose()

    app = FastAPI(
        title="CRM API",
        description="Leads, clients, deals and team tasks for a sales team",
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.database = database

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PATCH", "DELETE", "OPTIONS"],
        allow_headers=["Content-Type", "Authorization", "x-user-email"],
    )

    register_exception_handlers(app, settings)

    @app.middleware("http")
    async def prometheus_http_middleware(request: Request, call_next):
        """
        Record request metrics with low-cardinality path templates.
        """
        start = time.perf_counter()
        status_code = 500
        try:
            response = await call_next(request)
            status_code = getattr(response, "status_code", 500) or 500
            return response
        finally:
            route = request.scope.get("route")
            path = getattr(route, "path", request.url.path) or request.url.path
            # Avoid scraping loops / noise.
            if path not in {"/api/metrics", "/metrics"}:
                elapsed = time.perf_counter() - start
                HTTP_REQUESTS_TOTAL.labels(
                    method=request.method,
                    path=path,
                    status_code=str(status_code),
                ).inc()
                HTTP_REQUEST_DURATION_SECONDS.labels(
                    method=request.method,
                    path=path,
                ).observe(elapsed)

    @app.get("/health")
    async def health_check():
        """Health check endpoint: verifies DB connectivity."""
        try:
            async with database.session_factory() as db:
                await db.execute(text("SELECT 1"))
            return {"status": "healthy", "service": "crm-backend", "version": __version__}
        except Exception as e:
            logger.warning(f"Health check failed: {e}")
            return JSONResponse(
                status_code=503,
                content={"status": "unhealthy", "service": "crm-backend", "error": str(e)},
            )

    @app.get("/api/health")
    async def health_check_api():
        """Health check endpoint (API namespace, for reverse proxies)."""
        return await health_check()

    @app.get("/api/metrics")
    async def prometheus_metrics():
        """
        Prometheus scrape endpoint.

        Intended to be scraped locally; do not expose publicly.
        """
        return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)

    for module in ROUTERS:
        app.include_router(module.router, prefix="/api")

    @app.get("/")
    async def root():
        """Root endpoint with API information"""
        return {
            "service": "CRM API",
            "version": __version__,
            "docs": "/docs",
            "health": "/health",
            "endpoints": {
                "leads": "/api/leads",
                "clients": "/api/clients",
                "deals": "/api/deals",
                "tasks": "/api/tasks",
                "activities": "/api/activities",
                "calls": "/api/calls",
                "visits": "/api/visits",
                "notifications": "/api/notifications",
                "chat": "/api/chat",
                "pricing": "/api/pricing",
                "team": "/api/team",
                "dashboard": "/api/dashboard/summary",
            },
        }

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "crm.main:app",
        host="0.0.0.0",
        port=8000,
        reload=True,
        log_level="info"
    )
