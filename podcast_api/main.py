"""
Podcast API application.

Assembles the users and podcasts routers under the configured prefix and
adds the operational surface around them: request logging with
correlation ids, Prometheus request metrics labelled by route template,
health/readiness probes and the database engine lifecycle.
"""

import time
import uuid
import structlog
import uvicorn
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI, Request, Response, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from fastapi.middleware.cors import CORSMiddleware
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.exceptions import HTTPException as StarletteHTTPException
from sqlalchemy import text

from prometheus_client import Counter, Histogram, Gauge, generate_latest, CONTENT_TYPE_LATEST

from podcast_api import __version__
from podcast_api.config import get_settings
from podcast_api.dependencies import init_db_engine, close_db_engine, get_db_engine
from podcast_api.models.common import Base
from podcast_api.routers import podcasts, users
from shared.logging import bind_context, clear_context, configure_logging

settings = get_settings()

configure_logging(
    log_level=settings.log_level,
    json_logs=settings.log_format == "json",
    service_name=settings.app_name,
    environment=settings.environment,
)

logger = structlog.get_logger(__name__)

CORRELATION_HEADER = "X-Correlation-ID"
UNMATCHED_ROUTE = "unmatched"

# ============================================================================
# Prometheus Metrics
# ============================================================================

http_requests_total = Counter(
    "http_requests_total",
    "Total HTTP requests by route template",
    ["method", "endpoint", "status"]
)

http_request_duration_seconds = Histogram(
    "http_request_duration_seconds",
    "HTTP request duration in seconds by route template",
    ["method", "endpoint"]
)

database_connections_checked_out = Gauge(
    "database_connections_checked_out",
    "Database connections currently checked out of the pool"
)


def route_template(request: Request) -> str:
    """
    Path template of the route that handled the request.

    Ids in the URL collapse into one series per route, e.g.
    ``/api/v1/podcasts/{podcast_id}``. Requests that matched no route
    share a single label.
    """
    route = request.scope.get("route")
    return getattr(route, "path", UNMATCHED_ROUTE)

# ============================================================================
# Lifespan
# ============================================================================

async def create_schema() -> None:
    """Create missing tables; used for local development only."""
    async with get_db_engine().begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    logger.info("database_schema_created", tables=sorted(Base.metadata.tables))


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Open the database engine on startup and dispose it on shutdown."""
    await init_db_engine()
    try:
        if settings.database_create_schema:
            await create_schema()

        logger.info(
            "podcast_api_started",
            version=__version__,
            environment=settings.environment,
            api_prefix=settings.api_prefix
        )
        yield

    finally:
        await close_db_engine()
        logger.info("podcast_api_stopped")

# ============================================================================
# Application
# ============================================================================

app = FastAPI(
    title=settings.app_name,
    version=__version__,
    description=(
        "Podcast catalog with nested episodes, user accounts and "
        "bearer-token authentication. Hosts and admins manage the catalog; "
        "reading it is public."
    ),
    lifespan=lifespan,
    debug=settings.debug,
)

if settings.cors_enabled:
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=settings.cors_allow_credentials,
        allow_methods=settings.cors_allow_methods,
        allow_headers=settings.cors_allow_headers,
    )


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Correlation id binding, access logging and request metrics."""

    async def dispatch(self, request: Request, call_next):
        correlation_id = request.headers.get(CORRELATION_HEADER) or str(uuid.uuid4())
        bind_context(correlation_id=correlation_id, method=request.method, path=request.url.path)
        started = time.perf_counter()

        try:
            response = await call_next(request)
        except Exception as e:
            logger.error("request_failed", error=str(e), exc_info=True)
            clear_context()
            raise

        duration = time.perf_counter() - started
        endpoint = route_template(request)

        if settings.metrics_enabled:
            http_requests_total.labels(
                method=request.method,
                endpoint=endpoint,
                status=response.status_code
            ).inc()
            http_request_duration_seconds.labels(
                method=request.method,
                endpoint=endpoint
            ).observe(duration)

        logger.info(
            "request_completed",
            endpoint=endpoint,
            status_code=response.status_code,
            duration_ms=round(duration * 1000, 1)
        )
        clear_context()

        response.headers[CORRELATION_HEADER] = correlation_id
        return response


app.add_middleware(RequestLoggingMiddleware)

# ============================================================================
# Exception Handlers
# ============================================================================

@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    errors = jsonable_encoder(exc.errors())
    logger.warning("request_validation_failed", path=request.url.path, errors=errors)
    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content={"detail": errors}
    )


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    # 401/403 from the auth dependencies land here
    logger.warning(
        "http_exception",
        path=request.url.path,
        status_code=exc.status_code,
        detail=exc.detail
    )
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": exc.detail},
        headers=getattr(exc, "headers", None)
    )


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception):
    logger.error("unhandled_exception", path=request.url.path, error=str(exc), exc_info=True)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"detail": "Internal server error"}
    )

# ============================================================================
# Operational Endpoints
# ============================================================================

@app.get("/health", tags=["Health"])
async def health_check() -> dict:
    """Liveness probe; does not touch the database."""
    return {"status": "healthy", "service": settings.app_name, "version": __version__}


@app.get("/ready", tags=["Health"])
async def readiness_check() -> JSONResponse:
    """
    Readiness probe.

    Runs ``SELECT 1`` on the engine and reports 503 when the database is
    unreachable or the engine was never started.
    """
    try:
        engine = get_db_engine()
        async with engine.connect() as conn:
            await conn.execute(text("SELECT 1"))
        database_connections_checked_out.set(engine.pool.checkedout())
        database = "healthy"
    except Exception as e:
        logger.error("readiness_database_unavailable", error=str(e))
        database = "unhealthy"

    ready = database == "healthy"
    return JSONResponse(
        status_code=status.HTTP_200_OK if ready else status.HTTP_503_SERVICE_UNAVAILABLE,
        content={
            "status": "ready" if ready else "not_ready",
            "checks": {"database": database}
        }
    )


@app.get("/metrics", tags=["Monitoring"])
async def metrics() -> Response:
    return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)


app.include_router(users.router, prefix=settings.api_prefix)
app.include_router(podcasts.router, prefix=settings.api_prefix)


if __name__ == "__main__":
    uvicorn.run(
        "podcast_api.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.debug,
        log_level=settings.log_level.lower(),
    )
