"""
FastAPI application — the entrypoint for the books API.

Features:
- CORS restrictions
- Prometheus metrics endpoint
- Structured JSON logging
- Health / readiness / liveness probes
- Generic conversion of data-access failures
"""

from __future__ import annotations

import time
from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from prometheus_client import Counter, Histogram, generate_latest
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from books_api import __version__
from books_api.config import get_settings
from books_api.logging_config import setup_logging
from books_api.routers import auth, books

settings = get_settings()
setup_logging(settings.log_level, settings.log_format)
logger = structlog.get_logger()

SERVER_ERROR_DETAIL = "server error - contact support"

# ── Prometheus metrics ──
REQUEST_COUNT = Counter(
    "http_requests_total",
    "Total HTTP requests",
    ["method", "endpoint", "status"],
)
REQUEST_LATENCY = Histogram(
    "http_request_duration_seconds",
    "HTTP request latency",
    ["method", "endpoint"],
)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup and graceful shutdown."""
    logger.info("books_api_starting", environment=settings.environment)

    # Table creation on first start (dev convenience)
    if settings.environment == "development":
        from books_api.database import Base, engine
        from books_api.models import book, user  # noqa: F401

        async with engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
        logger.info("database_tables_created")

    yield

    logger.info("books_api_shutting_down")
    from books_api.database import engine

    await engine.dispose()


app = FastAPI(
    title="Books API",
    description="Book catalogue with filtered lookups, pagination and star ratings",
    version=__version__,
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan,
)

# ── CORS ──
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origin_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# ── Request metrics middleware ──
@app.middleware("http")
async def metrics_middleware(request: Request, call_next):
    if not settings.enable_metrics:
        return await call_next(request)

    start = time.time()
    response = await call_next(request)
    duration = time.time() - start

    route = request.scope.get("route")
    endpoint = route.path if route is not None else request.url.path
    REQUEST_COUNT.labels(
        method=request.method,
        endpoint=endpoint,
        status=response.status_code,
    ).inc()
    REQUEST_LATENCY.labels(
        method=request.method,
        endpoint=endpoint,
    ).observe(duration)

    return response


# ── Data-access failures ──
@app.exception_handler(SQLAlchemyError)
async def data_access_error_handler(request: Request, exc: SQLAlchemyError):
    logger.exception("data_access_error", method=request.method, path=request.url.path)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"detail": SERVER_ERROR_DETAIL},
    )


# ── Routers ──
app.include_router(auth.router)
app.include_router(books.router)


# ── Health / Readiness / Liveness ──
@app.get("/health", tags=["Health"])
async def health():
    return {"status": "healthy", "service": "books_api"}


@app.get("/ready", tags=["Health"])
async def readiness():
    """Readiness probe — checks DB connectivity."""
    checks = {}
    try:
        from books_api.database import engine

        async with engine.connect() as conn:
            await conn.execute(text("SELECT 1"))
        checks["database"] = "ok"
    except (SQLAlchemyError, OSError):
        logger.warning("readiness_database_unavailable")
        checks["database"] = "error"

    all_ok = all(v == "ok" for v in checks.values())
    return JSONResponse(
        status_code=200 if all_ok else 503,
        content={"status": "ready" if all_ok else "not_ready", "checks": checks},
    )


@app.get("/live", tags=["Health"])
async def liveness():
    return {"status": "alive"}


# ── Prometheus metrics endpoint ──
@app.get("/metrics", tags=["Monitoring"])
async def metrics():
    from starlette.responses import Response

    return Response(content=generate_latest(), media_type="text/plain")
