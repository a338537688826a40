"""
FastAPI application for Article Tags.

Run:
    uvicorn article_tags.main:app --reload

Docs:
    http://localhost:8000/docs       - Swagger UI
    http://localhost:8000/redoc      - ReDoc
"""

import time
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from datetime import UTC, datetime

from fastapi import APIRouter, Depends, FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from slowapi import Limiter
from slowapi.errors import RateLimitExceeded
from slowapi.util import get_remote_address
from sqlalchemy import text

from .api import articles_router, articles_tags_router, tags_router
from .api.dependencies import verify_api_key
from .api.errors import register_error_handlers
from .api.middleware import RequestLoggingMiddleware
from .core.config import settings
from .core.database import AsyncSessionLocal
from .core.logging import get_logger, setup_logging

setup_logging(
    log_level=settings.LOG_LEVEL, log_format=settings.LOG_FORMAT, sql_echo=settings.DATABASE_ECHO
)

logger = get_logger(__name__)

APP_VERSION = "1.0.0"
APP_START_TIME: float = 0.0  # set on startup

# ============================================================================
# RATE LIMITER
# ============================================================================

# Requests are grouped by client IP
limiter = Limiter(key_func=get_remote_address)


def rate_limit_exceeded_handler(request: Request, exc: RateLimitExceeded) -> JSONResponse:
    """429 in the common error envelope."""
    return JSONResponse(
        status_code=429,
        content={
            "error": {
                "code": "RATE_LIMIT_EXCEEDED",
                "message": f"Too many requests. Limit: {exc.detail}",
                "details": [{"field": "rate_limit", "message": str(exc.detail)}],
            }
        },
    )


# ============================================================================
# LIFESPAN
# ============================================================================


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    global APP_START_TIME

    APP_START_TIME = time.time()
    logger.info(
        "Application started",
        extra={
            "app_name": settings.APP_NAME,
            "version": APP_VERSION,
            "debug": settings.DEBUG,
            "log_level": settings.LOG_LEVEL,
        },
    )

    yield

    uptime = int(time.time() - APP_START_TIME)
    logger.info("Application stopped", extra={"uptime_seconds": uptime})


# ============================================================================
# APPLICATION
# ============================================================================

app = FastAPI(
    lifespan=lifespan,
    title=settings.APP_NAME,
    description="""
    Articles, tags and the articles_tags join table between them.

    ## Data model

    ```
    Articles ──< articles_tags >── Tags
                (article_id, tag_id)
    ```

    * A link row exists only while both its article and its tag exist
    * Deleting an article removes its links
    * A tag in use is deleted only with `force=true`

    ## Authentication

    Every `/api/v1` endpoint needs the `X-API-Key` header.
    """,
    version=APP_VERSION,
    docs_url="/docs",
    redoc_url="/redoc",
    openapi_url="/openapi.json",
)

app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, rate_limit_exceeded_handler)  # type: ignore[arg-type]

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)
app.add_middleware(RequestLoggingMiddleware)

# ============================================================================
# ROUTERS
# ============================================================================

api_v1_router = APIRouter(prefix="/api/v1")
api_v1_router.include_router(articles_router)
api_v1_router.include_router(tags_router)
api_v1_router.include_router(articles_tags_router)

app.include_router(api_v1_router, dependencies=[Depends(verify_api_key)])

register_error_handlers(app, hide_internal_errors=not settings.DEBUG)


# ============================================================================
# ROOT / HEALTH
# ============================================================================


@app.get("/", tags=["root"], summary="API information")
@limiter.limit(settings.RATE_LIMIT)
async def root(request: Request):
    return {
        "name": settings.APP_NAME,
        "version": APP_VERSION,
        "api_version": "v1",
        "docs": "/docs",
        "redoc": "/redoc",
        "openapi": "/openapi.json",
        "endpoints": {
            "articles": "/api/v1/articles",
            "tags": "/api/v1/tags",
            "articles_tags": "/api/v1/articles-tags",
        },
        "rate_limit": settings.RATE_LIMIT,
    }


@app.get("/health", tags=["health"], summary="Health check")
@limiter.limit(settings.RATE_LIMIT)
async def health_check(request: Request):
    """
    200 with "status": "ok" when the database answers, 503 otherwise.

    ```json
    {
        "status": "ok",
        "checks": {"database": "connected", "version": "1.0.0", "uptime_seconds": 3600},
        "timestamp": "2026-01-22T12:00:00+00:00"
    }
    ```
    """
    uptime_seconds = int(time.time() - APP_START_TIME) if APP_START_TIME > 0 else 0

    try:
        async with AsyncSessionLocal() as session:
            await session.execute(text("SELECT 1"))
        db_status = "connected"
    except Exception:
        logger.warning("Health check: database unreachable", exc_info=True)
        db_status = "disconnected"

    healthy = db_status == "connected"
    return JSONResponse(
        status_code=200 if healthy else 503,
        content={
            "status": "ok" if healthy else "error",
            "checks": {
                "database": db_status,
                "version": APP_VERSION,
                "uptime_seconds": uptime_seconds,
            },
            "timestamp": datetime.now(UTC).isoformat(),
        },
    )
