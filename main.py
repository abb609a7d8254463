from contextlib import asynccontextmanager
from typing import Any

from fastapi import Depends, FastAPI, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded
from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from api import seeds
from api.errors import register_exception_handlers
from core.config import get_settings
from core.database import engine, get_db
from core.logging import get_logger, setup_logging
from core.rate_limit import limiter
from middleware.correlation import CorrelationIDMiddleware

logger = get_logger(__name__)

settings = get_settings()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Configure logging on startup, release pooled connections on shutdown"""
    setup_logging()
    logger.info(
        f"{settings.app_name} {settings.app_version} starting "
        f"(IMAP sync cap: {settings.imap_sync_max_messages} messages, "
        f"rate limit: {settings.sync_rate_limit})"
    )

    # Tables for email_seeds / captured_newsletters are managed by Alembic

    yield

    await engine.dispose()
    logger.info("Database engine disposed")


app = FastAPI(
    title=settings.app_name,
    version=settings.app_version,
    debug=settings.debug,
    lifespan=lifespan,
)

# Sync endpoint is rate limited per client IP
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)

# RadarException subclasses -> {"error": message}
register_exception_handlers(app)

# Tags every request (and its IMAP log lines) with X-Correlation-ID
app.add_middleware(CorrelationIDMiddleware)

# allow_credentials=True requires explicit origins, not "*"
app.add_middleware(
    CORSMiddleware,
    allow_origins=[origin.strip() for origin in settings.allowed_origins.split(",")],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(seeds.router, prefix="/seeds", tags=["seeds"])


@app.get("/")
async def root():
    return {
        "name": settings.app_name,
        "version": settings.app_version,
        "status": "running",
    }


@app.get("/health")
async def health_check(db: AsyncSession = Depends(get_db)):
    """
    Liveness plus database reachability.

    200 when the seed registry answers a trivial query, 503 otherwise.
    IMAP servers are not probed; they are per-seed and contacted only on sync.
    """
    checks: dict[str, Any] = {"api": True, "database": False}

    try:
        await db.execute(text("SELECT 1"))
    except Exception as e:
        logger.error(f"Health check failed: database unreachable: {e}")
        checks["error"] = str(e)
        return JSONResponse(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            content={"status": "unhealthy", "checks": checks},
        )

    checks["database"] = True
    return {"status": "healthy", "checks": checks}
