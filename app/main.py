import logging
from datetime import datetime, timezone

import redis
from fastapi import FastAPI, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from app.api.v1.routes import router as api_v1_router
from app.core.cache import get_client
from app.core.config import settings
from app.core.errors import register_exception_handlers
from app.core.logging import configure_logging
from app.db.base import init_db
from app.db.session import SessionLocal

configure_logging()
logger = logging.getLogger(__name__)

app = FastAPI(
    title=settings.PROJECT_NAME,
    description="Subscription tracking, package catalog and checkout API",
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc",
)

register_exception_handlers(app)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS", "PATCH"],
    allow_headers=["*"],
    max_age=3600,
)
app.add_middleware(GZipMiddleware, minimum_size=1000)

app.include_router(api_v1_router, prefix=settings.API_V1_STR)


@app.on_event("startup")
async def startup_event():
    logger.info(f"Starting {settings.PROJECT_NAME} ({settings.ENVIRONMENT})")
    init_db()
    logger.info(
        f"Monthly totals {'normalized by billing cycle' if settings.NORMALIZE_MONTHLY_TOTAL else 'summed as entered'}, "
        f"currency {settings.DEFAULT_CURRENCY}"
    )


def _database_status() -> str:
    db = SessionLocal()
    try:
        db.execute(text("SELECT 1"))
        return "connected"
    except SQLAlchemyError as e:
        logger.error(f"Database health check failed: {e}")
        return "disconnected"
    finally:
        db.close()


def _cache_status() -> str:
    client = get_client()
    if client is None:
        return "not_configured"
    try:
        client.ping()
        return "connected"
    except redis.exceptions.AuthenticationError:
        logger.warning("Redis health check: authentication required (check REDIS_URL / REDIS_PASSWORD)")
        return "auth_required"
    except redis.RedisError as e:
        logger.warning(f"Redis health check failed: {e}")
        return "disconnected"


@app.get("/")
def root():
    return {
        "message": "SubManager Backend API",
        "version": "1.0.0",
        "api": settings.API_V1_STR,
        "docs": "/docs",
        "environment": settings.ENVIRONMENT,
    }


@app.get("/health")
def health_check():
    """
    Database and cache status. The cache is optional: only the database
    decides between 200 and 503.
    """
    database = _database_status()
    health_status = {
        "status": "healthy" if database == "connected" else "unhealthy",
        "environment": settings.ENVIRONMENT,
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "database": database,
        "redis": _cache_status(),
    }
    status_code = status.HTTP_200_OK if database == "connected" else status.HTTP_503_SERVICE_UNAVAILABLE
    return JSONResponse(content=health_status, status_code=status_code)
