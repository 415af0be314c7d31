from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
import logging
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from dotenv import load_dotenv
from pathlib import Path

env_path = Path(__file__).resolve().parent.parent / ".env"
_ = load_dotenv(dotenv_path=env_path)

from availability_calendar.config import settings
from availability_calendar.database import engine
from availability_calendar.core.middleware import setup_middleware
from availability_calendar.core.sentry_helpers import (
    capture_exception_with_context,
    init_sentry,
)
from availability_calendar.api import auth, availability, users

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(_app: FastAPI):
    logger.info(f"{settings.APP_NAME} {settings.VERSION} starting up")

    if settings.DEBUG:
        logger.info("Running in debug mode - enhanced logging enabled")

    yield

    logger.info(f"{settings.APP_NAME} shutting down")
    await engine.dispose()


if settings.SENTRY_DSN:
    init_sentry(
        dsn=settings.SENTRY_DSN,
        environment=settings.ENVIRONMENT,
        release=f"availability-calendar@{settings.VERSION}",
        debug=settings.DEBUG,
    )
    logger.info(f"Sentry initialized for environment: {settings.ENVIRONMENT}")
else:
    logger.info("Sentry DSN not configured - error tracking disabled")


app = FastAPI(
    title=settings.APP_NAME,
    version=settings.VERSION,
    openapi_url="/api/openapi.json" if settings.DOCS_ENABLED else None,
    docs_url="/docs" if settings.DOCS_ENABLED else None,
    redoc_url=None,
    lifespan=lifespan,
)

setup_middleware(app)

app.include_router(auth.router, prefix="/api/auth", tags=["authentication"])
app.include_router(users.router, prefix="/api/users", tags=["users"])
app.include_router(
    availability.router, prefix="/api/availability", tags=["availability"]
)


@app.get("/health")
async def health_check():
    return {
        "status": "healthy",
        "version": settings.VERSION,
        "environment": settings.ENVIRONMENT,
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    logger.error(
        f"Unhandled exception on {request.method} {request.url.path}: {exc}",
        exc_info=True,
    )

    if settings.SENTRY_DSN:
        capture_exception_with_context(exc, request=request)

    return JSONResponse(
        status_code=500,
        content={
            "error": "Internal server error",
            "detail": "An unexpected error occurred",
        },
    )
