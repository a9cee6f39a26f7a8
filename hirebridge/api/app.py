"""
HireBridge - FastAPI Application.

Main FastAPI app serving the interview API.
Includes background task for periodic session cleanup.
"""

import asyncio
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded
from slowapi.middleware import SlowAPIMiddleware

from hirebridge.api.routes import limiter, router as api_router
from hirebridge.app.orchestrator import InterviewOrchestrator, create_orchestrator
from hirebridge.core.config import configure_logging, get_settings
from hirebridge.core.exceptions import (
    ConfigurationError,
    HireBridgeError,
    SessionError,
)

logger = logging.getLogger(__name__)


async def background_cleanup_task(orchestrator: InterviewOrchestrator, interval_seconds: float):
    """Evict idle sessions every `interval_seconds`."""
    logger.info("🧹 Background cleanup task started")

    while True:
        try:
            await asyncio.sleep(interval_seconds)

            count = orchestrator.evict_stale()
            if count > 0:
                logger.info(f"🧹 Cleanup complete: {count} sessions removed")

        except asyncio.CancelledError:
            logger.info("🧹 Background cleanup task cancelled")
            break
        except Exception as e:
            logger.error(f"🧹 Cleanup task error: {e}")


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan manager.

    - Startup: start the background cleanup task
    - Shutdown: cancel it gracefully
    """
    logger.info("🚀 HireBridge API starting...")
    settings = get_settings()

    cleanup_task = asyncio.create_task(
        background_cleanup_task(
            app.state.orchestrator,
            settings.SESSION_CLEANUP_INTERVAL_SECONDS,
        )
    )

    yield

    logger.info("👋 HireBridge API shutting down...")
    cleanup_task.cancel()
    try:
        await cleanup_task
    except asyncio.CancelledError:
        pass


async def hirebridge_error_handler(request: Request, exc: HireBridgeError) -> JSONResponse:
    """Map domain errors to JSON responses."""
    if isinstance(exc, (ConfigurationError, SessionError)):
        status_code = 400
        logger.warning(f"{request.url.path}: {exc}")
    else:
        status_code = 500
        logger.error(f"{request.url.path}: {exc}")

    return JSONResponse(
        status_code=status_code,
        content={"error": exc.message, "detail": exc.details},
    )


def create_app(orchestrator: InterviewOrchestrator | None = None) -> FastAPI:
    """Create and configure the FastAPI application."""

    app = FastAPI(
        title="HireBridge",
        description="Adaptive AI Mock Interview API",
        version="1.0.0",
        docs_url="/api/docs",
        redoc_url="/api/redoc",
        lifespan=lifespan,
    )

    app.state.orchestrator = orchestrator or create_orchestrator()

    # Rate limiting
    app.state.limiter = limiter
    app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)
    app.add_middleware(SlowAPIMiddleware)

    app.add_exception_handler(HireBridgeError, hirebridge_error_handler)

    # CORS middleware for local development
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],  # In production, restrict this
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(api_router)

    return app


def _build_default_app() -> FastAPI:
    configure_logging()
    return create_app()


# Create app instance
app = _build_default_app()
