# =============================================================================
# File: main.py
# Date: 2026-10-19
# Copyright (c) 2024 Goutam Malakar. All rights reserved.
# =============================================================================

import signal
import sys
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from lazywebp.config.appsettings import AppSettings
from lazywebp.exceptions import LazyWebPBaseException
from lazywebp.logger import get_logger, is_debug_mode
from lazywebp.middleware.derivative_pipeline import DerivativePipelineMiddleware
from lazywebp.routers import health
from lazywebp.services.cache_registry import get_shared_cache
from lazywebp.utils.background_cleanup import BackgroundCleanup
from lazywebp.utils.error_handler import ErrorHandler

logger = get_logger("main")


def create_app(settings: Optional[AppSettings] = None) -> FastAPI:
    """Build a FastAPI host with the derivative pipeline middleware installed."""
    if settings is None:
        from lazywebp.app_init import APP_SETTINGS

        settings = APP_SETTINGS

    shared_cache = get_shared_cache(settings.cache.max_entries)
    cleanup = BackgroundCleanup(shared_cache, settings.cache.cleanup_interval_seconds)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Manage application lifespan events."""
        logger.info("Starting background cache cleanup")
        cleanup.start()

        yield

        logger.info("Stopping background cache cleanup")
        cleanup.stop()

    app = FastAPI(
        title=settings.app.name,
        description=settings.app.description,
        version=settings.app.version,
        openapi_url="/api/v1/openapi.json",
        docs_url="/api/v1/docs",
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.shared_cache = shared_cache

    app.add_middleware(DerivativePipelineMiddleware, settings=settings, shared_cache=shared_cache)
    app.include_router(health.router, prefix="/api/v1", tags=["Health & Monitoring"])

    @app.exception_handler(LazyWebPBaseException)
    async def lazywebp_exception_handler(request: Request, exc: LazyWebPBaseException):
        error_code, message = ErrorHandler.handle_exception(exc, request.url.path)
        return JSONResponse(status_code=500, content={"error": error_code, "detail": message})

    @app.get("/")
    def root() -> dict:
        """Root endpoint for health check."""
        return {"message": f"{settings.app.name} is running", "docs": "/api/v1/docs"}

    return app


def signal_handler(signum, frame):
    """Handle shutdown signals gracefully."""
    logger.info(f"Received signal {signum}, shutting down gracefully...")
    sys.exit(0)


def run_server():
    from lazywebp.app_init import APP_SETTINGS

    signal.signal(signal.SIGTERM, signal_handler)
    signal.signal(signal.SIGINT, signal_handler)

    logger.info(
        f"Starting uvicorn server on {APP_SETTINGS.server.host}:{APP_SETTINGS.server.port}"
    )

    import uvicorn

    uvicorn.run(
        "lazywebp.main:create_app",
        factory=True,
        host=APP_SETTINGS.server.host,
        port=APP_SETTINGS.server.port,
        log_level="debug" if is_debug_mode() else "info",
        timeout_keep_alive=APP_SETTINGS.server.keepalive_timeout,
    )

    logger.info("LazyWebP server stopped")


if __name__ == "__main__":
    try:
        run_server()
    except KeyboardInterrupt:
        logger.info("Application stopped by user")
