# =============================================================================
# File: derivative_pipeline.py
# Date: 2026-10-19
# Copyright (c) 2024 Goutam Malakar. All rights reserved.
# =============================================================================

"""Middleware wiring a DerivativePipeline into every request.

The pipeline is exposed to endpoints as ``request.state.derivative_pipeline``
together with ``request.state.supports_webp``. The batch drain is attached to
the response as a background task, which the server runs only after the
response body has been sent.
"""

import time
from typing import Any, Callable, Optional

from starlette.background import BackgroundTasks
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request

from lazywebp.config.appsettings import AppSettings
from lazywebp.logger import get_logger
from lazywebp.modules.shared_cache import SharedCache
from lazywebp.services.cache_registry import get_shared_cache
from lazywebp.services.pipeline import DerivativePipeline
from lazywebp.utils.error_handler import ErrorHandler

logger = get_logger("derivative_middleware")

STATE_PIPELINE = "derivative_pipeline"
STATE_SUPPORTS = "supports_webp"


def accepts_mime_type(accept_header: Optional[str], mime_type: str) -> bool:
    """True when the Accept header explicitly lists mime_type."""
    if not accept_header:
        return False
    for part in accept_header.split(","):
        media_range = part.split(";", 1)[0].strip().lower()
        if media_range == mime_type.lower():
            return True
    return False


class DerivativePipelineMiddleware(BaseHTTPMiddleware):
    def __init__(
        self,
        app,
        settings: Optional[AppSettings] = None,
        shared_cache: Optional[SharedCache] = None,
    ):
        super().__init__(app)
        if settings is None:
            from lazywebp.app_init import APP_SETTINGS

            settings = APP_SETTINGS
        self.settings = settings
        self.shared_cache = shared_cache or get_shared_cache(settings.cache.max_entries)
        self.target_mime_type = f"image/{settings.conversion.target_extension}"

    async def dispatch(self, request: Request, call_next: Callable[[Request], Any]) -> Any:
        pipeline = DerivativePipeline(self.settings, self.shared_cache)
        setattr(request.state, STATE_PIPELINE, pipeline)
        setattr(
            request.state,
            STATE_SUPPORTS,
            accepts_mime_type(request.headers.get("accept"), self.target_mime_type),
        )

        response = await call_next(request)

        if pipeline.queue.is_empty():
            return response

        tasks = BackgroundTasks()
        if response.background is not None:
            tasks.add_task(response.background)
        tasks.add_task(self._drain, pipeline, request.url.path)
        response.background = tasks
        return response

    @staticmethod
    def _drain(pipeline: DerivativePipeline, path: str) -> None:
        start_time = time.perf_counter()
        try:
            report = pipeline.finish()
        except Exception as e:
            ErrorHandler.handle_exception(e, "Post-response conversion")
            return
        logger.debug(
            "%s: converted %d/%d derivatives after response [%.2fms]",
            path,
            report.converted,
            report.attempted,
            (time.perf_counter() - start_time) * 1000,
        )


def get_pipeline(request: Request) -> Optional[DerivativePipeline]:
    """The request's pipeline, or None when the middleware is not installed."""
    return getattr(request.state, STATE_PIPELINE, None)


def client_supports_webp(request: Request) -> bool:
    return bool(getattr(request.state, STATE_SUPPORTS, False))


__all__ = [
    "DerivativePipelineMiddleware",
    "accepts_mime_type",
    "client_supports_webp",
    "get_pipeline",
]
