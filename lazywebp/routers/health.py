# =============================================================================
# File: health.py
# Date: 2026-10-19
# Copyright (c) 2024 Goutam Malakar. All rights reserved.
# =============================================================================

import os
import time

from fastapi import APIRouter, HTTPException, Request

from lazywebp.logger import get_logger
from lazywebp.utils.codec_support import is_format_supported
from lazywebp.utils.memory_guard import MB, MemoryGuard

logger = get_logger("health")
router = APIRouter()


@router.get("/health")
async def health_check(request: Request):
    """Report encoder availability, asset root and shared cache state."""
    try:
        settings = request.app.state.settings
        shared_cache = request.app.state.shared_cache
        guard = MemoryGuard(limit_mb=settings.conversion.memory_limit_mb)
        available = guard.available_bytes()

        size = shared_cache.size() if hasattr(shared_cache, "size") else None
        return {
            "status": "healthy",
            "timestamp": time.time(),
            "encoder": {
                "format": settings.conversion.target_format,
                "supported": is_format_supported(
                    settings.conversion.target_format,
                    shared_cache,
                    settings.cache.support_ttl_seconds,
                ),
            },
            "assets": {"root_exists": os.path.isdir(settings.assets.root)},
            "cache": {"entries": size},
            "memory": {
                "available_mb": None if available is None else available / MB,
            },
        }
    except Exception as e:
        logger.error(f"Health check failed: {e}")
        raise HTTPException(status_code=503, detail="Service unhealthy")
