# =============================================================================
# File: codec_support.py
# Date: 2026-10-19
# Copyright (c) 2024 Goutam Malakar. All rights reserved.
# =============================================================================

from typing import Optional

from PIL import Image, features

from lazywebp.logger import get_logger
from lazywebp.modules.shared_cache import SharedCache
from lazywebp.utils.cache_keys import format_support_key

logger = get_logger("codec_support")


def _encoder_available(target_format: str) -> bool:
    Image.init()
    fmt = target_format.upper()
    if fmt not in Image.SAVE:
        return False
    if fmt == "WEBP":
        return bool(features.check("webp"))
    return True


def is_format_supported(
    target_format: str,
    shared_cache: Optional[SharedCache] = None,
    ttl_seconds: float = 3600,
) -> bool:
    """Whether the installed Pillow can encode target_format (cached in the shared tier)."""
    key = format_support_key(target_format)
    if shared_cache is not None:
        cached = shared_cache.get(key)
        if cached is not None:
            return bool(cached)

    supported = _encoder_available(target_format)
    if not supported:
        logger.warning("Pillow cannot encode %s; derivative conversion disabled", target_format)

    if shared_cache is not None:
        shared_cache.set(key, supported, ttl_seconds)
    return supported
