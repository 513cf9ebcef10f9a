# =============================================================================
# File: cache_registry.py
# Date: 2026-10-19
# Copyright (c) 2024 Goutam Malakar. All rights reserved.
# =============================================================================

import threading
from typing import Optional

from lazywebp.modules.shared_cache import InMemorySharedCache, SharedCache

# The process-wide shared tier is created lazily so tests can import this
# module without loading application settings.
_INIT_LOCK = threading.Lock()
SHARED_CACHE: Optional[SharedCache] = None


def get_shared_cache(max_size: Optional[int] = None) -> SharedCache:
    """Return the process-wide shared existence cache, creating it on first use."""
    global SHARED_CACHE

    if SHARED_CACHE is not None:
        return SHARED_CACHE

    with _INIT_LOCK:
        if SHARED_CACHE is None:
            SHARED_CACHE = InMemorySharedCache(max_size=max_size)
    return SHARED_CACHE


def set_shared_cache(cache: Optional[SharedCache]) -> None:
    """Install a different shared tier (e.g. an external store), or reset with None."""
    global SHARED_CACHE
    with _INIT_LOCK:
        SHARED_CACHE = cache
