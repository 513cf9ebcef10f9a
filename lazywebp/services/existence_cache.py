# =============================================================================
# File: existence_cache.py
# Date: 2026-10-19
# Copyright (c) 2024 Goutam Malakar. All rights reserved.
# =============================================================================

"""Tiered cache answering "does a derivative exist for this source?".

Lookups go request memo -> shared TTL cache -> filesystem stat, and every
miss is written back to the tiers that missed. The filesystem stays the
source of truth: shared entries expire after ``ttl_seconds``.
"""

import os
from typing import Optional

from lazywebp.logger import get_logger
from lazywebp.models.existence_entry import ExistenceCacheEntry
from lazywebp.modules.shared_cache import SharedCache
from lazywebp.utils.cache_keys import existence_cache_key, normalize_path
from lazywebp.utils.derivative_paths import DerivativeNaming
from lazywebp.utils.log_sanitizer import sanitize_for_log
from lazywebp.utils.request_memo import RequestMemo

logger = get_logger("existence_cache")


class ExistenceCache:
    def __init__(
        self,
        shared_cache: SharedCache,
        naming: DerivativeNaming,
        ttl_seconds: float = 300,
        memo: Optional[RequestMemo] = None,
    ):
        self.shared_cache = shared_cache
        self.naming = naming
        self.ttl_seconds = ttl_seconds
        self.memo = memo if memo is not None else RequestMemo()

    def derivative_path_for(self, source_path: str) -> Optional[str]:
        """Candidate derivative path, or None when the extension is unsupported."""
        if not source_path:
            return None
        return self.naming.swap(source_path)

    def needs_conversion(self, source_path: str) -> bool:
        """True when the source is a readable supported original without a derivative."""
        derivative_path = self.derivative_path_for(source_path)
        if derivative_path is None:
            return False

        cached = self._lookup(derivative_path)
        if cached is True:
            return False

        if not (os.path.isfile(source_path) and os.access(source_path, os.R_OK)):
            return False

        if cached is None:
            cached = self._stat_and_store(derivative_path)
        return not cached

    def derivative_exists(self, derivative_path: str) -> bool:
        """Read-path lookup; never schedules work."""
        cached = self._lookup(derivative_path)
        if cached is not None:
            return cached
        return self._stat_and_store(derivative_path)

    def invalidate(self, derivative_path: str) -> None:
        """Drop cached knowledge so the next lookup re-stats the filesystem."""
        path = normalize_path(derivative_path)
        self.shared_cache.delete(existence_cache_key(path))
        self.memo.pop(path)

    def mark_exists(self, derivative_path: str) -> None:
        """Record a definitive positive result after a successful conversion."""
        self._store(normalize_path(derivative_path), True)

    def _lookup(self, derivative_path: str) -> Optional[bool]:
        path = normalize_path(derivative_path)

        memoized = self.memo.get(path)
        if memoized is not None:
            return memoized

        key = existence_cache_key(path)
        entry = self.shared_cache.get(key)
        if isinstance(entry, ExistenceCacheEntry):
            if entry.expires_at is not None and entry.expires_at <= self.shared_cache.now():
                # Backend kept the entry past its TTL
                self.shared_cache.delete(key)
                return None
            self.memo.put(path, entry.exists)
            return entry.exists
        return None

    def _stat_and_store(self, derivative_path: str) -> bool:
        path = normalize_path(derivative_path)
        exists = os.path.isfile(path) and os.access(path, os.R_OK)
        logger.debug("Stat %s -> %s", sanitize_for_log(path), exists)
        self._store(path, exists)
        return exists

    def _store(self, path: str, exists: bool) -> None:
        self.memo.put(path, exists)
        if not self.ttl_seconds or self.ttl_seconds <= 0:
            # Shared entries must expire; a zero TTL keeps results request-local
            return
        entry = ExistenceCacheEntry(
            derivative_path=path,
            exists=exists,
            expires_at=self.shared_cache.now() + self.ttl_seconds,
        )
        self.shared_cache.set(existence_cache_key(path), entry, self.ttl_seconds)
