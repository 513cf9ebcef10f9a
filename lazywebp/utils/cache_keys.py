# =============================================================================
# File: cache_keys.py
# Date: 2026-10-19
# Copyright (c) 2024 Goutam Malakar. All rights reserved.
# =============================================================================

import hashlib
import os

EXISTS_PREFIX = "webp_exists_"
LOCK_PREFIX = "webp_lock_"
SUPPORT_PREFIX = "webp_supported_"


def _digest(value: str) -> str:
    return hashlib.md5(value.encode("utf-8")).hexdigest()


def normalize_path(path: str) -> str:
    """Canonical absolute form of a filesystem path, used as the dedup key."""
    return os.path.normpath(os.path.abspath(path))


def existence_cache_key(derivative_path: str) -> str:
    """Shared-tier key for the existence entry of a derivative file."""
    return EXISTS_PREFIX + _digest(normalize_path(derivative_path))


def conversion_lock_key(dedup_key: str) -> str:
    """Shared-tier key of the advisory in-progress marker for a job."""
    return LOCK_PREFIX + _digest(dedup_key)


def format_support_key(target_format: str) -> str:
    return SUPPORT_PREFIX + target_format.lower()


__all__ = [
    "normalize_path",
    "existence_cache_key",
    "conversion_lock_key",
    "format_support_key",
]
