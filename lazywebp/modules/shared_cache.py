# =============================================================================
# File: shared_cache.py
# Date: 2026-10-19
# Copyright (c) 2024 Goutam Malakar. All rights reserved.
# =============================================================================

import time
from abc import ABC, abstractmethod
from threading import RLock
from typing import Any, Callable, Dict, Optional, Tuple


class SharedCache(ABC):
    """
    Cross-request key/value store with per-entry TTL.

    Implementations must tolerate concurrent readers and writers from
    different request handlers; last write wins.
    """

    @abstractmethod
    def get(self, key: str, default: Optional[Any] = None) -> Any:
        """Return the live value for key, or default when missing or expired."""

    @abstractmethod
    def set(self, key: str, value: Any, ttl_seconds: Optional[float] = None) -> None:
        """Store value; a ttl of None or 0 keeps it until deleted."""

    @abstractmethod
    def delete(self, key: str) -> None:
        """Remove key if present."""

    @abstractmethod
    def add(self, key: str, value: Any, ttl_seconds: Optional[float] = None) -> bool:
        """Store value only if key is absent or expired. Returns True if stored."""

    def now(self) -> float:
        """Clock used for expiry timestamps."""
        return time.time()


class InMemorySharedCache(SharedCache):
    """
    Thread-safe in-process SharedCache.
    Entries expire lazily on read; purge_expired() drops them eagerly and
    max_size evicts the least recently written entries.
    """

    def __init__(
        self,
        max_size: Optional[int] = None,
        clock: Optional[Callable[[], float]] = None,
    ):
        self._lock = RLock()
        self._dict: Dict[str, Tuple[Any, Optional[float]]] = {}
        self._write_times: Dict[str, float] = {}
        self._max_size = max_size if (max_size is None or max_size > 0) else None
        self._clock = clock or time.time

    def now(self) -> float:
        return self._clock()

    def _expires_at(self, ttl_seconds: Optional[float]) -> Optional[float]:
        if not ttl_seconds:
            return None
        return self._clock() + ttl_seconds

    def _is_live(self, key: str, current_time: float) -> bool:
        entry = self._dict.get(key)
        if entry is None:
            return False
        expires_at = entry[1]
        if expires_at is not None and expires_at <= current_time:
            del self._dict[key]
            self._write_times.pop(key, None)
            return False
        return True

    def get(self, key: str, default: Optional[Any] = None) -> Any:
        with self._lock:
            if self._is_live(key, self._clock()):
                return self._dict[key][0]
            return default

    def set(self, key: str, value: Any, ttl_seconds: Optional[float] = None) -> None:
        with self._lock:
            self._dict[key] = (value, self._expires_at(ttl_seconds))
            self._write_times[key] = self._clock()
            self._evict_if_needed()

    def delete(self, key: str) -> None:
        with self._lock:
            self._dict.pop(key, None)
            self._write_times.pop(key, None)

    def add(self, key: str, value: Any, ttl_seconds: Optional[float] = None) -> bool:
        with self._lock:
            if self._is_live(key, self._clock()):
                return False
            self.set(key, value, ttl_seconds)
            return True

    def size(self) -> int:
        with self._lock:
            return len(self._dict)

    def clear(self) -> None:
        with self._lock:
            self._dict.clear()
            self._write_times.clear()

    def purge_expired(self) -> int:
        """Remove every expired entry. Returns count of removed items."""
        with self._lock:
            current_time = self._clock()
            expired = [
                key
                for key, (_, expires_at) in self._dict.items()
                if expires_at is not None and expires_at <= current_time
            ]
            for key in expired:
                del self._dict[key]
                self._write_times.pop(key, None)
        return len(expired)

    def _evict_if_needed(self) -> None:
        if not self._max_size:
            return
        while len(self._dict) > self._max_size and self._write_times:
            oldest_key = min(self._write_times, key=self._write_times.get)
            self._dict.pop(oldest_key, None)
            self._write_times.pop(oldest_key, None)
