# =============================================================================
# File: request_memo.py
# Date: 2026-10-19
# Copyright (c) 2024 Goutam Malakar. All rights reserved.
# =============================================================================

from threading import Lock
from typing import Dict, Optional


class RequestMemo:
    """Request-lifetime existence memo. Entries never expire; the memo is dropped with the request."""

    def __init__(self):
        self.cache: Dict[str, bool] = {}
        self.lock = Lock()

    def get(self, key: str) -> Optional[bool]:
        with self.lock:
            return self.cache.get(key)

    def put(self, key: str, value: bool) -> None:
        with self.lock:
            self.cache[key] = value

    def pop(self, key: str) -> None:
        with self.lock:
            self.cache.pop(key, None)

    def size(self) -> int:
        with self.lock:
            return len(self.cache)

    def clear(self) -> None:
        with self.lock:
            self.cache.clear()
