# =============================================================================
# File: background_cleanup.py
# Date: 2026-10-19
# Copyright (c) 2024 Goutam Malakar. All rights reserved.
# =============================================================================

"""Background purge of expired shared-cache entries."""

import threading
from typing import Optional

from lazywebp.logger import get_logger
from lazywebp.modules.shared_cache import SharedCache

logger = get_logger("background_cleanup")


class BackgroundCleanup:
    """Periodically drops expired entries from a shared cache that supports it."""

    def __init__(self, cache: SharedCache, cleanup_interval: float = 60.0):
        self.cache = cache
        self.cleanup_interval = cleanup_interval
        self._stop_event = threading.Event()
        self._thread: Optional[threading.Thread] = None
        self._running = False

    @property
    def running(self) -> bool:
        return self._running

    def start(self):
        """Start the background cleanup service."""
        if self._running:
            return
        if not hasattr(self.cache, "purge_expired"):
            logger.info("Shared cache expires entries itself; background cleanup not started")
            return

        self._running = True
        self._stop_event.clear()
        self._thread = threading.Thread(target=self._cleanup_loop, daemon=True)
        self._thread.start()
        logger.info(f"Background cleanup started (interval: {self.cleanup_interval}s)")

    def stop(self):
        """Stop the background cleanup service."""
        if not self._running:
            return

        self._running = False
        self._stop_event.set()
        if self._thread:
            self._thread.join(timeout=5.0)
        logger.info("Background cleanup stopped")

    def run_once(self) -> int:
        purged = self.cache.purge_expired()
        if purged > 0:
            logger.debug(f"Purged {purged} expired cache entries")
        return purged

    def _cleanup_loop(self):
        """Main cleanup loop running in background thread."""
        while not self._stop_event.wait(self.cleanup_interval):
            try:
                self.run_once()
            except Exception as e:
                logger.error(f"Background cleanup error: {e}")
