# =============================================================================
# File: memory_guard.py
# Date: 2026-10-19
# Copyright (c) 2024 Goutam Malakar. All rights reserved.
# =============================================================================

"""Memory headroom checks performed before an image is decoded."""

from typing import Callable, Optional

import psutil

from lazywebp.logger import get_logger

logger = get_logger("memory_guard")

BYTES_PER_PIXEL = 4  # RGBA
PROCESSING_OVERHEAD = 1.5
MB = 1024 * 1024


class MemoryGuard:
    """Estimates transcode memory and compares it against the process limit."""

    def __init__(
        self,
        limit_mb: Optional[int] = None,
        safety_factor: float = 1.5,
        usage_provider: Optional[Callable[[], int]] = None,
    ):
        self.limit_mb = limit_mb
        self.safety_factor = safety_factor
        self._usage_provider = usage_provider

    @staticmethod
    def estimate_bytes(width: int, height: int) -> float:
        """Peak usage estimate: uncompressed RGBA buffer plus processing overhead."""
        return width * height * BYTES_PER_PIXEL * PROCESSING_OVERHEAD

    @staticmethod
    def current_usage_bytes() -> int:
        return psutil.Process().memory_info().rss

    @staticmethod
    def address_space_bytes() -> int:
        """Virtual size, the quantity RLIMIT_AS caps."""
        return psutil.Process().memory_info().vms

    @staticmethod
    def platform_limit_bytes() -> Optional[int]:
        """Soft address-space limit of this process, or None when unlimited/unknown."""
        if not hasattr(psutil, "RLIMIT_AS"):
            return None
        try:
            soft, _ = psutil.Process().rlimit(psutil.RLIMIT_AS)
        except (psutil.Error, OSError) as e:
            logger.debug("Cannot read process memory limit: %s", e)
            return None
        if soft == psutil.RLIM_INFINITY or soft < 0:
            return None
        return soft

    def process_limit_bytes(self) -> Optional[int]:
        if self.limit_mb is None:
            return MemoryGuard.platform_limit_bytes()
        if self.limit_mb < 0:
            return None
        return self.limit_mb * MB

    def available_bytes(self) -> Optional[int]:
        """Headroom under the limit, or None when there is no limit."""
        limit = self.process_limit_bytes()
        if limit is None:
            return None
        return limit - self._usage_bytes()

    def _usage_bytes(self) -> int:
        if self._usage_provider is not None:
            return self._usage_provider()
        # Detected limits are RLIMIT_AS, which caps virtual size
        if self.limit_mb is None:
            return MemoryGuard.address_space_bytes()
        return MemoryGuard.current_usage_bytes()

    def has_sufficient_memory(self, width: int, height: int) -> bool:
        available = self.available_bytes()
        if available is None:
            return True  # Unlimited

        estimated = MemoryGuard.estimate_bytes(width, height)
        sufficient = available > estimated * self.safety_factor
        if not sufficient:
            logger.debug(
                "Insufficient memory for %dx%d: need %.1fMB (with margin), %.1fMB available",
                width,
                height,
                estimated * self.safety_factor / MB,
                available / MB,
            )
        return sufficient
