# =============================================================================
# File: conversion_queue.py
# Date: 2026-10-19
# Copyright (c) 2024 Goutam Malakar. All rights reserved.
# =============================================================================

from collections import OrderedDict
from threading import Lock
from typing import Iterable, List, Optional

from lazywebp.logger import get_logger
from lazywebp.models.conversion_job import ConversionJob
from lazywebp.utils.log_sanitizer import sanitize_for_log

logger = get_logger("conversion_queue")


class ConversionQueue:
    """
    Request-scoped, deduplicated, insertion-ordered queue of conversion jobs.

    Holds at most ``2 * max_per_batch`` jobs; inserts beyond that are dropped
    and the source is rediscovered by a later request.
    """

    def __init__(self, max_per_batch: int = 5):
        self.max_per_batch = max(0, max_per_batch)
        self.capacity = self.max_per_batch * 2
        self._jobs: "OrderedDict[str, ConversionJob]" = OrderedDict()
        self._lock = Lock()

    def enqueue(self, job: ConversionJob) -> bool:
        """Insert job unless its key is already queued or the queue is full."""
        key = job.dedup_key
        with self._lock:
            if key in self._jobs:
                return False
            if len(self._jobs) >= self.capacity:
                logger.debug("Queue full (%d), dropping %s", self.capacity, sanitize_for_log(key))
                return False
            self._jobs[key] = job
            return True

    def drain_batch(self, max_count: Optional[int] = None) -> List[ConversionJob]:
        """First max_count jobs in insertion order; the queue is left unchanged."""
        if max_count is None:
            max_count = self.max_per_batch
        with self._lock:
            return list(self._jobs.values())[: max(0, max_count)]

    def remove(self, keys: Iterable[str]) -> None:
        with self._lock:
            for key in keys:
                self._jobs.pop(key, None)

    def keys(self) -> List[str]:
        with self._lock:
            return list(self._jobs.keys())

    def size(self) -> int:
        with self._lock:
            return len(self._jobs)

    def is_empty(self) -> bool:
        return self.size() == 0

    def __len__(self) -> int:
        return self.size()
