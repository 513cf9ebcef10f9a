# =============================================================================
# File: batch_processor.py
# Date: 2026-10-19
# Copyright (c) 2024 Goutam Malakar. All rights reserved.
# =============================================================================

import time
from typing import Callable, List, Optional

from lazywebp.config.appsettings import ConversionConfig
from lazywebp.logger import get_logger
from lazywebp.models.batch_report import BatchReport
from lazywebp.models.conversion_job import ConversionJob
from lazywebp.models.conversion_result import ConversionResult
from lazywebp.modules.shared_cache import SharedCache
from lazywebp.services.conversion_queue import ConversionQueue
from lazywebp.services.converter import Converter
from lazywebp.utils.cache_keys import conversion_lock_key
from lazywebp.utils.codec_support import is_format_supported
from lazywebp.utils.error_handler import ErrorHandler
from lazywebp.utils.log_sanitizer import sanitize_for_log

logger = get_logger("batch_processor")


class DeferredBatchProcessor:
    """
    Drains the conversion queue once, after the response has been sent.

    Every attempted job is removed whatever its outcome; a persistent failure
    is rediscovered by the next request that renders the same source. Jobs
    beyond the batch size stay queued until the request ends and are then
    dropped with it.
    """

    def __init__(
        self,
        queue: ConversionQueue,
        converter: Converter,
        config: ConversionConfig,
        shared_cache: Optional[SharedCache] = None,
        support_ttl_seconds: float = 3600,
        format_check: Optional[Callable[[], bool]] = None,
    ):
        self.queue = queue
        self.converter = converter
        self.config = config
        self.shared_cache = shared_cache
        self.support_ttl_seconds = support_ttl_seconds
        self._format_check = format_check
        self._has_run = False

    def target_format_supported(self) -> bool:
        if self._format_check is not None:
            return self._format_check()
        return is_format_supported(
            self.config.target_format, self.shared_cache, self.support_ttl_seconds
        )

    def process(self) -> BatchReport:
        if self._has_run:
            logger.debug("Batch drain already ran for this request")
            return BatchReport(remaining=self.queue.size())
        self._has_run = True

        if self.queue.is_empty():
            return BatchReport()

        if not self.target_format_supported():
            return BatchReport(remaining=self.queue.size())

        start_time = time.perf_counter()
        batch = self.queue.drain_batch(self.config.batch_size)
        report = BatchReport(attempted=len(batch))
        attempted_keys: List[str] = []

        for job in batch:
            attempted_keys.append(job.dedup_key)
            if not self._acquire(job):
                report.skipped += 1
                continue
            try:
                result = self._convert(job)
            finally:
                self._release(job)
            report.results.append(result)
            if result.success:
                report.converted += 1
            else:
                report.failed += 1

        self.queue.remove(attempted_keys)

        report.remaining = self.queue.size()
        report.duration_ms = (time.perf_counter() - start_time) * 1000
        logger.debug(
            "Converted %d images (%d failed, %d skipped), %d queued for next request [%.2fms]",
            report.converted,
            report.failed,
            report.skipped,
            report.remaining,
            report.duration_ms,
        )
        return report

    def _convert(self, job: ConversionJob) -> ConversionResult:
        try:
            return self.converter.convert_with_result(job.source_path)
        except Exception as e:
            error_code, message = ErrorHandler.handle_exception(
                e, f"Batch conversion of {sanitize_for_log(job.source_path)}"
            )
            return ConversionResult(
                source_path=job.source_path,
                success=False,
                error_code=error_code,
                message=message,
            )

    def _acquire(self, job: ConversionJob) -> bool:
        if not self.config.advisory_locking or self.shared_cache is None:
            return True
        acquired = self.shared_cache.add(
            conversion_lock_key(job.dedup_key), True, self.config.lock_ttl_seconds
        )
        if not acquired:
            logger.debug("Conversion in progress elsewhere: %s", sanitize_for_log(job.dedup_key))
        return acquired

    def _release(self, job: ConversionJob) -> None:
        if self.config.advisory_locking and self.shared_cache is not None:
            self.shared_cache.delete(conversion_lock_key(job.dedup_key))
