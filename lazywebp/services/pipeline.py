# =============================================================================
# File: pipeline.py
# Date: 2026-10-19
# Copyright (c) 2024 Goutam Malakar. All rights reserved.
# =============================================================================

"""Per-request facade over the derivative pipeline.

A host creates one DerivativePipeline per request, feeds every emitted image
reference through observe() (write path) and resolve() (read path), and calls
finish() once after the response has been flushed.
"""

from typing import Any, Dict, Optional

from lazywebp.config.appsettings import AppSettings
from lazywebp.exceptions import InvalidReference
from lazywebp.logger import get_logger
from lazywebp.models.batch_report import BatchReport
from lazywebp.models.conversion_job import ConversionJob
from lazywebp.modules.shared_cache import SharedCache
from lazywebp.services.batch_processor import DeferredBatchProcessor
from lazywebp.services.conversion_queue import ConversionQueue
from lazywebp.services.converter import Converter
from lazywebp.services.existence_cache import ExistenceCache
from lazywebp.services.substitution import SubstitutionLayer
from lazywebp.utils.derivative_paths import DerivativeNaming
from lazywebp.utils.error_handler import ErrorHandler, recover
from lazywebp.utils.log_sanitizer import sanitize_for_log
from lazywebp.utils.memory_guard import MemoryGuard
from lazywebp.utils.path_validator import PathResolver

logger = get_logger("pipeline")


class DerivativePipeline:
    def __init__(
        self,
        settings: AppSettings,
        shared_cache: SharedCache,
        memory_guard: Optional[MemoryGuard] = None,
    ):
        conversion = settings.conversion
        self.settings = settings
        self.shared_cache = shared_cache

        self.naming = DerivativeNaming(conversion.source_extensions, conversion.target_extension)
        self.path_resolver = PathResolver(settings.assets.root, settings.assets.base_url)
        self.existence_cache = ExistenceCache(
            shared_cache, self.naming, ttl_seconds=settings.cache.existence_ttl_seconds
        )
        self.queue = ConversionQueue(max_per_batch=conversion.batch_size)
        self.converter = Converter(
            conversion, self.path_resolver, self.existence_cache, memory_guard=memory_guard
        )
        self.processor = DeferredBatchProcessor(
            self.queue,
            self.converter,
            conversion,
            shared_cache=shared_cache,
            support_ttl_seconds=settings.cache.support_ttl_seconds,
        )
        self.substitution = SubstitutionLayer(self.path_resolver, self.existence_cache, self.naming)

    @recover(default=False, context="Derivative check")
    def observe(self, reference: str, source_id: Any = None) -> bool:
        """Queue a conversion if reference is a supported original without a derivative."""
        if not self.naming.matches(reference):
            return False
        try:
            source_path = self.path_resolver.to_path(reference)
        except InvalidReference as e:
            ErrorHandler.handle_exception(e, f"Reference {sanitize_for_log(reference)}")
            return False

        if not self.existence_cache.needs_conversion(source_path):
            return False
        return self.queue.enqueue(ConversionJob(source_path=source_path, source_id=source_id))

    def observe_srcset(self, sources: Dict[Any, Dict[str, Any]], source_id: Any = None) -> int:
        """Run observe() over every srcset candidate. Returns the number queued."""
        if not sources or not isinstance(sources, dict):
            return 0
        queued = 0
        for source in sources.values():
            if isinstance(source, dict) and source.get("url"):
                if self.observe(source["url"], source_id):
                    queued += 1
        return queued

    def resolve(self, reference: str, client_supports_format: bool) -> str:
        """Derivative reference when available for this client, else reference unchanged."""
        try:
            return self.substitution.resolve(reference, client_supports_format)
        except Exception as e:
            ErrorHandler.handle_exception(e, "Derivative substitution")
            return reference

    def resolve_srcset(
        self, sources: Dict[Any, Dict[str, Any]], client_supports_format: bool
    ) -> Dict[Any, Dict[str, Any]]:
        try:
            return self.substitution.resolve_srcset(sources, client_supports_format)
        except Exception as e:
            ErrorHandler.handle_exception(e, "Srcset substitution")
            return sources

    def finish(self) -> BatchReport:
        """End-of-request hook: drain one batch through the converter."""
        try:
            return self.processor.process()
        except Exception as e:
            ErrorHandler.handle_exception(e, "Deferred batch drain")
            return BatchReport(remaining=self.queue.size())
