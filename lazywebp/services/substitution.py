# =============================================================================
# File: substitution.py
# Date: 2026-10-19
# Copyright (c) 2024 Goutam Malakar. All rights reserved.
# =============================================================================

from typing import Any, Dict

from lazywebp.exceptions import InvalidReference
from lazywebp.services.existence_cache import ExistenceCache
from lazywebp.utils.derivative_paths import DerivativeNaming
from lazywebp.utils.path_validator import PathResolver


class SubstitutionLayer:
    """Swaps emitted asset references for their derivatives when they exist.

    Read path only: it never enqueues conversions and at most performs one
    cached stat per derivative.
    """

    def __init__(
        self,
        path_resolver: PathResolver,
        existence_cache: ExistenceCache,
        naming: DerivativeNaming,
    ):
        self.path_resolver = path_resolver
        self.existence_cache = existence_cache
        self.naming = naming

    def resolve(self, original_ref: str, client_supports_format: bool) -> str:
        if not client_supports_format or not original_ref or not isinstance(original_ref, str):
            return original_ref

        derivative_ref = self.naming.swap(original_ref)
        if derivative_ref is None:
            return original_ref

        try:
            derivative_path = self.path_resolver.to_path(derivative_ref)
        except InvalidReference:
            return original_ref

        if self.existence_cache.derivative_exists(derivative_path):
            return derivative_ref
        return original_ref

    def resolve_srcset(
        self, sources: Dict[Any, Dict[str, Any]], client_supports_format: bool
    ) -> Dict[Any, Dict[str, Any]]:
        """Apply resolve() to every ``{"url": ...}`` candidate of a responsive source set."""
        if not client_supports_format or not sources or not isinstance(sources, dict):
            return sources

        resolved = {}
        for descriptor, source in sources.items():
            if isinstance(source, dict) and source.get("url"):
                source = dict(source, url=self.resolve(source["url"], True))
            resolved[descriptor] = source
        return resolved
