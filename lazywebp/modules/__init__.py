"""Shared storage backends used across requests.

Expose the cache module as a package attribute so hosts can plug an
external store in by subclassing ``shared_cache.SharedCache``.
"""

from . import shared_cache  # re-export module

__all__ = ["shared_cache"]
