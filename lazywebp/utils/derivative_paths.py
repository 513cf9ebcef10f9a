# =============================================================================
# File: derivative_paths.py
# Date: 2026-10-19
# Copyright (c) 2024 Goutam Malakar. All rights reserved.
# =============================================================================

import re
from typing import Iterable, Optional


class DerivativeNaming:
    """Extension substitution between source assets and their derivatives.

    Works on both filesystem paths and public references: ``a/photo.JPG``
    becomes ``a/photo.webp``. Only a trailing supported extension matches.
    """

    def __init__(self, source_extensions: Iterable[str], target_extension: str = "webp"):
        extensions = [re.escape(ext.lower().lstrip(".")) for ext in source_extensions]
        if not extensions:
            raise ValueError("At least one source extension is required")
        self.target_extension = target_extension.lower().lstrip(".")
        self._pattern = re.compile(r"\.(" + "|".join(extensions) + r")$", re.IGNORECASE)

    def matches(self, value: str) -> bool:
        return bool(value) and self._pattern.search(value) is not None

    def swap(self, value: str) -> Optional[str]:
        """Return value with its source extension replaced, or None if it has none."""
        if not self.matches(value):
            return None
        return self._pattern.sub("." + self.target_extension, value)
