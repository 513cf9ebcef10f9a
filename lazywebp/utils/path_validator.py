# =============================================================================
# File: path_validator.py
# Date: 2026-10-19
# Copyright (c) 2024 Goutam Malakar. All rights reserved.
# =============================================================================

import os
import re
from typing import Any
from urllib.parse import unquote

from lazywebp.exceptions import InvalidReference
from lazywebp.logger import get_logger
from lazywebp.utils.log_sanitizer import sanitize_for_log

logger = get_logger("path_validator")

MAX_PATH_LENGTH = 4096

# Dangerous path patterns
DANGEROUS_PATTERNS = [
    r"(^|[\\/])\.\.([\\/]|$)",  # Parent directory segment
    r"\x00",  # NUL byte
    r"^\\\\",  # UNC paths
]

# Compile patterns for performance
COMPILED_PATTERNS = [re.compile(pattern) for pattern in DANGEROUS_PATTERNS]


def _check_dangerous(value: str) -> None:
    for pattern in COMPILED_PATTERNS:
        if pattern.search(value):
            raise InvalidReference(f"Dangerous path pattern detected: {value}")


class PathResolver:
    """
    Maps public asset references onto canonical filesystem paths inside the
    asset root and rejects anything that could escape it.

    Containment is decided on the normalized path, never on the raw string,
    and the same check is exposed as validate_path() so that paths coming
    back out of the conversion queue are validated again before any write.
    """

    def __init__(self, root: str, base_url: str = ""):
        self.root = os.path.normpath(os.path.abspath(root))
        base_url = (base_url or "").strip()
        if base_url and not base_url.endswith("/"):
            base_url += "/"
        self.base_url = base_url

    def belongs_to_root(self, reference: Any) -> bool:
        """True when reference is addressed under the asset base URL."""
        if not reference or not isinstance(reference, str):
            return False
        if self.base_url:
            return reference.startswith(self.base_url)
        # Without a base URL only relative references are asset references
        return not (
            reference.startswith(("/", "\\")) or "://" in reference or ":" in reference[:3]
        )

    def is_valid_reference(self, reference: Any) -> bool:
        try:
            self.to_path(reference)
            return True
        except InvalidReference:
            return False

    def to_path(self, reference: Any) -> str:
        """
        Resolve a public reference to a canonical absolute path.

        Raises:
            InvalidReference: If the reference is malformed, not under the
                base URL, or resolves outside the asset root
        """
        if not reference or not isinstance(reference, str):
            raise InvalidReference("Empty or non-string reference")
        if len(reference) > MAX_PATH_LENGTH:
            raise InvalidReference("Reference too long")
        if not self.belongs_to_root(reference):
            raise InvalidReference(f"Reference outside asset base URL: {reference}")

        relative = reference[len(self.base_url) :]
        relative = relative.split("#", 1)[0].split("?", 1)[0]
        relative = unquote(relative)
        if not relative:
            raise InvalidReference(f"Reference has no file component: {reference}")

        _check_dangerous(relative)
        return self.validate_path(os.path.join(self.root, relative))

    def validate_path(self, file_path: Any) -> str:
        """
        Validate that file_path lies inside the asset root.

        Returns:
            str: The normalized absolute path if safe

        Raises:
            InvalidReference: If a traversal or unsafe pattern is detected
        """
        if not file_path or not isinstance(file_path, (str, os.PathLike)):
            raise InvalidReference("Empty or non-string path")

        file_str = os.fspath(file_path)
        if len(file_str) > MAX_PATH_LENGTH:
            raise InvalidReference("Path too long")
        _check_dangerous(file_str)

        normalized = os.path.normpath(os.path.abspath(file_str))
        try:
            inside = os.path.commonpath([self.root, normalized]) == self.root
        except ValueError:
            inside = False

        if not inside or normalized == self.root:
            logger.debug(
                "Path traversal detected: %s is outside %s",
                sanitize_for_log(normalized),
                sanitize_for_log(self.root),
            )
            raise InvalidReference(f"Path traversal detected: {normalized} is outside asset root")

        return normalized
