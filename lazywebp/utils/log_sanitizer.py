# =============================================================================
# File: log_sanitizer.py
# Date: 2026-10-19
# Copyright (c) 2024 Goutam Malakar. All rights reserved.
# =============================================================================

import re
from typing import Any

_CONTROL_CHARS = re.compile(r"[\r\n\t\x00-\x1f\x7f-\x9f]")


def sanitize_for_log(value: Any, max_length: int = 200) -> str:
    """
    Sanitize a reference, path or message before it is written to a log line.

    Control characters are replaced so a crafted asset reference cannot forge
    extra log lines, and long values are truncated from the left so the file
    name at the end of a path stays visible.

    Args:
        value: Input value to sanitize
        max_length: Maximum number of characters to keep

    Returns:
        str: Sanitized string safe for logging
    """
    if value is None:
        return "None"

    sanitized = _CONTROL_CHARS.sub("_", str(value))

    if len(sanitized) > max_length:
        sanitized = "..." + sanitized[-(max_length - 3) :]

    return sanitized
