# =============================================================================
# File: error_handler.py
# Date: 2026-10-19
# Copyright (c) 2024 Goutam Malakar. All rights reserved.
# =============================================================================

"""Centralized error recovery for the derivative pipeline.

Nothing in the pipeline may raise into the page renderer: every public entry
point converts failures into a boolean or a default value. Expected pipeline
failures are logged at DEBUG so that they only show up in debug mode.
"""

import functools
import traceback
from typing import Any, Callable, Tuple

from lazywebp.exceptions import LazyWebPBaseException
from lazywebp.logger import get_logger, is_debug_mode
from lazywebp.utils.log_sanitizer import sanitize_for_log

logger = get_logger("error_handler")


class ErrorHandler:
    """Maps exceptions to error codes and logs them at the right level."""

    ERROR_MAPPINGS = {
        FileNotFoundError: ("Source file not accessible", "FILE_NOT_FOUND"),
        PermissionError: ("Permission denied", "PERMISSION_DENIED"),
        OSError: ("System resource error", "SYSTEM_ERROR"),
        ValueError: ("Invalid parameter value", "INVALID_VALUE"),
        MemoryError: ("Insufficient memory", "MEMORY_ERROR"),
        RuntimeError: ("Runtime error occurred", "RUNTIME_ERROR"),
    }

    @staticmethod
    def handle_exception(exc: Exception, context: str = "operation") -> Tuple[str, str]:
        """Log the exception and return ``(error_code, message)``."""
        if isinstance(exc, LazyWebPBaseException):
            logger.debug(
                "%s failed [%s]: %s",
                sanitize_for_log(context),
                exc.error_code,
                sanitize_for_log(exc.message),
            )
            return exc.error_code, exc.message

        message, error_code = ErrorHandler.ERROR_MAPPINGS.get(
            type(exc), (str(exc), "UNKNOWN_ERROR")
        )
        logger.error(
            "%s failed: %s (%s)",
            sanitize_for_log(context),
            sanitize_for_log(message),
            sanitize_for_log(str(exc)),
        )
        if is_debug_mode():
            logger.debug("Traceback: %s", traceback.format_exc())
        return error_code, message


def recover(default: Any = False, context: str = "operation") -> Callable:
    """Decorator that logs any exception and returns ``default`` instead."""

    def decorator(func: Callable) -> Callable:
        @functools.wraps(func)
        def wrapper(*args, **kwargs):
            try:
                return func(*args, **kwargs)
            except Exception as e:
                ErrorHandler.handle_exception(e, context)
                return default

        return wrapper

    return decorator
