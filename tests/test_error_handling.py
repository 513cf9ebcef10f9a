# =============================================================================
# File: test_error_handling.py
# Date: 2026-10-19
# Copyright (c) 2024 Goutam Malakar. All rights reserved.
# =============================================================================

"""Tests for the exception hierarchy and error recovery."""

import pytest

from lazywebp.exceptions import (
    ConversionException,
    EncodeFailure,
    InsufficientMemory,
    InvalidReference,
    LazyWebPBaseException,
    OversizedImage,
    SourceUnreadable,
    UnsupportedFormat,
    WriteFailure,
)
from lazywebp.utils.error_handler import ErrorHandler, recover
from lazywebp.utils.log_sanitizer import sanitize_for_log


class TestCustomExceptions:
    """Test custom exception classes."""

    def test_base_exception_properties(self):
        exc = OversizedImage("Too big", "TOO_BIG")
        assert exc.message == "Too big"
        assert exc.error_code == "TOO_BIG"
        assert str(exc) == "Too big"

    def test_exception_default_error_code(self):
        assert SourceUnreadable("gone").error_code == "SourceUnreadable"

    def test_all_conversion_exceptions(self):
        for exc_class in [
            InvalidReference,
            SourceUnreadable,
            UnsupportedFormat,
            OversizedImage,
            InsufficientMemory,
            EncodeFailure,
            WriteFailure,
        ]:
            exc = exc_class("failed")
            assert isinstance(exc, ConversionException)
            assert isinstance(exc, LazyWebPBaseException)


class TestErrorHandler:
    def test_pipeline_exception(self):
        code, message = ErrorHandler.handle_exception(InvalidReference("outside root"))
        assert code == "InvalidReference"
        assert message == "outside root"

    @pytest.mark.parametrize(
        "exc,expected_code",
        [
            (FileNotFoundError("x"), "FILE_NOT_FOUND"),
            (PermissionError("x"), "PERMISSION_DENIED"),
            (ValueError("x"), "INVALID_VALUE"),
            (MemoryError(), "MEMORY_ERROR"),
        ],
    )
    def test_mapped_builtin_exceptions(self, exc, expected_code):
        code, _ = ErrorHandler.handle_exception(exc)
        assert code == expected_code

    def test_unknown_exception(self):
        code, message = ErrorHandler.handle_exception(KeyError("k"))
        assert code == "UNKNOWN_ERROR"
        assert "k" in message

    def test_recover_returns_default(self):
        @recover(default="fallback", context="test")
        def explode():
            raise RuntimeError("boom")

        assert explode() == "fallback"

    def test_recover_passes_result(self):
        @recover(default=False)
        def fine(value):
            return value * 2

        assert fine(21) == 42
        assert fine.__name__ == "fine"


class TestLogSanitizer:
    def test_control_characters_replaced(self):
        assert sanitize_for_log("a.jpg\nFAKE ENTRY\r") == "a.jpg_FAKE ENTRY_"

    def test_long_values_keep_tail(self):
        value = "/uploads/" + "d/" * 200 + "photo.jpg"
        sanitized = sanitize_for_log(value, max_length=50)
        assert len(sanitized) == 50
        assert sanitized.startswith("...")
        assert sanitized.endswith("photo.jpg")

    def test_none(self):
        assert sanitize_for_log(None) == "None"
