# =============================================================================
# File: exceptions.py
# Date: 2026-10-19
# Copyright (c) 2024 Goutam Malakar. All rights reserved.
# =============================================================================

"""Custom exceptions for the LazyWebP derivative pipeline."""
from typing import Optional


class LazyWebPBaseException(Exception):
    """Base exception for all LazyWebP errors."""

    def __init__(self, message: str, error_code: Optional[str] = None):
        self.message = message
        self.error_code = error_code or self.__class__.__name__
        super().__init__(self.message)


class ConversionException(LazyWebPBaseException):
    """Exceptions raised while validating or transcoding a source image."""

    pass


class InvalidReference(ConversionException):
    """Reference is malformed or resolves outside the asset root."""

    pass


class SourceUnreadable(ConversionException):
    """Source image is missing, unreadable or cannot be decoded."""

    pass


class UnsupportedFormat(ConversionException):
    """Source image format is not in the allowed set."""

    pass


class OversizedImage(ConversionException):
    """Source image exceeds the configured maximum dimension."""

    pass


class InsufficientMemory(ConversionException):
    """Not enough process memory headroom to transcode the image."""

    pass


class EncodeFailure(ConversionException):
    """Encoder failed to produce the derivative."""

    pass


class WriteFailure(ConversionException):
    """Derivative could not be written or was not found after writing."""

    pass


class ConfigurationException(LazyWebPBaseException):
    """Configuration-related errors."""

    pass


class InvalidConfigError(ConfigurationException):
    """Invalid configuration parameters."""

    pass


class MissingConfigError(ConfigurationException):
    """Required configuration missing."""

    pass


class CacheException(LazyWebPBaseException):
    """Shared cache errors."""

    pass
