# =============================================================================
# File: converter.py
# Date: 2026-10-19
# Copyright (c) 2024 Goutam Malakar. All rights reserved.
# =============================================================================

"""Validated JPEG/PNG -> WebP transcoding.

Validation runs in a fixed order and every step has its own failure mode:

1. source exists and is readable          -> SourceUnreadable
2. source lies inside the asset root      -> InvalidReference
3. header decodes to an allowed MIME type -> UnsupportedFormat
4. width/height within max_dimension      -> OversizedImage
5. memory headroom for the decode         -> InsufficientMemory
6. decode + encode into a temp file       -> SourceUnreadable / EncodeFailure
7. atomic rename onto the derivative path -> WriteFailure

Steps 3-5 only read the image header; pixels are decoded in step 6.
"""

import os
import stat
import tempfile
from typing import Optional

from PIL import Image, ImageOps, UnidentifiedImageError

from lazywebp.config.appsettings import ConversionConfig
from lazywebp.exceptions import (
    ConversionException,
    EncodeFailure,
    InsufficientMemory,
    OversizedImage,
    SourceUnreadable,
    UnsupportedFormat,
    WriteFailure,
)
from lazywebp.logger import get_logger
from lazywebp.models.conversion_result import ConversionResult
from lazywebp.services.existence_cache import ExistenceCache
from lazywebp.utils.error_handler import ErrorHandler
from lazywebp.utils.log_sanitizer import sanitize_for_log
from lazywebp.utils.memory_guard import MemoryGuard
from lazywebp.utils.path_validator import PathResolver

logger = get_logger("converter")

ALPHA_MODES = ("RGBA", "LA", "PA", "RGBa", "La")


class Converter:
    """Converts one source image to its derivative under resource and format guards."""

    def __init__(
        self,
        config: ConversionConfig,
        path_resolver: PathResolver,
        existence_cache: ExistenceCache,
        memory_guard: Optional[MemoryGuard] = None,
    ):
        self.config = config
        self.path_resolver = path_resolver
        self.existence_cache = existence_cache
        self.memory_guard = memory_guard or MemoryGuard(
            limit_mb=config.memory_limit_mb, safety_factor=config.memory_safety_factor
        )

    def convert(self, source_path: str) -> bool:
        return self.convert_with_result(source_path).success

    def convert_with_result(self, source_path: str) -> ConversionResult:
        derivative_path: Optional[str] = None
        try:
            self._check_readable(source_path)
            safe_path = self.path_resolver.validate_path(source_path)

            derivative_path = self.existence_cache.derivative_path_for(safe_path)
            if derivative_path is None:
                raise UnsupportedFormat(f"No derivative mapping for {safe_path}")

            with self._open(safe_path) as image:
                self._check_format(image, safe_path)
                width, height = image.size
                self._check_dimensions(width, height)
                self._check_memory(width, height)
                self._transcode(image, safe_path, derivative_path)

            if not os.path.isfile(derivative_path):
                raise WriteFailure(f"Derivative missing after write: {derivative_path}")

            self.existence_cache.mark_exists(derivative_path)
            logger.debug(
                "Converted %s -> %s",
                sanitize_for_log(safe_path),
                sanitize_for_log(derivative_path),
            )
            return ConversionResult(
                source_path=source_path, derivative_path=derivative_path, success=True
            )
        except Exception as e:
            if derivative_path is not None:
                self.existence_cache.invalidate(derivative_path)
            error_code, message = ErrorHandler.handle_exception(
                e, f"Conversion of {sanitize_for_log(source_path)}"
            )
            return ConversionResult(
                source_path=source_path,
                derivative_path=derivative_path,
                success=False,
                error_code=error_code,
                message=message,
            )

    @staticmethod
    def _check_readable(source_path: str) -> None:
        if not source_path or not os.path.isfile(source_path):
            raise SourceUnreadable(f"Source does not exist: {source_path}")
        if not os.access(source_path, os.R_OK):
            raise SourceUnreadable(f"Source is not readable: {source_path}")

    def _open(self, path: str) -> Image.Image:
        try:
            return Image.open(path)
        except UnidentifiedImageError:
            raise UnsupportedFormat(f"Unrecognized image data: {path}")
        except Image.DecompressionBombError as e:
            raise OversizedImage(f"Decompression bomb rejected: {e}")
        except OSError as e:
            raise SourceUnreadable(f"Cannot open source {path}: {e}")

    def _check_format(self, image: Image.Image, path: str) -> None:
        mime_type = image.get_format_mimetype() if hasattr(image, "get_format_mimetype") else None
        if mime_type not in self.config.allowed_mime_types:
            raise UnsupportedFormat(f"Format {mime_type or image.format} not allowed for {path}")

    def _check_dimensions(self, width: int, height: int) -> None:
        max_dimension = self.config.max_dimension
        if width > max_dimension or height > max_dimension:
            raise OversizedImage(
                f"Image {width}x{height} exceeds maximum dimension {max_dimension}"
            )

    def _check_memory(self, width: int, height: int) -> None:
        if not self.memory_guard.has_sufficient_memory(width, height):
            raise InsufficientMemory(f"Insufficient memory to convert {width}x{height} image")

    def _transcode(self, image: Image.Image, source_path: str, derivative_path: str) -> None:
        quality = max(0, min(100, int(self.config.quality)))
        frame = self._decode(image)
        tmp_path = None
        try:
            try:
                fd, tmp_path = tempfile.mkstemp(
                    prefix="." + os.path.basename(derivative_path) + ".",
                    suffix=".tmp",
                    dir=os.path.dirname(derivative_path),
                )
                os.close(fd)
            except OSError as e:
                raise WriteFailure(f"Cannot create temp file next to {derivative_path}: {e}")

            save_kwargs = {"format": self.config.target_format, "quality": quality}
            icc_profile = image.info.get("icc_profile")
            if icc_profile:
                save_kwargs["icc_profile"] = icc_profile
            try:
                frame.save(tmp_path, **save_kwargs)
            except (OSError, ValueError, KeyError) as e:
                raise EncodeFailure(f"Encoding {self.config.target_format} failed: {e}")

            try:
                # mkstemp creates 0600; derivatives are served like their source
                os.chmod(tmp_path, stat.S_IMODE(os.stat(source_path).st_mode) & 0o666)
                os.replace(tmp_path, derivative_path)
            except OSError as e:
                raise WriteFailure(f"Cannot move derivative into place: {e}")
            tmp_path = None
        finally:
            if frame is not image:
                frame.close()
            if tmp_path is not None and os.path.exists(tmp_path):
                try:
                    os.remove(tmp_path)
                except OSError as e:
                    logger.warning("Could not remove temp file %s: %s", sanitize_for_log(tmp_path), e)

    @staticmethod
    def _decode(image: Image.Image) -> Image.Image:
        """Decode pixels and normalize to a mode the encoder accepts."""
        try:
            image.load()
            ImageOps.exif_transpose(image, in_place=True)
            has_alpha = image.mode in ALPHA_MODES or "transparency" in image.info
            target_mode = "RGBA" if has_alpha else "RGB"
            if image.mode != target_mode:
                return image.convert(target_mode)
            return image
        except ConversionException:
            raise
        except (OSError, SyntaxError, ValueError) as e:
            raise SourceUnreadable(f"Cannot decode source image: {e}")
