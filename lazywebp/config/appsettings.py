# =============================================================================
# File: appsettings.py
# Date: 2026-10-19
# Copyright (c) 2024 Goutam Malakar. All rights reserved.
# =============================================================================

from typing import List, Optional

from pydantic import BaseModel, Field, field_validator


class AppConfig(BaseModel):
    name: str = Field(default="LazyWebP")
    description: str = Field(default="On-demand WebP derivative pipeline")
    version: str = Field(default="1.0.0")
    debug: bool = Field(default=False)
    is_production: bool = Field(default=False)


class ServerConfig(BaseModel):
    host: str = Field(default="0.0.0.0")
    port: int = Field(default=5001)
    keepalive_timeout: int = Field(default=5)


class AssetConfig(BaseModel):
    root: str = Field(default="uploads")
    base_url: str = Field(default="/uploads/")

    @field_validator("base_url")
    @classmethod
    def ensure_trailing_slash(cls, v: str) -> str:
        v = v.strip()
        if v and not v.endswith("/"):
            v += "/"
        return v


class ConversionConfig(BaseModel):
    max_dimension: int = Field(default=3000, ge=1)
    max_per_batch: int = Field(default=5, ge=0)
    max_per_batch_cap: int = Field(default=20, ge=0)
    quality: int = Field(default=90)
    allowed_mime_types: List[str] = Field(default_factory=lambda: ["image/jpeg", "image/png"])
    source_extensions: List[str] = Field(default_factory=lambda: ["jpg", "jpeg", "png"])
    target_extension: str = Field(default="webp")
    target_format: str = Field(default="WEBP")
    # None: detect from the platform, -1: unlimited, otherwise megabytes
    memory_limit_mb: Optional[int] = Field(default=None)
    memory_safety_factor: float = Field(default=1.5, ge=1.0)
    advisory_locking: bool = Field(default=False)
    lock_ttl_seconds: int = Field(default=60, ge=1)

    @field_validator("quality", mode="before")
    @classmethod
    def clamp_quality(cls, v) -> int:
        return max(0, min(100, int(v)))

    @field_validator("source_extensions", mode="before")
    @classmethod
    def normalize_extensions(cls, v) -> List[str]:
        return [str(ext).lower().lstrip(".") for ext in v]

    @field_validator("target_extension", mode="before")
    @classmethod
    def normalize_target_extension(cls, v) -> str:
        return str(v).lower().lstrip(".")

    @property
    def batch_size(self) -> int:
        """Per-request job count, bounded by the external cap."""
        return min(self.max_per_batch, self.max_per_batch_cap)


class CacheConfig(BaseModel):
    existence_ttl_seconds: int = Field(default=300, gt=0)
    support_ttl_seconds: int = Field(default=3600, ge=0)
    max_entries: Optional[int] = Field(default=10000)
    cleanup_interval_seconds: float = Field(default=60.0, gt=0)


class LoggingConfig(BaseModel):
    folder: Optional[str] = Field(default=None)
    app_log_file: str = Field(default="lazywebp.log")


class AppSettings(BaseModel):
    app: AppConfig = Field(default_factory=AppConfig)
    server: ServerConfig = Field(default_factory=ServerConfig)
    assets: AssetConfig = Field(default_factory=AssetConfig)
    conversion: ConversionConfig = Field(default_factory=ConversionConfig)
    cache: CacheConfig = Field(default_factory=CacheConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)
