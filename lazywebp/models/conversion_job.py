# =============================================================================
# File: conversion_job.py
# Date: 2026-10-19
# Copyright (c) 2024 Goutam Malakar. All rights reserved.
# =============================================================================

from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from lazywebp.utils.cache_keys import normalize_path


class ConversionJob(BaseModel):
    """
    A pending derivative conversion for one source file.
    """

    model_config = ConfigDict(frozen=True)

    source_path: str = Field(..., description="Filesystem path of the original image.")
    source_id: Any = Field(
        None,
        description="Opaque identifier of the asset (e.g. attachment id). May alias; not used for dedup.",
    )

    @property
    def dedup_key(self) -> str:
        return normalize_path(self.source_path)
