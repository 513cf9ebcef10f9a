# =============================================================================
# File: batch_report.py
# Date: 2026-10-19
# Copyright (c) 2024 Goutam Malakar. All rights reserved.
# =============================================================================

from typing import List

from pydantic import BaseModel, Field

from lazywebp.models.conversion_result import ConversionResult


class BatchReport(BaseModel):
    """
    Summary of one end-of-request batch drain.
    """

    attempted: int = Field(0, description="Jobs taken from the queue.")
    converted: int = Field(0, description="Jobs that produced a derivative.")
    failed: int = Field(0, description="Jobs that failed validation or transcoding.")
    skipped: int = Field(0, description="Jobs skipped because another worker held the lock.")
    remaining: int = Field(0, description="Jobs left in the queue, discarded with the request.")
    duration_ms: float = Field(0.0, description="Wall time spent converting.")
    results: List[ConversionResult] = Field(default_factory=list)
