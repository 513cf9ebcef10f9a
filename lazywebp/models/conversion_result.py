# =============================================================================
# File: conversion_result.py
# Date: 2026-10-19
# Copyright (c) 2024 Goutam Malakar. All rights reserved.
# =============================================================================

from typing import Optional

from pydantic import BaseModel, Field


class ConversionResult(BaseModel):
    """
    Outcome of a single conversion attempt.
    """

    source_path: str = Field(..., description="The source path that was submitted.")
    derivative_path: Optional[str] = Field(
        None, description="Derivative path, when it could be derived."
    )
    success: bool = Field(False, description="True when the derivative was written.")
    error_code: Optional[str] = Field(None, description="Failure code, e.g. OversizedImage.")
    message: Optional[str] = Field(None, description="Human readable failure reason.")
