# =============================================================================
# File: existence_entry.py
# Date: 2026-10-19
# Copyright (c) 2024 Goutam Malakar. All rights reserved.
# =============================================================================

from typing import Optional

from pydantic import BaseModel, Field


class ExistenceCacheEntry(BaseModel):
    """
    Shared-tier record of whether a derivative file is materialized.
    """

    derivative_path: str = Field(..., description="Absolute path of the derivative file.")
    exists: bool = Field(..., description="Result of the last filesystem check or conversion.")
    expires_at: Optional[float] = Field(
        None, description="Epoch seconds after which the entry is stale. None never expires."
    )
