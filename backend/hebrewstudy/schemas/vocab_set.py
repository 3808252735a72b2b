"""
Hebrew Study Backend - Vocab Set Schemas
=========================================

What:  Request/response models for the /api/vocab/sets* endpoints.
"""

from datetime import datetime
from typing import List, Optional

from pydantic import Field

from hebrewstudy.schemas.common import CamelModel


class ToggleActiveRequest(CamelModel):
    """Body of POST /api/vocab/sets/toggle-active."""
    set_id: Optional[str] = Field(default=None, description="Set whose flag is flipped")


class ActivateResponse(CamelModel):
    success: bool = Field(default=True)
    active_set_id: str = Field(description="The only active set after the call")


class ToggleActiveResponse(CamelModel):
    success: bool = Field(default=True)
    set_id: str
    is_active: bool = Field(description="Flag value after the flip")


class VocabSetSummary(CamelModel):
    id: str
    title: str
    description: Optional[str] = None
    total_words: int
    is_active: bool
    created_at: datetime
    updated_at: datetime


class VocabSetListResponse(CamelModel):
    success: bool = Field(default=True)
    sets: List[VocabSetSummary]
