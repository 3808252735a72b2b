"""
Hebrew Study Backend - Bible Reference Schemas
===============================================

What:  Response models for GET /api/bible/books.
"""

from typing import List

from pydantic import Field

from hebrewstudy.schemas.common import CamelModel


class BibleBookResponse(CamelModel):
    """One book row, serialized as {id, name, hebrewName, ..., orderIndex}."""
    id: str
    name: str
    hebrew_name: str
    abbreviation: str
    chapter_count: int
    testament: str
    order_index: int


class BibleBookListResponse(CamelModel):
    success: bool = Field(default=True)
    books: List[BibleBookResponse] = Field(description="All books in canonical order")
