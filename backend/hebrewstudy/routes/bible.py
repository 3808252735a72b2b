"""
Hebrew Study Backend - Bible Route Handlers
============================================

What:  GET /api/bible/books
Who:   Called by the Bible reader's book navigation.

Caching:
    Book rows are static reference data, but the response is behind login,
    so it is only cacheable privately.
"""

import logging

from fastapi import APIRouter, Depends, Response
from sqlalchemy.ext.asyncio import AsyncSession

from hebrewstudy.database import get_db_session
from hebrewstudy.dependencies import get_current_user
from hebrewstudy.schemas.auth import AuthenticatedUser
from hebrewstudy.schemas.bible import BibleBookListResponse
from hebrewstudy.schemas.common import ErrorResponse
from hebrewstudy.services.bible_service import bible_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/bible", tags=["Bible"])


@router.get(
    "/books",
    response_model=BibleBookListResponse,
    responses={
        401: {"description": "Not logged in", "model": ErrorResponse},
        500: {"description": "Server error", "model": ErrorResponse},
    },
    summary="List Bible books in canonical order",
)
async def list_books(
    response: Response,
    user: AuthenticatedUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
) -> BibleBookListResponse:
    books = await bible_service.list_books(db)
    response.headers["Cache-Control"] = "private, max-age=3600"
    return BibleBookListResponse(books=books)
