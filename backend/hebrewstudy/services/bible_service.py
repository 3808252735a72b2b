"""
Hebrew Study Backend - Bible Reference Service
===============================================

What:  Read-only listing of Bible books for the reader's book picker.
How:   SELECT ... ORDER BY order_index ASC, fully materialized. The table holds
       a few dozen static rows, so there is no pagination.
"""

import logging
from typing import List

from sqlalchemy import asc, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from hebrewstudy.exceptions import StorageError
from hebrewstudy.models.bible_book import BibleBook
from hebrewstudy.schemas.bible import BibleBookResponse

logger = logging.getLogger(__name__)


class BibleService:

    async def list_books(self, db: AsyncSession) -> List[BibleBookResponse]:
        """
        Return every book in canonical order.

        Raises:
            StorageError: query failed ("Failed to fetch Bible books")
        """
        try:
            result = await db.execute(
                select(BibleBook).order_by(asc(BibleBook.order_index))
            )
            books = list(result.scalars().all())
        except SQLAlchemyError as e:
            logger.error("Database error fetching Bible books: %s", str(e), exc_info=True)
            raise StorageError(
                message="Failed to fetch Bible books",
                context={"error_type": type(e).__name__},
            ) from e

        return [BibleBookResponse.model_validate(book) for book in books]


bible_service = BibleService()
