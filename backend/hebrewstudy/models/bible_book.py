"""
Hebrew Study Backend - BibleBook SQLAlchemy Model
==================================================

What:  ORM model for the read-only `bible_books` reference table.
Why:   The Bible reader lists books in canonical order before loading chapters.
How:   Rows are seeded by migration scripts; this service only reads them.

Query Patterns:
    - List books: SELECT ... ORDER BY order_index ASC
      → Uses idx_bible_books_order_index
"""

from datetime import datetime

from sqlalchemy import DateTime, Index, Integer, String, Text, text
from sqlalchemy.orm import Mapped, mapped_column

from hebrewstudy.database import Base


class BibleBook(Base):
    """A book of the Hebrew Bible (e.g. 'genesis', order_index=1)."""

    __tablename__ = "bible_books"

    # Slug identifier ("genesis", "exodus"); referenced by verse rows
    id: Mapped[str] = mapped_column(Text, primary_key=True)

    name: Mapped[str] = mapped_column(Text, nullable=False)
    hebrew_name: Mapped[str] = mapped_column(Text, nullable=False)
    abbreviation: Mapped[str] = mapped_column(Text, nullable=False)
    chapter_count: Mapped[int] = mapped_column(Integer, nullable=False)

    # 'OT' for every book currently seeded
    testament: Mapped[str] = mapped_column(
        String(8),
        nullable=False,
        default="OT",
        server_default=text("'OT'"),
    )

    # Canonical position; the only supported ordering
    order_index: Mapped[int] = mapped_column(Integer, nullable=False)

    created_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
        server_default=text("CURRENT_TIMESTAMP"),
    )

    __table_args__ = (
        Index("idx_bible_books_order_index", order_index),
    )

    def __repr__(self) -> str:
        return f"<BibleBook(id='{self.id}', order_index={self.order_index})>"
