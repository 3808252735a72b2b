"""
Hebrew Study Backend - VocabSet SQLAlchemy Model
=================================================

What:  ORM model for the `vocab_sets` table.
Why:   The flashcard UI studies the words of every *active* set.
How:   Sets are created by seed scripts; this service only flips `is_active`.

Activation Policies:
    - Exclusive (POST /api/vocab/sets/{id}/activate): exactly one active set
      afterwards, written as one conditional UPDATE.
    - Independent (POST /api/vocab/sets/toggle-active): flips one set in place,
      any number of sets may be active.
"""

from datetime import datetime, timezone

from sqlalchemy import Boolean, DateTime, Index, Integer, Text, false, text
from sqlalchemy.orm import Mapped, mapped_column

from hebrewstudy.database import Base


class VocabSet(Base):
    """A named group of vocabulary words that can be switched on for study."""

    __tablename__ = "vocab_sets"

    id: Mapped[str] = mapped_column(Text, primary_key=True)
    title: Mapped[str] = mapped_column(Text, nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    total_words: Mapped[int] = mapped_column(
        Integer, nullable=False, default=0, server_default=text("0")
    )

    is_active: Mapped[bool] = mapped_column(
        Boolean,
        nullable=False,
        default=False,
        server_default=false(),
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
        server_default=text("CURRENT_TIMESTAMP"),
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
        server_default=text("CURRENT_TIMESTAMP"),
    )

    __table_args__ = (
        Index("idx_vocab_sets_is_active", is_active),
    )

    def __repr__(self) -> str:
        return f"<VocabSet(id='{self.id}', is_active={self.is_active})>"
