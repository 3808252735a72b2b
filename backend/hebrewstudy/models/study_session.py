"""
Hebrew Study Backend - StudySession SQLAlchemy Model
=====================================================

What:  ORM model for the `study_sessions` table.
Why:   Study time statistics are computed from session start, last activity
       and end timestamps.
How:   One row per started session, owned by the identity-provider user id.

Lifecycle:
    1. start: row inserted with start_time == last_activity == now
    2. heartbeat (any number of times): last_activity = now
    3. end: end_time, duration_seconds and cards_studied recorded
    Rows are never deleted by this service.

Ownership:
    Every UPDATE filters on user_id as well as id. A heartbeat carrying
    another user's session id therefore touches nothing.
"""

import uuid
from datetime import datetime, timezone

from sqlalchemy import DateTime, Index, Integer, String, Text, Uuid, text
from sqlalchemy.orm import Mapped, mapped_column

from hebrewstudy.database import Base


class StudySession(Base):
    """A single vocabulary study session of one user."""

    __tablename__ = "study_sessions"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True),
        primary_key=True,
        default=uuid.uuid4,
    )

    # Identity-provider user id; set once at creation
    user_id: Mapped[str] = mapped_column(String(64), nullable=False)

    # Plain text reference; dangling ids are accepted
    set_id: Mapped[str | None] = mapped_column(Text, nullable=True)

    mode: Mapped[str] = mapped_column(
        String(32),
        nullable=False,
        default="study",
        server_default=text("'study'"),
    )

    start_time: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    last_activity: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    end_time: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    duration_seconds: Mapped[int] = mapped_column(
        Integer, nullable=False, default=0, server_default=text("0")
    )
    cards_studied: Mapped[int] = mapped_column(
        Integer, nullable=False, default=0, server_default=text("0")
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
        server_default=text("CURRENT_TIMESTAMP"),
    )

    __table_args__ = (
        Index("idx_study_sessions_user_id", user_id),
        Index("idx_study_sessions_start_time", start_time),
    )

    def __repr__(self) -> str:
        return (
            f"<StudySession(id={self.id}, user_id='{self.user_id}', "
            f"mode='{self.mode}', start_time='{self.start_time}')>"
        )
