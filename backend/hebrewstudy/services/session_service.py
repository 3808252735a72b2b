"""
Hebrew Study Backend - Study Session Service
=============================================

What:  Start, heartbeat and end for vocabulary study sessions.
Why:   Study time statistics come from these rows; the client opens a session
       when a flashcard deck starts, pings it while the tab is visible and
       closes it when the deck is finished.
How:   Each operation is one or two statements against the request session.
       The request dependency commits; nothing here commits on its own.
Who:   Called by routes/sessions.py with the authenticated user's id.

Ownership:
    user_id always comes from the resolved identity, never from the body.
    heartbeat() and end() filter on (id, user_id):
        - heartbeat on someone else's session: nothing updated, still success
        - end on someone else's session: NotFoundError
"""

import logging
import uuid
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from hebrewstudy.exceptions import NotFoundError, StorageError, ValidationError
from hebrewstudy.models.study_session import StudySession
from hebrewstudy.schemas.session import (
    EndedSession,
    SessionEndResponse,
    SessionStartResponse,
)

logger = logging.getLogger(__name__)

DEFAULT_MODE = "study"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _as_utc(value: datetime) -> datetime:
    # SQLite hands back naive datetimes even for timezone-aware columns
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def _parse_session_id(session_id: str) -> Optional[uuid.UUID]:
    try:
        return uuid.UUID(str(session_id))
    except ValueError:
        return None


class SessionService:
    """
    Business logic for study sessions.

    Error Handling Strategy:
        Missing identifiers raise ValidationError before any statement runs.
        SQLAlchemy errors are logged with context and re-raised as
        StorageError carrying the generic per-operation message.
    """

    async def start_session(
        self,
        db: AsyncSession,
        user_id: str,
        set_id: Optional[str] = None,
        mode: Optional[str] = None,
    ) -> SessionStartResponse:
        """
        Create a new session row.

        start_time and last_activity share one timestamp, so a fresh session
        always has start_time == last_activity. No dedup: every call inserts
        a row, and set_id is stored even if no such set exists.
        """
        now = _utcnow()
        session = StudySession(
            id=uuid.uuid4(),
            user_id=user_id,
            set_id=set_id or None,
            mode=mode or DEFAULT_MODE,
            start_time=now,
            last_activity=now,
        )

        try:
            db.add(session)
            await db.flush()
        except SQLAlchemyError as e:
            logger.error("Database error starting session for user %s: %s", user_id, str(e))
            raise StorageError(
                message="Failed to start study session",
                context={"user_id": user_id, "error_type": type(e).__name__},
            ) from e

        logger.info(
            "Study session %s started (user=%s, set=%s, mode=%s)",
            session.id,
            user_id,
            session.set_id,
            session.mode,
        )
        return SessionStartResponse(session_id=session.id, start_time=session.start_time)

    async def heartbeat(self, db: AsyncSession, session_id: Optional[str], user_id: str) -> None:
        """
        Refresh last_activity on the caller's session.

        Reports success whether or not a row matched; a session id that is
        not even a UUID cannot match a row and is treated the same way.

        Raises:
            ValidationError: session_id missing (no statement is issued)
            StorageError: the UPDATE failed
        """
        if not session_id:
            raise ValidationError(message="Missing sessionId", field="sessionId")

        parsed_id = _parse_session_id(session_id)
        if parsed_id is None:
            logger.debug("Heartbeat for malformed session id %r ignored", session_id)
            return

        try:
            result = await db.execute(
                update(StudySession)
                .where(StudySession.id == parsed_id, StudySession.user_id == user_id)
                .values(last_activity=_utcnow())
            )
        except SQLAlchemyError as e:
            logger.error("Database error on heartbeat for session %s: %s", session_id, str(e))
            raise StorageError(
                message="Failed to update session",
                context={"session_id": str(session_id), "error_type": type(e).__name__},
            ) from e

        if result.rowcount == 0:
            logger.debug("Heartbeat for session %s matched no row owned by %s", session_id, user_id)

    async def end_session(
        self,
        db: AsyncSession,
        session_id: Optional[str],
        user_id: str,
        cards_studied: Optional[int] = None,
    ) -> SessionEndResponse:
        """
        Close the caller's session and record its duration.

        duration_seconds is the whole number of seconds between start_time and
        now. Ending an already ended session recomputes the values.

        Raises:
            ValidationError: session_id missing
            NotFoundError: no such session owned by user_id (→ 404)
            StorageError: a statement failed
        """
        if not session_id:
            raise ValidationError(message="Missing sessionId", field="sessionId")

        parsed_id = _parse_session_id(session_id)
        if parsed_id is None:
            raise NotFoundError(resource="Session", resource_id=str(session_id))

        try:
            result = await db.execute(
                select(StudySession).where(
                    StudySession.id == parsed_id,
                    StudySession.user_id == user_id,
                )
            )
            session = result.scalar_one_or_none()
            if session is None:
                raise NotFoundError(resource="Session", resource_id=str(session_id))

            now = _utcnow()
            session.end_time = now
            session.duration_seconds = max(
                0, int((now - _as_utc(session.start_time)).total_seconds())
            )
            session.cards_studied = cards_studied or 0
            await db.flush()
        except NotFoundError:
            raise
        except SQLAlchemyError as e:
            logger.error("Database error ending session %s: %s", session_id, str(e))
            raise StorageError(
                message="Failed to end study session",
                context={"session_id": str(session_id), "error_type": type(e).__name__},
            ) from e

        logger.info(
            "Study session %s ended after %ds (%d cards)",
            session.id,
            session.duration_seconds,
            session.cards_studied,
        )
        return SessionEndResponse(
            session=EndedSession(
                id=session.id,
                duration_seconds=session.duration_seconds,
                cards_studied=session.cards_studied,
            )
        )


session_service = SessionService()
