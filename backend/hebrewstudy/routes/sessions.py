"""
Hebrew Study Backend - Study Session Route Handlers
====================================================

What:  POST /api/vocab/session/start, /heartbeat and /end.
Who:   Called by the flashcard study view (start/end) and the stats bar
       (heartbeat every few seconds while the tab is visible).

All three require an authenticated caller; the owner of a session is always
the caller, never a value from the request body.
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from hebrewstudy.database import get_db_session
from hebrewstudy.dependencies import get_current_user
from hebrewstudy.schemas.auth import AuthenticatedUser
from hebrewstudy.schemas.common import ErrorResponse, SuccessResponse
from hebrewstudy.schemas.session import (
    SessionEndRequest,
    SessionEndResponse,
    SessionHeartbeatRequest,
    SessionStartRequest,
    SessionStartResponse,
)
from hebrewstudy.services.session_service import session_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/vocab/session", tags=["Study Sessions"])


@router.post(
    "/start",
    response_model=SessionStartResponse,
    responses={
        401: {"description": "Not logged in", "model": ErrorResponse},
        500: {"description": "Server error", "model": ErrorResponse},
    },
    summary="Start a study session",
)
async def start_session(
    body: Optional[SessionStartRequest] = None,
    user: AuthenticatedUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
) -> SessionStartResponse:
    """An empty body starts a session in the default 'study' mode with no set."""
    body = body or SessionStartRequest()
    return await session_service.start_session(
        db=db,
        user_id=user.id,
        set_id=body.set_id,
        mode=body.mode,
    )


@router.post(
    "/heartbeat",
    response_model=SuccessResponse,
    responses={
        400: {"description": "Missing sessionId", "model": ErrorResponse},
        401: {"description": "Not logged in", "model": ErrorResponse},
        500: {"description": "Server error", "model": ErrorResponse},
    },
    summary="Refresh a session's last activity",
)
async def heartbeat(
    body: Optional[SessionHeartbeatRequest] = None,
    user: AuthenticatedUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
) -> SuccessResponse:
    """Answers success even when the session belongs to someone else."""
    body = body or SessionHeartbeatRequest()
    await session_service.heartbeat(db=db, session_id=body.session_id, user_id=user.id)
    return SuccessResponse()


@router.post(
    "/end",
    response_model=SessionEndResponse,
    responses={
        400: {"description": "Missing sessionId", "model": ErrorResponse},
        401: {"description": "Not logged in", "model": ErrorResponse},
        404: {"description": "Session not found", "model": ErrorResponse},
        500: {"description": "Server error", "model": ErrorResponse},
    },
    summary="End a session and record its duration",
)
async def end_session(
    body: Optional[SessionEndRequest] = None,
    user: AuthenticatedUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
) -> SessionEndResponse:
    body = body or SessionEndRequest()
    return await session_service.end_session(
        db=db,
        session_id=body.session_id,
        user_id=user.id,
        cards_studied=body.cards_studied,
    )
