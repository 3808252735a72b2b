"""
Hebrew Study Backend - Vocab Set Route Handlers
================================================

What:  GET  /api/vocab/sets
       POST /api/vocab/sets/{set_id}/activate   (exclusive: one active set)
       POST /api/vocab/sets/toggle-active       (independent flags)
Who:   Called by the vocabulary library and admin pages.

Access:
    These endpoints perform no authentication check. Whether they are an
    internal admin surface or should require a login is an open product
    question; until that is settled they stay open.
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from hebrewstudy.database import get_db_session
from hebrewstudy.schemas.common import ErrorResponse
from hebrewstudy.schemas.vocab_set import (
    ActivateResponse,
    ToggleActiveRequest,
    ToggleActiveResponse,
    VocabSetListResponse,
)
from hebrewstudy.services.vocab_set_service import vocab_set_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/vocab/sets", tags=["Vocab Sets"])


@router.get(
    "",
    response_model=VocabSetListResponse,
    responses={500: {"description": "Server error", "model": ErrorResponse}},
    summary="List vocab sets with their active flag",
)
async def list_sets(
    db: AsyncSession = Depends(get_db_session),
) -> VocabSetListResponse:
    sets = await vocab_set_service.list_sets(db)
    return VocabSetListResponse(sets=sets)


@router.post(
    "/toggle-active",
    response_model=ToggleActiveResponse,
    responses={
        400: {"description": "Missing setId", "model": ErrorResponse},
        404: {"description": "Vocab set not found", "model": ErrorResponse},
        500: {"description": "Server error", "model": ErrorResponse},
    },
    summary="Flip one set's active flag",
)
async def toggle_active(
    body: Optional[ToggleActiveRequest] = None,
    db: AsyncSession = Depends(get_db_session),
) -> ToggleActiveResponse:
    body = body or ToggleActiveRequest()
    return await vocab_set_service.toggle(db=db, set_id=body.set_id)


@router.post(
    "/{set_id}/activate",
    response_model=ActivateResponse,
    responses={
        404: {"description": "Vocab set not found", "model": ErrorResponse},
        500: {"description": "Server error", "model": ErrorResponse},
    },
    summary="Make one set the only active set",
)
async def activate_set(
    set_id: str,
    db: AsyncSession = Depends(get_db_session),
) -> ActivateResponse:
    return await vocab_set_service.activate(db=db, set_id=set_id)
