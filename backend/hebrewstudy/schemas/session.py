"""
Hebrew Study Backend - Study Session Schemas
=============================================

What:  Request/response models for the /api/vocab/session/* endpoints.
Why:   Required fields are declared Optional on purpose: a missing sessionId is
       a business-rule 400 ("Missing sessionId") raised by the service, not a
       framework-generated 422.
"""

import uuid
from datetime import datetime
from typing import Optional

from pydantic import Field

from hebrewstudy.schemas.common import CamelModel


# ══════════════════════════════════════════════════════════════════════════
# Request Models
# ══════════════════════════════════════════════════════════════════════════


class SessionStartRequest(CamelModel):
    """Body of POST /api/vocab/session/start. Both fields are optional."""
    set_id: Optional[str] = Field(default=None, description="Vocab set being studied")
    mode: Optional[str] = Field(
        default=None,
        max_length=32,
        description="Study mode; defaults to 'study'",
    )


class SessionHeartbeatRequest(CamelModel):
    session_id: Optional[str] = Field(default=None, description="Session to keep alive")


class SessionEndRequest(CamelModel):
    session_id: Optional[str] = Field(default=None, description="Session to close")
    cards_studied: Optional[int] = Field(
        default=None,
        ge=0,
        description="Number of cards reviewed during the session",
    )


# ══════════════════════════════════════════════════════════════════════════
# Response Models
# ══════════════════════════════════════════════════════════════════════════


class SessionStartResponse(CamelModel):
    success: bool = Field(default=True)
    session_id: uuid.UUID = Field(description="Identifier to send with heartbeats")
    start_time: datetime = Field(description="Server-side session start (UTC)")


class EndedSession(CamelModel):
    id: uuid.UUID
    duration_seconds: int
    cards_studied: int


class SessionEndResponse(CamelModel):
    success: bool = Field(default=True)
    session: EndedSession
