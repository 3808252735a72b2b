"""
Hebrew Study Backend - Identity Schemas
========================================

What:  The caller identity returned by the identity provider.
Who:   Produced by the identity client, consumed by route dependencies.
"""

from typing import Optional

from pydantic import BaseModel, ConfigDict


class AuthenticatedUser(BaseModel):
    """
    Identity resolved from a bearer token or session cookie.

    Only `id` is used by this service (ownership key for study sessions).
    The provider's user payload carries many more fields; they are ignored.
    """

    model_config = ConfigDict(extra="ignore", frozen=True)

    id: str
    email: Optional[str] = None
    role: Optional[str] = None
