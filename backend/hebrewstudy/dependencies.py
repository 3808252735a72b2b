"""
Hebrew Study Backend - Request Dependencies
============================================

What:  FastAPI dependencies resolving the identity provider and the caller.
Why:   Protected routes declare `user: AuthenticatedUser = Depends(get_current_user)`
       and never look at headers or cookies themselves.
How:   The provider instance lives on `app.state` (built once by create_app);
       the token comes from the Authorization header, falling back to the
       provider's session cookie.

Failure Policy:
    Any failure to resolve an identity (no token, rejected token, provider
    down, circuit open) is "no identity". get_current_user turns that into
    AuthenticationError → 401 {"error": "Unauthorized - Please log in"}.
"""

import logging
from typing import Optional

from fastapi import Depends, Request

from hebrewstudy.config import settings
from hebrewstudy.exceptions import (
    AuthenticationError,
    CircuitBreakerOpenError,
    IdentityProviderError,
)
from hebrewstudy.middleware.request_id import request_id_var
from hebrewstudy.schemas.auth import AuthenticatedUser
from hebrewstudy.services.identity_base import IdentityProvider
from hebrewstudy.services.identity_service import access_token_from_cookies, bearer_token

logger = logging.getLogger(__name__)


def get_identity_provider(request: Request) -> IdentityProvider:
    """The provider constructed at startup by create_app()."""
    return request.app.state.identity_provider


async def get_current_user_optional(
    request: Request,
    provider: IdentityProvider = Depends(get_identity_provider),
) -> Optional[AuthenticatedUser]:
    """Return the caller's identity, or None if it cannot be resolved."""
    token = bearer_token(request.headers.get("Authorization"))
    if token is None:
        token = access_token_from_cookies(request.cookies, settings.resolved_auth_cookie_name)
    if token is None:
        return None

    rid = request_id_var.get("")
    try:
        return await provider.get_user(token)
    except CircuitBreakerOpenError as e:
        logger.warning("[%s] Identity check skipped: %s", rid, e.message)
    except IdentityProviderError as e:
        logger.error("[%s] Identity check failed: %s | Context: %s", rid, e.message, e.context)
    return None


async def get_current_user(
    user: Optional[AuthenticatedUser] = Depends(get_current_user_optional),
) -> AuthenticatedUser:
    """Require an authenticated caller. Raises AuthenticationError (401) otherwise."""
    if user is None:
        raise AuthenticationError()
    return user
