"""
Hebrew Study Backend - Abstract Identity Provider Interface
============================================================

What:  Abstract base class for resolving an access token to a user identity.
Why:   Route dependencies only need "token in, user or None out". Keeping that
       contract separate from the Supabase client lets tests inject a fake
       provider through `create_app(identity_provider=...)`.
How:   Concrete implementations inherit from IdentityProvider.
Who:   Constructed once by the application factory; used by the auth dependency.
"""

from abc import ABC, abstractmethod
from typing import Optional

from hebrewstudy.schemas.auth import AuthenticatedUser


class IdentityProvider(ABC):
    """
    Contract:
        - get_user() returns the identity for a valid token, None for a token
          the provider rejects
        - provider outages surface as IdentityProviderError or
          CircuitBreakerOpenError; the caller decides how to degrade
        - aclose() releases network resources at shutdown
    """

    @abstractmethod
    async def get_user(self, access_token: str) -> Optional[AuthenticatedUser]:
        """
        Resolve an access token (JWT) to the user it was issued for.

        Returns:
            AuthenticatedUser, or None when the token is missing, expired or
            otherwise rejected.

        Raises:
            IdentityProviderError: Provider unreachable or answering 5xx after retries.
            CircuitBreakerOpenError: Too many recent provider failures.
        """
        ...

    @abstractmethod
    async def health_check(self) -> bool:
        """Lightweight reachability probe used by GET /health."""
        ...

    async def aclose(self) -> None:
        """Release resources held by the provider (default: nothing to release)."""
        return None
