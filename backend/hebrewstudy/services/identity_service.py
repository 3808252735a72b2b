"""
Hebrew Study Backend - Supabase Identity Provider Client
=========================================================

What:  Resolves access tokens to users through Supabase Auth (GoTrue).
Why:   Authentication is delegated; this service never sees passwords and
       never verifies JWT signatures itself.
How:   GET {SUPABASE_URL}/auth/v1/user with the anon key and the caller's
       bearer token, wrapped in tenacity retries and a circuit breaker.
Who:   Constructed once by create_app(); called by the auth dependency.

Resilience Strategy:
    1. Tenacity retry with exponential backoff + jitter for transport errors,
       429 and 5xx answers
    2. Circuit breaker so a provider outage fails requests fast instead of
       holding every request for the full retry budget
    3. 401/403 answers are a normal "not logged in" result, never retried

Cookie Sessions:
    Browser clients do not send an Authorization header. The Supabase SSR
    helpers store the session as JSON in the `sb-<ref>-auth-token` cookie,
    optionally base64url encoded ("base64-" prefix) and split into
    `<name>.0`, `<name>.1`, ... chunks when larger than one cookie.
    `access_token_from_cookies()` reassembles that value.
"""

import base64
import json
import logging
import time
from typing import Mapping, Optional

import httpx
from tenacity import (
    AsyncRetrying,
    before_sleep_log,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential_jitter,
)

from hebrewstudy.config import Settings
from hebrewstudy.exceptions import CircuitBreakerOpenError, IdentityProviderError
from hebrewstudy.schemas.auth import AuthenticatedUser
from hebrewstudy.services.identity_base import IdentityProvider

logger = logging.getLogger(__name__)

BASE64_PREFIX = "base64-"


# ══════════════════════════════════════════════════════════════════════════
# Token Extraction
# ══════════════════════════════════════════════════════════════════════════

def bearer_token(authorization: Optional[str]) -> Optional[str]:
    """Return the token of an `Authorization: Bearer <token>` header, if any."""
    if not authorization:
        return None
    scheme, _, token = authorization.partition(" ")
    if scheme.lower() != "bearer":
        return None
    token = token.strip()
    return token or None


def access_token_from_cookies(cookies: Mapping[str, str], cookie_name: str) -> Optional[str]:
    """
    Extract the access token from a Supabase SSR session cookie.

    Accepts the single-cookie form and the chunked form, plain JSON and the
    "base64-" encoding, and both session layouts the helpers have used (an
    object with `access_token`, or the legacy `[access_token, refresh_token, ...]`
    array). Anything unreadable yields None.
    """
    raw = cookies.get(cookie_name)
    if raw is None:
        chunks = []
        index = 0
        while f"{cookie_name}.{index}" in cookies:
            chunks.append(cookies[f"{cookie_name}.{index}"])
            index += 1
        if not chunks:
            return None
        raw = "".join(chunks)

    if raw.startswith(BASE64_PREFIX):
        encoded = raw[len(BASE64_PREFIX):]
        encoded += "=" * (-len(encoded) % 4)
        try:
            raw = base64.urlsafe_b64decode(encoded).decode("utf-8")
        except (ValueError, UnicodeDecodeError):
            logger.debug("Session cookie %s is not valid base64", cookie_name)
            return None

    try:
        session = json.loads(raw)
    except ValueError:
        logger.debug("Session cookie %s is not valid JSON", cookie_name)
        return None

    token = None
    if isinstance(session, dict):
        token = session.get("access_token")
    elif isinstance(session, list) and session:
        token = session[0]

    if isinstance(token, str) and token:
        return token
    return None


# ══════════════════════════════════════════════════════════════════════════
# Circuit Breaker Implementation
# ══════════════════════════════════════════════════════════════════════════

class CircuitBreaker:
    """
    Circuit breaker around identity provider calls.

    State Machine:
        CLOSED (normal operation)
            → On failure: increment failure_count
            → When failure_count >= threshold: transition to OPEN

        OPEN (rejecting all requests)
            → All calls raise CircuitBreakerOpenError immediately
            → After recovery_timeout seconds: transition to HALF_OPEN

        HALF_OPEN (testing recovery)
            → On success: transition to CLOSED (reset failure_count)
            → On failure: transition back to OPEN (reset timer)

    Not thread-safe; uvicorn async workers share a single event loop per process.
    """

    CLOSED = "closed"
    OPEN = "open"
    HALF_OPEN = "half_open"

    def __init__(self, failure_threshold: int = 5, recovery_timeout: int = 30):
        self.failure_threshold = failure_threshold
        self.recovery_timeout = recovery_timeout
        self.failure_count = 0
        self.state = self.CLOSED
        self.last_failure_time: Optional[float] = None

    def can_execute(self) -> bool:
        """
        Check if a call is allowed through.

        Raises:
            CircuitBreakerOpenError if OPEN and the recovery timeout hasn't elapsed.
        """
        if self.state == self.CLOSED:
            return True

        if self.state == self.OPEN:
            elapsed = time.time() - (self.last_failure_time or 0)
            if elapsed >= self.recovery_timeout:
                logger.info(
                    "Circuit breaker transitioning to HALF_OPEN after %.1fs",
                    elapsed,
                )
                self.state = self.HALF_OPEN
                return True
            remaining = int(self.recovery_timeout - elapsed)
            raise CircuitBreakerOpenError(recovery_time=remaining)

        return True

    def record_success(self) -> None:
        """Record a provider answer. Resets the breaker to CLOSED."""
        if self.state == self.HALF_OPEN:
            logger.info("Circuit breaker transitioning to CLOSED (provider recovered)")
        self.failure_count = 0
        self.state = self.CLOSED
        self.last_failure_time = None

    def record_failure(self) -> None:
        """Record a failed call. May trigger CLOSED → OPEN transition."""
        self.failure_count += 1
        self.last_failure_time = time.time()

        if self.state == self.HALF_OPEN:
            logger.warning("Circuit breaker returning to OPEN (test request failed)")
            self.state = self.OPEN
        elif self.failure_count >= self.failure_threshold:
            logger.warning(
                "Circuit breaker OPENING after %d consecutive failures",
                self.failure_count,
            )
            self.state = self.OPEN


# ══════════════════════════════════════════════════════════════════════════
# Supabase Identity Provider
# ══════════════════════════════════════════════════════════════════════════

class SupabaseIdentityProvider(IdentityProvider):
    """
    Supabase Auth implementation of IdentityProvider.

    Error Handling Chain:
        call fails (transport error / 429 / 5xx) → tenacity retries with backoff
        → all retries fail → circuit breaker failure recorded, IdentityProviderError
        → threshold reached → later calls raise CircuitBreakerOpenError instantly
        → recovery timeout → one test call (HALF_OPEN)
    """

    USER_PATH = "/auth/v1/user"
    HEALTH_PATH = "/auth/v1/health"

    def __init__(
        self,
        base_url: str,
        api_key: str,
        timeout: float = 10.0,
        max_attempts: int = 3,
        min_wait: float = 0.5,
        max_wait: float = 4.0,
        jitter: float = 0.5,
        failure_threshold: int = 5,
        recovery_timeout: int = 30,
        http_client: Optional[httpx.AsyncClient] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.api_key = api_key
        self.max_attempts = max_attempts
        self.min_wait = min_wait
        self.max_wait = max_wait
        self.jitter = jitter

        # An injected client belongs to the caller and is not closed here
        self._owns_client = http_client is None
        self._client = http_client or httpx.AsyncClient(
            base_url=self.base_url or "http://identity.invalid",
            timeout=timeout,
        )

        self.circuit_breaker = CircuitBreaker(
            failure_threshold=failure_threshold,
            recovery_timeout=recovery_timeout,
        )

        logger.info(
            "SupabaseIdentityProvider initialized for %s, "
            "circuit_breaker(threshold=%d, recovery=%ds)",
            self.base_url or "<unconfigured>",
            failure_threshold,
            recovery_timeout,
        )

    @classmethod
    def from_settings(cls, settings: Settings) -> "SupabaseIdentityProvider":
        return cls(
            base_url=settings.supabase_url,
            api_key=settings.supabase_anon_key,
            timeout=settings.auth_timeout_seconds,
            max_attempts=settings.retry_max_attempts,
            min_wait=settings.retry_min_wait,
            max_wait=settings.retry_max_wait,
            failure_threshold=settings.cb_failure_threshold,
            recovery_timeout=settings.cb_recovery_timeout,
        )

    @property
    def configured(self) -> bool:
        return bool(self.base_url and self.api_key)

    async def get_user(self, access_token: str) -> Optional[AuthenticatedUser]:
        """
        Resolve a token through GET /auth/v1/user.

        Flow:
            1. No token or provider not configured → None (nobody is logged in)
            2. Check circuit breaker → may raise CircuitBreakerOpenError
            3. Call the provider with retry logic
            4. Record success/failure in the circuit breaker
        """
        if not access_token:
            return None
        if not self.configured:
            logger.warning("Identity provider is not configured; treating caller as anonymous")
            return None

        self.circuit_breaker.can_execute()

        retrying = AsyncRetrying(
            retry=retry_if_exception_type((httpx.TransportError, IdentityProviderError)),
            stop=stop_after_attempt(self.max_attempts),
            wait=wait_exponential_jitter(
                multiplier=self.min_wait,
                max=self.max_wait,
                jitter=self.jitter,
            ),
            before_sleep=before_sleep_log(logger, logging.WARNING),
            reraise=True,
        )

        try:
            user = await retrying(self._fetch_user, access_token)
        except IdentityProviderError as e:
            self.circuit_breaker.record_failure()
            logger.error("Identity provider failed after %d attempts: %s", self.max_attempts, e.message)
            raise
        except httpx.HTTPError as e:
            self.circuit_breaker.record_failure()
            logger.error(
                "Identity provider unreachable after %d attempts: %s",
                self.max_attempts,
                str(e),
            )
            raise IdentityProviderError(
                message="Identity provider is unreachable",
                context={"error_type": type(e).__name__, "attempts": self.max_attempts},
            ) from e

        self.circuit_breaker.record_success()
        return user

    async def _fetch_user(self, access_token: str) -> Optional[AuthenticatedUser]:
        """
        One provider round trip (retried by get_user).

        401/403 mean the token is invalid or expired. Other 4xx answers
        (malformed JWT) are also a plain "no identity". 429 and 5xx are
        raised so tenacity retries them.
        """
        start_time = time.perf_counter()
        response = await self._client.get(
            self.USER_PATH,
            headers={
                "apikey": self.api_key,
                "Authorization": f"Bearer {access_token}",
            },
        )
        duration_ms = (time.perf_counter() - start_time) * 1000

        if response.status_code == 429 or response.status_code >= 500:
            logger.warning(
                "Identity provider answered %d after %.0fms",
                response.status_code,
                duration_ms,
            )
            raise IdentityProviderError(
                message=f"Identity provider answered HTTP {response.status_code}",
                status_code=response.status_code,
            )

        if response.status_code != 200:
            logger.debug("Token rejected by identity provider (HTTP %d)", response.status_code)
            return None

        try:
            payload = response.json()
        except ValueError:
            logger.warning("Identity provider returned a non-JSON user payload")
            return None

        if not isinstance(payload, dict) or not payload.get("id"):
            return None

        logger.debug("Resolved user %s in %.0fms", payload["id"], duration_ms)
        return AuthenticatedUser.model_validate(payload)

    async def health_check(self) -> bool:
        """GET /auth/v1/health; True when the provider answers 200."""
        if not self.configured:
            return False
        try:
            response = await self._client.get(
                self.HEALTH_PATH,
                headers={"apikey": self.api_key},
            )
        except httpx.HTTPError as e:
            logger.warning("Identity provider health check failed: %s", str(e))
            return False
        return response.status_code == 200

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()
