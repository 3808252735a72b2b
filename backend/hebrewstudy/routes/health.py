"""
Hebrew Study Backend - Health Check Route
==========================================

What:  Health check endpoint for monitoring and load balancer probes.
How:   Checks the database and the identity provider and returns aggregate status.

Status levels:
    - healthy:   All dependencies operational (HTTP 200)
    - degraded:  Identity provider down or circuit open (HTTP 200); reference
                 and vocab-set endpoints still work, logged-in ones answer 401
    - unhealthy: Database down (HTTP 503)
"""

import logging
import time

from fastapi import APIRouter, Depends, Response
from sqlalchemy.ext.asyncio import AsyncSession

from hebrewstudy import __version__
from hebrewstudy.database import get_db_session, ping
from hebrewstudy.dependencies import get_identity_provider
from hebrewstudy.schemas.common import HealthResponse
from hebrewstudy.services.identity_base import IdentityProvider
from hebrewstudy.services.identity_service import CircuitBreaker

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Health"])

_start_time = time.time()


@router.get(
    "/health",
    response_model=HealthResponse,
    summary="Service health check",
)
async def health_check(
    response: Response,
    db: AsyncSession = Depends(get_db_session),
    provider: IdentityProvider = Depends(get_identity_provider),
) -> HealthResponse:
    """
    Probe the database (SELECT 1) and the identity provider.

    The provider probe is skipped while its circuit breaker is open; the
    breaker state is reported instead.
    """
    db_status = "connected"
    identity_status = "available"
    overall = "healthy"

    try:
        await ping(db)
    except Exception as e:
        db_status = "disconnected"
        overall = "unhealthy"
        logger.warning("Health check: database unreachable: %s", str(e))
        # Leaves nothing for the session dependency to commit
        await db.rollback()

    breaker = getattr(provider, "circuit_breaker", None)
    if breaker is not None and breaker.state == CircuitBreaker.OPEN:
        identity_status = "circuit_open"
    elif getattr(provider, "configured", True) is False:
        identity_status = "unconfigured"
    elif not await provider.health_check():
        identity_status = "unavailable"

    if identity_status != "available" and overall == "healthy":
        overall = "degraded"

    if overall == "unhealthy":
        response.status_code = 503

    return HealthResponse(
        status=overall,
        version=__version__,
        database=db_status,
        identity_provider=identity_status,
        uptime_seconds=round(time.time() - _start_time, 2),
    )
