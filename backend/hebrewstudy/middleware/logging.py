"""
Hebrew Study Backend - Access Log Middleware
=============================================

What:  One access-log line per request on the "hebrewstudy.access" logger.
How:   Level follows the status class (5xx ERROR, 4xx WARNING, else INFO).
       Structured fields go into `extra` for JSON log shippers.

Privacy:
    Never logged: request bodies, Authorization headers, session cookies.
    Heartbeats and health probes are logged at DEBUG; an open study tab sends
    one every few seconds.
"""

import logging
import time

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

from hebrewstudy.middleware.request_id import request_id_var

access_logger = logging.getLogger("hebrewstudy.access")

QUIET_PATHS = frozenset({"/health", "/api/vocab/session/heartbeat"})


def access_log_level(status_code: int, path: str) -> int:
    if status_code >= 500:
        return logging.ERROR
    if status_code >= 400:
        return logging.WARNING
    return logging.DEBUG if path in QUIET_PATHS else logging.INFO


class RequestLoggingMiddleware(BaseHTTPMiddleware):

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        started = time.perf_counter()
        response = await call_next(request)
        elapsed_ms = round((time.perf_counter() - started) * 1000, 2)

        fields = {
            "request_id": request_id_var.get(""),
            "method": request.method,
            "path": request.url.path,
            "status": response.status_code,
            "duration_ms": elapsed_ms,
            "client_ip": request.client.host if request.client else "unknown",
        }
        access_logger.log(
            access_log_level(response.status_code, fields["path"]),
            "%(method)s %(path)s %(status)d %(duration_ms).1fms [%(request_id)s] from %(client_ip)s",
            fields,
            extra=fields,
        )
        return response
