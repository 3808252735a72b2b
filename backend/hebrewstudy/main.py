"""
Hebrew Study Backend - FastAPI Application Factory
===================================================

What:  Creates and configures the FastAPI application instance.
How:   create_app() wires middleware, exception handlers, routers and the
       identity provider, and returns a ready FastAPI instance.
Who:   uvicorn (`uvicorn hebrewstudy.main:app`) and the test suite, which
       passes its own identity provider.

Application Layout:
    ┌──────────────────────────────────────────────────────────┐
    │                      FastAPI App                         │
    │                                                          │
    │  Middleware: RequestID → AccessLog → RateLimit → GZip    │
    │                                                          │
    │  Routes:                                                 │
    │    GET  /api/bible/books          (login)                │
    │    POST /api/vocab/session/*      (login)                │
    │    GET  /api/vocab/sets, POST activate / toggle-active   │
    │    GET  /health                                          │
    │                                                          │
    │  Errors → {"error": ..., "requestId": ...}               │
    │    400 ValidationError | 401 Auth | 404 NotFound | 500   │
    └──────────────────────────────────────────────────────────┘

Lifecycle:
    Startup:  logging, configuration check (logged, not fatal)
    Shutdown: close the identity provider's HTTP client, dispose the engine
"""

import logging
import sys
from contextlib import asynccontextmanager
from typing import AsyncGenerator, Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import JSONResponse

from hebrewstudy import __version__
from hebrewstudy.config import settings
from hebrewstudy.database import dispose_engine
from hebrewstudy.exceptions import (
    AuthenticationError,
    HebrewStudyError,
    NotFoundError,
    StorageError,
    ValidationError,
)
from hebrewstudy.middleware.logging import RequestLoggingMiddleware
from hebrewstudy.middleware.rate_limit import RateLimitMiddleware
from hebrewstudy.middleware.request_id import (
    REQUEST_ID_HEADER,
    RequestIDMiddleware,
    request_id_var,
)
from hebrewstudy.routes import bible, health, sessions, vocab_sets
from hebrewstudy.services.identity_base import IdentityProvider
from hebrewstudy.services.identity_service import SupabaseIdentityProvider

logger = logging.getLogger(__name__)


# ══════════════════════════════════════════════════════════════════════════
# Logging Configuration
# ══════════════════════════════════════════════════════════════════════════

def setup_logging() -> None:
    """
    Configure the root logger for the whole process.

    Format: 2025-01-01T12:00:00 [INFO] hebrewstudy.access: POST /api/... 200 3.1ms

    httpx logs every identity-provider request at INFO, and the tokens live in
    headers it does not print, but the volume alone drowns the access log.
    """
    logging.basicConfig(
        level=getattr(logging, settings.log_level, logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%S",
        handlers=[logging.StreamHandler(sys.stdout)],
        force=True,
    )

    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
    logging.getLogger("httpx").setLevel(logging.WARNING)


# ══════════════════════════════════════════════════════════════════════════
# Application Lifespan
# ══════════════════════════════════════════════════════════════════════════

@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    setup_logging()
    logger.info("=" * 60)
    logger.info("Hebrew Study Backend %s starting up...", __version__)

    try:
        settings.validate_required_for_production()
    except ValueError as e:
        # Not fatal: /health and the unauthenticated vocab-set routes still work
        logger.error("Configuration error: %s", str(e))

    logger.info("Session cookie name: %s", settings.resolved_auth_cookie_name)
    logger.info("Server ready at http://%s:%d", settings.backend_host, settings.backend_port)
    logger.info("=" * 60)

    yield

    logger.info("Hebrew Study Backend shutting down...")
    await app.state.identity_provider.aclose()
    await dispose_engine()
    logger.info("Shutdown complete.")


# ══════════════════════════════════════════════════════════════════════════
# Exception Handlers
# ══════════════════════════════════════════════════════════════════════════

def _request_id(request: Request) -> str:
    # The catch-all handler runs outside the middleware stack, after the
    # ContextVar has been reset; request.state still holds the ID.
    return request_id_var.get("") or getattr(request.state, "request_id", "")


def _error_body(message: str, details: Optional[dict] = None, request_id: str = "") -> dict:
    body = {"error": message, "requestId": request_id or request_id_var.get("")}
    if details:
        body["details"] = details
    return body


def register_exception_handlers(app: FastAPI) -> None:
    """
    Map the exception hierarchy onto status codes and the error envelope.

        ValidationError         → 400 (message + details)
        RequestValidationError  → 400 "Invalid request body"
        AuthenticationError     → 401 "Unauthorized - Please log in"
        NotFoundError           → 404 "<Resource> not found"
        StorageError            → 500 per-operation message, context logged only
        HebrewStudyError        → 500
        Exception               → 500 generic message, stack trace logged only
    """

    @app.exception_handler(ValidationError)
    async def handle_validation_error(request: Request, exc: ValidationError):
        logger.warning("[%s] Validation error: %s", request_id_var.get(""), exc.message)
        return JSONResponse(status_code=400, content=_error_body(exc.message, exc.context))

    @app.exception_handler(RequestValidationError)
    async def handle_request_validation(request: Request, exc: RequestValidationError):
        """Malformed JSON or a wrongly typed field."""
        errors = [
            {"loc": [str(part) for part in err.get("loc", ())], "msg": err.get("msg", "")}
            for err in exc.errors()
        ]
        logger.warning("[%s] Invalid request body: %s", request_id_var.get(""), errors)
        return JSONResponse(
            status_code=400,
            content=_error_body("Invalid request body", {"errors": errors}),
        )

    @app.exception_handler(AuthenticationError)
    async def handle_authentication_error(request: Request, exc: AuthenticationError):
        return JSONResponse(status_code=401, content=_error_body(exc.message))

    @app.exception_handler(NotFoundError)
    async def handle_not_found(request: Request, exc: NotFoundError):
        return JSONResponse(status_code=404, content=_error_body(exc.message))

    @app.exception_handler(StorageError)
    async def handle_storage_error(request: Request, exc: StorageError):
        rid = request_id_var.get("")
        logger.error("[%s] Storage error: %s | Context: %s", rid, exc.message, exc.context)
        return JSONResponse(status_code=500, content=_error_body(exc.message))

    @app.exception_handler(HebrewStudyError)
    async def handle_application_error(request: Request, exc: HebrewStudyError):
        rid = request_id_var.get("")
        logger.error("[%s] %s: %s | Context: %s", rid, type(exc).__name__, exc.message, exc.context)
        return JSONResponse(status_code=500, content=_error_body(exc.message))

    @app.exception_handler(Exception)
    async def handle_unexpected_error(request: Request, exc: Exception):
        rid = _request_id(request)
        logger.error("[%s] Unexpected error: %s", rid, str(exc), exc_info=True)
        return JSONResponse(
            status_code=500,
            content=_error_body("An unexpected error occurred. Please try again later.", request_id=rid),
            headers={REQUEST_ID_HEADER: rid} if rid else None,
        )


# ══════════════════════════════════════════════════════════════════════════
# Application Factory
# ══════════════════════════════════════════════════════════════════════════

def create_app(identity_provider: Optional[IdentityProvider] = None) -> FastAPI:
    """
    Create and configure the FastAPI application.

    Args:
        identity_provider: Token verifier stored on `app.state`. Defaults to a
            SupabaseIdentityProvider built from settings; tests pass a fake.
    """
    app = FastAPI(
        title="Hebrew Study API",
        description=(
            "Backend for a Hebrew study app: Bible book reference data, "
            "vocabulary set activation and per-user study session tracking."
        ),
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )

    app.state.identity_provider = (
        identity_provider or SupabaseIdentityProvider.from_settings(settings)
    )

    # Added in reverse execution order: the last one added runs first
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_credentials=True,  # the session cookie is sent cross-origin
        allow_methods=["GET", "POST", "OPTIONS"],
        allow_headers=["Content-Type", "Authorization", "X-Request-ID"],
        expose_headers=["X-Request-ID", "Retry-After"],
    )
    app.add_middleware(GZipMiddleware, minimum_size=500)
    app.add_middleware(RateLimitMiddleware)
    app.add_middleware(RequestLoggingMiddleware)
    # Outermost, so 429s and access log lines carry the ID
    app.add_middleware(RequestIDMiddleware)

    register_exception_handlers(app)

    app.include_router(bible.router)
    app.include_router(sessions.router)
    app.include_router(vocab_sets.router)
    app.include_router(health.router)

    return app


app = create_app()
