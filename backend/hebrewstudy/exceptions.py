"""
Hebrew Study Backend - Custom Exception Hierarchy
==================================================

What:  Application-specific exceptions for the error scenarios of the API.
Why:   Each exception maps to one HTTP status code and a fixed JSON envelope,
       so route handlers never build error responses themselves.
How:   Each exception carries a user-safe message and an optional context dict.
       Global exception handlers (registered in main.py) translate them.
Who:   Raised by services and dependencies; caught by global handlers.

Exception Hierarchy:
    HebrewStudyError (base)
    ├── ValidationError          → 400 Bad Request (missing required field)
    ├── AuthenticationError      → 401 Unauthorized
    ├── NotFoundError            → 404 Not Found
    ├── StorageError             → 500 Internal Server Error (generic message)
    ├── IdentityProviderError    → resolved to "no identity" by the auth dependency
    └── CircuitBreakerOpenError  → resolved to "no identity" by the auth dependency
"""

from typing import Any, Dict, Optional


class HebrewStudyError(Exception):
    """
    Base exception for all application errors.

    Attributes:
        message:  User-facing error description (safe to return in API response)
        context:  Additional debug info (logged but NOT returned to client)
    """

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        context: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.context = context or {}
        super().__init__(self.message)


class ValidationError(HebrewStudyError):
    """
    Raised when a required request field is missing or empty.

    Checked by services before any datastore access, so a rejected request
    never opens a statement.

    Example response:
        {"error": "Missing sessionId", "details": {"field": "sessionId"}, "requestId": "1a2b3c4d"}
    """

    def __init__(
        self,
        message: str = "Validation failed",
        field: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        if field:
            ctx["field"] = field
        super().__init__(message=message, context=ctx)
        self.field = field


class AuthenticationError(HebrewStudyError):
    """Raised when no caller identity could be resolved for a protected route."""

    def __init__(
        self,
        message: str = "Unauthorized - Please log in",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class NotFoundError(HebrewStudyError):
    """
    Raised when a referenced record does not exist.

    SQLAlchemy returns None (or no RETURNING row) for missing records; services
    convert that into this exception so the handler can answer 404.
    """

    def __init__(
        self,
        resource: str = "Resource",
        resource_id: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        ctx["resource"] = resource
        if resource_id:
            ctx["resource_id"] = resource_id
        super().__init__(message=f"{resource} not found", context=ctx)
        self.resource = resource
        self.resource_id = resource_id


class StorageError(HebrewStudyError):
    """
    Raised when a datastore operation fails.

    The message is the generic, per-operation text returned to the caller
    ("Failed to start study session"). Driver errors, SQL and constraint names
    go into `context` and the server log only.
    """

    def __init__(
        self,
        message: str = "A database error occurred. Please try again later.",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class IdentityProviderError(HebrewStudyError):
    """
    Raised when the identity provider cannot answer a token check.

    Covers transport failures, timeouts and 5xx responses. A rejected token is
    NOT an error; the provider client returns None for it.
    """

    def __init__(
        self,
        message: str = "Identity provider is unavailable",
        status_code: Optional[int] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        if status_code is not None:
            ctx["status_code"] = status_code
        super().__init__(message=message, context=ctx)
        self.status_code = status_code


class CircuitBreakerOpenError(HebrewStudyError):
    """
    Raised when the identity provider circuit breaker is OPEN.

    State machine:
        CLOSED → after N consecutive failures → OPEN (reject for M seconds)
        → HALF_OPEN (allow one test call) → CLOSED on success / OPEN on failure
    """

    def __init__(
        self,
        recovery_time: int = 30,
        context: Optional[Dict[str, Any]] = None,
    ):
        message = (
            "Identity provider calls are suspended after repeated failures; "
            f"retrying in approximately {recovery_time} seconds."
        )
        ctx = context or {}
        ctx["recovery_time"] = recovery_time
        super().__init__(message=message, context=ctx)
        self.recovery_time = recovery_time
