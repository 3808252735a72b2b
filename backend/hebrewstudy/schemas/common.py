"""
Hebrew Study Backend - Shared Pydantic Schemas
===============================================

What:  Base model and envelopes shared by every endpoint.
Why:   The web client reads camelCase keys (sessionId, isActive, hebrewName);
       the Python side stays snake_case. One alias generator handles both.
How:   `CamelModel` accepts either spelling on input and FastAPI serializes
       response models by alias.
"""

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Base for all API schemas: snake_case attributes, camelCase JSON."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


class SuccessResponse(CamelModel):
    """Minimal acknowledgement body: {"success": true}."""
    success: bool = Field(default=True)


class ErrorResponse(CamelModel):
    """
    Error envelope returned by every failing endpoint.

    Example:
        {"error": "Vocab set not found", "requestId": "1a2b3c4d"}
    """
    error: str = Field(description="Human-readable error description")
    details: Optional[dict] = Field(default=None, description="Validation context")
    request_id: Optional[str] = Field(default=None, description="Request correlation ID")


class HealthResponse(CamelModel):
    """Service and dependency status for load balancer probes."""
    status: str = Field(description="Overall service status: healthy, degraded, unhealthy")
    version: str = Field(description="Application version")
    database: str = Field(description="Database connectivity: connected, disconnected")
    identity_provider: str = Field(
        description="Identity provider status: available, unavailable, circuit_open, unconfigured"
    )
    uptime_seconds: float = Field(description="Seconds since service started")
