"""
Xync Backend — Shared Schemas
=============================

What:  Response models shared by every router (errors, health) and the
       helper used by partial-update schemas.
"""

from typing import Iterable, Optional

from pydantic import BaseModel, Field


class ErrorResponse(BaseModel):
    """
    What:  Standardized error response format for all API errors.

    Fields:
        error: Machine-readable error code (e.g., "validation_error", "not_found")
        message: Human-readable description for display to users
        details: Optional extra context (e.g., which field failed validation)
        request_id: Correlation ID for tracing this error in server logs

    Example:
        {
            "error": "conflict",
            "message": "A category with this name already exists",
            "details": null,
            "request_id": "550e8400"
        }
    """
    error: str = Field(description="Machine-readable error code")
    message: str = Field(description="Human-readable error description")
    details: Optional[dict] = Field(default=None, description="Additional error context")
    request_id: Optional[str] = Field(default=None, description="Request correlation ID")


class HealthResponse(BaseModel):
    """Returned by GET /health for monitoring and load balancer checks."""
    status: str = Field(description="Overall service status: healthy, unhealthy")
    version: str = Field(description="Application version")
    database: str = Field(description="Database connectivity: connected, disconnected")
    uptime_seconds: float = Field(description="Seconds since service started")


class LivenessResponse(BaseModel):
    """GET /health/live: the process is up. Never touches the database."""
    status: str = Field(description="Always \"ok\"")
    version: str = Field(description="Application version")


class ReadinessResponse(BaseModel):
    """GET /health/ready: whether the service can take traffic."""
    status: str = Field(description="ready or not_ready")
    database: str = Field(description="Database connectivity: connected, disconnected")


def reject_explicit_nulls(model: BaseModel, fields: Iterable[str]) -> None:
    """
    Raise ValueError if any of `fields` was sent as an explicit null.

    Update schemas distinguish "absent" (leave unchanged) from "null"
    (clear the value). Required columns cannot be cleared, so null is
    rejected for them at the schema boundary (→ 422).
    """
    for name in fields:
        if name in model.model_fields_set and getattr(model, name) is None:
            raise ValueError(f"'{name}' cannot be null")
