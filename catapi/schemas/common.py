"""
Cat Registry API — Shared Envelope Schemas
===========================================

What:  The success and error envelopes every endpoint speaks, plus the health payload.
Why:   Clients parse one shape for every success ({message, data?}) and one
       for every failure ({message, error, request_id, stack?}).
"""

from typing import Optional

from pydantic import BaseModel, Field


class MessageResponse(BaseModel):
    """
    What:  Base success envelope.
    Who:   Extended by resource-specific envelopes that add a typed `data` field.
    """
    message: str = Field(description="Human-readable outcome of the operation")


class ErrorResponse(BaseModel):
    """
    What:  Standardized error envelope for all API errors.

    Fields:
        message:    Human-readable description (aggregated for validation errors)
        error:      Machine-readable code (validation_error, not_found, ...)
        request_id: Correlation ID for tracing this error in server logs
        stack:      Traceback text, only present when DEBUG is enabled

    Example:
        {
            "message": "Field required: cat_name, Input should be greater than 0: weight",
            "error": "validation_error",
            "request_id": "1a2b3c4d"
        }
    """
    message: str = Field(description="Human-readable error description")
    error: str = Field(description="Machine-readable error code")
    request_id: Optional[str] = Field(default=None, description="Request correlation ID")
    stack: Optional[str] = Field(default=None, description="Traceback (debug only)")


class HealthResponse(BaseModel):
    """
    What:  Health check response showing service and dependency status.
    Who:   Returned by GET /health for monitoring and load balancer health checks.
    """
    status: str = Field(description="Overall service status: healthy, unhealthy")
    version: str = Field(description="Application version")
    database: str = Field(description="Database connectivity: connected, disconnected")
    uptime_seconds: float = Field(description="Seconds since service started")
