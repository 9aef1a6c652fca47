"""
Devbook API — Shared Response Models
=====================================

What:  The error envelope and the health check response, used for OpenAPI
       documentation of every route.
"""

from pydantic import BaseModel, Field


class ErrorResponse(BaseModel):
    """
    Error envelope returned with every non-2xx status.

    Example:
        {"error": "you cannot update a post that is not yours"}
    """
    error: str = Field(description="Human-readable error description")


class HealthResponse(BaseModel):
    """Returned by GET /health for monitoring and load balancer probes."""
    status: str = Field(description="Overall service status: healthy or unhealthy")
    version: str = Field(description="Application version")
    database: str = Field(description="Database connectivity: connected, disconnected")
    uptime_seconds: float = Field(description="Seconds since service started")
