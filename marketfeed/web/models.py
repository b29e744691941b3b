"""
Web API data models
Request/response envelopes of the FastAPI service
"""

from datetime import UTC, datetime
from typing import Any

from pydantic import BaseModel, Field


def _utc_now() -> datetime:
    return datetime.now(UTC)


class APIResponse(BaseModel):
    """Standard API response envelope."""

    success: bool = Field(..., description="Whether the request succeeded")
    data: Any | None = Field(None, description="Response payload")
    message: str | None = Field(None, description="Human readable message")
    timestamp: datetime = Field(default_factory=_utc_now, description="Response timestamp")
    request_id: str | None = Field(None, description="Request id for tracing")


class ErrorResponse(BaseModel):
    """Error response envelope."""

    success: bool = Field(False, description="Always false")
    error: str = Field(..., description="Error type")
    message: str = Field(..., description="Error message")
    details: dict[str, Any] | None = Field(None, description="Structured error details")
    timestamp: datetime = Field(default_factory=_utc_now, description="Error timestamp")
    request_id: str | None = Field(None, description="Request id for tracing")


class HealthStatus(BaseModel):
    """Health check payload."""

    status: str = Field(..., description="Overall status")
    version: str = Field(..., description="Service version")
    uptime: float = Field(..., description="Uptime in seconds")
    timestamp: datetime = Field(default_factory=_utc_now, description="Check timestamp")
    components: dict[str, str] = Field(..., description="Per-component status")


class CacheStats(BaseModel):
    """Cache statistics."""

    total_entries: int = Field(..., description="Entries currently held")
    quote_ttl_seconds: float = Field(..., description="Quote TTL")
    bar_ttl_seconds: float = Field(..., description="Bar series TTL")
