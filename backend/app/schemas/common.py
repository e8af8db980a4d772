"""
Accounting Notes Backend: Shared Response Schemas
=================================================

What:  The response envelope used by every endpoint, plus error and health
       payloads.
Why:   The frontend reads `statusCode`, `message` (a list of strings) and
       `data` from every response, success or error.

Example:
    {
        "statusCode": 200,
        "message": ["Uzyskanie kategorii udane"],
        "data": [...]
    }
"""

from typing import Generic, List, Optional, TypeVar

from pydantic import BaseModel, Field

T = TypeVar("T")


class ApiResponse(BaseModel, Generic[T]):
    """Success envelope; `data` carries the endpoint-specific payload."""

    status_code: int = Field(
        default=200,
        serialization_alias="statusCode",
        description="HTTP status code repeated in the body",
    )
    message: List[str] = Field(description="Human-readable messages (Polish)")
    data: Optional[T] = Field(default=None, description="Endpoint payload")

    model_config = {"populate_by_name": True}


class ErrorResponse(BaseModel):
    """
    Error envelope returned by the global exception handlers.

    Fields:
        statusCode: HTTP status code
        error: Machine-readable error code (e.g. "not_found", "conflict")
        message: Human-readable descriptions
        request_id: Correlation ID for tracing this error in server logs
    """

    status_code: int = Field(serialization_alias="statusCode")
    error: str = Field(description="Machine-readable error code")
    message: List[str] = Field(description="Human-readable error description")
    request_id: Optional[str] = Field(default=None, description="Request correlation ID")

    model_config = {"populate_by_name": True}


class HealthResponse(BaseModel):
    """Health check response showing service and dependency status."""

    status: str = Field(description="Overall service status: healthy, degraded, unhealthy")
    version: str = Field(description="Application version")
    database: str = Field(description="Database connectivity: connected, disconnected")
    storage: str = Field(description="Bucket reachability: available, unavailable")
    uptime_seconds: float = Field(description="Seconds since service started")
