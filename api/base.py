"""Unified API error format."""

from datetime import datetime
from uuid import uuid4

from pydantic import BaseModel, Field

from utils.durations import now_utc


class APIError(BaseModel):
    """Error details in API response."""

    code: str = Field(..., description="Machine-readable error code")
    message: str = Field(..., description="Human-readable error message")


class APIMeta(BaseModel):
    """Metadata included in every error response."""

    timestamp: datetime = Field(..., description="Response timestamp (UTC)")
    request_id: str = Field(..., description="Unique request identifier for tracing")


class APIErrorResponse(BaseModel):
    """
    Body of every failed request.

    Successful token endpoints return the bare token pair instead, so
    existing clients keep parsing {"accessToken", "refreshToken"}.
    """

    success: bool = False
    error: APIError
    meta: APIMeta


def error_response(code: str, message: str, request_id: str | None = None) -> APIErrorResponse:
    """Create an error response."""
    return APIErrorResponse(
        error=APIError(code=code, message=message),
        meta=APIMeta(
            timestamp=now_utc(),
            request_id=request_id or str(uuid4()),
        ),
    )


class ErrorCodes:
    """Standard error codes for consistent error handling."""

    # Authentication
    NOT_AUTHENTICATED = "NOT_AUTHENTICATED"
    INVALID_CREDENTIALS = "INVALID_CREDENTIALS"
    INVALID_TOKEN = "INVALID_TOKEN"

    # Registration
    ALREADY_EXISTS = "ALREADY_EXISTS"

    # Validation Errors
    VALIDATION_ERROR = "VALIDATION_ERROR"

    # Infrastructure
    INTERNAL_ERROR = "INTERNAL_ERROR"
