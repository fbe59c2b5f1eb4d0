"""Shared response schemas."""

from typing import Any, Dict, Optional

from pydantic import BaseModel, Field


class ErrorDetail(BaseModel):
    """Error body of a failed request."""

    code: str = Field(description="Application-specific error code")
    message: str = Field(description="Human-readable error message")
    status_code: int = Field(description="HTTP status code")
    details: Optional[Dict[str, Any]] = Field(
        default=None, description="Structured error context"
    )


class ErrorResponse(BaseModel):
    """Envelope returned for every handled error."""

    error: ErrorDetail
    success: bool = False


class MessageResponse(BaseModel):
    """Plain confirmation message."""

    message: str
