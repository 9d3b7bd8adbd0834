"""Error payloads returned by every exception handler."""

from datetime import datetime
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class ErrorType(str, Enum):
    VALIDATION_ERROR = "validation_error"
    NOT_FOUND = "not_found"
    CONFLICT = "conflict"
    DATABASE_ERROR = "database_error"
    UPSTREAM_ERROR = "upstream_error"
    INTERNAL_ERROR = "internal_error"
    TIMEOUT_ERROR = "timeout_error"
    AUTHENTICATION_ERROR = "authentication_error"
    AUTHORIZATION_ERROR = "authorization_error"


class ErrorResponse(BaseModel):
    """Body shared by all non-2xx responses."""

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "error_type": "upstream_error",
                "message": "Movie provider request failed",
                "detail": "omdb: Request limit reached!",
                "status_code": 502,
                "timestamp": "2026-03-01T10:30:00Z",
                "request_id": "5f0c6f1e-3b0a-4c55-9a55-0f3b1c4f2d10",
                "path": "/movies/search",
            }
        }
    )

    error_type: ErrorType = Field(..., description="Category of error")
    message: str = Field(..., description="Human-readable error message")
    detail: str | None = Field(None, description="Additional context")
    status_code: int
    timestamp: datetime
    request_id: str | None = Field(None, description="Identifier echoed in X-Request-ID")
    path: str | None = None
    retry_after: int | None = Field(None, description="Seconds to wait before retrying")


class ValidationErrorDetail(BaseModel):
    field: str
    message: str
    value: Any = None


class ValidationErrorResponse(ErrorResponse):
    error_type: ErrorType = Field(default=ErrorType.VALIDATION_ERROR)
    errors: list[ValidationErrorDetail] = Field(default_factory=list)


__all__ = [
    "ErrorResponse",
    "ErrorType",
    "ValidationErrorDetail",
    "ValidationErrorResponse",
]
