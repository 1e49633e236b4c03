"""Error response models for consistent API error handling."""

from enum import Enum

from pydantic import BaseModel


class ErrorCode(str, Enum):
    """Machine-readable error codes returned in error responses."""

    INVALID_REQUEST = "INVALID_REQUEST"
    """Body could not be decoded or failed validation."""

    UNSUPPORTED_MEDIA_TYPE = "UNSUPPORTED_MEDIA_TYPE"
    """Content-Type is not application/json."""

    STORAGE_ERROR = "STORAGE_ERROR"
    """The event could not be persisted."""

    INTERNAL_ERROR = "INTERNAL_ERROR"
    """An unexpected internal error occurred."""


class ErrorBody(BaseModel):
    code: ErrorCode
    message: str


class ErrorResponse(BaseModel):
    """Top-level error envelope. Never carries internal detail."""

    error: ErrorBody


def error_payload(code: ErrorCode, message: str) -> dict[str, object]:
    return ErrorResponse(error=ErrorBody(code=code, message=message)).model_dump(mode="json")
