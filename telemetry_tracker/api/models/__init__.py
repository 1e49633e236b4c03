"""API request/response models."""

from telemetry_tracker.api.models.errors import ErrorBody, ErrorCode, ErrorResponse, error_payload

__all__ = ["ErrorBody", "ErrorCode", "ErrorResponse", "error_payload"]
