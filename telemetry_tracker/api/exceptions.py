"""API exception hierarchy for consistent error handling.

All API exceptions inherit from TelemetryAPIError, whose status_code and
error_code are turned into an ErrorResponse by the registered handler.
"""

from telemetry_tracker.api.models.errors import ErrorCode


class TelemetryAPIError(Exception):
    """Base exception for all API errors."""

    status_code: int = 500
    error_code: ErrorCode = ErrorCode.INTERNAL_ERROR

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


class InvalidRequestError(TelemetryAPIError):
    """Raised when the request body is malformed or invalid."""

    status_code = 400
    error_code = ErrorCode.INVALID_REQUEST


class UnsupportedMediaTypeError(TelemetryAPIError):
    """Raised when the request is not application/json."""

    status_code = 415
    error_code = ErrorCode.UNSUPPORTED_MEDIA_TYPE


class StorageUnavailableError(TelemetryAPIError):
    """Raised when the event store rejects a write."""

    status_code = 500
    error_code = ErrorCode.STORAGE_ERROR
