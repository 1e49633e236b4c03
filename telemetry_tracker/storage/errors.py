"""Store error hierarchy.

Store implementations wrap backend-specific errors in one of these.
"""


class StoreError(Exception):
    """Base exception for all store errors."""

    def __init__(self, message: str, cause: Exception | None = None) -> None:
        super().__init__(message)
        self.cause = cause


class ConnectionError(StoreError):
    """Raised when the store cannot connect to its backend.

    Examples:
        - Database unreachable at startup
        - Pool creation fails
    """

    pass


class WriteError(StoreError):
    """Raised when an event could not be persisted."""

    pass
