"""Exceptions raised by the basebase client.

Every error carries a stable kind (``code``, an ErrorCode) plus a
human-readable message. Validation errors are raised before any request is
made; remote errors are raised when the awaited operation completes. Nothing
in this package retries.
"""

from typing import Any

from basebase.domain.enums import ErrorCode


class BasebaseException(Exception):
    """Base exception for all basebase client errors.

    Attributes:
        message: Human-readable error description.
        code: Stable error kind.
        error_code: Machine-readable code string (the value of ``code``).
        details: Additional error context (e.g. path, status).
    """

    code: ErrorCode = ErrorCode.INTERNAL

    def __init__(
        self,
        message: str,
        error_code: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize the exception.

        Args:
            message: Human-readable error description.
            error_code: Optional machine-readable code; defaults to the kind.
            details: Optional dict of extra context.
        """
        self.message = message
        self.error_code = error_code or self.code.value
        self.details = details or {}
        super().__init__(self.message)

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(code={self.code.value!r}, message={self.message!r})"


class InvalidArgumentError(BasebaseException):
    """Malformed path, identifier, constraint or payload (caught client-side)."""

    code = ErrorCode.INVALID_ARGUMENT

    def __init__(self, message: str, field: str | None = None) -> None:
        details = {"field": field} if field else {}
        super().__init__(message, details=details)


class UnauthenticatedError(BasebaseException):
    """Missing or expired credential."""

    code = ErrorCode.UNAUTHENTICATED

    def __init__(self, message: str = "Authentication required") -> None:
        super().__init__(message)


class PermissionDeniedError(BasebaseException):
    """The server refused the operation for the current credential."""

    code = ErrorCode.PERMISSION_DENIED

    def __init__(self, message: str = "Permission denied") -> None:
        super().__init__(message)


class NotFoundError(BasebaseException):
    """The addressed document, collection or app does not exist."""

    code = ErrorCode.NOT_FOUND

    def __init__(self, message: str = "Not found") -> None:
        super().__init__(message)


class AlreadyExistsError(BasebaseException):
    """Creating something whose name or id is already taken."""

    code = ErrorCode.ALREADY_EXISTS

    def __init__(self, message: str = "Already exists") -> None:
        super().__init__(message)


class UnavailableError(BasebaseException):
    """The server is unavailable or the request timed out."""

    code = ErrorCode.UNAVAILABLE

    def __init__(self, message: str = "Service unavailable") -> None:
        super().__init__(message)


class NetworkError(BasebaseException):
    """Transport-level failure with no HTTP status."""

    code = ErrorCode.NETWORK_ERROR

    def __init__(self, message: str = "Network error") -> None:
        super().__init__(message)


class InternalError(BasebaseException):
    """Uncategorized remote failure or unexpected local state."""

    code = ErrorCode.INTERNAL

    def __init__(self, message: str = "Internal error", status: int | None = None) -> None:
        details = {"status": status} if status is not None else {}
        super().__init__(message, details=details)


_STATUS_ERRORS: dict[int, type[BasebaseException]] = {
    400: InvalidArgumentError,
    401: UnauthenticatedError,
    403: PermissionDeniedError,
    404: NotFoundError,
    409: AlreadyExistsError,
    503: UnavailableError,
}


def error_for_status(status: int, message: str) -> BasebaseException:
    """Build the exception matching an HTTP status code.

    Args:
        status: Non-2xx HTTP status returned by the server.
        message: Message extracted from the response (or a default).

    Returns:
        An exception instance; statuses without a dedicated kind map to InternalError.
    """
    exc_type = _STATUS_ERRORS.get(status)
    if exc_type is None:
        return InternalError(message, status=status)
    exc = exc_type(message)
    exc.details["status"] = status
    return exc
