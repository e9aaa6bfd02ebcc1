class DomainError(Exception):
    """Base exception for business rule violations."""

    code = "BAD_REQUEST"


class ValidationError(DomainError):
    """Raised when input data is invalid or violates domain rules."""


class ConflictError(ValidationError):
    """Raised when a same-day attendance record already exists."""

    code = "CONFLICT"


class NotFoundError(DomainError):
    """Raised when the record or session an operation needs does not exist."""

    code = "NOT_FOUND"


class AuthorizationError(DomainError):
    """Raised when a user lacks permission for an action."""

    code = "FORBIDDEN"


class InternalError(Exception):
    """Opaque failure surfaced to callers; the cause is only logged."""

    code = "INTERNAL"

    def __init__(self, message: str = "Internal error while processing attendance."):
        super().__init__(message)
