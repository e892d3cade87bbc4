class DomainError(Exception):
    """Base exception for business rule violations.

    ``code`` is the stable machine-readable identifier returned to clients and
    ``http_status`` the status the HTTP layer answers with.
    """

    code = "BAD_INPUT"
    http_status = 400
    retryable = False


class ValidationError(DomainError):
    """Raised when input data is invalid or violates domain rules."""


class AuthenticationError(DomainError):
    """Raised when no user identity can be resolved for the caller."""

    code = "UNAUTHENTICATED"
    http_status = 401


class AuthorizationError(DomainError):
    """Raised when a user lacks permission for an action."""

    code = "FORBIDDEN"
    http_status = 403


class NotFoundError(DomainError):
    code = "NOT_FOUND"
    http_status = 404


class InvalidStateError(DomainError):
    """Raised when the current status does not allow the requested transition."""

    code = "INVALID_STATE"
    http_status = 409


class TransientStorageError(DomainError):
    """Storage timed out or dropped the connection; the call may be retried."""

    code = "TRANSIENT_STORAGE_FAILURE"
    http_status = 500
    retryable = True
