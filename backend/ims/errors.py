# Overview: Domain error taxonomy shared by services and routes.

"""
Error taxonomy.

Services raise these; routes translate them to HTTP status codes:

    ValidationError            -> 400
    InvalidCredential          -> 401
    PermissionDeniedError      -> 403
    NotFoundError              -> 404
    ConflictError              -> 409 (UniqueConstraintViolation, LifecycleError)
    BackendError               -> 500

ValidationError, NotFoundError and ConflictError subclass ValueError so
callers that only care about "bad input" can catch ValueError.
"""


class ValidationError(ValueError):
    """400-level input problem. Raised before any write is attempted."""

    def __init__(self, message: str, field: str | None = None):
        super().__init__(message)
        self.field = field


class NotFoundError(ValueError):
    """Lookup returned nothing."""


class UsernameNotFound(NotFoundError):
    """No user matches the submitted username (case-insensitive)."""


class InvalidCredential(Exception):
    """Submitted password did not match the stored credential."""


class ConflictError(ValueError):
    """409-level business rule conflict (e.g., deleting a referenced row)."""


class UniqueConstraintViolation(ConflictError):
    """Duplicate value for a unique field (e.g., username)."""


class LifecycleError(ConflictError):
    """
    Raised when an invalid order state transition is attempted.

    This is a domain error, not a technical error. It indicates
    that the user attempted an operation that violates business rules.
    """


class PermissionDeniedError(Exception):
    """Raised when the acting role may not perform the requested action."""

    def __init__(self, message: str, action: str | None = None):
        super().__init__(message)
        self.action = action


class BackendError(Exception):
    """Any other storage-layer failure."""
