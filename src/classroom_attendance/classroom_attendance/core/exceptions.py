class DomainError(Exception):
    """Base exception for business rule violations.

    ``code`` doubles as the HTTP status used by the controllers.
    """

    code = 400

    def __init__(self, message: str = ""):
        super().__init__(message)
        self.message = message


class ValidationError(DomainError):
    """Raised when input data is invalid or violates domain rules."""


class AlreadyCheckedInError(ValidationError):
    """Raised when a student already has a record for the session's day."""


class NotFoundError(DomainError):
    """Raised when a course, session or student does not exist."""

    code = 404


class AuthenticationError(DomainError):
    """Raised when login credentials are invalid."""

    code = 401


class AuthorizationError(DomainError):
    """Raised when a user lacks permission for an action."""

    code = 403


class InternalError(DomainError):
    """Unexpected failure (store down, corrupted row, ...)."""

    code = 500
