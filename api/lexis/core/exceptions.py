"""
Custom exceptions for the application.
"""


class LexisException(Exception):
    """Base exception for all Lexis application exceptions."""
    pass


class ValidationError(LexisException):
    """Raised when a business rule is violated (unfinished items, incomplete package, ...)."""
    pass


class NotFoundError(LexisException):
    """Raised when a requested resource is not found."""
    pass


class ConflictError(LexisException):
    """Raised when there's a conflict (e.g., duplicate entry)."""
    pass


class AuthorizationError(LexisException):
    """Raised when the caller does not own the referenced resource."""
    pass


class UpstreamError(LexisException):
    """Raised when the AI generator fails or question generation exhausts its retries."""
    pass


class InsufficientDataError(LexisException):
    """Raised when the word catalog cannot satisfy a request (e.g., no words for a level)."""
    pass
