"""
Base exception classes for the fortress core.

Each module defines its own exceptions that inherit from these bases.
Every error carries a stable ``code`` so callers can branch on it and
so log lines stay greppable.
"""

from typing import Optional, Any


class FortressError(Exception):
    """
    Base exception for all fortress errors.

    All custom exceptions should inherit from this class.
    """

    def __init__(
        self,
        message: str,
        code: Optional[str] = None,
        details: Optional[dict[str, Any]] = None,
    ):
        super().__init__(message)
        self.message = message
        self.code = code or self.__class__.__name__
        self.details = details or {}

    def to_dict(self) -> dict[str, Any]:
        """Convert exception to a plain dictionary (logs, CLI output)."""
        return {
            "error": self.code,
            "message": self.message,
            "details": self.details,
        }


class NotFoundError(FortressError):
    """Resource not found."""

    pass


class ValidationError(FortressError):
    """Input or model invariant validation failed."""

    pass


class AuthenticationError(FortressError):
    """Authentication failed (invalid or missing credentials)."""

    pass


class AuthorizationError(FortressError):
    """The device or user lacks the authority for an operation."""

    pass


class StorageError(FortressError):
    """A durable store (local or remote) could not be read or written."""

    def __init__(
        self,
        message: str,
        store: str,
        code: Optional[str] = None,
        details: Optional[dict[str, Any]] = None,
    ):
        super().__init__(message, code or "STORAGE_FAILURE", details)
        self.store = store
        self.details["store"] = store


class ExternalServiceError(FortressError):
    """Error communicating with an external service."""

    def __init__(
        self,
        message: str,
        service: str,
        code: Optional[str] = None,
        details: Optional[dict[str, Any]] = None,
    ):
        super().__init__(message, code, details)
        self.service = service
        self.details["service"] = service
