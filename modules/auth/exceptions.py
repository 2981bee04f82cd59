"""
Authentication module exceptions.

Routing treats every one of these as "no authenticated identity".
"""

from shared.exceptions import AuthenticationError


class InvalidTokenError(AuthenticationError):
    """Raised when an access token is invalid or malformed."""

    def __init__(self, message: str = "Invalid authentication token"):
        super().__init__(message, code="INVALID_TOKEN")


class ExpiredTokenError(AuthenticationError):
    """Raised when an access token has expired."""

    def __init__(self, message: str = "Authentication token has expired"):
        super().__init__(message, code="TOKEN_EXPIRED")


class MissingTokenError(AuthenticationError):
    """Raised when no access token is available."""

    def __init__(self, message: str = "Authentication required"):
        super().__init__(message, code="MISSING_TOKEN")
