"""
Authentication module.

Turns a Supabase access token into the Identity that routing keys the
account lookup on.

Public API:
- IAuthService: Interface for identity operations
- Identity: The signed-in identity
- JWTPayload: Decoded token claims
- Auth exceptions: InvalidTokenError, ExpiredTokenError, MissingTokenError
"""

from .interfaces import IAuthService
from .models import Identity, JWTPayload
from .exceptions import (
    InvalidTokenError,
    ExpiredTokenError,
    MissingTokenError,
)

__all__ = [
    # Interface
    "IAuthService",
    # Models
    "Identity",
    "JWTPayload",
    # Exceptions
    "InvalidTokenError",
    "ExpiredTokenError",
    "MissingTokenError",
]
