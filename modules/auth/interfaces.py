"""
Authentication module interface.

Other modules depend on IAuthService, not the concrete implementation.
"""

from typing import Protocol, Optional, runtime_checkable

from .models import Identity


@runtime_checkable
class IAuthService(Protocol):
    """
    Interface for identity operations.

    The sign-in flow itself belongs to the platform; the core only turns
    the resulting access token into an Identity.
    """

    async def validate_token(self, token: str) -> Identity:
        """
        Validate an access token and return the identity it was issued for.

        Args:
            token: JWT access token from Supabase Auth

        Returns:
            Identity with ID and email

        Raises:
            AuthenticationError: If token is missing, invalid or expired
        """
        ...

    async def get_identity(self, token: Optional[str]) -> Optional[Identity]:
        """
        Resolve a possibly missing token to an identity.

        Args:
            token: Access token, or None when signed out

        Returns:
            Identity if the token is valid, None otherwise
        """
        ...
