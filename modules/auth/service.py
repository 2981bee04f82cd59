"""
Authentication service implementation.

Validates Supabase access tokens locally with the project's JWT secret,
so routing works without a round trip to the auth server.
"""

import logging
from typing import Optional
import jwt

from shared.config import get_settings

from .interfaces import IAuthService
from .models import Identity, JWTPayload
from .exceptions import (
    InvalidTokenError,
    ExpiredTokenError,
    MissingTokenError,
)

logger = logging.getLogger(__name__)


class AuthService(IAuthService):
    """
    Implementation of the authentication service.

    Uses the Supabase JWT secret (HS256, audience "authenticated").
    """

    def __init__(self, jwt_secret: Optional[str] = None):
        self._jwt_secret = jwt_secret if jwt_secret is not None else get_settings().supabase_jwt_secret

    async def validate_token(self, token: str) -> Identity:
        """Decode and verify the token."""
        if not token:
            raise MissingTokenError()

        try:
            payload = jwt.decode(
                token,
                self._jwt_secret,
                algorithms=["HS256"],
                audience="authenticated",
            )
        except jwt.ExpiredSignatureError:
            raise ExpiredTokenError()
        except jwt.InvalidTokenError as e:
            raise InvalidTokenError(str(e))

        jwt_payload = JWTPayload(**payload)

        return Identity(
            id=jwt_payload.sub,
            email=jwt_payload.email or "",
            email_verified=jwt_payload.email_confirmed_at is not None,
        )

    async def get_identity(self, token: Optional[str]) -> Optional[Identity]:
        """Resolve a token, treating any authentication failure as signed out."""
        if not token:
            return None
        try:
            return await self.validate_token(token)
        except (MissingTokenError, ExpiredTokenError, InvalidTokenError) as e:
            logger.info(f"No authenticated identity: {e.code}")
            return None


# Module-level instance getter
_service_instance: Optional[AuthService] = None


def get_auth_service() -> AuthService:
    """Get the auth service singleton."""
    global _service_instance
    if _service_instance is None:
        _service_instance = AuthService()
    return _service_instance


def reset_auth_service() -> None:
    """Reset the auth service singleton (for testing)."""
    global _service_instance
    _service_instance = None
