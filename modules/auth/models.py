"""
Authentication module data models.

Identity is what the rest of the core needs from the sign-in layer: a
stable ID to key the account record on, and the email it was issued for.
"""

from typing import Optional
from pydantic import BaseModel, Field


class JWTPayload(BaseModel):
    """
    Decoded access token payload from Supabase Auth.

    Only the claims the core reads are modelled; the rest are ignored.
    """

    sub: str = Field(..., description="Subject (identity ID)")
    email: Optional[str] = Field(None, description="Identity email")
    exp: int = Field(..., description="Expiration timestamp")
    iat: int = Field(..., description="Issued at timestamp")
    aud: str = Field(default="authenticated", description="Audience")
    role: str = Field(default="authenticated", description="Token role")
    email_confirmed_at: Optional[str] = Field(None, description="Email confirmation time")

    model_config = {"extra": "ignore"}


class Identity(BaseModel):
    """
    The signed-in identity on this device.

    Extracted from the access token and passed to routing; absence of an
    Identity means "not signed in".
    """

    id: str = Field(..., description="Identity ID (UUID from Supabase Auth)")
    email: str = Field(default="", description="Identity email")
    email_verified: bool = Field(default=False, description="Whether email is verified")

    model_config = {"frozen": True}
