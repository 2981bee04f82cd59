import pytest
from pydantic import ValidationError

from modules.auth.models import Identity, JWTPayload


class TestJWTPayload:
    def test_ignores_unknown_claims(self):
        """Unmodelled claims should be dropped."""
        payload = JWTPayload(sub="u1", exp=2, iat=1, session_id="abc")
        assert payload.sub == "u1"
        assert not hasattr(payload, "session_id")

    def test_defaults(self):
        """Audience and role default to authenticated."""
        payload = JWTPayload(sub="u1", exp=2, iat=1)
        assert payload.aud == "authenticated"
        assert payload.role == "authenticated"
        assert payload.email is None


class TestIdentity:
    def test_is_frozen(self):
        """Identity should be immutable."""
        identity = Identity(id="u1", email="a@b.c")
        with pytest.raises(ValidationError):
            identity.id = "u2"

    def test_email_optional(self):
        """Email defaults to empty string."""
        assert Identity(id="u1").email == ""
