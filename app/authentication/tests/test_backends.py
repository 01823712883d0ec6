"""
Tests for identity token resolution.

Test Organization:
    - TestIdentityJWTAuthentication: DRF authentication class
    - TestResolveUserFromToken: The non-raising variant used by WebSockets
"""

from datetime import timedelta

import pytest
from rest_framework.exceptions import AuthenticationFailed

from authentication.backends import IdentityJWTAuthentication, resolve_user_from_token
from authentication.models import User
from authentication.tests.conftest import bearer_token_for
from authentication.tests.factories import UserFactory
from authentication.tokens import IdentityToken


class TestIdentityJWTAuthentication:
    """Tests for IdentityJWTAuthentication.get_user()."""

    def test_unknown_subject_creates_user(self, db):
        """
        A valid token for a new subject signs the user up.

        Why it matters: There is no registration step besides the first request.
        """
        token = IdentityToken.for_identity("user_first", name="Ada", email="ada@example.com")

        user = IdentityJWTAuthentication().get_user(token)

        assert user.external_id == "user_first"
        assert user.name == "Ada"
        assert User.objects.filter(external_id="user_first").exists()

    def test_inactive_user_is_rejected(self, db):
        """
        Deactivated users cannot authenticate even with a valid token.

        Why it matters: Deactivation is the only way to lock someone out.
        """
        user = UserFactory(is_active=False)
        token = IdentityToken.for_identity(user.external_id)

        with pytest.raises(AuthenticationFailed):
            IdentityJWTAuthentication().get_user(token)


class TestResolveUserFromToken:
    """Tests for resolve_user_from_token()."""

    def test_valid_token_resolves_user(self, db):
        """A signed, unexpired token resolves to its user."""
        user = UserFactory()

        resolved = resolve_user_from_token(bearer_token_for(user))

        assert resolved == user

    def test_garbage_token_returns_none(self, db):
        """
        Malformed tokens resolve to nobody instead of raising.

        Why it matters: The WebSocket middleware maps None to an anonymous
        user and the consumer closes the socket.
        """
        assert resolve_user_from_token("not-a-jwt") is None

    def test_expired_token_returns_none(self, db):
        """Expired tokens are rejected."""
        token = IdentityToken.for_identity("user_expired")
        token.set_exp(lifetime=-timedelta(minutes=1))

        assert resolve_user_from_token(str(token)) is None
        assert not User.objects.filter(external_id="user_expired").exists()

    def test_wrong_token_type_returns_none(self, db):
        """Tokens declaring a different type are rejected."""
        token = IdentityToken.for_identity("user_refresh")
        token["token_type"] = "refresh"

        assert resolve_user_from_token(str(token)) is None

    def test_inactive_user_returns_none(self, db):
        """Deactivated users resolve to nobody."""
        user = UserFactory(is_active=False)

        assert resolve_user_from_token(bearer_token_for(user)) is None
