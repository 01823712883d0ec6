"""
Test configuration and fixtures for authentication tests.

This module provides:
- Reusable user fixtures
- API client helpers for authenticated requests
- Identity token minting

Usage:
    def test_example(user, authenticated_client):
        response = authenticated_client.get('/api/v1/auth/me/')
        assert response.status_code == 200
"""

import pytest
from rest_framework.test import APIClient

from authentication.tests.factories import UserFactory
from authentication.tokens import IdentityToken


def bearer_token_for(user) -> str:
    """Mint an identity token carrying the user's current profile claims."""
    return str(
        IdentityToken.for_identity(
            user.external_id,
            name=user.name,
            email=user.email,
            picture=user.avatar_ref,
        )
    )


# =============================================================================
# User Fixtures
# =============================================================================


@pytest.fixture
def user(db):
    """Create a basic active user."""
    return UserFactory(name="Ada Lovelace")


@pytest.fixture
def other_user(db):
    """Create a second user."""
    return UserFactory(name="Grace Hopper")


@pytest.fixture
def deactivated_user(db):
    """Create a deactivated user (is_active=False)."""
    return UserFactory(is_active=False)


# =============================================================================
# API Client Fixtures
# =============================================================================


@pytest.fixture
def api_client():
    """Return an unauthenticated API client."""
    return APIClient()


@pytest.fixture
def authenticated_client_factory(db):
    """
    Build API clients authenticated as a given user.

    The client sends a real identity token, so requests go through
    IdentityJWTAuthentication like production traffic.
    """

    def make(user):
        client = APIClient()
        client.credentials(HTTP_AUTHORIZATION=f"Bearer {bearer_token_for(user)}")
        return client

    return make


@pytest.fixture
def authenticated_client(authenticated_client_factory, user):
    """Return an API client authenticated as `user`."""
    return authenticated_client_factory(user)
