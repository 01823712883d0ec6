"""
Tests for authentication API views.

Test Organization:
    - TestMeView: GET /api/v1/auth/me/
    - TestPresenceView: POST /api/v1/auth/me/presence/
    - TestUserViewSet: GET /api/v1/auth/users/ and /users/{id}/
"""

from django.urls import reverse
from rest_framework import status

from authentication.tests.factories import UserFactory


# =============================================================================
# TestMeView
# =============================================================================


class TestMeView:
    """Tests for the current user endpoint."""

    def test_returns_caller_record(self, authenticated_client, user):
        """
        The caller gets their own directory record.

        Why it matters: Clients use it to tell their own messages apart.
        """
        response = authenticated_client.get(reverse("authentication:me"))

        assert response.status_code == status.HTTP_200_OK
        assert response.data["id"] == user.id
        assert response.data["external_id"] == user.external_id
        assert response.data["name"] == "Ada Lovelace"
        assert response.data["is_online"] is False

    def test_first_request_creates_user(self, authenticated_client_factory, db):
        """
        A token for an unknown subject creates the user on first request.

        Why it matters: Sign-up happens at the identity provider only.
        """
        newcomer = UserFactory.build(external_id="user_newcomer", name="New Person")
        client = authenticated_client_factory(newcomer)

        response = client.get(reverse("authentication:me"))

        assert response.status_code == status.HTTP_200_OK
        assert response.data["external_id"] == "user_newcomer"
        assert response.data["name"] == "New Person"

    def test_unauthenticated_returns_401(self, api_client):
        """
        Requests without a token are rejected with UNAUTHENTICATED.

        Why it matters: Every error body carries a machine readable code.
        """
        response = api_client.get(reverse("authentication:me"))

        assert response.status_code == status.HTTP_401_UNAUTHORIZED
        assert response.data["error_code"] == "UNAUTHENTICATED"

    def test_invalid_token_returns_401(self, api_client, db):
        """A malformed bearer token is rejected."""
        api_client.credentials(HTTP_AUTHORIZATION="Bearer not-a-jwt")

        response = api_client.get(reverse("authentication:me"))

        assert response.status_code == status.HTTP_401_UNAUTHORIZED
        assert response.data["error_code"] == "UNAUTHENTICATED"


# =============================================================================
# TestPresenceView
# =============================================================================


class TestPresenceView:
    """Tests for the presence endpoint."""

    def test_sets_online_flag(self, authenticated_client, user):
        """
        Posting is_online updates the stored flag.

        Why it matters: Other users see presence in the directory.
        """
        response = authenticated_client.post(
            reverse("authentication:presence"), {"is_online": True}, format="json"
        )

        user.refresh_from_db()
        assert response.status_code == status.HTTP_200_OK
        assert response.data["is_online"] is True
        assert user.is_online is True

    def test_missing_flag_is_invalid(self, authenticated_client):
        """A body without is_online is rejected with INVALID_ARGUMENT."""
        response = authenticated_client.post(
            reverse("authentication:presence"), {}, format="json"
        )

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.data["error_code"] == "INVALID_ARGUMENT"


# =============================================================================
# TestUserViewSet
# =============================================================================


class TestUserViewSet:
    """Tests for the directory listing and lookup."""

    def test_list_excludes_caller(self, authenticated_client, user, other_user):
        """
        The directory lists other users only.

        Why it matters: A user cannot start a conversation with themselves.
        """
        response = authenticated_client.get(reverse("authentication:user-list"))

        assert response.status_code == status.HTTP_200_OK
        ids = [item["id"] for item in response.data]
        assert ids == [other_user.id]

    def test_list_is_ordered_by_name(self, authenticated_client, user):
        """Users are returned alphabetically."""
        UserFactory(name="Zara")
        UserFactory(name="Bob")

        response = authenticated_client.get(reverse("authentication:user-list"))

        assert [item["name"] for item in response.data] == ["Bob", "Zara"]

    def test_retrieve_returns_user(self, authenticated_client, other_user):
        """A single user can be looked up by id."""
        response = authenticated_client.get(
            reverse("authentication:user-detail", args=[other_user.id])
        )

        assert response.status_code == status.HTTP_200_OK
        assert response.data["name"] == "Grace Hopper"
        assert "external_id" not in response.data

    def test_retrieve_missing_returns_404(self, authenticated_client):
        """
        Unknown ids return NOT_FOUND.

        Why it matters: Clients branch on the error code, not the message.
        """
        response = authenticated_client.get(
            reverse("authentication:user-detail", args=[999999])
        )

        assert response.status_code == status.HTTP_404_NOT_FOUND
        assert response.data["error_code"] == "NOT_FOUND"
