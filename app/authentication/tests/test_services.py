"""
Tests for authentication services.

Test Organization:
    - TestIdentityServiceUpsert: First sight creation and claim refresh
    - TestUserDirectoryService: Lookups, listing and presence

Testing Philosophy:
    Tests focus on observable behavior:
    - ServiceResult success/failure states
    - Error codes for specific failure modes
    - Database state changes
"""

from authentication.models import User
from authentication.services import IdentityService, UserDirectoryService
from authentication.tests.factories import UserFactory
from core.exceptions import ErrorCode


# =============================================================================
# TestIdentityServiceUpsert
# =============================================================================


class TestIdentityServiceUpsert:
    """
    Tests for IdentityService.upsert_from_provider().

    Verifies:
    - First sight creates an offline user from the claims
    - Later sights refresh changed claims only
    - Missing subjects are rejected
    """

    def test_first_sight_creates_user_from_claims(self, db):
        """
        An unknown subject creates a user with the token's profile.

        Why it matters: This is the "first sign-in" event; there is no
        separate registration endpoint.
        """
        result = IdentityService.upsert_from_provider(
            "user_new",
            name="Ada",
            email="ada@example.com",
            avatar_ref="https://img.example.com/ada.png",
        )

        assert result.success is True
        user = result.data
        assert user.external_id == "user_new"
        assert user.name == "Ada"
        assert user.email == "ada@example.com"
        assert user.avatar_ref == "https://img.example.com/ada.png"
        assert user.is_online is False

    def test_second_sight_returns_same_user(self, db):
        """
        The same subject always maps to the same user.

        Why it matters: Duplicate users would split a person's conversations.
        """
        first = IdentityService.upsert_from_provider("user_same", name="Ada").data
        second = IdentityService.upsert_from_provider("user_same", name="Ada").data

        assert first.pk == second.pk
        assert User.objects.filter(external_id="user_same").count() == 1

    def test_changed_claims_are_refreshed(self, db):
        """
        A new name from the provider overwrites the stored one.

        Why it matters: The provider owns the profile.
        """
        user = UserFactory(external_id="user_rename", name="Old Name")

        result = IdentityService.upsert_from_provider("user_rename", name="New Name")

        user.refresh_from_db()
        assert result.success is True
        assert user.name == "New Name"

    def test_empty_claims_do_not_erase_stored_values(self, db):
        """
        Claims the provider left out keep their stored value.

        Why it matters: Providers omit claims the user never filled in.
        """
        user = UserFactory(external_id="user_keep", name="Ada", email="ada@example.com")

        IdentityService.upsert_from_provider("user_keep")

        user.refresh_from_db()
        assert user.name == "Ada"
        assert user.email == "ada@example.com"

    def test_refresh_does_not_touch_presence(self, db):
        """
        Signing in again does not change the online flag.

        Why it matters: Presence comes only from explicit client signals.
        """
        user = UserFactory(external_id="user_online", is_online=True)

        IdentityService.upsert_from_provider("user_online", name="Renamed")

        user.refresh_from_db()
        assert user.is_online is True

    def test_blank_subject_is_unauthenticated(self, db):
        """
        A token without a subject identifies nobody.

        Why it matters: Every operation needs a resolvable caller.
        """
        result = IdentityService.upsert_from_provider("   ")

        assert result.success is False
        assert result.error_code == ErrorCode.UNAUTHENTICATED
        assert User.objects.count() == 0


# =============================================================================
# TestUserDirectoryService
# =============================================================================


class TestUserDirectoryService:
    """Tests for UserDirectoryService."""

    def test_list_users_excludes_caller_and_orders_by_name(self, db):
        """
        The directory lists everyone but the caller, alphabetically.

        Why it matters: The caller picks conversation partners from it.
        """
        caller = UserFactory(name="Mia")
        UserFactory(name="Zoe")
        UserFactory(name="Ben")

        names = [u.name for u in UserDirectoryService.list_users(caller)]

        assert names == ["Ben", "Zoe"]

    def test_list_users_excludes_inactive_users(self, db):
        """
        Deactivated users are hidden.

        Why it matters: They cannot be messaged.
        """
        caller = UserFactory()
        UserFactory(is_active=False)

        assert list(UserDirectoryService.list_users(caller)) == []

    def test_get_user_returns_user(self, db):
        """Looking up an existing user succeeds."""
        caller = UserFactory()
        other = UserFactory()

        result = UserDirectoryService.get_user(caller, other.id)

        assert result.success is True
        assert result.data == other

    def test_get_user_missing_is_not_found(self, db):
        """
        Unknown ids report NOT_FOUND.

        Why it matters: Clients show "user not found" rather than an error.
        """
        caller = UserFactory()

        result = UserDirectoryService.get_user(caller, 999999)

        assert result.success is False
        assert result.error_code == ErrorCode.NOT_FOUND

    def test_get_me_returns_fresh_record(self, db):
        """get_me re-reads the caller from the database."""
        caller = UserFactory(name="Before")
        User.objects.filter(pk=caller.pk).update(name="After")

        result = UserDirectoryService.get_me(caller)

        assert result.data.name == "After"

    def test_update_online_status_sets_flag(self, db):
        """
        Presence flips to exactly the value the client sent.

        Why it matters: Other users see this flag next to the name.
        """
        caller = UserFactory(is_online=False)

        result = UserDirectoryService.update_online_status(caller, True)

        caller.refresh_from_db()
        assert result.success is True
        assert caller.is_online is True

        UserDirectoryService.update_online_status(caller, False)
        caller.refresh_from_db()
        assert caller.is_online is False
