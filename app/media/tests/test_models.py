"""Tests for UploadHandle."""

from datetime import timedelta

from django.utils import timezone
from freezegun import freeze_time

from media.models import UploadHandle


class TestUploadHandleState:
    """Tests for the is_expired / is_completed properties."""

    def test_fresh_handle_is_pending(self, pending_handle):
        """A new handle is pending and not expired."""
        assert pending_handle.status == UploadHandle.Status.PENDING
        assert pending_handle.is_expired is False
        assert pending_handle.is_completed is False

    def test_handle_expires_at_deadline(self, user):
        """
        The handle is expired from expires_at onwards.

        Why it matters: Late uploads must be refused.
        """
        with freeze_time("2026-01-01 12:00:00"):
            handle = UploadHandle.objects.create(
                owner=user,
                expires_at=timezone.now() + timedelta(minutes=5),
            )

        with freeze_time("2026-01-01 12:04:59"):
            assert handle.is_expired is False
        with freeze_time("2026-01-01 12:05:00"):
            assert handle.is_expired is True

    def test_completed_handle_never_expires(self, completed_handle):
        """
        Completed handles stay valid after the upload window.

        Why it matters: Messages keep referencing them forever.
        """
        with freeze_time(completed_handle.expires_at + timedelta(days=30)):
            assert completed_handle.is_completed is True
            assert completed_handle.is_expired is False

    def test_str_includes_ref_and_status(self, pending_handle):
        assert str(pending_handle.storage_ref) in str(pending_handle)
        assert "pending" in str(pending_handle)
