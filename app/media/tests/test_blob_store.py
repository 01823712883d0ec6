"""
Tests for BlobStoreService.

Test Organization:
    - TestRequestUploadHandle: Issuing storage references
    - TestStore: Receiving bytes
    - TestValidateAttachment: Checks done before a message send
    - TestResolveUrls: Read-time URL resolution
"""

import uuid
from unittest.mock import patch

from django.core.files.uploadedfile import SimpleUploadedFile

from core.exceptions import ErrorCode
from media.models import UploadHandle
from media.services.blob_store import BlobStoreService
from media.tests.samples import PDF_BYTES


# =============================================================================
# TestRequestUploadHandle
# =============================================================================


class TestRequestUploadHandle:
    """Tests for BlobStoreService.request_upload_handle()."""

    def test_issues_pending_handle_owned_by_caller(self, user):
        """
        A new handle is pending and belongs to the caller.

        Why it matters: Only the owner may upload bytes or attach the file.
        """
        result = BlobStoreService.request_upload_handle(user)

        assert result.success is True
        target = result.data
        handle = UploadHandle.objects.get(storage_ref=target.storage_ref)
        assert handle.owner == user
        assert handle.status == UploadHandle.Status.PENDING
        assert target.upload_url.endswith(f"/uploads/{target.storage_ref}/")
        assert target.expires_at == handle.expires_at

    def test_each_request_gets_a_new_reference(self, user):
        """Storage references are never reused."""
        first = BlobStoreService.request_upload_handle(user).data
        second = BlobStoreService.request_upload_handle(user).data

        assert first.storage_ref != second.storage_ref


# =============================================================================
# TestStore
# =============================================================================


class TestStore:
    """Tests for BlobStoreService.store()."""

    def test_stores_bytes_and_completes_handle(self, user, pending_handle, sample_png):
        """
        Storing bytes completes the handle with the file's metadata.

        Why it matters: Only completed handles can be attached to messages.
        """
        result = BlobStoreService.store(user, str(pending_handle.storage_ref), sample_png)

        assert result.success is True
        handle = result.data
        assert handle.status == UploadHandle.Status.COMPLETED
        assert handle.original_filename == "photo.png"
        assert handle.content_type == "image/png"
        assert handle.size == sample_png.size
        assert handle.completed_at is not None
        assert handle.file.name.endswith("photo.png")

    def test_foreign_handle_is_not_found(self, other_user, pending_handle, sample_png):
        """
        Another user's handle looks like it does not exist.

        Why it matters: Handle ids must not leak between users.
        """
        result = BlobStoreService.store(other_user, str(pending_handle.storage_ref), sample_png)

        assert result.success is False
        assert result.error_code == ErrorCode.NOT_FOUND

    def test_malformed_reference_is_not_found(self, user, sample_png):
        result = BlobStoreService.store(user, "not-a-uuid", sample_png)

        assert result.error_code == ErrorCode.NOT_FOUND

    def test_expired_handle_is_conflict(self, user, expired_handle, sample_png):
        """Uploads after the window closes are refused."""
        result = BlobStoreService.store(user, str(expired_handle.storage_ref), sample_png)

        assert result.success is False
        assert result.error_code == ErrorCode.CONFLICT

    def test_completed_handle_is_conflict(self, user, completed_handle, sample_pdf):
        """
        A handle accepts bytes once.

        Why it matters: Replacing bytes would change already-sent messages.
        """
        result = BlobStoreService.store(user, str(completed_handle.storage_ref), sample_pdf)

        assert result.success is False
        assert result.error_code == ErrorCode.CONFLICT

    def test_oversized_file_is_invalid(self, user, pending_handle, settings):
        settings.UPLOAD_MAX_BYTES = 10
        big = SimpleUploadedFile("big.bin", b"x" * 11, content_type="application/octet-stream")

        result = BlobStoreService.store(user, str(pending_handle.storage_ref), big)

        assert result.error_code == ErrorCode.INVALID_ARGUMENT
        pending_handle.refresh_from_db()
        assert pending_handle.status == UploadHandle.Status.PENDING

    def test_empty_file_is_invalid(self, user, pending_handle):
        empty = SimpleUploadedFile("empty.txt", b"", content_type="text/plain")

        result = BlobStoreService.store(user, str(pending_handle.storage_ref), empty)

        assert result.error_code == ErrorCode.INVALID_ARGUMENT

    def test_content_type_comes_from_bytes(self, user, pending_handle):
        """
        The declared type is ignored in favor of the detected one.

        Why it matters: The attachment kind shown in chat is derived from
        this type, so a client must not be able to relabel a file.
        """
        disguised = SimpleUploadedFile("invoice.png", PDF_BYTES, content_type="image/png")

        handle = BlobStoreService.store(user, str(pending_handle.storage_ref), disguised).data

        assert handle.content_type == "application/pdf"

    def test_undetectable_content_falls_back_to_extension(self, user, pending_handle):
        upload = SimpleUploadedFile("notes.csv", b"a,b\n1,2\n", content_type="image/png")

        with patch.object(BlobStoreService, "_sniff_content_type", return_value=None):
            handle = BlobStoreService.store(user, str(pending_handle.storage_ref), upload).data

        assert handle.content_type == "text/csv"

    def test_unknown_content_and_extension_is_octet_stream(self, user, pending_handle):
        upload = SimpleUploadedFile("blob", b"\x01\x02\x03", content_type="image/png")

        with patch.object(BlobStoreService, "_sniff_content_type", return_value=None):
            handle = BlobStoreService.store(user, str(pending_handle.storage_ref), upload).data

        assert handle.content_type == "application/octet-stream"

    def test_storage_failure_leaves_handle_pending(self, user, pending_handle, sample_png):
        with patch(
            "django.core.files.storage.FileSystemStorage.save",
            side_effect=OSError("disk full"),
        ):
            result = BlobStoreService.store(user, str(pending_handle.storage_ref), sample_png)

        assert result.success is False
        assert result.error_code == "OSERROR"
        pending_handle.refresh_from_db()
        assert pending_handle.status == UploadHandle.Status.PENDING


# =============================================================================
# TestValidateAttachment
# =============================================================================


class TestValidateAttachment:
    """Tests for BlobStoreService.validate_attachment()."""

    def test_completed_own_handle_is_valid(self, user, completed_handle):
        result = BlobStoreService.validate_attachment(user, str(completed_handle.storage_ref))

        assert result.success is True
        assert result.data == completed_handle

    def test_pending_handle_is_invalid(self, user, pending_handle):
        """
        A reference without bytes cannot be attached.

        Why it matters: Messages would render a broken attachment.
        """
        result = BlobStoreService.validate_attachment(user, str(pending_handle.storage_ref))

        assert result.error_code == ErrorCode.INVALID_ARGUMENT

    def test_foreign_handle_is_invalid(self, other_user, completed_handle):
        result = BlobStoreService.validate_attachment(
            other_user, str(completed_handle.storage_ref)
        )

        assert result.error_code == ErrorCode.INVALID_ARGUMENT

    def test_unknown_reference_is_invalid(self, user):
        result = BlobStoreService.validate_attachment(user, str(uuid.uuid4()))

        assert result.error_code == ErrorCode.INVALID_ARGUMENT


# =============================================================================
# TestResolveUrls
# =============================================================================


class TestResolveUrls:
    """Tests for resolve_url() and resolve_urls()."""

    def test_completed_reference_resolves_to_file_url(self, completed_handle, settings):
        url = BlobStoreService.resolve_url(str(completed_handle.storage_ref))

        assert url == completed_handle.file.url
        assert url.startswith(settings.MEDIA_URL)

    def test_absolute_urls_pass_through(self, db):
        """
        Provider avatar URLs are returned unchanged.

        Why it matters: avatar_ref may hold either kind of value.
        """
        url = "https://img.example.com/ada.png"

        assert BlobStoreService.resolve_url(url) == url

    def test_empty_and_unknown_references_resolve_to_none(self, pending_handle):
        assert BlobStoreService.resolve_url("") is None
        assert BlobStoreService.resolve_url(None) is None
        assert BlobStoreService.resolve_url("garbage") is None
        assert BlobStoreService.resolve_url(str(pending_handle.storage_ref)) is None

    def test_resolve_urls_maps_each_reference(self, completed_handle, pending_handle):
        done = str(completed_handle.storage_ref)
        pending = str(pending_handle.storage_ref)

        resolved = BlobStoreService.resolve_urls([done, pending, done, "", None])

        assert resolved == {done: completed_handle.file.url, pending: None}
