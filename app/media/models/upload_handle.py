"""
UploadHandle model for out-of-band attachment uploads.

Provides:
- Opaque storage references handed to clients before they upload
- Ownership and expiry checks for the byte upload
- The stored file once the upload completes

Flow:
    1. Client requests a handle (PENDING, expires after UPLOAD_HANDLE_TTL_SECONDS)
    2. Client PUTs the bytes to the handle's upload URL (COMPLETED)
    3. Client passes the storage_ref to the message send command
"""

from __future__ import annotations

import uuid

from django.conf import settings
from django.db import models
from django.utils import timezone

from core.models import BaseModel


def upload_handle_path(instance: UploadHandle, filename: str) -> str:
    """Store attachments under their handle so names never collide."""
    return f"attachments/{instance.owner_id}/{instance.storage_ref}/{filename}"


class UploadHandle(BaseModel):
    """
    A storage reference issued to a user for one attachment upload.

    Attributes:
        storage_ref: Opaque identifier clients pass around (primary key)
        owner: User allowed to upload bytes and to attach the result
        file: Stored file, empty until the upload completes
        original_filename: Filename sent by the client
        content_type: MIME type detected from the uploaded bytes
        size: Stored size in bytes
        status: PENDING until bytes arrive, then COMPLETED
        expires_at: Deadline for the byte upload
        completed_at: When the bytes were stored

    Usage:
        result = BlobStoreService.request_upload_handle(user)
        target = result.data  # UploadTarget(storage_ref, upload_url, expires_at)
    """

    # =========================================================================
    # Enums
    # =========================================================================

    class Status(models.TextChoices):
        """Upload handle status."""

        PENDING = "pending", "Pending"
        COMPLETED = "completed", "Completed"

    # =========================================================================
    # Identity & Ownership
    # =========================================================================

    storage_ref = models.UUIDField(
        primary_key=True,
        default=uuid.uuid4,
        editable=False,
        help_text="Opaque storage reference for this upload",
    )
    owner = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="upload_handles",
        help_text="User who requested the handle",
    )

    # =========================================================================
    # File
    # =========================================================================

    file = models.FileField(
        upload_to=upload_handle_path,
        max_length=500,
        blank=True,
        help_text="Stored file (empty until uploaded)",
    )
    original_filename = models.CharField(
        max_length=255,
        blank=True,
        default="",
        help_text="Filename provided by the client",
    )
    content_type = models.CharField(
        max_length=100,
        blank=True,
        default="",
        help_text="MIME type detected from the uploaded bytes",
    )
    size = models.BigIntegerField(
        default=0,
        help_text="Stored file size in bytes",
    )

    # =========================================================================
    # Status & Expiration
    # =========================================================================

    status = models.CharField(
        max_length=20,
        choices=Status.choices,
        default=Status.PENDING,
        help_text="Current upload status",
    )
    expires_at = models.DateTimeField(
        help_text="When the byte upload window closes",
    )
    completed_at = models.DateTimeField(
        null=True,
        blank=True,
        help_text="When the bytes were stored",
    )

    class Meta:
        db_table = "media_upload_handle"
        ordering = ["-created_at"]
        indexes = [
            models.Index(
                fields=["owner", "status"],
                name="idx_upload_handle_owner_status",
            ),
            models.Index(
                fields=["expires_at"],
                name="idx_upload_handle_expires",
            ),
        ]

    def __str__(self) -> str:
        return f"UploadHandle({self.storage_ref}, {self.status})"

    @property
    def is_expired(self) -> bool:
        """True once the upload window has closed for a pending handle."""
        return self.status == self.Status.PENDING and timezone.now() >= self.expires_at

    @property
    def is_completed(self) -> bool:
        return self.status == self.Status.COMPLETED
