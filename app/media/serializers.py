"""
Serializers for attachment uploads.

Provides:
- UploadTargetSerializer: Response for a new upload handle
- UploadBytesSerializer: Multipart body for the byte upload
- UploadHandleSerializer: Completed upload details
"""

from __future__ import annotations

from rest_framework import serializers

from media.models import UploadHandle
from media.services.blob_store import BlobStoreService


class UploadTargetSerializer(serializers.Serializer):
    """Where to send the bytes for a freshly issued storage reference."""

    storage_ref = serializers.CharField(read_only=True)
    upload_url = serializers.CharField(read_only=True)
    expires_at = serializers.DateTimeField(read_only=True)


class UploadBytesSerializer(serializers.Serializer):
    """Multipart request body for PUT /media/uploads/{storage_ref}/."""

    file = serializers.FileField(
        allow_empty_file=False,
        help_text="Attachment bytes",
    )


class UploadHandleSerializer(serializers.ModelSerializer):
    """Completed upload as returned after the bytes are stored."""

    storage_ref = serializers.CharField(read_only=True)
    url = serializers.SerializerMethodField()

    class Meta:
        model = UploadHandle
        fields = [
            "storage_ref",
            "original_filename",
            "content_type",
            "size",
            "status",
            "completed_at",
            "url",
        ]
        read_only_fields = fields

    def get_url(self, obj) -> str | None:
        return BlobStoreService.resolve_url(str(obj.storage_ref))
