"""
Serializers for directory users.

This module provides DRF serializers for:
- UserSummarySerializer: The compact user shape embedded everywhere
  (conversation participants, message senders, typing users)
- UserSerializer: The caller's own record
- PresenceUpdateSerializer: Presence flag input

Related files:
    - models.py: User
    - views.py: Views that use these serializers
    - media/services/blob_store.py: Avatar reference resolution
"""

from rest_framework import serializers

from authentication.models import User
from media.services.blob_store import BlobStoreService


class UserSummarySerializer(serializers.ModelSerializer):
    """
    Compact user representation.

    avatar_url is resolved at read time; the stored avatar_ref may be an
    absolute provider URL or a blob store reference.
    """

    avatar_url = serializers.SerializerMethodField()

    class Meta:
        model = User
        fields = ["id", "name", "email", "avatar_url", "is_online"]
        read_only_fields = fields

    def get_avatar_url(self, obj) -> str | None:
        return BlobStoreService.resolve_url(obj.avatar_ref)


class UserSerializer(UserSummarySerializer):
    """Serializer for the caller's own record (GET /auth/me/)."""

    class Meta(UserSummarySerializer.Meta):
        fields = [*UserSummarySerializer.Meta.fields, "external_id", "date_joined"]
        read_only_fields = fields


class PresenceUpdateSerializer(serializers.Serializer):
    """Request body for POST /auth/me/presence/."""

    is_online = serializers.BooleanField(
        help_text="Whether the client is currently visible and connected",
    )
