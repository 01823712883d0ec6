"""
Serializers for chat API.

This module provides serializers for the chat system:
- Conversation serializers (summary, create, update)
- Membership serializers (read, add, manage)
- Message serializers (read, create, preview)
- Reaction, typing and shared media serializers

Serializer Hierarchy:
    ConversationSummarySerializer: One conversation as the caller sees it
    DirectConversationCreateSerializer: Open a DM with one user
    GroupCreateSerializer: Group creation
    GroupDetailsUpdateSerializer: Partial group name/avatar update

    MemberSerializer: Membership with user info
    AddMembersSerializer: Add users to a group
    ManageMemberSerializer: Remove / promote / demote

    MessageSerializer: Message enriched for the caller
    MessageCreateSerializer: Send new message
    MessagePreviewSerializer: Minimal message for list preview

Design Decisions:
    - Read and write serializers are separate for clarity
    - Read serializers render the service layer's read models, not raw rows
    - Soft-deleted message content is never rendered; previews show a
      placeholder
    - Attachment and avatar URLs are resolved at read time
"""

from __future__ import annotations

from rest_framework import serializers

from authentication.serializers import UserSummarySerializer
from chat.authorization import MemberAction
from chat.constants import ATTACHMENT_CONFIG, GROUP_CONFIG, MESSAGE_CONFIG
from chat.models import ConversationType, Membership, MembershipRole, Message
from chat.updates import GroupDetailsUpdate
from media.services import BlobStoreService


# =============================================================================
# Message Serializers
# =============================================================================


class MessagePreviewSerializer(serializers.ModelSerializer):
    """
    Minimal message serializer for conversation list preview.

    Used to show the last message in conversation lists.
    Handles soft-deleted message content replacement.
    """

    content = serializers.SerializerMethodField(
        help_text="Preview text (placeholder if deleted)"
    )

    class Meta:
        model = Message
        fields = [
            "id",
            "sender_id",
            "content",
            "attachment_kind",
            "is_deleted",
            "created_at",
        ]
        read_only_fields = fields

    def get_content(self, obj: Message) -> str:
        """
        Get preview content.

        - Deleted messages: placeholder text
        - Otherwise: content truncated to PREVIEW_LENGTH characters
        """
        if obj.is_deleted:
            return MESSAGE_CONFIG.DELETED_PLACEHOLDER
        content = obj.content
        if len(content) > MESSAGE_CONFIG.PREVIEW_LENGTH:
            return content[: MESSAGE_CONFIG.PREVIEW_LENGTH - 3] + "..."
        return content


class MessageSerializer(serializers.Serializer):
    """
    Message as shown in a conversation's message list.

    Renders chat.services.MessageView. Deleted messages keep their place in
    the list but render empty content and no attachment.
    """

    id = serializers.IntegerField(source="message.id")
    conversation_id = serializers.IntegerField(source="message.conversation_id")
    sender = UserSummarySerializer()
    content = serializers.CharField(source="message.display_content")
    attachment_kind = serializers.SerializerMethodField()
    attachment_url = serializers.CharField(allow_null=True)
    is_deleted = serializers.BooleanField(source="message.is_deleted")
    created_at = serializers.DateTimeField(source="message.created_at")
    reaction_counts = serializers.DictField(
        source="reactions.counts",
        child=serializers.IntegerField(),
        help_text="Emoji to number of users who reacted with it",
    )
    my_reactions = serializers.ListField(
        source="reactions.mine",
        child=serializers.CharField(),
        help_text="Emoji the caller reacted with",
    )
    is_me = serializers.BooleanField(help_text="Whether the caller sent this message")

    def get_attachment_kind(self, obj) -> str | None:
        message = obj.message
        if message.is_deleted or not message.attachment_kind:
            return None
        return message.attachment_kind


class MessageCreateSerializer(serializers.Serializer):
    """
    Serializer for sending a new message.

    Content may be empty when an attachment is provided; the service
    enforces that rule.
    """

    content = serializers.CharField(
        required=False,
        allow_blank=True,
        default="",
        max_length=MESSAGE_CONFIG.MAX_CONTENT_LENGTH,
        help_text="Message text",
    )
    attachment_ref = serializers.CharField(
        required=False,
        allow_blank=True,
        default="",
        help_text="Storage reference of a completed upload",
    )
    attachment_kind = serializers.ChoiceField(
        choices=ATTACHMENT_CONFIG.KINDS,
        required=False,
        allow_blank=True,
        default="",
        help_text="Rendering hint; derived from the upload when omitted",
    )


# =============================================================================
# Conversation Serializers
# =============================================================================


class ConversationSummarySerializer(serializers.Serializer):
    """
    Conversation for list and detail views.

    Renders chat.services.ConversationSummary: the conversation, the other
    participants, the last message preview and the caller's unread count
    and role.
    """

    id = serializers.IntegerField(source="conversation.id")
    conversation_type = serializers.ChoiceField(
        source="conversation.conversation_type",
        choices=ConversationType.choices,
    )
    is_group = serializers.BooleanField(source="conversation.is_group")
    group_name = serializers.CharField(source="conversation.group_name")
    group_avatar_url = serializers.SerializerMethodField()
    owner_id = serializers.IntegerField(source="conversation.owner_id", allow_null=True)
    is_deleted = serializers.BooleanField(source="conversation.is_deleted")
    created_at = serializers.DateTimeField(source="conversation.created_at")
    participants = UserSummarySerializer(many=True)
    last_message = MessagePreviewSerializer(allow_null=True)
    unread_count = serializers.IntegerField()
    user_role = serializers.ChoiceField(choices=MembershipRole.choices)

    def get_group_avatar_url(self, obj) -> str | None:
        return BlobStoreService.resolve_url(obj.conversation.group_avatar_ref)


class DirectConversationCreateSerializer(serializers.Serializer):
    """Request body for opening a direct conversation."""

    user_id = serializers.IntegerField(help_text="The other participant")


class GroupCreateSerializer(serializers.Serializer):
    """
    Request body for creating a group.

    Blank names and empty member lists reach the service, which reports
    them as INVALID_ARGUMENT with its own messages.
    """

    group_name = serializers.CharField(
        allow_blank=True,
        max_length=GROUP_CONFIG.MAX_NAME_LENGTH,
    )
    member_ids = serializers.ListField(
        child=serializers.IntegerField(),
        allow_empty=True,
        help_text="Users to add besides the creator",
    )
    group_avatar_ref = serializers.CharField(
        required=False,
        allow_blank=True,
        default="",
    )


class GroupDetailsUpdateSerializer(serializers.Serializer):
    """
    Partial update of group details.

    Omitted fields keep their current values. An empty group_avatar_ref
    clears the avatar.
    """

    group_name = serializers.CharField(required=False, allow_blank=True)
    group_avatar_ref = serializers.CharField(required=False, allow_blank=True)

    def to_update(self) -> GroupDetailsUpdate:
        return GroupDetailsUpdate(
            group_name=self.validated_data.get("group_name"),
            group_avatar_ref=self.validated_data.get("group_avatar_ref"),
        )


class ReadStateSerializer(serializers.Serializer):
    """Caller's read position after mark read."""

    conversation_id = serializers.IntegerField()
    last_seen_message_id = serializers.IntegerField(allow_null=True)
    unread_count = serializers.IntegerField()


# =============================================================================
# Membership Serializers
# =============================================================================


class MemberSerializer(serializers.ModelSerializer):
    """Member of a conversation with user info."""

    user = UserSummarySerializer(read_only=True)
    joined_at = serializers.DateTimeField(source="created_at", read_only=True)

    class Meta:
        model = Membership
        fields = ["user", "role", "joined_at"]
        read_only_fields = fields


class AddMembersSerializer(serializers.Serializer):
    """Request body for adding users to a group."""

    user_ids = serializers.ListField(
        child=serializers.IntegerField(),
        allow_empty=True,
    )


class ManageMemberSerializer(serializers.Serializer):
    """Request body for acting on another member."""

    action = serializers.ChoiceField(choices=MemberAction.choices)


# =============================================================================
# Reaction, Typing and Media Serializers
# =============================================================================


class ReactionToggleSerializer(serializers.Serializer):
    """Request body for toggling a reaction."""

    emoji = serializers.CharField(help_text="One of the supported reaction emoji")


class ReactionToggleResultSerializer(serializers.Serializer):
    """Renders chat.services.ReactionToggleResult."""

    message_id = serializers.IntegerField()
    emoji = serializers.CharField()
    added = serializers.BooleanField(help_text="False when the reaction was removed")
    reaction_counts = serializers.DictField(
        source="reactions.counts",
        child=serializers.IntegerField(),
    )
    my_reactions = serializers.ListField(
        source="reactions.mine",
        child=serializers.CharField(),
    )


class TypingUsersSerializer(serializers.Serializer):
    """Users currently typing in a conversation."""

    users = UserSummarySerializer(many=True)


class SharedMediaSerializer(serializers.Serializer):
    """Renders chat.services.SharedMediaItem."""

    message_id = serializers.IntegerField()
    sender_id = serializers.IntegerField()
    attachment_ref = serializers.CharField()
    attachment_kind = serializers.CharField()
    url = serializers.CharField(allow_null=True)
    created_at = serializers.DateTimeField()


class SharedMediaCountSerializer(serializers.Serializer):
    count = serializers.IntegerField()
