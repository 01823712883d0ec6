"""
Django admin configuration for chat models.

Provides admin interfaces for:
- Conversation management
- Membership viewing
- Message moderation
"""

from django.contrib import admin

from chat.models import (
    Conversation,
    DirectConversationPair,
    Membership,
    Message,
    MessageReaction,
    TypingSignal,
)


class MembershipInline(admin.TabularInline):
    """Inline display of members in conversation admin."""

    model = Membership
    extra = 0
    readonly_fields = ["created_at", "last_seen_message"]
    raw_id_fields = ["user"]


@admin.register(Conversation)
class ConversationAdmin(admin.ModelAdmin):
    """Admin interface for Conversation model."""

    list_display = [
        "id",
        "conversation_type",
        "group_name",
        "owner",
        "is_deleted",
        "created_at",
    ]
    list_filter = ["conversation_type", "is_deleted", "created_at"]
    search_fields = ["group_name", "id"]
    readonly_fields = ["created_at", "updated_at", "deleted_at", "last_message"]
    raw_id_fields = ["owner"]
    inlines = [MembershipInline]
    ordering = ["-created_at"]


@admin.register(DirectConversationPair)
class DirectConversationPairAdmin(admin.ModelAdmin):
    """Admin interface for DirectConversationPair model."""

    list_display = ["conversation", "user_lower", "user_higher"]
    raw_id_fields = ["conversation", "user_lower", "user_higher"]


@admin.register(Membership)
class MembershipAdmin(admin.ModelAdmin):
    """Admin interface for Membership model."""

    list_display = ["id", "conversation", "user", "role", "created_at"]
    list_filter = ["role", "created_at"]
    search_fields = ["user__name", "user__email", "conversation__group_name"]
    readonly_fields = ["created_at", "updated_at"]
    raw_id_fields = ["conversation", "user", "last_seen_message"]
    ordering = ["-created_at"]


@admin.register(Message)
class MessageAdmin(admin.ModelAdmin):
    """Admin interface for Message model."""

    list_display = [
        "id",
        "conversation",
        "sender",
        "content_preview",
        "attachment_kind",
        "is_deleted",
        "created_at",
    ]
    list_filter = ["attachment_kind", "is_deleted", "created_at"]
    search_fields = ["content", "sender__name"]
    readonly_fields = ["created_at", "updated_at", "deleted_at"]
    raw_id_fields = ["conversation", "sender"]
    ordering = ["-created_at"]

    @admin.display(description="Content Preview")
    def content_preview(self, obj: Message) -> str:
        """Return truncated content for list display."""
        max_length = 50
        if len(obj.content) > max_length:
            return obj.content[:max_length] + "..."
        return obj.content


@admin.register(MessageReaction)
class MessageReactionAdmin(admin.ModelAdmin):
    list_display = ["id", "message", "user", "emoji", "created_at"]
    raw_id_fields = ["message", "user"]


@admin.register(TypingSignal)
class TypingSignalAdmin(admin.ModelAdmin):
    list_display = ["conversation", "user", "last_typed_at"]
    raw_id_fields = ["conversation", "user"]
