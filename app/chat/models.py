"""
Chat system models.

This module defines the data models for the chat system supporting:
- Direct (1:1) conversations between exactly two users
- Group conversations with role-based membership

Models:
    Conversation: Container for messages between participants
    DirectConversationPair: Canonical user pair enforcing one DM per pair
    Membership: A user's place in a conversation (role and read position)
    Message: Individual message within a conversation
    MessageReaction: One user's emoji on one message
    TypingSignal: Ephemeral "is typing" timestamp per (conversation, user)

Design Decisions:
    - The participant set of a conversation is its Membership rows
    - Group conversations use a three-tier role hierarchy: owner > admin > member
    - Deleting a group is a terminal soft delete; messages are kept
    - Messages are soft deleted so they keep counting for ordering and unread
      math; their content is hidden in every API response
    - Unread counts, reaction aggregates and typing liveness are derived on
      read, never stored
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from django.conf import settings
from django.db import models
from django.db.models import F, Q

from chat.constants import GROUP_CONFIG, MESSAGE_CONFIG, REACTION_CONFIG
from core.managers import SoftDeleteQuerySet
from core.model_mixins import SoftDeleteMixin
from core.models import BaseModel

if TYPE_CHECKING:
    from authentication.models import User


class ConversationType(models.TextChoices):
    """
    Type of conversation.

    DIRECT: Exactly two participants, no name, no meaningful roles
    GROUP: Named, role-based membership with a single owner
    """

    DIRECT = "direct", "Direct Message"
    GROUP = "group", "Group"


class MembershipRole(models.TextChoices):
    """
    Role within a conversation.

    Hierarchy: OWNER > ADMIN > MEMBER

    OWNER: Everything an admin can do, plus promote/demote, remove admins
           and delete the group
    ADMIN: Can add members, remove members, edit group details
    MEMBER: Can send messages, react, leave

    Note: Direct conversation memberships always carry MEMBER.
    """

    OWNER = "owner", "Owner"
    ADMIN = "admin", "Admin"
    MEMBER = "member", "Member"


class Conversation(SoftDeleteMixin, BaseModel):
    """
    A conversation between two or more users.

    Conversation Types:
        DIRECT: Exactly 2 participants. Unique per user pair (enforced via
                DirectConversationPair). Never soft deleted.

        GROUP: Creator becomes owner. Soft deleted by the owner (terminal,
               sends are rejected afterwards). Hard deleted when the last
               member leaves.

    Fields:
        conversation_type: Type of conversation (direct or group)
        group_name: Group display name (empty for direct)
        group_avatar_ref: Avatar URL or blob store reference (groups only)
        owner: Current owner (groups only); always a current member
        last_message: Most recently sent message, for previews and sorting

    Relationships:
        memberships: Membership rows, i.e. the participant set
        messages: Message rows
        direct_pair: DirectConversationPair if type is DIRECT
    """

    conversation_type = models.CharField(
        max_length=10,
        choices=ConversationType.choices,
        default=ConversationType.GROUP,
        db_index=True,
        help_text="Type of conversation (direct or group)",
    )

    group_name = models.CharField(
        max_length=GROUP_CONFIG.MAX_NAME_LENGTH,
        blank=True,
        default="",
        help_text="Name for group conversations (empty for direct)",
    )

    group_avatar_ref = models.CharField(
        max_length=1024,
        blank=True,
        default="",
        help_text="Group avatar URL or storage reference",
    )

    owner = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="owned_conversations",
        help_text="Owner of a group conversation (null for direct)",
    )

    last_message = models.ForeignKey(
        "chat.Message",
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="+",
        help_text="Most recent message in this conversation",
    )

    objects = SoftDeleteQuerySet.as_manager()

    class Meta:
        db_table = "chat_conversation"
        ordering = ["-created_at"]
        indexes = [
            models.Index(
                fields=["conversation_type", "is_deleted"],
                name="chat_conv_type_deleted_idx",
            ),
        ]

    def __str__(self) -> str:
        if self.conversation_type == ConversationType.DIRECT:
            return f"Direct({self.pk})"
        if self.group_name:
            return f"Group: {self.group_name}"
        return f"Group({self.pk})"

    @property
    def is_group(self) -> bool:
        """Check if this is a group conversation."""
        return self.conversation_type == ConversationType.GROUP

    def get_membership_for_user(self, user: User) -> Membership | None:
        """Return the user's membership in this conversation, if any."""
        return self.memberships.filter(user=user).first()


class DirectConversationPair(models.Model):
    """
    Enforces uniqueness of direct conversations between two users.

    Stores user pairs in canonical order (lower user id first). The unique
    constraint makes concurrent first contacts between the same two users
    collide in the database; the loser re-reads the winner's conversation.

    Fields:
        conversation: The direct conversation (OneToOne, serves as PK)
        user_lower: User with lower ID
        user_higher: User with higher ID

    Constraints:
        - UniqueConstraint(user_lower, user_higher): One conversation per pair
        - CheckConstraint(user_lower_id < user_higher_id): Canonical order
    """

    conversation = models.OneToOneField(
        Conversation,
        on_delete=models.CASCADE,
        primary_key=True,
        related_name="direct_pair",
        help_text="The direct conversation this pair represents",
    )

    user_lower = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="+",
        help_text="User with lower ID in this conversation pair",
    )

    user_higher = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="+",
        help_text="User with higher ID in this conversation pair",
    )

    class Meta:
        db_table = "chat_direct_conversation_pair"
        constraints = [
            models.UniqueConstraint(
                fields=["user_lower", "user_higher"],
                name="unique_direct_conversation_pair",
            ),
            models.CheckConstraint(
                condition=Q(user_lower_id__lt=F("user_higher_id")),
                name="user_lower_less_than_higher",
            ),
        ]

    def __str__(self) -> str:
        return f"DirectPair({self.user_lower_id}, {self.user_higher_id})"

    @staticmethod
    def canonical(user_a_id: int, user_b_id: int) -> tuple[int, int]:
        """Return the pair ordered as (lower, higher)."""
        return (user_a_id, user_b_id) if user_a_id < user_b_id else (user_b_id, user_a_id)


class Membership(BaseModel):
    """
    A user's membership in a conversation.

    One row per (conversation, user), created when the user joins and
    deleted when they leave or are removed.

    Fields:
        conversation: Conversation this membership belongs to
        user: Member
        role: owner/admin/member (always member for direct conversations)
        last_seen_message: Newest message the member has acknowledged.
            Only ever advances; basis for unread counts.
    """

    conversation = models.ForeignKey(
        Conversation,
        on_delete=models.CASCADE,
        related_name="memberships",
        help_text="Conversation this membership belongs to",
    )

    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="memberships",
        help_text="Member of the conversation",
    )

    role = models.CharField(
        max_length=10,
        choices=MembershipRole.choices,
        default=MembershipRole.MEMBER,
        help_text="Role in the conversation",
    )

    last_seen_message = models.ForeignKey(
        "chat.Message",
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="+",
        help_text="Newest message this member has read",
    )

    class Meta:
        db_table = "chat_membership"
        ordering = ["created_at", "id"]
        indexes = [
            # Ownership transfer: first admin by join order
            models.Index(
                fields=["conversation", "role", "created_at"],
                name="chat_member_conv_role_idx",
            ),
        ]
        constraints = [
            models.UniqueConstraint(
                fields=["conversation", "user"],
                name="unique_conversation_membership",
            ),
        ]

    def __str__(self) -> str:
        return f"Membership: {self.user_id} in {self.conversation_id} ({self.role})"

    @property
    def is_owner(self) -> bool:
        return self.role == MembershipRole.OWNER


class Message(SoftDeleteMixin, BaseModel):
    """
    A message within a conversation.

    Messages are append-only. Soft deletion keeps the row so ordering and
    unread counts are unaffected; content is hidden when rendered.

    Ordering is by created_at, ties broken by id (insertion order).

    Fields:
        conversation: Conversation the message belongs to. Set to NULL if the
            conversation is hard deleted after its last member leaves.
        sender: Author
        content: Trimmed text, may be empty when an attachment is present
        attachment_ref: Blob store storage reference (resolved at read time)
        attachment_kind: image/video/audio/pdf/archive/file
    """

    conversation = models.ForeignKey(
        Conversation,
        on_delete=models.SET_NULL,
        null=True,
        related_name="messages",
        help_text="Conversation this message belongs to",
    )

    sender = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="sent_messages",
        help_text="User who sent this message",
    )

    content = models.TextField(
        blank=True,
        default="",
        max_length=MESSAGE_CONFIG.MAX_CONTENT_LENGTH,
        help_text="Message text",
    )

    attachment_ref = models.CharField(
        max_length=255,
        blank=True,
        default="",
        help_text="Storage reference of the attached file",
    )

    attachment_kind = models.CharField(
        max_length=20,
        blank=True,
        default="",
        help_text="Kind of attachment, used by clients to pick a renderer",
    )

    objects = SoftDeleteQuerySet.as_manager()

    class Meta:
        db_table = "chat_message"
        ordering = ["created_at", "id"]
        indexes = [
            models.Index(
                fields=["conversation", "created_at", "id"],
                name="chat_msg_conv_order_idx",
            ),
            models.Index(
                fields=["conversation", "sender"],
                name="chat_msg_conv_sender_idx",
            ),
        ]

    def __str__(self) -> str:
        return f"Message({self.pk}) in {self.conversation_id} by {self.sender_id}"

    @property
    def display_content(self) -> str:
        """Content safe to show to any caller; empty once deleted."""
        return "" if self.is_deleted else self.content


class MessageReaction(BaseModel):
    """
    One user's reaction with one emoji on one message.

    Presence of the row means "reacted"; toggling deletes or inserts it.

    Constraints:
        - UniqueConstraint(message, user, emoji)
    """

    message = models.ForeignKey(
        Message,
        on_delete=models.CASCADE,
        related_name="reactions",
        help_text="Message this reaction belongs to",
    )

    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="message_reactions",
        help_text="User who added this reaction",
    )

    emoji = models.CharField(
        max_length=REACTION_CONFIG.MAX_EMOJI_LENGTH,
        help_text="Emoji from the fixed reaction vocabulary",
    )

    class Meta:
        db_table = "chat_message_reaction"
        ordering = ["created_at"]
        constraints = [
            models.UniqueConstraint(
                fields=["message", "user", "emoji"],
                name="unique_user_message_emoji_reaction",
            ),
        ]
        indexes = [
            models.Index(
                fields=["message", "emoji"],
                name="chat_reaction_msg_emoji_idx",
            ),
        ]

    def __str__(self) -> str:
        return f"Reaction({self.emoji}) by {self.user_id} on {self.message_id}"


class TypingSignal(models.Model):
    """
    Last time a user typed in a conversation.

    Liveness is evaluated at read time against TYPING_CONFIG.STALE_AFTER_MS;
    stale rows are simply ignored, never swept.
    """

    conversation = models.ForeignKey(
        Conversation,
        on_delete=models.CASCADE,
        related_name="typing_signals",
        help_text="Conversation being typed in",
    )

    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="typing_signals",
        help_text="User who is typing",
    )

    last_typed_at = models.DateTimeField(
        help_text="When the user last reported typing",
    )

    class Meta:
        db_table = "chat_typing_signal"
        constraints = [
            models.UniqueConstraint(
                fields=["conversation", "user"],
                name="unique_typing_signal",
            ),
        ]

    def __str__(self) -> str:
        return f"Typing: {self.user_id} in {self.conversation_id} at {self.last_typed_at}"
