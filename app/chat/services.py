"""
Chat system service layer.

This module provides the business logic for the chat system, encapsulating
all operations on conversations, memberships, messages, reactions and
typing signals.

Services:
    ConversationService: Conversation lifecycle and the caller's inbox
    MembershipService: Adding, removing, promoting and demoting members; leave
    MessageService: Send, list, soft delete, mark read, shared media
    ReactionService: Emoji toggles and per-message aggregates
    TypingService: "Is typing" signals that expire at read time

Design Principles:
    - Services are stateless (use class methods)
    - Every operation takes the resolved caller as its first argument
    - Expected failures return ServiceResult.failure() with an ErrorCode
    - Conversations the caller does not belong to are reported as NOT_FOUND;
      list-style reads return an empty result instead
    - Membership and role are re-read inside the transaction of every
      mutation, never taken from an earlier request
    - Unread counts, reaction aggregates and typing liveness are derived on
      every read
    - Each committed mutation publishes a change notice (see chat.events)

Usage:
    from chat.services import ConversationService, MessageService

    # Open (or reopen) a direct conversation
    result = ConversationService.create_or_get_direct(caller, other_user.id)
    conversation, created = result.data

    # Send a message
    result = MessageService.send(caller, conversation.id, content="hi")
    if result.success:
        message = result.data
"""

from __future__ import annotations

from collections import Counter, defaultdict
from dataclasses import dataclass, field
from datetime import timedelta
from typing import TYPE_CHECKING

from django.db import IntegrityError
from django.db.models import Case, IntegerField, Prefetch, Q, Value, When
from django.utils import timezone

from authentication.models import User
from chat.authorization import (
    ChatAuthorizationService,
    MemberAction,
    can_manage,
    check_member_action,
    is_owner,
)
from chat.constants import (
    ATTACHMENT_CONFIG,
    GROUP_CONFIG,
    MESSAGE_CONFIG,
    REACTION_CONFIG,
    TYPING_CONFIG,
)
from chat.events import ChangeKind, publish_conversation_change
from chat.models import (
    Conversation,
    ConversationType,
    DirectConversationPair,
    Membership,
    MembershipRole,
    Message,
    MessageReaction,
    TypingSignal,
)
from chat.updates import GroupDetails, GroupDetailsUpdate
from core.exceptions import ErrorCode
from core.services import BaseService, ServiceResult
from media.services import BlobStoreService

if TYPE_CHECKING:
    from collections.abc import Iterable


# =============================================================================
# Read Models
# =============================================================================


@dataclass
class ConversationSummary:
    """
    A conversation as one member sees it.

    Attributes:
        conversation: The conversation row
        membership: The caller's membership
        participants: Other current participants (caller excluded)
        last_message: Most recent message, or None
        unread_count: Messages from others after the caller's read pointer
    """

    conversation: Conversation
    membership: Membership
    participants: list[User]
    last_message: Message | None
    unread_count: int

    @property
    def user_role(self) -> str:
        return self.membership.role

    @property
    def activity_at(self):
        if self.last_message is not None:
            return self.last_message.created_at
        return self.conversation.created_at


@dataclass
class ReactionSummary:
    """Reaction aggregate of one message for one caller."""

    counts: dict[str, int] = field(default_factory=dict)
    mine: list[str] = field(default_factory=list)


@dataclass
class MessageView:
    """A message enriched for display to one caller."""

    message: Message
    sender: User
    attachment_url: str | None
    reactions: ReactionSummary
    is_me: bool


@dataclass
class ReactionToggleResult:
    """Outcome of a reaction toggle."""

    message_id: int
    emoji: str
    added: bool
    reactions: ReactionSummary


@dataclass
class SharedMediaItem:
    """An attachment shared in a conversation."""

    message_id: int
    sender_id: int
    attachment_ref: str
    attachment_kind: str
    url: str | None
    created_at: object


# =============================================================================
# Helpers
# =============================================================================


def count_unread(membership: Membership) -> int:
    """
    Count messages from others the member has not seen.

    Without a read pointer every message from someone else is unread.
    Otherwise only messages ordered after the seen message count, using
    (created_at, id) so messages sharing a timestamp still order. Soft
    deleted messages still count.
    """
    queryset = Message.objects.filter(
        conversation_id=membership.conversation_id,
    ).exclude(sender_id=membership.user_id)

    seen = membership.last_seen_message
    if seen is not None:
        queryset = queryset.filter(
            Q(created_at__gt=seen.created_at)
            | Q(created_at=seen.created_at, id__gt=seen.id)
        )
    return queryset.count()


def attachment_kind_for(content_type: str) -> str:
    """Derive an attachment kind from a MIME type."""
    content_type = (content_type or "").lower()
    if content_type.startswith("image/"):
        return ATTACHMENT_CONFIG.KIND_IMAGE
    if content_type.startswith("video/"):
        return ATTACHMENT_CONFIG.KIND_VIDEO
    if content_type.startswith("audio/"):
        return ATTACHMENT_CONFIG.KIND_AUDIO
    if content_type == "application/pdf":
        return ATTACHMENT_CONFIG.KIND_PDF
    if content_type in ATTACHMENT_CONFIG.ARCHIVE_MIME_TYPES:
        return ATTACHMENT_CONFIG.KIND_ARCHIVE
    return ATTACHMENT_CONFIG.KIND_FILE


def _dedupe_ids(ids: Iterable[int], exclude: int | None = None) -> list[int]:
    return [i for i in dict.fromkeys(ids) if i != exclude]


def _member_ids(conversation_id: int) -> list[int]:
    return list(
        Membership.objects.filter(conversation_id=conversation_id).values_list(
            "user_id", flat=True
        )
    )


def _not_found(what: str = "Conversation") -> ServiceResult:
    return ServiceResult.failure(f"{what} not found", error_code=ErrorCode.NOT_FOUND)


# =============================================================================
# Conversation Service
# =============================================================================


class ConversationService(BaseService):
    """
    Service for conversation lifecycle operations.

    Methods:
        create_or_get_direct: Open the single DM between two users
        create_group: Create a group owned by the caller
        update_group_details: Partial update of name and avatar
        delete_group: Terminal soft delete (owner only)
        get_by_id: One conversation as the caller sees it
        list_for_user: The caller's inbox, most recent activity first
    """

    @classmethod
    def create_or_get_direct(
        cls,
        caller: User,
        other_user_id: int,
    ) -> ServiceResult[tuple[Conversation, bool]]:
        """
        Return the direct conversation between caller and another user.

        Creates the conversation and both memberships on first contact.
        Concurrent first contacts collide on the canonical pair's unique
        constraint; the loser returns the winner's conversation.

        Args:
            caller: User opening the conversation
            other_user_id: The other participant

        Returns:
            ServiceResult with (conversation, created)

        Error codes:
            INVALID_ARGUMENT: other_user_id is the caller
            NOT_FOUND: Other user does not exist
        """
        if other_user_id == caller.id:
            return ServiceResult.failure(
                "Cannot start a direct conversation with yourself",
                error_code=ErrorCode.INVALID_ARGUMENT,
            )

        other = User.objects.filter(pk=other_user_id, is_active=True).first()
        if other is None:
            return _not_found("User")

        lower_id, higher_id = DirectConversationPair.canonical(caller.id, other.id)
        existing = cls._find_direct(lower_id, higher_id)
        if existing is not None:
            return ServiceResult.success((existing, False))

        try:
            with cls.atomic():
                conversation = Conversation.objects.create(
                    conversation_type=ConversationType.DIRECT,
                )
                DirectConversationPair.objects.create(
                    conversation=conversation,
                    user_lower_id=lower_id,
                    user_higher_id=higher_id,
                )
                Membership.objects.bulk_create(
                    [
                        Membership(conversation=conversation, user=caller),
                        Membership(conversation=conversation, user=other),
                    ]
                )
        except IntegrityError:
            existing = cls._find_direct(lower_id, higher_id)
            if existing is None:
                raise
            cls.get_logger().info(
                f"Direct conversation race between {lower_id} and {higher_id} "
                f"resolved to {existing.id}"
            )
            return ServiceResult.success((existing, False))

        cls.get_logger().info(
            f"Created direct conversation {conversation.id} "
            f"between users {caller.id} and {other.id}"
        )
        publish_conversation_change(
            conversation.id,
            ChangeKind.CONVERSATION_CREATED,
            user_ids=[caller.id, other.id],
        )
        return ServiceResult.success((conversation, True))

    @classmethod
    def create_group(
        cls,
        caller: User,
        group_name: str,
        member_ids: list[int],
        group_avatar_ref: str = "",
    ) -> ServiceResult[Conversation]:
        """
        Create a group conversation owned by the caller.

        Args:
            caller: Creator, becomes the owner
            group_name: Display name (trimmed, required)
            member_ids: Other users to add as members. Duplicates and the
                caller's own id are ignored.
            group_avatar_ref: Optional avatar storage reference or URL

        Returns:
            ServiceResult with the new Conversation

        Error codes:
            INVALID_ARGUMENT: Blank name, name too long, no other members,
                or too many members
            NOT_FOUND: A member id does not exist
        """
        group_name = (group_name or "").strip()
        validation = cls.validate_required(group_name=group_name)
        if validation is not None:
            return validation
        if len(group_name) > GROUP_CONFIG.MAX_NAME_LENGTH:
            return ServiceResult.failure(
                f"Group name cannot exceed {GROUP_CONFIG.MAX_NAME_LENGTH} characters",
                error_code=ErrorCode.INVALID_ARGUMENT,
            )

        ids = _dedupe_ids(member_ids or [], exclude=caller.id)
        if not ids:
            return ServiceResult.failure(
                "A group needs at least one other member",
                error_code=ErrorCode.INVALID_ARGUMENT,
            )
        if len(ids) + 1 > GROUP_CONFIG.MAX_MEMBERS:
            return ServiceResult.failure(
                f"A group cannot have more than {GROUP_CONFIG.MAX_MEMBERS} members",
                error_code=ErrorCode.INVALID_ARGUMENT,
            )

        users = {user.id: user for user in User.objects.filter(pk__in=ids, is_active=True)}
        missing = [i for i in ids if i not in users]
        if missing:
            return ServiceResult.failure(
                "Some users were not found",
                error_code=ErrorCode.NOT_FOUND,
                errors={"member_ids": [str(i) for i in missing]},
            )

        with cls.atomic():
            conversation = Conversation.objects.create(
                conversation_type=ConversationType.GROUP,
                group_name=group_name,
                group_avatar_ref=(group_avatar_ref or "").strip(),
                owner=caller,
            )
            Membership.objects.bulk_create(
                [Membership(conversation=conversation, user=caller, role=MembershipRole.OWNER)]
                + [
                    Membership(conversation=conversation, user=users[i], role=MembershipRole.MEMBER)
                    for i in ids
                ]
            )

        cls.get_logger().info(
            f"User {caller.id} created group {conversation.id} with {len(ids)} members"
        )
        publish_conversation_change(
            conversation.id,
            ChangeKind.CONVERSATION_CREATED,
            user_ids=[caller.id, *ids],
        )
        return ServiceResult.success(conversation)

    @classmethod
    def update_group_details(
        cls,
        caller: User,
        conversation_id: int,
        update: GroupDetailsUpdate,
    ) -> ServiceResult[Conversation]:
        """
        Apply a partial update to a group's name and avatar.

        Fields left as None keep their stored value.

        Error codes:
            NOT_FOUND: Conversation missing or caller not a member
            INVALID_ARGUMENT: Direct conversation, blank or too long name
            FORBIDDEN: Caller is a plain member
            CONFLICT: Group was deleted
        """
        update = update.normalized()

        with cls.atomic():
            conversation = Conversation.objects.select_for_update().filter(pk=conversation_id).first()
            if conversation is None:
                return _not_found()
            membership = conversation.get_membership_for_user(caller)
            if membership is None:
                return _not_found()

            if not conversation.is_group:
                return ServiceResult.failure(
                    "Direct conversations have no group details",
                    error_code=ErrorCode.INVALID_ARGUMENT,
                )
            if not can_manage(membership.role):
                return ServiceResult.failure(
                    "Only owners and admins can edit group details",
                    error_code=ErrorCode.FORBIDDEN,
                )
            if conversation.is_deleted:
                return ServiceResult.failure(
                    "This group has been deleted",
                    error_code=ErrorCode.CONFLICT,
                )

            if update.group_name is not None:
                if not update.group_name:
                    return ServiceResult.failure(
                        "Group name cannot be blank",
                        error_code=ErrorCode.INVALID_ARGUMENT,
                    )
                if len(update.group_name) > GROUP_CONFIG.MAX_NAME_LENGTH:
                    return ServiceResult.failure(
                        f"Group name cannot exceed {GROUP_CONFIG.MAX_NAME_LENGTH} characters",
                        error_code=ErrorCode.INVALID_ARGUMENT,
                    )

            current = GroupDetails.of(conversation)
            changed = update.changed_fields(current)
            if changed:
                merged = update.merge(current)
                for name in changed:
                    setattr(conversation, name, getattr(merged, name))
                conversation.save(update_fields=[*changed, "updated_at"])

        if changed:
            cls.get_logger().info(
                f"User {caller.id} updated {', '.join(changed)} of group {conversation.id}"
            )
            publish_conversation_change(
                conversation.id,
                ChangeKind.CONVERSATION_UPDATED,
                user_ids=_member_ids(conversation.id),
            )
        return ServiceResult.success(conversation)

    @classmethod
    def delete_group(cls, caller: User, conversation_id: int) -> ServiceResult[Conversation]:
        """
        Soft delete a group. Only the owner may do this.

        Messages and memberships are kept; members still see the group in
        their list but can no longer send to it. Deleting twice succeeds.

        Error codes:
            NOT_FOUND: Conversation missing or caller not a member
            INVALID_ARGUMENT: Direct conversation
            FORBIDDEN: Caller is not the owner
        """
        with cls.atomic():
            conversation = Conversation.objects.select_for_update().filter(pk=conversation_id).first()
            if conversation is None:
                return _not_found()
            membership = conversation.get_membership_for_user(caller)
            if membership is None:
                return _not_found()

            if not conversation.is_group:
                return ServiceResult.failure(
                    "Direct conversations cannot be deleted",
                    error_code=ErrorCode.INVALID_ARGUMENT,
                )
            if not is_owner(membership.role):
                return ServiceResult.failure(
                    "Only the group owner can delete the group",
                    error_code=ErrorCode.FORBIDDEN,
                )
            if conversation.is_deleted:
                return ServiceResult.success(conversation)

            conversation.soft_delete()

        cls.get_logger().info(f"User {caller.id} deleted group {conversation.id}")
        publish_conversation_change(
            conversation.id,
            ChangeKind.CONVERSATION_DELETED,
            user_ids=_member_ids(conversation.id),
        )
        return ServiceResult.success(conversation)

    @classmethod
    def get_by_id(cls, caller: User, conversation_id: int) -> ServiceResult[ConversationSummary]:
        """
        Return one conversation as the caller sees it.

        Error codes:
            NOT_FOUND: Conversation missing or caller not a member
        """
        membership = cls._memberships_for(caller).filter(conversation_id=conversation_id).first()
        if membership is None:
            return _not_found()
        return ServiceResult.success(cls._summarize(membership))

    @classmethod
    def list_for_user(cls, caller: User) -> list[ConversationSummary]:
        """
        Every conversation the caller belongs to, most recent activity first.

        Activity is the last message's creation time, falling back to the
        conversation's creation time. Deleted groups are included so members
        can see what happened to them.
        """
        summaries = [cls._summarize(m) for m in cls._memberships_for(caller)]
        summaries.sort(
            key=lambda s: (s.activity_at, s.conversation.id),
            reverse=True,
        )
        return summaries

    @classmethod
    def _memberships_for(cls, caller: User):
        return Membership.objects.filter(user=caller).select_related(
            "conversation",
            "conversation__last_message",
            "conversation__last_message__sender",
            "last_seen_message",
        ).prefetch_related(
            Prefetch(
                "conversation__memberships",
                queryset=Membership.objects.select_related("user").order_by("created_at", "id"),
            )
        )

    @classmethod
    def _summarize(cls, membership: Membership) -> ConversationSummary:
        conversation = membership.conversation
        participants = [
            m.user
            for m in conversation.memberships.all()
            if m.user_id != membership.user_id
        ]
        return ConversationSummary(
            conversation=conversation,
            membership=membership,
            participants=participants,
            last_message=conversation.last_message,
            unread_count=count_unread(membership),
        )

    @staticmethod
    def _find_direct(lower_id: int, higher_id: int) -> Conversation | None:
        pair = (
            DirectConversationPair.objects.select_related("conversation")
            .filter(user_lower_id=lower_id, user_higher_id=higher_id)
            .first()
        )
        return pair.conversation if pair else None


# =============================================================================
# Membership Service
# =============================================================================


class MembershipService(BaseService):
    """
    Service for group membership.

    Role rules live in chat.authorization; this service loads fresh
    memberships under a conversation row lock and applies them.
    """

    @classmethod
    def list_members(cls, caller: User, conversation_id: int) -> ServiceResult[list[Membership]]:
        """
        Members of a conversation the caller belongs to.

        Ordered owner first, then admins, then members, each by join time.

        Error codes:
            NOT_FOUND: Conversation missing or caller not a member
        """
        if not ChatAuthorizationService.is_conversation_participant(caller, conversation_id):
            return _not_found()

        role_order = Case(
            When(role=MembershipRole.OWNER, then=Value(0)),
            When(role=MembershipRole.ADMIN, then=Value(1)),
            default=Value(2),
            output_field=IntegerField(),
        )
        members = list(
            Membership.objects.filter(conversation_id=conversation_id)
            .select_related("user")
            .order_by(role_order, "created_at", "id")
        )
        return ServiceResult.success(members)

    @classmethod
    def add_members(
        cls,
        caller: User,
        conversation_id: int,
        user_ids: list[int],
    ) -> ServiceResult[list[Membership]]:
        """
        Add users to a group as plain members.

        Users who already belong are skipped.

        Returns:
            ServiceResult with the newly created memberships

        Error codes:
            NOT_FOUND: Conversation or a user missing, or caller not a member
            INVALID_ARGUMENT: Direct conversation, no user ids, group full
            CONFLICT: Group was deleted
            FORBIDDEN: Caller is a plain member
        """
        ids = _dedupe_ids(user_ids or [])
        if not ids:
            return ServiceResult.failure(
                "No users to add",
                error_code=ErrorCode.INVALID_ARGUMENT,
            )

        with cls.atomic():
            conversation = Conversation.objects.select_for_update().filter(pk=conversation_id).first()
            if conversation is None:
                return _not_found()
            membership = conversation.get_membership_for_user(caller)
            if membership is None:
                return _not_found()

            if not conversation.is_group:
                return ServiceResult.failure(
                    "Members cannot be added to a direct conversation",
                    error_code=ErrorCode.INVALID_ARGUMENT,
                )
            if conversation.is_deleted:
                return ServiceResult.failure(
                    "This group has been deleted",
                    error_code=ErrorCode.CONFLICT,
                )
            if not can_manage(membership.role):
                return ServiceResult.failure(
                    "Only owners and admins can add members",
                    error_code=ErrorCode.FORBIDDEN,
                )

            users = {u.id: u for u in User.objects.filter(pk__in=ids, is_active=True)}
            missing = [i for i in ids if i not in users]
            if missing:
                return ServiceResult.failure(
                    "Some users were not found",
                    error_code=ErrorCode.NOT_FOUND,
                    errors={"user_ids": [str(i) for i in missing]},
                )

            current = set(_member_ids(conversation.id))
            new_ids = [i for i in ids if i not in current]
            if len(current) + len(new_ids) > GROUP_CONFIG.MAX_MEMBERS:
                return ServiceResult.failure(
                    f"A group cannot have more than {GROUP_CONFIG.MAX_MEMBERS} members",
                    error_code=ErrorCode.INVALID_ARGUMENT,
                )

            added = Membership.objects.bulk_create(
                [
                    Membership(conversation=conversation, user=users[i], role=MembershipRole.MEMBER)
                    for i in new_ids
                ]
            )

        if added:
            cls.get_logger().info(
                f"User {caller.id} added {len(added)} members to group {conversation.id}"
            )
            publish_conversation_change(
                conversation.id,
                ChangeKind.MEMBERS_CHANGED,
                user_ids=[*current, *new_ids],
            )
        return ServiceResult.success(added)

    @classmethod
    def manage_member(
        cls,
        caller: User,
        conversation_id: int,
        target_user_id: int,
        action: str,
    ) -> ServiceResult[Membership | None]:
        """
        Remove, promote or demote another member of a group.

        Promoting an admin or demoting a member changes nothing and succeeds.

        Returns:
            ServiceResult with the target's membership, or None after removal

        Error codes:
            INVALID_ARGUMENT: Unknown action or direct conversation
            NOT_FOUND: Conversation or target membership missing, or caller
                not a member
            CONFLICT: Group was deleted
            FORBIDDEN: Role rules refuse the action
        """
        if action not in MemberAction.values:
            return ServiceResult.failure(
                f"Unknown action '{action}'",
                error_code=ErrorCode.INVALID_ARGUMENT,
            )

        with cls.atomic():
            conversation = Conversation.objects.select_for_update().filter(pk=conversation_id).first()
            if conversation is None:
                return _not_found()
            membership = conversation.get_membership_for_user(caller)
            if membership is None:
                return _not_found()

            if not conversation.is_group:
                return ServiceResult.failure(
                    "Direct conversations have no roles",
                    error_code=ErrorCode.INVALID_ARGUMENT,
                )
            if conversation.is_deleted:
                return ServiceResult.failure(
                    "This group has been deleted",
                    error_code=ErrorCode.CONFLICT,
                )

            target = Membership.objects.filter(
                conversation=conversation,
                user_id=target_user_id,
            ).first()
            if target is None:
                return _not_found("Member")

            refusal = check_member_action(membership.role, target.role, action)
            if refusal:
                return ServiceResult.failure(refusal, error_code=ErrorCode.FORBIDDEN)

            affected = _member_ids(conversation.id)
            if action == MemberAction.REMOVE:
                target.delete()
                TypingSignal.objects.filter(
                    conversation=conversation,
                    user_id=target_user_id,
                ).delete()
                result = None
            else:
                new_role = (
                    MembershipRole.ADMIN if action == MemberAction.PROMOTE else MembershipRole.MEMBER
                )
                if target.role == new_role:
                    return ServiceResult.success(target)
                target.role = new_role
                target.save(update_fields=["role", "updated_at"])
                result = target

        cls.get_logger().info(
            f"User {caller.id} applied {action} to user {target_user_id} "
            f"in group {conversation.id}"
        )
        publish_conversation_change(
            conversation.id,
            ChangeKind.MEMBERS_CHANGED,
            user_ids=affected,
            user_id=target_user_id,
            action=str(action),
        )
        return ServiceResult.success(result)

    @classmethod
    def leave(cls, caller: User, conversation_id: int) -> ServiceResult[None]:
        """
        Leave a group.

        An owner's departure hands ownership to the earliest-joined admin,
        or to the earliest-joined member when there is no admin. When the
        last member leaves, the conversation is deleted outright; its
        messages stay behind without a conversation.

        Error codes:
            NOT_FOUND: Conversation missing or caller not a member
            INVALID_ARGUMENT: Direct conversation
        """
        with cls.atomic():
            conversation = Conversation.objects.select_for_update().filter(pk=conversation_id).first()
            if conversation is None:
                return _not_found()
            membership = conversation.get_membership_for_user(caller)
            if membership is None:
                return _not_found()

            if not conversation.is_group:
                return ServiceResult.failure(
                    "Direct conversations cannot be left",
                    error_code=ErrorCode.INVALID_ARGUMENT,
                )

            was_owner = membership.is_owner
            membership.delete()
            TypingSignal.objects.filter(conversation=conversation, user=caller).delete()

            remaining = Membership.objects.filter(conversation=conversation).order_by(
                "created_at", "id"
            )
            successor = None
            if not remaining.exists():
                conversation.hard_delete()
            elif was_owner:
                successor = (
                    remaining.filter(role=MembershipRole.ADMIN).first() or remaining.first()
                )
                successor.role = MembershipRole.OWNER
                successor.save(update_fields=["role", "updated_at"])
                conversation.owner_id = successor.user_id
                conversation.save(update_fields=["owner", "updated_at"])

            affected = [caller.id, *remaining.values_list("user_id", flat=True)]

        if successor is not None:
            cls.get_logger().info(
                f"Ownership of group {conversation_id} passed to user {successor.user_id}"
            )
        cls.get_logger().info(f"User {caller.id} left conversation {conversation_id}")
        publish_conversation_change(
            conversation_id,
            ChangeKind.MEMBERS_CHANGED,
            user_ids=affected,
            user_id=caller.id,
            action="leave",
        )
        return ServiceResult.success(None)


# =============================================================================
# Message Service
# =============================================================================


class MessageService(BaseService):
    """
    Service for the message log.

    Messages are append-only. Deletion is a soft delete by the sender that
    hides content and attachment but keeps the row for ordering and unread
    accounting.
    """

    @classmethod
    def send(
        cls,
        caller: User,
        conversation_id: int,
        content: str = "",
        attachment_ref: str | None = None,
        attachment_kind: str | None = None,
    ) -> ServiceResult[Message]:
        """
        Send a message to a conversation.

        Content is trimmed and may be empty only when an attachment is
        present. The attachment must be a completed upload owned by the
        caller; its kind is derived from the upload's MIME type when not
        given. Sending also clears the caller's typing signal.

        Error codes:
            NOT_FOUND: Conversation missing or caller not a member
            CONFLICT: Group was deleted
            INVALID_ARGUMENT: Empty message, content too long, bad attachment
        """
        content = (content or "").strip()
        attachment_ref = (attachment_ref or "").strip()
        attachment_kind = (attachment_kind or "").strip()

        with cls.atomic():
            conversation = Conversation.objects.select_for_update().filter(pk=conversation_id).first()
            if conversation is None:
                return _not_found()
            if not conversation.memberships.filter(user=caller).exists():
                return _not_found()
            if conversation.is_deleted:
                return ServiceResult.failure(
                    "This group has been deleted",
                    error_code=ErrorCode.CONFLICT,
                )

            if not content and not attachment_ref:
                return ServiceResult.failure(
                    "Message cannot be empty",
                    error_code=ErrorCode.INVALID_ARGUMENT,
                )
            if len(content) > MESSAGE_CONFIG.MAX_CONTENT_LENGTH:
                return ServiceResult.failure(
                    f"Message cannot exceed {MESSAGE_CONFIG.MAX_CONTENT_LENGTH} characters",
                    error_code=ErrorCode.INVALID_ARGUMENT,
                )

            if attachment_ref:
                upload = BlobStoreService.validate_attachment(caller, attachment_ref)
                if not upload:
                    return upload
                if not attachment_kind:
                    attachment_kind = attachment_kind_for(upload.data.content_type)
                elif attachment_kind not in ATTACHMENT_CONFIG.KINDS:
                    return ServiceResult.failure(
                        f"Unknown attachment kind '{attachment_kind}'",
                        error_code=ErrorCode.INVALID_ARGUMENT,
                    )
            else:
                attachment_kind = ""

            message = Message.objects.create(
                conversation=conversation,
                sender=caller,
                content=content,
                attachment_ref=attachment_ref,
                attachment_kind=attachment_kind,
            )
            conversation.last_message = message
            conversation.save(update_fields=["last_message", "updated_at"])

            TypingSignal.objects.filter(conversation=conversation, user=caller).delete()

        cls.get_logger().debug(
            f"User {caller.id} sent message {message.id} to conversation {conversation.id}"
        )
        publish_conversation_change(
            conversation.id,
            ChangeKind.MESSAGE_SENT,
            user_ids=_member_ids(conversation.id),
            message_id=message.id,
        )
        return ServiceResult.success(message)

    @classmethod
    def list_messages(cls, caller: User, conversation_id: int) -> list[MessageView]:
        """
        Messages of a conversation, oldest first, enriched for the caller.

        Returns an empty list when the caller is not a member.
        """
        if not ChatAuthorizationService.is_conversation_participant(caller, conversation_id):
            return []

        messages = list(
            Message.objects.filter(conversation_id=conversation_id)
            .select_related("sender")
            .order_by("created_at", "id")
        )
        if not messages:
            return []

        reactions = ReactionService.summarize([m.id for m in messages], caller)
        urls = BlobStoreService.resolve_urls(
            m.attachment_ref for m in messages if not m.is_deleted
        )

        return [
            MessageView(
                message=m,
                sender=m.sender,
                attachment_url=None if m.is_deleted else urls.get(m.attachment_ref),
                reactions=reactions.get(m.id, ReactionSummary()),
                is_me=m.sender_id == caller.id,
            )
            for m in messages
        ]

    @classmethod
    def view_for(cls, caller: User, message: Message) -> MessageView:
        """Enrich a single message for the caller, as list_messages does."""
        reactions = ReactionService.summarize([message.id], caller)
        return MessageView(
            message=message,
            sender=message.sender,
            attachment_url=(
                None if message.is_deleted else BlobStoreService.resolve_url(message.attachment_ref)
            ),
            reactions=reactions.get(message.id, ReactionSummary()),
            is_me=message.sender_id == caller.id,
        )

    @classmethod
    def soft_delete(cls, caller: User, message_id: int) -> ServiceResult[Message]:
        """
        Soft delete a message. Only its sender may do this; repeating it
        succeeds without change.

        Error codes:
            NOT_FOUND: Message missing or caller not in its conversation
            FORBIDDEN: Caller did not send the message
        """
        message = ChatAuthorizationService.get_visible_message(caller, message_id)
        if message is None:
            return _not_found("Message")
        if message.sender_id != caller.id:
            return ServiceResult.failure(
                "You can only delete your own messages",
                error_code=ErrorCode.FORBIDDEN,
            )
        if message.is_deleted:
            return ServiceResult.success(message)

        message.soft_delete()

        cls.get_logger().info(f"User {caller.id} deleted message {message.id}")
        publish_conversation_change(
            message.conversation_id,
            ChangeKind.MESSAGE_DELETED,
            user_ids=_member_ids(message.conversation_id),
            message_id=message.id,
        )
        return ServiceResult.success(message)

    @classmethod
    def mark_read(cls, caller: User, conversation_id: int) -> ServiceResult[Membership]:
        """
        Move the caller's read pointer to the newest message.

        The pointer only moves forward: it is compared by (created_at, id)
        under a lock on the membership row, so a late or repeated call never
        moves it back. No messages means no change.

        Error codes:
            NOT_FOUND: Conversation missing or caller not a member
        """
        with cls.atomic():
            membership = ChatAuthorizationService.get_membership(
                caller,
                conversation_id,
                for_update=True,
            )
            if membership is None:
                return _not_found()

            newest = (
                Message.objects.filter(conversation_id=conversation_id)
                .order_by("-created_at", "-id")
                .first()
            )
            if newest is None:
                return ServiceResult.success(membership)

            seen = membership.last_seen_message
            if seen is not None and (seen.created_at, seen.id) >= (newest.created_at, newest.id):
                return ServiceResult.success(membership)

            membership.last_seen_message = newest
            membership.save(update_fields=["last_seen_message", "updated_at"])

        publish_conversation_change(conversation_id, ChangeKind.READ, user_ids=[caller.id])
        return ServiceResult.success(membership)

    @classmethod
    def shared_media(cls, caller: User, conversation_id: int) -> list[SharedMediaItem]:
        """
        Attachments of live messages, newest first, each with a resolved URL.

        Returns an empty list when the caller is not a member.
        """
        if not ChatAuthorizationService.is_conversation_participant(caller, conversation_id):
            return []

        messages = list(
            cls._media_queryset(conversation_id).order_by("-created_at", "-id")
        )
        urls = BlobStoreService.resolve_urls(m.attachment_ref for m in messages)
        return [
            SharedMediaItem(
                message_id=m.id,
                sender_id=m.sender_id,
                attachment_ref=m.attachment_ref,
                attachment_kind=m.attachment_kind,
                url=urls.get(m.attachment_ref),
                created_at=m.created_at,
            )
            for m in messages
        ]

    @classmethod
    def shared_media_count(cls, caller: User, conversation_id: int) -> int:
        """Number of live messages with an attachment; 0 for non-members."""
        if not ChatAuthorizationService.is_conversation_participant(caller, conversation_id):
            return 0
        return cls._media_queryset(conversation_id).count()

    @staticmethod
    def _media_queryset(conversation_id: int):
        return (
            Message.objects.active()
            .filter(conversation_id=conversation_id)
            .exclude(attachment_ref="")
        )


# =============================================================================
# Reaction Service
# =============================================================================


class ReactionService(BaseService):
    """
    Service for message reactions.

    A reaction row means "this user reacted with this emoji". Toggling
    deletes the row if present and inserts it otherwise, so two toggles
    restore the starting state.
    """

    @classmethod
    def validate_emoji(cls, emoji: str | None) -> str | None:
        """Return the trimmed emoji if it is in the vocabulary, else None."""
        emoji = (emoji or "").strip()
        if not emoji or len(emoji) > REACTION_CONFIG.MAX_EMOJI_LENGTH:
            return None
        return emoji if emoji in REACTION_CONFIG.ALLOWED_EMOJIS else None

    @classmethod
    def toggle(
        cls,
        caller: User,
        message_id: int,
        emoji: str,
    ) -> ServiceResult[ReactionToggleResult]:
        """
        Add or remove the caller's reaction.

        Any member may react, including to their own messages. Reactions on
        a deleted message, or on any message of a deleted group, can be
        removed but not added.

        Error codes:
            INVALID_ARGUMENT: Emoji not in the vocabulary
            NOT_FOUND: Message missing or caller not in its conversation
            CONFLICT: Adding a reaction to a deleted message or in a
                deleted group
        """
        valid = cls.validate_emoji(emoji)
        if valid is None:
            return ServiceResult.failure(
                "Unsupported reaction",
                error_code=ErrorCode.INVALID_ARGUMENT,
            )

        message = ChatAuthorizationService.get_visible_message(caller, message_id)
        if message is None:
            return _not_found("Message")

        with cls.atomic():
            removed, _ = MessageReaction.objects.filter(
                message=message,
                user=caller,
                emoji=valid,
            ).delete()
            added = not removed
            if added:
                if message.is_deleted:
                    return ServiceResult.failure(
                        "Cannot react to a deleted message",
                        error_code=ErrorCode.CONFLICT,
                    )
                if message.conversation.is_deleted:
                    return ServiceResult.failure(
                        "This group has been deleted",
                        error_code=ErrorCode.CONFLICT,
                    )
                try:
                    with cls.atomic():
                        MessageReaction.objects.create(message=message, user=caller, emoji=valid)
                except IntegrityError:
                    # A concurrent toggle inserted the same row
                    pass

        cls.get_logger().debug(
            f"User {caller.id} {'added' if added else 'removed'} {valid} on message {message.id}"
        )
        publish_conversation_change(
            message.conversation_id,
            ChangeKind.REACTIONS_CHANGED,
            message_id=message.id,
        )
        summary = cls.summarize([message.id], caller).get(message.id, ReactionSummary())
        return ServiceResult.success(
            ReactionToggleResult(message_id=message.id, emoji=valid, added=added, reactions=summary)
        )

    @classmethod
    def summarize(cls, message_ids: list[int], caller: User) -> dict[int, ReactionSummary]:
        """
        Aggregate reactions for many messages in one query.

        Counts and the caller's own set are ordered like the vocabulary.
        Messages without reactions are absent from the result.
        """
        rows = MessageReaction.objects.filter(message_id__in=message_ids).values_list(
            "message_id", "user_id", "emoji"
        )
        counts: dict[int, Counter] = defaultdict(Counter)
        mine: dict[int, set[str]] = defaultdict(set)
        for message_id, user_id, emoji in rows:
            counts[message_id][emoji] += 1
            if user_id == caller.id:
                mine[message_id].add(emoji)

        order = {emoji: i for i, emoji in enumerate(REACTION_CONFIG.ALLOWED_EMOJIS)}

        def rank(emoji: str) -> tuple[int, str]:
            return (order.get(emoji, len(order)), emoji)

        return {
            message_id: ReactionSummary(
                counts={e: emoji_counts[e] for e in sorted(emoji_counts, key=rank)},
                mine=sorted(mine[message_id], key=rank),
            )
            for message_id, emoji_counts in counts.items()
        }


# =============================================================================
# Typing Service
# =============================================================================


class TypingService(BaseService):
    """
    Service for typing signals.

    A signal is a timestamp per (conversation, user). It counts as live for
    TYPING_CONFIG.STALE_AFTER_MS after it was set; expiry is evaluated when
    reading and nothing sweeps old rows.
    """

    @classmethod
    def set_typing(cls, caller: User, conversation_id: int) -> ServiceResult[TypingSignal]:
        """
        Record that the caller is typing now.

        Error codes:
            NOT_FOUND: Conversation missing or caller not a member
            CONFLICT: Group was deleted
        """
        membership = ChatAuthorizationService.get_membership(caller, conversation_id)
        if membership is None:
            return _not_found()
        if membership.conversation.is_deleted:
            return ServiceResult.failure(
                "This group has been deleted",
                error_code=ErrorCode.CONFLICT,
            )

        now = timezone.now()
        try:
            with cls.atomic():
                signal, _ = TypingSignal.objects.update_or_create(
                    conversation_id=conversation_id,
                    user=caller,
                    defaults={"last_typed_at": now},
                )
        except IntegrityError:
            TypingSignal.objects.filter(
                conversation_id=conversation_id,
                user=caller,
            ).update(last_typed_at=now)
            signal = TypingSignal.objects.get(conversation_id=conversation_id, user=caller)

        publish_conversation_change(conversation_id, ChangeKind.TYPING_CHANGED)
        return ServiceResult.success(signal)

    @classmethod
    def clear_typing(cls, caller: User, conversation_id: int) -> ServiceResult[None]:
        """Remove the caller's signal. Succeeds whether or not one exists."""
        deleted, _ = TypingSignal.objects.filter(
            conversation_id=conversation_id,
            user=caller,
        ).delete()
        if deleted:
            publish_conversation_change(conversation_id, ChangeKind.TYPING_CHANGED)
        return ServiceResult.success(None)

    @classmethod
    def list_typing(cls, caller: User, conversation_id: int) -> list[User]:
        """
        Users currently typing, caller excluded.

        A signal is live while now - last_typed_at < STALE_AFTER_MS.
        Returns an empty list when the caller is not a member.
        """
        if not ChatAuthorizationService.is_conversation_participant(caller, conversation_id):
            return []

        cutoff = timezone.now() - timedelta(milliseconds=TYPING_CONFIG.STALE_AFTER_MS)
        signals = (
            TypingSignal.objects.filter(
                conversation_id=conversation_id,
                last_typed_at__gt=cutoff,
            )
            .exclude(user=caller)
            .select_related("user")
            .order_by("last_typed_at", "user_id")
        )
        return [signal.user for signal in signals]
