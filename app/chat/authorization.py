"""
Service-level authorization for chat operations.

This module holds every role rule of the membership hierarchy in one place,
plus the participant lookups services and the WebSocket consumer share.

Key Components:
    can_manage / is_owner / can_remove / can_change_role:
        Pure predicates over roles. No database access.
    check_member_action:
        The manage-member decision table, returning the refusal reason.
    ChatAuthorizationService:
        Stateless participant lookups. Always read fresh from the database
        so a role change that just committed is honored.

Role rules:
    owner  -> may remove admins and members, promote, demote, delete group
    admin  -> may remove members, add members, edit group details
    member -> none of the above
    Nobody may remove, promote or demote the owner.

Usage:
    from chat.authorization import ChatAuthorizationService, can_manage

    membership = ChatAuthorizationService.get_membership(user, conversation_id)
    if membership is None:
        return ServiceResult.failure("Conversation not found", ErrorCode.NOT_FOUND)
    if not can_manage(membership.role):
        return ServiceResult.failure("Only owners and admins ...", ErrorCode.FORBIDDEN)
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from django.db import models

from chat.models import Membership, MembershipRole, Message

if TYPE_CHECKING:
    from authentication.models import User


class MemberAction(models.TextChoices):
    """Actions an owner or admin can take on another member."""

    REMOVE = "remove", "Remove"
    PROMOTE = "promote", "Promote to admin"
    DEMOTE = "demote", "Demote to member"


# =============================================================================
# Role Predicates
# =============================================================================


def can_manage(role: str | None) -> bool:
    """Owners and admins manage membership and group details."""
    return role in (MembershipRole.OWNER, MembershipRole.ADMIN)


def is_owner(role: str | None) -> bool:
    return role == MembershipRole.OWNER


def can_remove(actor_role: str | None, target_role: str | None) -> bool:
    """
    Whether actor_role may remove a member holding target_role.

    The owner can never be removed. Owners remove anyone else; admins
    remove plain members only.
    """
    if target_role == MembershipRole.OWNER:
        return False
    if actor_role == MembershipRole.OWNER:
        return True
    if actor_role == MembershipRole.ADMIN:
        return target_role == MembershipRole.MEMBER
    return False


def can_change_role(actor_role: str | None, target_role: str | None) -> bool:
    """Only the owner promotes or demotes, and never themselves."""
    return actor_role == MembershipRole.OWNER and target_role != MembershipRole.OWNER


def check_member_action(
    actor_role: str | None,
    target_role: str | None,
    action: str,
) -> str | None:
    """
    Decide a manage-member request.

    Returns:
        None if allowed, otherwise the human-readable refusal reason
        (reported as FORBIDDEN)
    """
    if not can_manage(actor_role):
        return "Only owners and admins can manage members"
    if target_role == MembershipRole.OWNER:
        return "The owner cannot be removed, promoted or demoted"
    if actor_role == MembershipRole.ADMIN and target_role == MembershipRole.ADMIN:
        return "Admins cannot act on other admins"

    if action == MemberAction.REMOVE:
        if not can_remove(actor_role, target_role):
            return "You cannot remove this member"
    elif not can_change_role(actor_role, target_role):
        return "Only the owner can promote or demote members"

    return None


# =============================================================================
# Participant Lookups
# =============================================================================


class ChatAuthorizationService:
    """
    Stateless participant lookups.

    Conversations a user does not belong to are indistinguishable from
    conversations that do not exist; callers report both as NOT_FOUND.
    """

    @classmethod
    def is_conversation_participant(cls, user: User, conversation_id: int) -> bool:
        """Check if user currently has a membership in the conversation."""
        return Membership.objects.filter(
            conversation_id=conversation_id,
            user=user,
        ).exists()

    @classmethod
    def get_membership(
        cls,
        user: User,
        conversation_id: int,
        for_update: bool = False,
    ) -> Membership | None:
        """
        Return the user's membership with its conversation, or None.

        Args:
            for_update: Lock the membership row (caller must be in a transaction)
        """
        queryset = Membership.objects.select_related("conversation")
        if for_update:
            queryset = queryset.select_for_update(of=("self",))
        return queryset.filter(conversation_id=conversation_id, user=user).first()

    @classmethod
    def get_visible_message(cls, user: User, message_id: int) -> Message | None:
        """
        Return a message if the user belongs to its conversation.

        Soft-deleted messages are returned too; callers decide what a
        deleted message allows.
        """
        message = (
            Message.objects.select_related("conversation")
            .filter(id=message_id, conversation__isnull=False)
            .first()
        )
        if message is None:
            return None
        if not cls.is_conversation_participant(user, message.conversation_id):
            return None
        return message
