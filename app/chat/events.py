"""
Change notices for live chat views.

Every committed chat mutation publishes a small notice over the Channels
layer so subscribed clients re-read what they display. A notice names the
conversation and the kind of change only; it never carries message content,
so a client always learns the new state through the normal read paths and
their participant checks.

Groups:
    conversation_<id>: Everyone watching one conversation (message list,
        typing line, reactions, member list)
    user_<id>: One user's conversation list (ordering, previews, unread)

Notices are sent after the surrounding transaction commits. A rolled back
mutation publishes nothing.

Usage:
    from chat.events import ChangeKind, publish_conversation_change

    publish_conversation_change(
        conversation.id,
        ChangeKind.MESSAGE_SENT,
        user_ids=member_ids,
    )
"""

from __future__ import annotations

import logging
from collections.abc import Iterable

from asgiref.sync import async_to_sync
from channels.layers import get_channel_layer
from django.db import models, transaction

from chat.constants import REALTIME_CONFIG

logger = logging.getLogger(__name__)


class ChangeKind(models.TextChoices):
    """What changed in a conversation."""

    CONVERSATION_CREATED = "conversation_created", "Conversation created"
    CONVERSATION_UPDATED = "conversation_updated", "Group details updated"
    CONVERSATION_DELETED = "conversation_deleted", "Group deleted"
    MEMBERS_CHANGED = "members_changed", "Members changed"
    MESSAGE_SENT = "message_sent", "Message sent"
    MESSAGE_DELETED = "message_deleted", "Message deleted"
    REACTIONS_CHANGED = "reactions_changed", "Reactions changed"
    TYPING_CHANGED = "typing_changed", "Typing changed"
    READ = "read", "Read pointer moved"


def conversation_group(conversation_id: int) -> str:
    return f"{REALTIME_CONFIG.CONVERSATION_GROUP_PREFIX}{conversation_id}"


def user_group(user_id: int) -> str:
    return f"{REALTIME_CONFIG.USER_GROUP_PREFIX}{user_id}"


def build_notice(conversation_id: int, kind: str, **extra) -> dict:
    """
    Build the channel layer event for a change.

    The "type" key routes the event to the consumer's conversation_changed
    handler.
    """
    return {
        "type": REALTIME_CONFIG.EVENT_TYPE,
        "conversation_id": conversation_id,
        "kind": str(kind),
        **extra,
    }


def publish_conversation_change(
    conversation_id: int,
    kind: str,
    user_ids: Iterable[int] = (),
    **extra,
) -> None:
    """
    Publish a change notice once the current transaction commits.

    Args:
        conversation_id: Conversation that changed
        kind: A ChangeKind value
        user_ids: Users whose conversation list is affected
        **extra: Additional identifiers (e.g. message_id, user_id). Never
            message content.
    """
    notice = build_notice(conversation_id, kind, **extra)
    targets = [conversation_group(conversation_id)]
    targets.extend(user_group(user_id) for user_id in dict.fromkeys(user_ids))

    transaction.on_commit(lambda: _send(targets, notice))


def _send(targets: list[str], notice: dict) -> None:
    channel_layer = get_channel_layer()
    if channel_layer is None:
        return

    try:
        for group in targets:
            async_to_sync(channel_layer.group_send)(group, notice)
    except Exception:
        # The mutation already committed; clients resync on their next read
        logger.warning(
            f"Failed to publish {notice['kind']} for conversation "
            f"{notice['conversation_id']}",
            exc_info=True,
        )
