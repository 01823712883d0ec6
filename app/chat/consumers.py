"""
WebSocket consumers for the chat application.

The sockets are notification feeds only. Clients send every command through
the REST API; the server pushes "conversation.changed" notices telling
clients which conversation to re-read. Notices never carry message content.

Consumers:
    ConversationConsumer: Notices for one conversation the user belongs to
    InboxConsumer: Notices for the user's conversation list

Authentication:
    Users are authenticated via JWT token passed as query parameter or
    subprotocol. JWTAuthMiddleware attaches the user to self.scope["user"].

Channel Groups:
    conversation_<id>: Joined by ConversationConsumer
    user_<id>: Joined by InboxConsumer

Close codes:
    4001: Not authenticated
    4004: Conversation missing, or user is not (or no longer) a member

Message Types (to client):
    {"type": "conversation.changed", "conversation_id": 1, "kind": "message_sent", ...}
"""

from __future__ import annotations

import logging

from channels.db import database_sync_to_async
from channels.generic.websocket import AsyncJsonWebsocketConsumer
from django.contrib.auth.models import AnonymousUser

from chat.authorization import ChatAuthorizationService
from chat.constants import REALTIME_CONFIG
from chat.events import ChangeKind, conversation_group, user_group
from chat.middleware import JWT_SUBPROTOCOL

logger = logging.getLogger(__name__)


class NoticeConsumer(AsyncJsonWebsocketConsumer):
    """
    Shared behavior of the notice feeds.

    Subclasses decide which group to join in get_group_name(); returning
    None closes the connection with CLOSE_NOT_FOUND.
    """

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.user = None
        self.group_name: str | None = None

    async def connect(self):
        """
        Handle WebSocket connection.

        Validates:
            1. User is authenticated
            2. The feed is visible to the user

        On success, joins the channel group and accepts the connection.
        """
        user = self.scope.get("user")
        if not user or isinstance(user, AnonymousUser):
            logger.warning(f"Rejected unauthenticated connection to {self.scope.get('path')}")
            await self.close(code=REALTIME_CONFIG.CLOSE_UNAUTHENTICATED)
            return
        self.user = user

        group_name = await self.get_group_name()
        if group_name is None:
            await self.close(code=REALTIME_CONFIG.CLOSE_NOT_FOUND)
            return

        self.group_name = group_name
        await self.channel_layer.group_add(self.group_name, self.channel_name)

        subprotocols = self.scope.get("subprotocols") or []
        await self.accept(subprotocol=JWT_SUBPROTOCOL if JWT_SUBPROTOCOL in subprotocols else None)
        logger.info(f"User {user.id} subscribed to {self.group_name}")

    async def disconnect(self, close_code):
        """Leave the channel group if one was joined."""
        if self.group_name:
            await self.channel_layer.group_discard(self.group_name, self.channel_name)
            logger.info(f"User {self.user.id} unsubscribed from {self.group_name} ({close_code})")

    async def receive_json(self, content, **kwargs):
        """Commands are not accepted over the socket."""
        await self.send_json(
            {
                "type": "error",
                "message": "This socket only delivers notices; use the REST API for commands",
            }
        )

    async def conversation_changed(self, event):
        """
        Handle conversation.changed events from the channel layer.

        Forwards the notice to the client.
        """
        await self.send_json(event)

    async def get_group_name(self) -> str | None:
        raise NotImplementedError


class ConversationConsumer(NoticeConsumer):
    """
    Notice feed for one conversation.

    URL: ws/chat/<conversation_id>/

    A member who leaves or is removed receives the notice and is then
    disconnected with CLOSE_NOT_FOUND.
    """

    async def get_group_name(self) -> str | None:
        self.conversation_id = self.scope["url_route"]["kwargs"]["conversation_id"]
        is_member = await self._is_participant()
        if not is_member:
            logger.warning(
                f"User {self.user.id} is not a participant in "
                f"conversation {self.conversation_id}"
            )
            return None
        return conversation_group(self.conversation_id)

    async def conversation_changed(self, event):
        await super().conversation_changed(event)

        if event.get("kind") == ChangeKind.MEMBERS_CHANGED and event.get("user_id") == self.user.id:
            still_member = await self._is_participant()
            if not still_member:
                await self.close(code=REALTIME_CONFIG.CLOSE_NOT_FOUND)

    @database_sync_to_async
    def _is_participant(self) -> bool:
        return ChatAuthorizationService.is_conversation_participant(
            self.user,
            self.conversation_id,
        )


class InboxConsumer(NoticeConsumer):
    """
    Notice feed for the user's conversation list.

    URL: ws/chat/
    """

    async def get_group_name(self) -> str | None:
        return user_group(self.user.id)
