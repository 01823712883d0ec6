"""
Tests for the WebSocket notice feeds.

These tests run the real middleware and routing through channels'
WebsocketCommunicator. They use transactional database access so the
services' on_commit notices actually fire.

Test Organization:
    - TestConnect: Authentication and membership checks on connect
    - TestConversationFeed: Notices for one conversation
    - TestInboxFeed: Notices for the user's conversation list
"""

import pytest
from asgiref.sync import async_to_sync
from channels.db import database_sync_to_async
from channels.layers import get_channel_layer
from channels.routing import URLRouter
from channels.testing import WebsocketCommunicator

from authentication.tests.conftest import bearer_token_for
from chat.authorization import MemberAction
from chat.constants import REALTIME_CONFIG
from chat.events import ChangeKind
from chat.middleware import JWTAuthMiddleware
from chat.routing import websocket_urlpatterns
from chat.services import MembershipService, MessageService

pytestmark = [pytest.mark.asyncio, pytest.mark.django_db(transaction=True)]

application = JWTAuthMiddleware(URLRouter(websocket_urlpatterns))


@pytest.fixture(autouse=True)
def empty_channel_layer():
    """Start every test with no channels or groups left over."""
    async_to_sync(get_channel_layer().flush)()


def feed(path, user=None, subprotocols=None):
    if user is not None and subprotocols is None:
        path = f"{path}?token={bearer_token_for(user)}"
    return WebsocketCommunicator(application, path, subprotocols=subprotocols)


# =============================================================================
# TestConnect
# =============================================================================


class TestConnect:
    """Tests for connection acceptance."""

    async def test_anonymous_connection_is_closed(self, group_conversation):
        communicator = feed(f"/ws/chat/{group_conversation.id}/")

        connected, code = await communicator.connect()

        assert connected is False
        assert code == REALTIME_CONFIG.CLOSE_UNAUTHENTICATED

    async def test_invalid_token_is_closed(self, group_conversation):
        communicator = feed(f"/ws/chat/{group_conversation.id}/?token=not-a-jwt")

        connected, code = await communicator.connect()

        assert connected is False
        assert code == REALTIME_CONFIG.CLOSE_UNAUTHENTICATED

    async def test_outsider_is_closed_with_not_found(self, group_conversation, outsider_user):
        """
        Non-members cannot subscribe to a conversation's notices.

        Why it matters: Notices reveal activity even without content.
        """
        communicator = feed(f"/ws/chat/{group_conversation.id}/", outsider_user)

        connected, code = await communicator.connect()

        assert connected is False
        assert code == REALTIME_CONFIG.CLOSE_NOT_FOUND

    async def test_member_connects_with_query_token(self, group_conversation, member_user):
        communicator = feed(f"/ws/chat/{group_conversation.id}/", member_user)

        connected, _ = await communicator.connect()

        assert connected is True
        await communicator.disconnect()

    async def test_member_connects_with_subprotocol_token(self, group_conversation, member_user):
        communicator = feed(
            f"/ws/chat/{group_conversation.id}/",
            subprotocols=["jwt", bearer_token_for(member_user)],
        )

        connected, subprotocol = await communicator.connect()

        assert connected is True
        assert subprotocol == "jwt"
        await communicator.disconnect()


# =============================================================================
# TestConversationFeed
# =============================================================================


class TestConversationFeed:
    """Tests for ConversationConsumer."""

    async def test_receives_message_sent_notice(self, group_conversation, owner_user, member_user):
        communicator = feed(f"/ws/chat/{group_conversation.id}/", member_user)
        await communicator.connect()

        message = (
            await database_sync_to_async(MessageService.send)(
                owner_user, group_conversation.id, content="hello there"
            )
        ).data

        notice = await communicator.receive_json_from(timeout=2)
        assert notice["type"] == "conversation.changed"
        assert notice["kind"] == ChangeKind.MESSAGE_SENT
        assert notice["conversation_id"] == group_conversation.id
        assert notice["message_id"] == message.id
        assert "hello there" not in str(notice)

        await communicator.disconnect()

    async def test_commands_are_rejected(self, group_conversation, member_user):
        communicator = feed(f"/ws/chat/{group_conversation.id}/", member_user)
        await communicator.connect()

        await communicator.send_json_to({"type": "send_message", "content": "hi"})

        reply = await communicator.receive_json_from(timeout=2)
        assert reply["type"] == "error"
        await communicator.disconnect()

    async def test_removed_member_is_disconnected(self, group_conversation, owner_user, member_user):
        """
        A removed member's open feed is closed after the notice.

        Why it matters: Removed users must stop seeing activity at once.
        """
        communicator = feed(f"/ws/chat/{group_conversation.id}/", member_user)
        await communicator.connect()

        await database_sync_to_async(MembershipService.manage_member)(
            owner_user, group_conversation.id, member_user.id, MemberAction.REMOVE
        )

        notice = await communicator.receive_json_from(timeout=2)
        assert notice["kind"] == ChangeKind.MEMBERS_CHANGED
        assert notice["user_id"] == member_user.id

        closed = await communicator.receive_output(timeout=2)
        assert closed["type"] == "websocket.close"
        assert closed["code"] == REALTIME_CONFIG.CLOSE_NOT_FOUND
        await communicator.disconnect()

    async def test_other_members_stay_connected_after_removal(
        self, group_conversation, owner_user, admin_user, member_user
    ):
        communicator = feed(f"/ws/chat/{group_conversation.id}/", admin_user)
        await communicator.connect()

        await database_sync_to_async(MembershipService.manage_member)(
            owner_user, group_conversation.id, member_user.id, MemberAction.REMOVE
        )

        notice = await communicator.receive_json_from(timeout=2)
        assert notice["kind"] == ChangeKind.MEMBERS_CHANGED
        assert await communicator.receive_nothing(timeout=0.2) is True
        await communicator.disconnect()


# =============================================================================
# TestInboxFeed
# =============================================================================


class TestInboxFeed:
    """Tests for InboxConsumer."""

    async def test_anonymous_connection_is_closed(self):
        connected, code = await feed("/ws/chat/").connect()

        assert connected is False
        assert code == REALTIME_CONFIG.CLOSE_UNAUTHENTICATED

    async def test_receives_notices_for_any_conversation(
        self, group_conversation, direct_conversation, owner_user, member_user
    ):
        """
        The inbox hears about every conversation the user belongs to.

        Why it matters: The conversation list reorders on each new message.
        """
        communicator = feed("/ws/chat/", member_user)
        connected, _ = await communicator.connect()
        assert connected is True

        await database_sync_to_async(MessageService.send)(
            owner_user, direct_conversation.id, content="psst"
        )

        notice = await communicator.receive_json_from(timeout=2)
        assert notice["conversation_id"] == direct_conversation.id
        assert notice["kind"] == ChangeKind.MESSAGE_SENT
        await communicator.disconnect()

    async def test_read_notice_reaches_only_the_reader(
        self, group_conversation, owner_user, member_user
    ):
        await database_sync_to_async(MessageService.send)(
            owner_user, group_conversation.id, content="hi"
        )
        owner_inbox = feed("/ws/chat/", owner_user)
        member_inbox = feed("/ws/chat/", member_user)
        await owner_inbox.connect()
        await member_inbox.connect()

        await database_sync_to_async(MessageService.mark_read)(member_user, group_conversation.id)

        notice = await member_inbox.receive_json_from(timeout=2)
        assert notice["kind"] == ChangeKind.READ
        assert await owner_inbox.receive_nothing(timeout=0.2) is True

        await owner_inbox.disconnect()
        await member_inbox.disconnect()
