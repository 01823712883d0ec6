"""
WebSocket URL routing for the chat application.

This module defines the URL patterns for WebSocket connections,
mapping paths to their corresponding consumers.

URL Patterns:
    ws/chat/                   - Notices for the user's conversation list
    ws/chat/<conversation_id>/ - Notices for one conversation

Authentication:
    JWT token should be passed as query parameter (?token=<jwt>) or as the
    subprotocol pair "jwt, <jwt>". JWTAuthMiddleware validates the token and
    attaches the user to the consumer's scope.
"""

from django.urls import path

from chat import consumers

websocket_urlpatterns = [
    path(
        "ws/chat/",
        consumers.InboxConsumer.as_asgi(),
    ),
    path(
        "ws/chat/<int:conversation_id>/",
        consumers.ConversationConsumer.as_asgi(),
    ),
]
