"""
WebSocket authentication middleware.

Provides JWT authentication for WebSocket connections using the same
identity tokens as the REST API. Supports token via query string or
subprotocol.

Related files:
    - routing.py: WebSocket URL patterns
    - consumers.py: WebSocket handlers
    - config/asgi.py: ASGI configuration
    - authentication/backends.py: resolve_user_from_token

Token Passing Methods:
    1. Query string: ws://host/ws/chat/1/?token=<jwt_token>
    2. Subprotocol: Sec-WebSocket-Protocol: jwt, <jwt_token>

Usage in config/asgi.py:
    from chat.middleware import JWTAuthMiddleware

    application = ProtocolTypeRouter({
        "websocket": JWTAuthMiddleware(
            URLRouter(websocket_urlpatterns)
        ),
    })
"""

from __future__ import annotations

import logging
from urllib.parse import parse_qs

from channels.db import database_sync_to_async
from channels.middleware import BaseMiddleware
from django.contrib.auth.models import AnonymousUser

from authentication.backends import resolve_user_from_token

logger = logging.getLogger(__name__)

JWT_SUBPROTOCOL = "jwt"


class JWTAuthMiddleware(BaseMiddleware):
    """
    JWT authentication middleware for WebSocket connections.

    Extracts the token from the query string or subprotocol, resolves it to
    a User and attaches it to scope["user"]. Missing or invalid tokens
    leave an AnonymousUser; consumers close those connections.

    Token sources (in order of precedence):
        1. Query string: ?token=<jwt_token>
        2. Subprotocol: Sec-WebSocket-Protocol: jwt, <jwt_token>
    """

    async def __call__(self, scope, receive, send):
        """Authenticate the connection, then pass to the inner application."""
        scope = dict(scope)
        token = self._get_token_from_query(scope) or self._get_token_from_subprotocol(scope)

        user = None
        if token:
            user = await self._get_user_from_token(token)
        scope["user"] = user or AnonymousUser()

        return await super().__call__(scope, receive, send)

    @staticmethod
    def _get_token_from_query(scope) -> str | None:
        """Extract token from query string."""
        query_string = scope.get("query_string", b"").decode()
        token_list = parse_qs(query_string).get("token", [])
        return token_list[0] if token_list else None

    @staticmethod
    def _get_token_from_subprotocol(scope) -> str | None:
        """
        Extract token from WebSocket subprotocol.

        Expects: Sec-WebSocket-Protocol: jwt, <token>
        """
        subprotocols = scope.get("subprotocols") or []
        if len(subprotocols) >= 2 and subprotocols[0] == JWT_SUBPROTOCOL:
            return subprotocols[1]
        return None

    @database_sync_to_async
    def _get_user_from_token(self, token: str):
        return resolve_user_from_token(token)
