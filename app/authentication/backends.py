"""
Identity resolution for HTTP and WebSocket callers.

Every request carrying `Authorization: Bearer <token>` is resolved here:
the token is verified by simplejwt (IdentityToken), then its subject is
upserted into the directory through IdentityService. A request without a
resolvable identity never reaches a chat service.

Related files:
    - tokens.py: IdentityToken verification rules
    - services.py: IdentityService.upsert_from_provider
    - chat/middleware.py: Reuses resolve_user_from_token for WebSockets
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from rest_framework.exceptions import AuthenticationFailed
from rest_framework_simplejwt.authentication import JWTAuthentication
from rest_framework_simplejwt.exceptions import InvalidToken
from rest_framework_simplejwt.settings import api_settings

from authentication.services import IdentityService

if TYPE_CHECKING:
    from rest_framework_simplejwt.tokens import Token

    from authentication.models import User

logger = logging.getLogger(__name__)


class IdentityJWTAuthentication(JWTAuthentication):
    """
    DRF authentication class resolving identity provider tokens to users.

    Unlike the stock class, unknown subjects are not rejected: the first
    valid token for a subject creates its User.
    """

    def get_user(self, validated_token: Token) -> User:
        try:
            external_id = validated_token[api_settings.USER_ID_CLAIM]
        except KeyError as exc:
            raise InvalidToken("Token contained no recognizable user identification") from exc

        result = IdentityService.upsert_from_provider(
            external_id,
            name=validated_token.get("name", ""),
            email=validated_token.get("email", ""),
            avatar_ref=validated_token.get("picture", ""),
        )
        if not result.success:
            raise InvalidToken(result.error)

        user = result.data
        if not user.is_active:
            logger.warning(f"Inactive user {user.id} presented a valid token")
            raise AuthenticationFailed("User is inactive", code="user_inactive")

        return user


def resolve_user_from_token(raw_token: str) -> User | None:
    """
    Resolve a raw token string to an active User.

    Returns None instead of raising, for callers (the WebSocket
    middleware) that represent failure as an anonymous user.
    """
    authenticator = IdentityJWTAuthentication()
    try:
        validated_token = authenticator.get_validated_token(raw_token)
        return authenticator.get_user(validated_token)
    except (InvalidToken, AuthenticationFailed) as exc:
        logger.warning(f"Rejected identity token: {exc}")
        return None
