"""
Identity provider token type for djangorestframework-simplejwt.

Tokens are issued by the external identity provider, not by this service,
so they carry no simplejwt `jti` and usually no `token_type` claim. The
subject (`sub`) is the user's external identity; `name`, `email` and
`picture` claims are copied onto the User on sight.

Configured through SIMPLE_JWT["AUTH_TOKEN_CLASSES"].

Usage:
    # Decode and verify (signature, exp, aud/iss when configured)
    token = IdentityToken(raw_token)
    external_id = token["sub"]

    # Mint a token, e.g. for tests or a local development login
    raw = str(IdentityToken.for_identity("user_2abc", name="Ada"))
"""

from __future__ import annotations

from rest_framework_simplejwt.exceptions import TokenError
from rest_framework_simplejwt.settings import api_settings
from rest_framework_simplejwt.tokens import Token


class IdentityToken(Token):
    """
    Access token issued by the identity provider.

    Verification checks expiry, and the token type only when the provider
    included one.
    """

    token_type = "access"
    lifetime = api_settings.ACCESS_TOKEN_LIFETIME

    def verify(self) -> None:
        self.check_exp()

        if api_settings.TOKEN_TYPE_CLAIM in self.payload:
            self.verify_token_type()

    def verify_token_type(self) -> None:
        token_type = self.payload.get(api_settings.TOKEN_TYPE_CLAIM)
        if token_type != self.token_type:
            raise TokenError("Token has wrong type")

    @classmethod
    def for_identity(
        cls,
        external_id: str,
        name: str = "",
        email: str = "",
        picture: str = "",
    ) -> IdentityToken:
        """
        Build a signed token for an external identity.

        Empty profile claims are left out, matching providers that only
        send what the user filled in.
        """
        token = cls()
        token[api_settings.USER_ID_CLAIM] = external_id
        for claim, value in (("name", name), ("email", email), ("picture", picture)):
            if value:
                token[claim] = value
        return token
