from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Literal, Protocol

TokenType = Literal["access", "refresh"]

ACCESS_TOKEN_TYPE: TokenType = "access"
REFRESH_TOKEN_TYPE: TokenType = "refresh"


@dataclass(frozen=True, slots=True)
class TokenClaims:
    """
    Verified claims of a bearer token.

    :ivar user_id: Subject (owner user id).
    :ivar type: ``"access"`` or ``"refresh"``.
    :ivar issued_at: ``iat`` as an aware UTC datetime.
    :ivar expires_at: ``exp`` as an aware UTC datetime.
    :ivar jti: Random nonce making each issuance unique.
    """

    user_id: str
    type: TokenType
    issued_at: datetime
    expires_at: datetime
    jti: str | None = None


class TokenProvider(Protocol):
    """
    Issue and verify signed bearer tokens.

    Implementations hold the signing secret and lifetimes; callers never see
    either.
    """

    def create_access_token(self, user_id: str) -> str:
        """Return a signed access token for ``user_id``."""
        ...

    def create_refresh_token(self, user_id: str) -> str:
        """Return a signed refresh token for ``user_id``."""
        ...

    def decode(self, token: str, expected_type: TokenType) -> TokenClaims:
        """
        Verify signature, algorithm, type and expiry.

        :raises InvalidTokenError: On any verification failure.
        :raises TokenExpiredError: When only the expiry check fails.
        """
        ...
