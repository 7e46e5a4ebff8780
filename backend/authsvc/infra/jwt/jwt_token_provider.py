# authsvc/infra/jwt/jwt_token_provider.py
from __future__ import annotations

import secrets
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from typing import Any, Final

import jwt

from authsvc.core.config import AuthSettings
from authsvc.services._shared.errors import (
    InternalServerError,
    InvalidTokenError,
    TokenExpiredError,
)
from authsvc.services._shared.ports import (
    ACCESS_TOKEN_TYPE,
    REFRESH_TOKEN_TYPE,
    TokenClaims,
    TokenProvider,
    TokenType,
)

ALGORITHM: Final[str] = "HS256"
REQUIRED_CLAIMS: Final[list[str]] = ["user_id", "type", "iat", "exp"]


@dataclass(frozen=True, slots=True)
class JWTTokenProvider(TokenProvider):
    """
    HS256 token provider backed by PyJWT.

    Claims are flat: ``{user_id, type, iat, exp, jti}``. ``jti`` is a random
    nonce so two tokens minted for the same user in the same second differ.

    :param settings: Read-only auth settings (secret and lifetimes).
    """

    settings: AuthSettings

    def _encode(self, user_id: str, token_type: TokenType, ttl: timedelta) -> str:
        now = datetime.now(UTC)
        payload: dict[str, Any] = {
            "user_id": user_id,
            "type": token_type,
            "iat": int(now.timestamp()),
            "exp": int((now + ttl).timestamp()),
            "jti": secrets.token_hex(8),
        }
        try:
            return jwt.encode(payload, self.settings.jwt_secret, algorithm=ALGORITHM)
        except (jwt.PyJWTError, TypeError, ValueError) as exc:
            raise InternalServerError() from exc

    def create_access_token(self, user_id: str) -> str:
        return self._encode(user_id, ACCESS_TOKEN_TYPE, self.settings.access_expires)

    def create_refresh_token(self, user_id: str) -> str:
        return self._encode(user_id, REFRESH_TOKEN_TYPE, self.settings.refresh_expires)

    def decode(self, token: str, expected_type: TokenType) -> TokenClaims:
        """
        Verify ``token`` and return its claims.

        Only ``HS256`` is accepted, which rejects ``alg: none`` and any
        asymmetric/alternate-algorithm substitution.

        :raises TokenExpiredError: When ``exp`` is in the past.
        :raises InvalidTokenError: On signature, algorithm, claim or type mismatch.
        """
        try:
            payload = jwt.decode(
                token,
                self.settings.jwt_secret,
                algorithms=[ALGORITHM],
                options={"require": REQUIRED_CLAIMS},
            )
        except jwt.ExpiredSignatureError as exc:
            raise TokenExpiredError() from exc
        except jwt.PyJWTError as exc:
            raise InvalidTokenError() from exc

        if payload.get("type") != expected_type:
            raise InvalidTokenError(f"Expected a {expected_type} token")

        user_id = payload.get("user_id")
        if not isinstance(user_id, str) or not user_id:
            raise InvalidTokenError("Token subject is malformed")

        return TokenClaims(
            user_id=user_id,
            type=expected_type,
            issued_at=datetime.fromtimestamp(int(payload["iat"]), UTC),
            expires_at=datetime.fromtimestamp(int(payload["exp"]), UTC),
            jti=payload.get("jti"),
        )
