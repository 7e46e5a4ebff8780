"""
authsvc.services._shared.ports
==============================

Collection of *ports* (hexagonal interfaces) that define the contracts the
auth service depends on.

Modules
-------
- :mod:`token_provider`:
    :class:`~.TokenProvider` and :class:`~.TokenClaims`: signed token issuance and verification.

- :mod:`user_store`:
    :class:`~.UserStore`: durable user identities.

- :mod:`session_store`:
    :class:`~.SessionStore`: durable audit trail of issued refresh tokens.

- :mod:`password_reset_store`:
    :class:`~.PasswordResetStore`: outstanding one-time reset tokens.

- :mod:`refresh_token_cache`:
    :class:`~.RefreshTokenCache`: the live refresh token per user.

Design Notes
------------
Every store port ships an in-memory implementation next to its Protocol.
Concrete adapters (SQLAlchemy, Redis, PyJWT) live under ``authsvc.infra``.
"""

from __future__ import annotations

from .password_reset_store import InMemoryPasswordResetStore, PasswordResetStore
from .refresh_token_cache import (
    REFRESH_TOKEN_KEY_PREFIX,
    InMemoryRefreshTokenCache,
    RefreshTokenCache,
)
from .session_store import InMemorySessionStore, SessionStore
from .token_provider import (
    ACCESS_TOKEN_TYPE,
    REFRESH_TOKEN_TYPE,
    TokenClaims,
    TokenProvider,
    TokenType,
)
from .user_store import InMemoryUserStore, UserStore

__all__ = [
    "ACCESS_TOKEN_TYPE",
    "REFRESH_TOKEN_KEY_PREFIX",
    "REFRESH_TOKEN_TYPE",
    "InMemoryPasswordResetStore",
    "InMemoryRefreshTokenCache",
    "InMemorySessionStore",
    "InMemoryUserStore",
    "PasswordResetStore",
    "RefreshTokenCache",
    "SessionStore",
    "TokenClaims",
    "TokenProvider",
    "TokenType",
    "UserStore",
]
