# comments in English; reST docstrings strict
from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

from authsvc.services._shared.dto import UserRecord


@dataclass(frozen=True, slots=True)
class LoginIn:
    """
    Input contract for login.

    :param email: Login email (normalized by the service).
    :type email: str
    :param password: Raw password.
    :type password: str
    """

    email: str
    password: str


@dataclass(frozen=True, slots=True)
class RegisterIn:
    """
    Input contract for account registration.

    :param name: Display name (trimmed by the service).
    :type name: str
    :param email: Login email.
    :type email: str
    :param password: Raw password.
    :type password: str
    """

    name: str
    email: str
    password: str


@dataclass(frozen=True, slots=True)
class RefreshIn:
    """
    Input contract for token refresh.

    :param refresh_token: Refresh token presented by the client.
    :type refresh_token: str
    """

    refresh_token: str


@dataclass(frozen=True, slots=True)
class PasswordResetRequestIn:
    """:param email: Email of the account to reset."""

    email: str


@dataclass(frozen=True, slots=True)
class PasswordResetConfirmIn:
    """
    Input contract for consuming a reset token.

    :param token: Raw reset token received out of band.
    :param new_password: Replacement password.
    """

    token: str
    new_password: str


@dataclass(frozen=True, slots=True)
class TokenPairOut:
    """
    Output contract for issued tokens.

    :param access_token: Short-lived access token.
    :type access_token: str
    :param refresh_token: Long-lived refresh token (never set as a cookie).
    :type refresh_token: str
    :param expires_in: Access-token lifetime in seconds.
    :type expires_in: int
    :param token_type: Always ``"Bearer"``.
    :type token_type: str
    """

    access_token: str
    refresh_token: str
    expires_in: int
    token_type: str = "Bearer"


@dataclass(frozen=True, slots=True)
class UserOut:
    """Public view of a user (no password hash)."""

    id: str
    email: str
    name: str
    is_active: bool
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_record(cls, record: UserRecord) -> UserOut:
        return cls(
            id=record.id,
            email=record.email,
            name=record.name,
            is_active=record.is_active,
            created_at=record.created_at,
            updated_at=record.updated_at,
        )


@dataclass(frozen=True, slots=True)
class PurgeOut:
    """
    Result of an expiry sweep.

    :param sessions: Expired session rows removed.
    :param password_resets: Expired reset rows removed.
    """

    sessions: int
    password_resets: int
