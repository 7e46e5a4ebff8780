# comments in English; reST docstrings strict
"""Store-level records exchanged between ports and services."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime


@dataclass(frozen=True, slots=True)
class UserRecord:
    """
    Snapshot of a user as returned by a :class:`UserStore`.

    :param id: Opaque user identifier (UUID string).
    :type id: str
    :param email: Normalized (trimmed, lower-case) email.
    :type email: str
    :param name: Display name.
    :type name: str
    :param password_hash: Stored password hash.
    :type password_hash: str
    :param is_active: Whether the account may authenticate.
    :type is_active: bool
    :param created_at: Creation time (UTC).
    :type created_at: datetime
    :param updated_at: Last update time (UTC).
    :type updated_at: datetime
    """

    id: str
    email: str
    name: str
    password_hash: str
    is_active: bool
    created_at: datetime
    updated_at: datetime


@dataclass(frozen=True, slots=True)
class NewUser:
    """
    Data needed to create a user; the store assigns id and timestamps.

    :param email: Normalized email.
    :param name: Trimmed display name.
    :param password_hash: Already hashed password.
    """

    email: str
    name: str
    password_hash: str
    is_active: bool = True


@dataclass(frozen=True, slots=True)
class SessionRecord:
    """
    Durable receipt of an issued refresh token.

    :param token_hash: SHA-256 hex digest of the refresh token.
    """

    id: str
    user_id: str
    token_hash: str
    expires_at: datetime
    created_at: datetime


@dataclass(frozen=True, slots=True)
class PasswordResetRecord:
    """
    Outstanding password reset.

    :param token_hash: SHA-256 hex digest of the reset token.
    :param used: ``True`` once the reset has been consumed.
    """

    id: str
    user_id: str
    token_hash: str
    expires_at: datetime
    used: bool
    created_at: datetime
