"""
Domain-level and store-level exceptions.

Two families live here:

* :class:`ServiceError` and its subclasses are the error kinds the auth
  service surfaces to callers. Each carries a stable ``code``.
* :class:`StoreError` and its subclasses are raised by store adapters
  (SQL, Redis, in-memory). The service maps every store error to a
  :class:`ServiceError` before returning.

None of these import Flask or HTTP. The translation to RFC 7807 responses is
handled by ``authsvc/core/errors.py`` via ``BaseService.translate_exceptions()``.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, ClassVar

from sqlalchemy.exc import IntegrityError


def violates(exc: IntegrityError, constraint_name: str) -> bool:
    """
    Check whether an IntegrityError originates from a specific constraint.

    PostgreSQL includes the constraint name in the message. SQLite reports the
    offending columns instead (``UNIQUE constraint failed: users.email``), so
    the ``uq_<table>_<column>`` convention is matched against that form too.

    :param exc: The exception raised by SQLAlchemy during flush/commit.
    :param constraint_name: Constraint to match (e.g. ``'uq_users_email'``).
    :returns: ``True`` if the IntegrityError matches the given constraint.
    """
    message = str(exc.orig).lower() if exc.orig else str(exc).lower()
    name = constraint_name.lower()
    if name in message:
        return True
    if name.startswith("uq_") and "unique" in message:
        table_column = name[3:]
        return any(
            f"{table_column[:i]}.{table_column[i + 1:]}" in message
            for i, ch in enumerate(table_column)
            if ch == "_"
        )
    return False


# --------------------------------------------------------------------------- #
# Service errors
# --------------------------------------------------------------------------- #


class ServiceError(Exception):
    """
    Base class for all service-level errors.

    :param message: Client-safe message; defaults to the class message.
    :param details: Optional structured, client-safe details.
    """

    code: ClassVar[str] = "service_error"
    default_message: ClassVar[str] = "Service error"

    def __init__(self, message: str | None = None, *, details: dict[str, Any] | None = None):
        self.message = message or self.default_message
        self.details = details or {}
        super().__init__(self.message)


class InvalidInputError(ServiceError):
    """Caller-supplied data fails shape validation."""

    code = "invalid_input"
    default_message = "Invalid input"


class InvalidCredentialsError(ServiceError):
    """Login failed: unknown email, inactive user or wrong password alike."""

    code = "invalid_credentials"
    default_message = "Invalid email or password"


class UserExistsError(ServiceError):
    code = "user_exists"
    default_message = "A user with this email already exists"


class UserNotFoundError(ServiceError):
    code = "user_not_found"
    default_message = "User not found"


class InvalidTokenError(ServiceError):
    """Signature, algorithm, type, expiry or cache mismatch on a presented token."""

    code = "invalid_token"
    default_message = "Invalid token"


class TokenExpiredError(InvalidTokenError):
    code = "token_expired"
    default_message = "Token has expired"


class ForbiddenError(ServiceError):
    code = "forbidden"
    default_message = "Account is disabled"


class PasswordResetExpiredError(ServiceError):
    code = "password_reset_expired"
    default_message = "Password reset token has expired"


class PasswordResetUsedError(ServiceError):
    code = "password_reset_used"
    default_message = "Password reset token has already been used"


class InternalServerError(ServiceError):
    """Store, hashing or signing failure. The message is always opaque."""

    code = "internal_server_error"
    default_message = "Unexpected error"

    def __init__(self, message: str | None = None, **_: Any) -> None:
        super().__init__(self.default_message)


class DeadlineExceededError(InternalServerError):
    """The request deadline passed before the operation finished."""


# --------------------------------------------------------------------------- #
# Store errors
# --------------------------------------------------------------------------- #


class StoreError(Exception):
    """
    Base class for store adapter failures (connection, driver, timeout).

    Adapters wrap driver exceptions in this type so nothing SQLAlchemy- or
    redis-specific escapes upward.
    """


@dataclass(slots=True, eq=False)
class NotFoundError(StoreError):
    """
    Raised when an entity is not found in a store.

    :param entity: Entity name (e.g., "User").
    :type entity: str
    :param key: Identifier or search key.
    :type key: str
    """

    entity: str
    key: str

    def __str__(self) -> str:
        return f"{self.entity} not found: {self.key}"


@dataclass(slots=True, eq=False)
class ConflictError(StoreError):
    """
    Raised when a unique constraint is violated.

    :param entity: Entity name (e.g., "User").
    :type entity: str
    :param detail: Short human-readable explanation.
    :type detail: str
    """

    entity: str
    detail: str

    def __str__(self) -> str:
        return f"Conflict on {self.entity}: {self.detail}"
