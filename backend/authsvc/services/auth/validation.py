"""Shape checks for auth inputs. Each failure raises :class:`InvalidInputError`."""

from __future__ import annotations

from typing import Final

from authsvc.services._shared.errors import InvalidInputError

MAX_EMAIL_LENGTH: Final[int] = 255
MIN_PASSWORD_LENGTH: Final[int] = 6
MAX_PASSWORD_LENGTH: Final[int] = 128
MAX_NAME_LENGTH: Final[int] = 100


def normalize_email(email: str) -> str:
    """Trim and lower-case an email."""
    return email.strip().lower() if isinstance(email, str) else ""


def is_valid_email(email: str) -> bool:
    if not isinstance(email, str) or not email or len(email) > MAX_EMAIL_LENGTH:
        return False
    local, sep, domain = email.rpartition("@")
    return bool(sep and local and "." in domain.strip(".") and " " not in email)


def is_valid_password(password: str) -> bool:
    return isinstance(password, str) and MIN_PASSWORD_LENGTH <= len(password) <= MAX_PASSWORD_LENGTH


def is_valid_name(name: str) -> bool:
    return isinstance(name, str) and 0 < len(name.strip()) <= MAX_NAME_LENGTH


def require_email(email: str) -> str:
    """Return the normalized email or raise."""
    normalized = normalize_email(email)
    if not is_valid_email(normalized):
        raise InvalidInputError("Invalid email", details={"field": "email"})
    return normalized


def require_password(password: str, *, field: str = "password") -> str:
    if not is_valid_password(password):
        raise InvalidInputError(
            f"Password must be {MIN_PASSWORD_LENGTH}-{MAX_PASSWORD_LENGTH} characters",
            details={"field": field},
        )
    return password


def require_name(name: str) -> str:
    """Return the trimmed name or raise."""
    if not is_valid_name(name):
        raise InvalidInputError(
            f"Name must be 1-{MAX_NAME_LENGTH} characters", details={"field": "name"}
        )
    return name.strip()
