"""User model definition."""

from __future__ import annotations

from typing import Any

from sqlalchemy import Boolean, String, UniqueConstraint, true
from sqlalchemy.orm import Mapped, mapped_column, validates

from authsvc.core.extensions import db
from authsvc.core.security import hash_password, verify_password

from .base import ReprMixin, TimestampMixin, UUIDPKMixin


class User(UUIDPKMixin, ReprMixin, TimestampMixin, db.Model):
    """
    Authentication identity.

    Fields
    ------
    email : str
        Login email. Stored normalized (lowercase, trimmed).
    name : str
        Display name.
    password_hash : str
        Hashed password (write-only setter via ``password``).
    is_active : bool
        Inactive users cannot log in or refresh.
    """

    __tablename__ = "users"

    email: Mapped[str] = mapped_column(String(255), nullable=False)
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    password_hash: Mapped[str] = mapped_column(String(255), nullable=False)
    is_active: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=True, server_default=true()
    )

    __table_args__ = (UniqueConstraint("email", name="uq_users_email"),)

    @property
    def password(self) -> Any:
        """Write-only; reading raises :class:`AttributeError`."""
        raise AttributeError("Password is write-only.")

    @password.setter
    def password(self, raw: str) -> None:
        """Store the scrypt hash of ``raw``."""
        if not isinstance(raw, str) or not raw:
            raise ValueError("Password must be a non-empty string.")
        self.password_hash = hash_password(raw)

    def verify_password(self, raw: str) -> bool:
        """Constant-time check of ``raw`` against the stored hash."""
        return verify_password(raw, self.password_hash)

    # -------------------- Validators --------------------
    @validates("email")
    def _normalize_email(self, key: str, value: str) -> str:
        """
        Normalize email (lowercased/trimmed).

        :raises ValueError: If email is missing.
        """
        if not value or not isinstance(value, str):
            raise ValueError("Email is required.")
        return value.strip().lower()

    @validates("name")
    def _normalize_name(self, key: str, value: str) -> str:
        """Trim the display name; blank names are rejected."""
        if not isinstance(value, str) or not value.strip():
            raise ValueError("Name is required.")
        return value.strip()
