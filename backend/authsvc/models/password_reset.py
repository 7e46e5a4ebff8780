"""One-time password reset capabilities."""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import Boolean, DateTime, ForeignKey, Index, String, UniqueConstraint, false
from sqlalchemy.orm import Mapped, mapped_column

from authsvc.core.extensions import db

from .base import CreatedAtMixin, ReprMixin, UUIDPKMixin


class PasswordReset(UUIDPKMixin, ReprMixin, CreatedAtMixin, db.Model):
    """
    Outstanding password reset token.

    Only the SHA-256 digest of the emailed token is stored in ``token_hash``.
    ``used`` flips to ``True`` exactly once.
    """

    __tablename__ = "password_resets"

    user_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )
    token_hash: Mapped[str] = mapped_column(String(64), nullable=False)
    expires_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    used: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=False, server_default=false()
    )

    __table_args__ = (
        UniqueConstraint("token_hash", name="uq_password_resets_token_hash"),
        Index("ix_password_resets_user_id", "user_id"),
    )
