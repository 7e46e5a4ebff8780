"""Durable receipts of issued refresh tokens."""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import DateTime, ForeignKey, Index, String
from sqlalchemy.orm import Mapped, mapped_column

from authsvc.core.extensions import db

from .base import CreatedAtMixin, ReprMixin, UUIDPKMixin


class UserSession(UUIDPKMixin, ReprMixin, CreatedAtMixin, db.Model):
    """
    One row per refresh token ever issued.

    ``token_hash`` is the SHA-256 hex digest of the refresh token; the raw
    token never reaches this table. Rows are not removed on rotation, only by
    the expiry sweep.
    """

    __tablename__ = "user_sessions"

    user_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )
    token_hash: Mapped[str] = mapped_column(String(64), nullable=False)
    expires_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)

    __table_args__ = (
        Index("ix_user_sessions_user_id", "user_id"),
        Index("ix_user_sessions_expires_at", "expires_at"),
    )
