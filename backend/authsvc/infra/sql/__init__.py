"""SQLAlchemy adapters for the durable store ports."""

from __future__ import annotations

from .password_reset_store import SQLAlchemyPasswordResetStore
from .session_store import SQLAlchemySessionStore
from .user_store import SQLAlchemyUserStore

__all__ = ["SQLAlchemyPasswordResetStore", "SQLAlchemySessionStore", "SQLAlchemyUserStore"]
