"""Persistence for :class:`UserSession` rows."""

from __future__ import annotations

from sqlalchemy import select

from authsvc.models.session import UserSession
from authsvc.repositories.base import ExpiringRepository


class UserSessionRepository(ExpiringRepository[UserSession]):
    """One row per issued refresh token."""

    model = UserSession

    def list_for_user(self, user_id: str) -> list[UserSession]:
        """Return a user's sessions, newest first."""
        stmt = (
            select(UserSession)
            .where(UserSession.user_id == user_id)
            .order_by(UserSession.created_at.desc(), UserSession.id.desc())
        )
        return list(self.session.execute(stmt).scalars())
