"""Persistence for :class:`User` rows."""

from __future__ import annotations

from sqlalchemy import select

from authsvc.models.user import User
from authsvc.repositories.base import BaseRepository


class UserRepository(BaseRepository[User]):
    """User lookups and updates. Passwords change only via :meth:`set_password_hash`."""

    model = User
    updatable = frozenset({"email", "name", "is_active"})

    def get_by_email(self, email: str) -> User | None:
        """Fetch a user by email, ignoring case and surrounding whitespace."""
        stmt = select(User).where(User.email == email.strip().lower())
        return self.session.execute(stmt).scalar_one_or_none()

    def set_password_hash(self, user: User, password_hash: str) -> None:
        """Store an already computed hash."""
        user.password_hash = password_hash
        self.flush()
