"""SQLAlchemy repositories for users, sessions and password resets."""

from __future__ import annotations

from authsvc.repositories.base import BaseRepository, ExpiringRepository
from authsvc.repositories.password_reset import PasswordResetRepository
from authsvc.repositories.session import UserSessionRepository
from authsvc.repositories.user import UserRepository

__all__ = [
    "BaseRepository",
    "ExpiringRepository",
    "PasswordResetRepository",
    "UserRepository",
    "UserSessionRepository",
]
