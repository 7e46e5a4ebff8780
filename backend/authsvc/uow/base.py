"""Transaction boundary shared by the SQL store adapters."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from authsvc.repositories import (
        PasswordResetRepository,
        UserRepository,
        UserSessionRepository,
    )


class UnitOfWork(ABC):
    """
    One store operation's transaction.

    Repositories reached through the unit of work share its session, so
    their changes commit or roll back together when the ``with`` block ends.
    """

    users: UserRepository
    sessions: UserSessionRepository
    password_resets: PasswordResetRepository

    @abstractmethod
    def __enter__(self) -> UnitOfWork: ...
    @abstractmethod
    def __exit__(self, exc_type, exc, tb) -> None: ...
    @abstractmethod
    def commit(self) -> None: ...
    @abstractmethod
    def rollback(self) -> None: ...
