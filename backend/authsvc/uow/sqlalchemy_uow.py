"""Unit of work over the Flask-SQLAlchemy session."""

from __future__ import annotations

from sqlalchemy.orm import Session

from authsvc.core.extensions import db
from authsvc.repositories import (
    PasswordResetRepository,
    UserRepository,
    UserSessionRepository,
)
from authsvc.uow.base import UnitOfWork


class SQLAlchemyUnitOfWork(UnitOfWork):
    """
    Commit when the ``with`` block exits cleanly, roll back otherwise.

    A failed commit is rolled back before the error propagates, so the
    session is usable again by the next unit of work.
    """

    def __init__(self, session: Session | None = None) -> None:
        self.session: Session = session if session is not None else db.session
        self.users = UserRepository(self.session)
        self.sessions = UserSessionRepository(self.session)
        self.password_resets = PasswordResetRepository(self.session)

    def __enter__(self) -> SQLAlchemyUnitOfWork:
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        if exc_type is not None:
            self.rollback()
            return
        try:
            self.commit()
        except BaseException:
            self.rollback()
            raise

    def commit(self) -> None:
        self.session.commit()

    def rollback(self) -> None:
        self.session.rollback()
