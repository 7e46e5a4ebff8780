"""Shared Factory Boy base bound to the per-test database session."""

from __future__ import annotations

import factory
from sqlalchemy.orm import Session


class SQLAlchemySession:
    """Holder for the session installed by the ``_factories_session`` fixture."""

    _current: Session | None = None

    @classmethod
    def set(cls, session: Session | None) -> None:
        cls._current = session

    @classmethod
    def get(cls) -> Session:
        if cls._current is None:
            raise RuntimeError("No factory session installed; request the 'session' fixture first.")
        return cls._current


class BaseFactory(factory.alchemy.SQLAlchemyModelFactory):
    """Flushes (never commits) so rows vanish with the test SAVEPOINT."""

    class Meta:
        abstract = True
        sqlalchemy_session_factory = SQLAlchemySession.get
        sqlalchemy_session_persistence = "flush"
