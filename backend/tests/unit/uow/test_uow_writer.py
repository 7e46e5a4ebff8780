"""Unit tests for SQLAlchemyUnitOfWork."""

from __future__ import annotations

from datetime import timedelta

import pytest
from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError

from authsvc.models import User, UserSession
from authsvc.models.base import utcnow
from authsvc.uow import SQLAlchemyUnitOfWork
from tests.factories.user import UserFactory


def _count(session, model) -> int:
    return session.execute(select(func.count()).select_from(model)).scalar_one()


def _session_row(user_id: str) -> UserSession:
    return UserSession(user_id=user_id, token_hash="d" * 64, expires_at=utcnow() + timedelta(days=1))


class TestSQLAlchemyUnitOfWork:
    def test_commits_user_and_session_together(self, session):
        with SQLAlchemyUnitOfWork() as uow:
            user = uow.users.add(UserFactory.build())
            uow.sessions.add(_session_row(user.id))

        assert _count(session, User) == 1
        assert _count(session, UserSession) == 1

    def test_exception_rolls_back_every_repository(self, session):
        with pytest.raises(RuntimeError), SQLAlchemyUnitOfWork() as uow:
            user = uow.users.add(UserFactory.build())
            uow.sessions.add(_session_row(user.id))
            raise RuntimeError("boom")

        assert _count(session, User) == 0
        assert _count(session, UserSession) == 0

    def test_constraint_violation_propagates_and_rolls_back(self, session):
        with SQLAlchemyUnitOfWork() as uow:
            uow.users.add(UserFactory.build(email="taken@example.com"))

        with pytest.raises(IntegrityError), SQLAlchemyUnitOfWork() as uow:
            uow.users.add(UserFactory.build(email="taken@example.com"))

        assert _count(session, User) == 1

    def test_repositories_share_the_session(self, session):
        uow = SQLAlchemyUnitOfWork()
        assert uow.users.session is uow.sessions.session is uow.password_resets.session
