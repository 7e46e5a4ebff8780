"""Unit tests for the session and password-reset repositories."""

from __future__ import annotations

import pytest

from authsvc.models.base import utcnow
from authsvc.repositories import PasswordResetRepository, UserSessionRepository
from tests.factories.session import PasswordResetFactory, UserSessionFactory
from tests.factories.user import UserFactory


class TestUserSessionRepository:
    @pytest.fixture()
    def repo(self):
        return UserSessionRepository()

    def test_list_for_user_only_returns_own_sessions(self, repo, session):
        user = UserFactory()
        mine = [UserSessionFactory(user=user) for _ in range(3)]
        UserSessionFactory()

        listed = repo.list_for_user(user.id)
        assert {s.id for s in listed} == {s.id for s in mine}

    def test_delete_expired(self, repo, session):
        user = UserFactory()
        live = UserSessionFactory(user=user)
        UserSessionFactory(user=user, expired=True)
        UserSessionFactory(user=user, expired=True)

        assert repo.delete_expired(utcnow()) == 2
        session.expire_all()
        assert [s.id for s in repo.list_for_user(user.id)] == [live.id]


class TestPasswordResetRepository:
    @pytest.fixture()
    def repo(self):
        return PasswordResetRepository()

    def test_get_by_token_hash(self, repo, session):
        reset = PasswordResetFactory(token_hash="b" * 64)
        assert repo.get_by_token_hash("b" * 64).id == reset.id
        assert repo.get_by_token_hash("c" * 64) is None

    def test_mark_used_happens_once(self, repo, session):
        reset = PasswordResetFactory()

        assert repo.mark_used(reset.id) == 1
        assert repo.mark_used(reset.id) == 0
        session.expire_all()
        assert repo.get(reset.id).used is True

    def test_delete_expired(self, repo, session):
        PasswordResetFactory(expired=True)
        kept = PasswordResetFactory()

        assert repo.delete_expired(utcnow()) == 1
        session.expire_all()
        assert repo.get(kept.id) is not None
