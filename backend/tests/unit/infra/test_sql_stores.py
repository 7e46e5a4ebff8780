"""Unit tests for the SQLAlchemy store adapters."""

from __future__ import annotations

from datetime import timedelta

import pytest
from sqlalchemy.exc import OperationalError

from authsvc.infra.sql import (
    SQLAlchemyPasswordResetStore,
    SQLAlchemySessionStore,
    SQLAlchemyUserStore,
)
from authsvc.models.base import utcnow
from authsvc.services._shared.dto import NewUser
from authsvc.services._shared.errors import ConflictError, NotFoundError, StoreError
from tests.factories.session import PasswordResetFactory, UserSessionFactory
from tests.factories.user import UserFactory


def _new_user(email: str = "new@example.com") -> NewUser:
    return NewUser(email=email, name="New User", password_hash="scrypt:fake$hash")


class TestSQLAlchemyUserStore:
    @pytest.fixture()
    def store(self):
        return SQLAlchemyUserStore()

    def test_create_and_lookup(self, store, session):
        created = store.create_user(_new_user())

        assert created.id
        assert created.is_active is True
        assert created.created_at.tzinfo is not None
        assert store.get_user_by_id(created.id) == created
        assert store.get_user_by_email("NEW@example.com").id == created.id

    def test_duplicate_email_is_conflict(self, store, session):
        store.create_user(_new_user())
        with pytest.raises(ConflictError):
            store.create_user(_new_user())

    def test_missing_user_is_not_found(self, store, session):
        with pytest.raises(NotFoundError):
            store.get_user_by_id("missing")
        with pytest.raises(NotFoundError):
            store.get_user_by_email("missing@example.com")
        with pytest.raises(NotFoundError):
            store.update_password("missing", "x")

    def test_update_user_whitelist(self, store, session):
        user = UserFactory()
        updated = store.update_user(user.id, {"name": "Renamed", "is_active": False})

        assert updated.name == "Renamed"
        assert updated.is_active is False

    def test_update_password(self, store, session):
        user = UserFactory()
        store.update_password(user.id, "scrypt:other$hash")

        assert store.get_user_by_id(user.id).password_hash == "scrypt:other$hash"

    def test_delete_user(self, store, session):
        user = UserFactory()
        store.delete_user(user.id)
        with pytest.raises(NotFoundError):
            store.get_user_by_id(user.id)

    def test_driver_errors_become_store_errors(self, store, session, monkeypatch):
        def _boom(*args, **kwargs):
            raise OperationalError("SELECT 1", {}, Exception("database is locked"))

        monkeypatch.setattr("authsvc.repositories.user.UserRepository.get_by_email", _boom)
        with pytest.raises(StoreError) as excinfo:
            store.get_user_by_email("any@example.com")
        assert not isinstance(excinfo.value, NotFoundError)


class TestSQLAlchemySessionStore:
    @pytest.fixture()
    def store(self):
        return SQLAlchemySessionStore()

    def test_create_and_list(self, store, session):
        user = UserFactory()
        expires = utcnow() + timedelta(days=7)
        first = store.create_session(user.id, "a" * 64, expires)
        second = store.create_session(user.id, "b" * 64, expires)

        assert store.get_session_by_id(first.id).token_hash == "a" * 64
        listed = store.get_sessions_by_user_id(user.id)
        assert {s.id for s in listed} == {first.id, second.id}

    def test_delete_session(self, store, session):
        row = UserSessionFactory()
        store.delete_session(row.id)
        with pytest.raises(NotFoundError):
            store.get_session_by_id(row.id)
        with pytest.raises(NotFoundError):
            store.delete_session(row.id)

    def test_delete_expired_sessions(self, store, session):
        UserSessionFactory(expired=True)
        live = UserSessionFactory()

        assert store.delete_expired_sessions() == 1
        assert store.get_session_by_id(live.id).id == live.id


class TestSQLAlchemyPasswordResetStore:
    @pytest.fixture()
    def store(self):
        return SQLAlchemyPasswordResetStore()

    def test_create_and_lookup_by_digest(self, store, session):
        user = UserFactory()
        created = store.create_password_reset(user.id, "c" * 64, utcnow() + timedelta(hours=24))

        found = store.get_password_reset_by_token("c" * 64)
        assert found.id == created.id
        assert found.used is False
        assert found.expires_at > utcnow()

    def test_duplicate_digest_is_conflict(self, store, session):
        user = UserFactory()
        store.create_password_reset(user.id, "d" * 64, utcnow() + timedelta(hours=1))
        with pytest.raises(ConflictError):
            store.create_password_reset(user.id, "d" * 64, utcnow() + timedelta(hours=1))

    def test_mark_used_once(self, store, session):
        reset = PasswordResetFactory()

        store.mark_password_reset_as_used(reset.id)
        assert store.get_password_reset_by_token(reset.token_hash).used is True
        with pytest.raises(ConflictError):
            store.mark_password_reset_as_used(reset.id)

    def test_mark_used_unknown(self, store, session):
        with pytest.raises(NotFoundError):
            store.mark_password_reset_as_used("missing")

    def test_delete_expired(self, store, session):
        PasswordResetFactory(expired=True)
        PasswordResetFactory(expired=True)
        PasswordResetFactory()

        assert store.delete_expired_password_resets() == 2
