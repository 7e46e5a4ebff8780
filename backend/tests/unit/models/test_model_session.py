"""Tests for the session and password-reset models."""

from __future__ import annotations

from datetime import timedelta

import pytest
from sqlalchemy.exc import IntegrityError

from authsvc.models import PasswordReset
from authsvc.models.base import as_utc, utcnow
from tests.factories.session import PasswordResetFactory, UserSessionFactory
from tests.factories.user import UserFactory


class TestUserSession:
    def test_token_hash_is_sha256_hex(self, session):
        s = UserSessionFactory()
        assert len(s.token_hash) == 64
        int(s.token_hash, 16)

    def test_expires_at_round_trips_as_utc(self, session):
        s = UserSessionFactory()
        session.expire(s)
        assert as_utc(s.expires_at) > utcnow()


class TestPasswordReset:
    def test_defaults(self, session):
        reset = PasswordResetFactory()
        assert reset.used is False
        assert reset.created_at is not None

    def test_token_hash_unique(self, session):
        user = UserFactory()
        PasswordResetFactory(user=user, token_hash="a" * 64)
        session.add(
            PasswordReset(
                user_id=user.id,
                token_hash="a" * 64,
                expires_at=utcnow() + timedelta(hours=1),
            )
        )
        with pytest.raises(IntegrityError):
            session.flush()
        session.rollback()
