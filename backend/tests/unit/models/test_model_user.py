"""Tests for the User model."""

from __future__ import annotations

import pytest
from sqlalchemy.exc import IntegrityError

from authsvc.models.user import User


class TestUser:
    def test_password_hashing(self, session):
        u = User(email="Test@Example.com", name="Tester")
        u.password = "secret123"
        session.add(u)
        session.flush()
        assert u.password_hash.startswith("scrypt:")
        assert u.verify_password("secret123") is True
        assert u.verify_password("wrong") is False

    def test_password_is_write_only(self):
        u = User(email="a@example.com", name="A")
        u.password = "secret123"
        with pytest.raises(AttributeError):
            _ = u.password

    def test_empty_password_rejected(self):
        u = User(email="a@example.com", name="A")
        with pytest.raises(ValueError):
            u.password = ""

    def test_email_normalized_and_unique(self, session):
        u1 = User(email="  Alice@Example.com ", name="Alice")
        u1.password = "secret123"
        session.add(u1)
        session.flush()
        assert u1.email == "alice@example.com"

        u2 = User(email="alice@example.com", name="Alice Two")
        u2.password = "secret123"
        session.add(u2)
        with pytest.raises(IntegrityError):
            session.flush()
        session.rollback()

    def test_name_trimmed(self):
        u = User(email="n@example.com", name="  Grace Hopper  ")
        assert u.name == "Grace Hopper"

    @pytest.mark.parametrize("value", ["", "   "])
    def test_blank_name_rejected(self, value):
        with pytest.raises(ValueError):
            User(email="n@example.com", name=value)

    def test_defaults_on_insert(self, session):
        u = User(email="d@example.com", name="D")
        u.password = "secret123"
        session.add(u)
        session.flush()
        assert u.is_active is True
        assert len(u.id) == 36
        assert u.created_at is not None
        assert u.updated_at is not None
        assert repr(u) == f"<User id={u.id}>"
