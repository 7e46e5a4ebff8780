"""Tests for auth input shape checks."""

from __future__ import annotations

import pytest

from authsvc.services._shared.errors import InvalidInputError
from authsvc.services.auth.validation import (
    is_valid_email,
    require_email,
    require_name,
    require_password,
)


def test_require_email_normalizes():
    assert require_email("  Ada@Example.COM ") == "ada@example.com"


@pytest.mark.parametrize(
    "email",
    ["", "   ", "no-at-sign.com", "@example.com", "ada@localhost", "a b@example.com", "a@" + "x" * 252 + ".io", None],
)
def test_require_email_rejects(email):
    with pytest.raises(InvalidInputError) as excinfo:
        require_email(email)
    assert excinfo.value.details == {"field": "email"}


def test_is_valid_email_accepts_subdomains():
    assert is_valid_email("ada@mail.example.co.uk")


@pytest.mark.parametrize("password", ["123456", "x" * 128])
def test_require_password_bounds_ok(password):
    assert require_password(password) == password


@pytest.mark.parametrize("password", ["", "12345", "x" * 129, None])
def test_require_password_rejects(password):
    with pytest.raises(InvalidInputError):
        require_password(password)


def test_require_password_reports_field():
    with pytest.raises(InvalidInputError) as excinfo:
        require_password("123", field="new_password")
    assert excinfo.value.details == {"field": "new_password"}


def test_require_name_trims():
    assert require_name("  Ada Lovelace ") == "Ada Lovelace"


@pytest.mark.parametrize("name", ["", "   ", "x" * 101, None])
def test_require_name_rejects(name):
    with pytest.raises(InvalidInputError):
        require_name(name)
