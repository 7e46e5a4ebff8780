"""Unit tests for the PyJWT-backed token provider."""

from __future__ import annotations

from datetime import UTC, datetime, timedelta

import jwt
import pytest
from freezegun import freeze_time

from authsvc.core.config import AuthSettings
from authsvc.infra.jwt.jwt_token_provider import JWTTokenProvider
from authsvc.services._shared.errors import InvalidTokenError, TokenExpiredError

SECRET = "unit-test-secret-long-enough-for-hs256!!"


@pytest.fixture()
def provider() -> JWTTokenProvider:
    return JWTTokenProvider(AuthSettings(jwt_secret=SECRET))


def _claims(token: str) -> dict:
    return jwt.decode(token, SECRET, algorithms=["HS256"])


def test_access_token_claims(provider):
    with freeze_time("2026-01-01 12:00:00"):
        token = provider.create_access_token("user-1")
    payload = jwt.decode(token, SECRET, algorithms=["HS256"], options={"verify_exp": False})

    assert payload["user_id"] == "user-1"
    assert payload["type"] == "access"
    assert payload["exp"] - payload["iat"] == 15 * 60
    assert jwt.get_unverified_header(token)["alg"] == "HS256"


def test_refresh_token_lifetime(provider):
    token = provider.create_refresh_token("user-1")
    payload = _claims(token)

    assert payload["type"] == "refresh"
    assert payload["exp"] - payload["iat"] == 7 * 24 * 3600


def test_tokens_issued_in_same_second_differ(provider):
    with freeze_time("2026-01-01 12:00:00"):
        first = provider.create_refresh_token("user-1")
        second = provider.create_refresh_token("user-1")
    assert first != second


def test_decode_round_trip(provider):
    token = provider.create_access_token("user-1")
    claims = provider.decode(token, "access")

    assert claims.user_id == "user-1"
    assert claims.type == "access"
    assert claims.expires_at > claims.issued_at
    assert claims.jti


def test_decode_rejects_wrong_type(provider):
    token = provider.create_access_token("user-1")
    with pytest.raises(InvalidTokenError):
        provider.decode(token, "refresh")


def test_decode_expired(provider):
    with freeze_time(datetime.now(UTC) - timedelta(days=1)):
        token = provider.create_access_token("user-1")
    with pytest.raises(TokenExpiredError):
        provider.decode(token, "access")


def test_decode_rejects_other_secret(provider):
    other = JWTTokenProvider(AuthSettings(jwt_secret="another-secret-that-is-long-enough!!"))
    token = other.create_access_token("user-1")
    with pytest.raises(InvalidTokenError) as excinfo:
        provider.decode(token, "access")
    assert not isinstance(excinfo.value, TokenExpiredError)


def test_decode_rejects_alg_none(provider):
    now = int(datetime.now(UTC).timestamp())
    token = jwt.encode(
        {"user_id": "user-1", "type": "access", "iat": now, "exp": now + 60},
        None,
        algorithm="none",
    )
    with pytest.raises(InvalidTokenError):
        provider.decode(token, "access")


def test_decode_rejects_other_hmac_algorithm(provider):
    now = int(datetime.now(UTC).timestamp())
    token = jwt.encode(
        {"user_id": "user-1", "type": "access", "iat": now, "exp": now + 60},
        SECRET,
        algorithm="HS512",
    )
    with pytest.raises(InvalidTokenError):
        provider.decode(token, "access")


@pytest.mark.parametrize("missing", ["user_id", "type", "exp"])
def test_decode_requires_claims(provider, missing):
    now = int(datetime.now(UTC).timestamp())
    payload = {"user_id": "user-1", "type": "access", "iat": now, "exp": now + 60}
    del payload[missing]
    token = jwt.encode(payload, SECRET, algorithm="HS256")
    with pytest.raises(InvalidTokenError):
        provider.decode(token, "access")


@pytest.mark.parametrize("token", ["", "not-a-jwt", "a.b.c"])
def test_decode_garbage(provider, token):
    with pytest.raises(InvalidTokenError):
        provider.decode(token, "access")
