"""Tests for configuration helpers."""

from __future__ import annotations

from datetime import timedelta

import pytest

from authsvc.core.config import (
    AuthSettings,
    DevelopmentConfig,
    ProductionConfig,
    TestingConfig,
    env_bool,
    get_config,
    parse_duration,
)


@pytest.mark.parametrize(
    ("raw", "expected"),
    [
        ("15m", timedelta(minutes=15)),
        ("7d", timedelta(days=7)),
        ("24h", timedelta(hours=24)),
        ("30s", timedelta(seconds=30)),
        ("45", timedelta(seconds=45)),
        (90, timedelta(seconds=90)),
        (timedelta(minutes=2), timedelta(minutes=2)),
    ],
)
def test_parse_duration(raw, expected):
    assert parse_duration(raw) == expected


@pytest.mark.parametrize("raw", ["", "abc", "10w", "0", "-5m", 0])
def test_parse_duration_rejects_invalid(raw):
    with pytest.raises(ValueError):
        parse_duration(raw)


def test_env_bool(monkeypatch):
    monkeypatch.setenv("FLAG_ON", "yes")
    monkeypatch.setenv("FLAG_OFF", "0")
    monkeypatch.delenv("FLAG_MISSING", raising=False)

    assert env_bool("FLAG_ON") is True
    assert env_bool("FLAG_OFF", True) is False
    assert env_bool("FLAG_MISSING", True) is True


@pytest.mark.parametrize(
    ("env", "expected"),
    [
        ("development", DevelopmentConfig),
        ("testing", TestingConfig),
        ("production", ProductionConfig),
        ("unknown", DevelopmentConfig),
    ],
)
def test_get_config(monkeypatch, env, expected):
    monkeypatch.setenv("APP_ENV", env)
    assert get_config() is expected


def test_auth_settings_from_config():
    settings = AuthSettings.from_config(
        {"JWT_SECRET": "s" * 32, "JWT_EXPIRATION": "5m", "REFRESH_TOKEN_EXPIRATION": "2d"}
    )

    assert settings.jwt_secret == "s" * 32
    assert settings.access_expires == timedelta(minutes=5)
    assert settings.refresh_expires == timedelta(days=2)
    assert settings.reset_expires == timedelta(hours=24)


def test_auth_settings_defaults():
    settings = AuthSettings.from_config({"JWT_SECRET": "s" * 32})

    assert settings.access_expires == timedelta(minutes=15)
    assert settings.refresh_expires == timedelta(days=7)


def test_auth_settings_requires_secret():
    with pytest.raises(ValueError):
        AuthSettings.from_config({"JWT_SECRET": ""})


def test_auth_settings_is_frozen():
    settings = AuthSettings(jwt_secret="s" * 32)
    with pytest.raises(AttributeError):
        settings.jwt_secret = "other"  # type: ignore[misc]
