"""Application settings with environment-based simple classes."""

from __future__ import annotations

import os
import re
from collections.abc import Mapping
from dataclasses import dataclass
from datetime import timedelta
from typing import Any, Final

from dotenv import load_dotenv

# Public selector env var (keep neutral name to avoid collisions)
ENV_VAR: Final[str] = "APP_ENV"  # 'development' | 'testing' | 'production'

# Placeholder secret; production refuses to boot with it.
DEFAULT_JWT_SECRET: Final[str] = "CHANGE_ME_JWT"

_DURATION_RE = re.compile(r"^\s*(\d+)\s*([smhd]?)\s*$", re.IGNORECASE)
_DURATION_UNITS: Final[dict[str, str]] = {
    "s": "seconds",
    "m": "minutes",
    "h": "hours",
    "d": "days",
    "": "seconds",
}


# Load .env in development (no-op when the file does not exist)
load_dotenv()


def env_bool(name: str, default: bool = False) -> bool:
    """Parse a boolean flag from an environment variable.

    Parameters
    ----------
    name: str
        Environment variable to inspect.
    default: bool, optional
        Value returned when the variable is unset. Defaults to ``False``.

    Returns
    -------
    bool
        ``True`` if the value resembles ``{"1", "true", "yes", "y", "on"}``
        ignoring case; otherwise ``False`` or ``default`` when missing.
    """
    val = os.getenv(name)
    if val is None:
        return default
    return str(val).strip().lower() in {"1", "true", "yes", "y", "on"}


def parse_duration(raw: str | int | timedelta) -> timedelta:
    """Convert a duration literal such as ``"15m"`` or ``"7d"`` to a timedelta.

    Bare integers are read as seconds.

    :param raw: Duration literal, number of seconds, or an existing timedelta.
    :returns: Parsed duration.
    :raises ValueError: If the literal cannot be parsed or is not positive.
    """
    if isinstance(raw, timedelta):
        value = raw
    elif isinstance(raw, int):
        value = timedelta(seconds=raw)
    else:
        match = _DURATION_RE.match(str(raw))
        if match is None:
            raise ValueError(f"Invalid duration: {raw!r}")
        amount, unit = match.groups()
        value = timedelta(**{_DURATION_UNITS[unit.lower()]: int(amount)})
    if value <= timedelta(0):
        raise ValueError(f"Duration must be positive: {raw!r}")
    return value


def env_duration(name: str, default: str) -> timedelta:
    """Read a duration literal from the environment (see :func:`parse_duration`)."""
    return parse_duration(os.getenv(name, default))


class BaseConfig:
    """Base configuration shared across environments.

    Attributes
    ----------
    API_BASE_PREFIX: str
        Root path for registering API blueprints.
    SECRET_KEY: str
        Flask secret used for session signing.
    JWT_SECRET: str
        Shared HS256 secret used to sign and verify access/refresh tokens.
        Mirrored into ``JWT_SECRET_KEY`` so ``flask-jwt-extended`` verifies
        the same tokens on protected routes.
    JWT_EXPIRATION: timedelta
        Access-token lifetime (``15m`` by default).
    REFRESH_TOKEN_EXPIRATION: timedelta
        Refresh-token lifetime and refresh cache TTL (``7d`` by default).
    SQLALCHEMY_DATABASE_URI: str
        Database connection string consumed by SQLAlchemy.
    REDIS_URL: str | None
        Redis connection string for the refresh-token cache.
    LOG_LEVEL: str
        Root logging verbosity (``INFO`` by default).
    LOG_FORMAT: str
        ``json`` (default) or ``console``.
    CORS_ORIGINS: str
        Comma-separated list of allowed origins for CORS.
    AUTH_COOKIE_SECURE: bool
        Whether the ``access_token`` cookie carries the ``Secure`` flag.
    AUTH_REQUEST_TIMEOUT: float
        Per-request deadline (seconds) applied to auth operations.
    REQUIRE_CLIENT_HEADERS: bool
        Enforce ``X-App-Version``/``X-App-Type``/``X-Device-ID`` on auth routes.
    """

    API_BASE_PREFIX = "/api"

    # Secrets / security
    SECRET_KEY = os.getenv("SECRET_KEY", "CHANGE_ME")
    JWT_SECRET = os.getenv("JWT_SECRET", DEFAULT_JWT_SECRET)
    JWT_EXPIRATION = env_duration("JWT_EXPIRATION", "15m")
    REFRESH_TOKEN_EXPIRATION = env_duration("REFRESH_TOKEN_EXPIRATION", "7d")

    # flask-jwt-extended (verification side only; issuance lives in the token provider)
    JWT_ALGORITHM = "HS256"
    JWT_DECODE_ALGORITHMS = ["HS256"]
    JWT_IDENTITY_CLAIM = "user_id"
    JWT_TOKEN_LOCATION = ["headers", "cookies"]
    JWT_ACCESS_COOKIE_NAME = "access_token"
    JWT_COOKIE_CSRF_PROTECT = False

    # Auth transport
    AUTH_COOKIE_SECURE = env_bool("AUTH_COOKIE_SECURE", True)
    AUTH_REQUEST_TIMEOUT = float(os.getenv("AUTH_REQUEST_TIMEOUT", "10"))
    REQUIRE_CLIENT_HEADERS = env_bool("REQUIRE_CLIENT_HEADERS", True)

    # DB / cache
    SQLALCHEMY_DATABASE_URI = os.getenv("DATABASE_URL", "sqlite:///./dev.db")
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    SQLALCHEMY_ECHO = env_bool("SQLALCHEMY_ECHO", False)
    REDIS_URL = os.getenv("REDIS_URL", "redis://localhost:6379/0")

    # Flask & JSON
    JSON_SORT_KEYS = False
    PROPAGATE_EXCEPTIONS = False

    # Logging & CORS
    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
    LOG_FORMAT = os.getenv("LOG_FORMAT", "json")
    CORS_ORIGINS = os.getenv("CORS_ORIGINS", "http://localhost:5173")

    # Flask built-ins
    DEBUG = False
    TESTING = False


class DevelopmentConfig(BaseConfig):
    """Configuration tailored for local development.

    Notes
    -----
    Enables debug mode, console logs and non-secure cookies so the API works
    over plain ``http://localhost``.
    """

    DEBUG = env_bool("FLASK_DEBUG", True)
    LOG_FORMAT = os.getenv("LOG_FORMAT", "console")
    AUTH_COOKIE_SECURE = env_bool("AUTH_COOKIE_SECURE", False)
    REQUIRE_CLIENT_HEADERS = env_bool("REQUIRE_CLIENT_HEADERS", False)
    CORS_MAX_AGE = 600  # 10 minutes


class TestingConfig(BaseConfig):
    """Configuration for automated test runs.

    Notes
    -----
    - Forces ``TESTING`` mode and disables debug logs.
    - Uses an in-memory SQLite database unless ``TEST_DATABASE_URL`` is set.
    - Leaves ``REDIS_URL`` unset; tests install a fake client.
    """

    TESTING = True
    DEBUG = False
    SQLALCHEMY_DATABASE_URI = os.getenv("TEST_DATABASE_URL", "sqlite:///:memory:")
    REDIS_URL = None
    JWT_SECRET = "testing-secret-with-enough-entropy-for-hs256"
    AUTH_COOKIE_SECURE = False
    PROPAGATE_EXCEPTIONS = True


class ProductionConfig(BaseConfig):
    """Configuration defaults for production deployments."""

    DEBUG = False
    SQLALCHEMY_ECHO = False
    PROPAGATE_EXCEPTIONS = False


# Map names -> classes (simple, explicit)
CONFIG_MAP: Mapping[str, type[BaseConfig]] = {
    "development": DevelopmentConfig,
    "testing": TestingConfig,
    "production": ProductionConfig,
}


def get_config() -> type[BaseConfig]:
    """Return the configuration class inferred from ``APP_ENV``.

    Falls back to :class:`DevelopmentConfig` when ``APP_ENV`` is unset or
    unknown.
    """
    name = os.getenv(ENV_VAR, "development").strip().lower()
    return CONFIG_MAP.get(name, DevelopmentConfig)


@dataclass(frozen=True, slots=True)
class AuthSettings:
    """
    Read-only auth configuration shared by the token provider and the service.

    Built once per application from the Flask config and passed explicitly to
    constructors.

    :param jwt_secret: HS256 signing secret.
    :type jwt_secret: str
    :param access_expires: Access-token lifetime.
    :type access_expires: timedelta
    :param refresh_expires: Refresh-token lifetime (also the cache TTL).
    :type refresh_expires: timedelta
    :param reset_expires: Password-reset token lifetime.
    :type reset_expires: timedelta
    """

    jwt_secret: str
    access_expires: timedelta = timedelta(minutes=15)
    refresh_expires: timedelta = timedelta(days=7)
    reset_expires: timedelta = timedelta(hours=24)

    @classmethod
    def from_config(cls, config: Mapping[str, Any]) -> AuthSettings:
        """Build settings from a Flask config mapping.

        :raises ValueError: If the secret is missing or a duration is invalid.
        """
        secret = config.get("JWT_SECRET")
        if not secret:
            raise ValueError("JWT_SECRET must be configured.")
        return cls(
            jwt_secret=str(secret),
            access_expires=parse_duration(config.get("JWT_EXPIRATION", "15m")),
            refresh_expires=parse_duration(config.get("REFRESH_TOKEN_EXPIRATION", "7d")),
        )
