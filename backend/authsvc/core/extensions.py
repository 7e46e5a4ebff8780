"""Extension singletons shared across the app, plus the Redis client."""

from __future__ import annotations

import redis  # type: ignore[import-untyped]
from flask import Flask, current_app
from flask_jwt_extended import JWTManager
from flask_migrate import Migrate
from flask_sqlalchemy import SQLAlchemy
from redis.exceptions import RedisError  # type: ignore[import-untyped]
from sqlalchemy import MetaData

# Deterministic constraint names keep Alembic diffs stable.
metadata = MetaData(
    naming_convention={
        "ix": "ix_%(table_name)s_%(column_0_name)s",
        "uq": "uq_%(table_name)s_%(column_0_name)s",
        "ck": "ck_%(table_name)s_%(constraint_name)s",
        "fk": "fk_%(table_name)s_%(column_0_name)s_%(referred_table_name)s",
        "pk": "pk_%(table_name)s",
    }
)

db: SQLAlchemy = SQLAlchemy(session_options={"autoflush": False}, metadata=metadata)
migrate = Migrate(render_as_batch=True)
# Verifies access tokens on ``/me``; issuance lives in the token provider.
jwt = JWTManager()

REDIS_EXTENSION_KEY = "redis_client"


def init_app(app: Flask) -> None:
    """Bind the database, migrations, JWT verification and Redis to ``app``.

    ``JWT_SECRET`` and ``AUTH_COOKIE_SECURE`` are mirrored into the
    Flask-JWT-Extended settings so tokens minted by the provider verify here
    and the access cookie carries the configured flags.
    """
    db.init_app(app)
    from authsvc import models  # noqa: F401  (registers tables on metadata)

    migrate.init_app(app, db)

    app.config.setdefault("JWT_SECRET_KEY", app.config.get("JWT_SECRET"))
    app.config.setdefault("JWT_COOKIE_SECURE", bool(app.config.get("AUTH_COOKIE_SECURE", True)))
    app.config.setdefault("JWT_COOKIE_SAMESITE", "Lax")
    jwt.init_app(app)

    client = _connect_redis(app)
    if client is None:
        app.extensions.pop(REDIS_EXTENSION_KEY, None)
    else:
        app.extensions[REDIS_EXTENSION_KEY] = client


def _connect_redis(app: Flask) -> redis.Redis | None:
    """Open and ping the client for ``REDIS_URL``; ``None`` when unset.

    :raises RuntimeError: If Redis is configured but unreachable at startup.
    """
    url = app.config.get("REDIS_URL")
    if not url:
        return None
    client = redis.Redis.from_url(
        url,
        socket_timeout=app.config.get("REDIS_SOCKET_TIMEOUT", 2.0),
        socket_connect_timeout=app.config.get("REDIS_CONNECT_TIMEOUT", 2.0),
        retry_on_timeout=True,
    )
    try:
        client.ping()
    except RedisError as exc:
        raise RuntimeError(f"Failed to connect to Redis at {url!r}") from exc
    return client


def get_redis() -> redis.Redis:
    """Return the Redis client bound to the current application."""
    client = current_app.extensions.get(REDIS_EXTENSION_KEY)
    if client is None:
        raise RuntimeError("Redis client is not initialized; set REDIS_URL.")
    return client
