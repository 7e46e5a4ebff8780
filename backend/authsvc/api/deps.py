"""Shared API helpers for request parsing and cross-cutting concerns."""

from __future__ import annotations

import functools
import time
from collections.abc import Callable
from typing import Any, TypeVar, cast

from flask import Response, current_app, jsonify, request
from flask_jwt_extended import verify_jwt_in_request

from authsvc.core.config import AuthSettings
from authsvc.core.extensions import get_redis
from authsvc.core.logger import ensure_request_id
from authsvc.infra.jwt.jwt_token_provider import JWTTokenProvider
from authsvc.infra.redis.redis_refresh_token_cache import RedisRefreshTokenCache
from authsvc.infra.sql import (
    SQLAlchemyPasswordResetStore,
    SQLAlchemySessionStore,
    SQLAlchemyUserStore,
)
from authsvc.services._shared.base import ServiceContext
from authsvc.services.auth.service import AuthService, ResetDelivery

F = TypeVar("F", bound=Callable[..., Any])

AUTH_SETTINGS_KEY = "auth_settings"
RESET_DELIVERY_KEY = "password_reset_delivery"


def auth_settings() -> AuthSettings:
    """Return the frozen auth settings built at app creation."""
    return cast(AuthSettings, current_app.extensions[AUTH_SETTINGS_KEY])


def reset_delivery() -> ResetDelivery | None:
    """Return the password-reset delivery hook registered on the app, if any."""
    return cast(ResetDelivery | None, current_app.extensions.get(RESET_DELIVERY_KEY))


def service_context() -> ServiceContext:
    """Build a request-scoped context with the configured deadline."""
    return ServiceContext.with_timeout(
        current_app.config.get("AUTH_REQUEST_TIMEOUT"),
        request_id=ensure_request_id(),
    )


def build_auth_service(ctx: ServiceContext | None = None) -> AuthService:
    """Wire :class:`AuthService` to the SQL stores, Redis cache and JWT provider."""
    settings = auth_settings()
    return AuthService(
        users=SQLAlchemyUserStore(),
        sessions=SQLAlchemySessionStore(),
        resets=SQLAlchemyPasswordResetStore(),
        refresh_cache=RedisRefreshTokenCache(r=get_redis()),
        tokens=JWTTokenProvider(settings),
        settings=settings,
        ctx=ctx or service_context(),
    )


def require_auth(func: F) -> F:
    """Ensure the request carries a valid JWT access token."""

    @functools.wraps(func)
    def wrapper(*args: Any, **kwargs: Any):
        verify_jwt_in_request(optional=False)
        return func(*args, **kwargs)

    return wrapper  # type: ignore[return-value]


def json_response(payload: Any, *, status: int = 200) -> Response:
    """Return a JSON response enforcing a consistent MIME type."""

    response = jsonify(payload)
    response.status_code = status
    return response


def timing(func: F) -> F:
    """Decorator capturing handler execution time in milliseconds."""

    @functools.wraps(func)
    def wrapper(*args: Any, **kwargs: Any):
        start = time.perf_counter()
        try:
            return func(*args, **kwargs)
        finally:
            elapsed_ms = (time.perf_counter() - start) * 1000
            request_endpoint = getattr(request, "endpoint", None)
            current_app.logger.debug(
                "request.elapsed",
                extra={"endpoint": request_endpoint, "elapsed_ms": round(elapsed_ms, 2)},
            )

    return wrapper  # type: ignore[return-value]
