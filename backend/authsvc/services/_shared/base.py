# authsvc/services/_shared/base.py
from __future__ import annotations

import time
from dataclasses import dataclass
from datetime import UTC, datetime
from http import HTTPStatus

from authsvc.core import errors as api_errors
from authsvc.services._shared.errors import (
    DeadlineExceededError,
    ForbiddenError,
    InternalServerError,
    InvalidCredentialsError,
    InvalidInputError,
    InvalidTokenError,
    ServiceError,
    UserExistsError,
    UserNotFoundError,
)


@dataclass(slots=True)
class ServiceContext:
    """
    Carry cross-cutting request-scoped data.

    :param request_id: Correlation id for logging/tracing.
    :param actor_id: Authenticated user identifier, when known.
    :param deadline: Absolute :func:`time.monotonic` instant after which the
        operation must stop issuing store calls. ``None`` disables the check.
    """

    request_id: str | None = None
    actor_id: str | None = None
    deadline: float | None = None

    @classmethod
    def with_timeout(cls, seconds: float | None, **kwargs) -> ServiceContext:
        """Build a context whose deadline is ``seconds`` from now."""
        deadline = time.monotonic() + seconds if seconds else None
        return cls(deadline=deadline, **kwargs)

    def remaining(self) -> float | None:
        """Seconds left before the deadline (``None`` when unbounded)."""
        if self.deadline is None:
            return None
        return self.deadline - time.monotonic()


class BaseService:
    """
    Base class for application services.

    Responsibilities
    ----------------
    * Hold the request-scoped :class:`ServiceContext`.
    * Enforce the caller's deadline between store calls.
    * Centralize error translation to API errors.

    Notes
    -----
    - Services stay framework-agnostic; stores are injected as ports.
    """

    def __init__(self, *, ctx: ServiceContext | None = None) -> None:
        """
        Initialize the base service.

        :param ctx: Optional request-scoped context (tracing, deadline).
        :type ctx: ServiceContext | None
        """
        self.ctx = ctx or ServiceContext()

    @staticmethod
    def now_utc() -> datetime:
        return datetime.now(UTC)

    # -------------------------- Cancellation --------------------------------

    def ensure_deadline(self, step: str) -> None:
        """
        Raise if the request deadline has passed.

        :param step: Name of the store call about to run (for diagnostics).
        :raises DeadlineExceededError: When no time is left.
        """
        remaining = self.ctx.remaining()
        if remaining is not None and remaining <= 0:
            raise DeadlineExceededError(f"deadline exceeded before {step}")

    # -------------------------- Error handling ------------------------------

    @staticmethod
    def translate_exceptions(exc: Exception) -> Exception:
        """
        Map service-level errors to API-level (HTTP) errors.

        :param exc: Exception raised within the service.
        :type exc: Exception
        :returns: Translated exception ready to be re-raised.
        :rtype: Exception
        """
        if not isinstance(exc, ServiceError):
            # Fallback: return untouched (will bubble up to Flask handler)
            return exc

        details = exc.details or None

        if isinstance(exc, InternalServerError):
            # → 500 with an opaque message
            return api_errors.APIError(
                message=exc.message,
                status_code=HTTPStatus.INTERNAL_SERVER_ERROR,
                code=exc.code,
            )

        if isinstance(exc, InvalidCredentialsError | InvalidTokenError):
            # → 401 Unauthorized
            return api_errors.Unauthorized(exc.message, code=exc.code)

        if isinstance(exc, ForbiddenError):
            return api_errors.Forbidden(exc.message, code=exc.code)

        if isinstance(exc, UserNotFoundError):
            return api_errors.NotFound(exc.message, code=exc.code)

        if isinstance(exc, UserExistsError):
            return api_errors.Conflict(exc.message, code=exc.code)

        if isinstance(exc, InvalidInputError):
            return api_errors.APIError(
                message=exc.message, status_code=400, code=exc.code, details=details
            )

        # Any other ServiceError subclass (reset expired/used) → 400 Bad Request
        return api_errors.APIError(message=exc.message, status_code=400, code=exc.code)
