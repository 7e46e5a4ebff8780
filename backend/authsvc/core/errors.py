"""Problem Details (RFC 7807) responses for every failure the API returns.

All handlers funnel through :func:`problem`, so clients always receive
``application/problem+json`` with ``status``, ``code``, ``detail`` and the
``request_id`` that also appears in the server logs.
"""

from __future__ import annotations

import logging
from http import HTTPStatus
from typing import Any

from flask import Flask, Response, has_request_context, jsonify, request
from marshmallow import ValidationError as MarshmallowValidationError
from werkzeug.exceptions import HTTPException

from authsvc.core.logger import ensure_request_id

log = logging.getLogger(__name__)

# Stable codes for framework-raised HTTP errors.
_HTTP_CODES: dict[int, str] = {
    400: "bad_request",
    401: "unauthorized",
    403: "forbidden",
    404: "not_found",
    405: "method_not_allowed",
    409: "conflict",
    413: "payload_too_large",
    415: "unsupported_media_type",
    422: "unprocessable_entity",
    500: "internal_server_error",
    503: "service_unavailable",
}


class APIError(Exception):
    """
    An error with a client-safe message and a fixed HTTP mapping.

    :param message: Text placed in ``detail``.
    :param status_code: HTTP status; defaults to the class's ``status_code``.
    :param code: Machine-readable code; defaults to the class's ``code``.
    :param details: Optional structured payload placed in ``details``.
    """

    status_code: int = HTTPStatus.BAD_REQUEST
    code: str = "bad_request"

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        code: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = int(status_code if status_code is not None else type(self).status_code)
        self.code = code or type(self).code
        self.details = details or {}

    def to_problem(self) -> dict[str, Any]:
        return problem_body(self.status_code, self.code, self.message, self.details)


class Unauthorized(APIError):
    status_code = HTTPStatus.UNAUTHORIZED
    code = "unauthorized"

    def __init__(self, message: str = "Unauthorized", code: str | None = None) -> None:
        super().__init__(message, code=code)


class Forbidden(APIError):
    status_code = HTTPStatus.FORBIDDEN
    code = "forbidden"

    def __init__(self, message: str = "Forbidden", code: str | None = None) -> None:
        super().__init__(message, code=code)


class NotFound(APIError):
    status_code = HTTPStatus.NOT_FOUND
    code = "not_found"

    def __init__(self, message: str = "Resource not found", code: str | None = None) -> None:
        super().__init__(message, code=code)


class Conflict(APIError):
    status_code = HTTPStatus.CONFLICT
    code = "conflict"

    def __init__(self, message: str = "Conflict", code: str | None = None) -> None:
        super().__init__(message, code=code)


def problem_body(
    status: int, code: str, message: str, details: dict[str, Any] | None = None
) -> dict[str, Any]:
    """Assemble the Problem Details payload for the current request."""
    body: dict[str, Any] = {
        "type": "about:blank",
        "title": HTTPStatus(status).phrase,
        "status": int(status),
        "detail": message,
        "instance": request.path if has_request_context() else None,
        "code": code,
        "request_id": ensure_request_id(),
    }
    if details:
        body["details"] = details
    return body


def problem(
    status: int,
    code: str,
    message: str,
    details: dict[str, Any] | None = None,
    *,
    exc_info: bool = False,
) -> tuple[Response, int]:
    """Log the failure and return a ``(response, status)`` pair.

    5xx responses log at ERROR, everything else at WARNING.
    """
    body = problem_body(status, code, message, details)
    log.log(
        logging.ERROR if status >= 500 else logging.WARNING,
        "request.failed code=%s status=%s detail=%s",
        code,
        int(status),
        message,
        exc_info=exc_info,
    )
    response = jsonify(body)
    response.mimetype = "application/problem+json"
    return response, int(status)


def init_app(app: Flask) -> None:
    """
    Register the Problem Details handlers on ``app``.

    Service errors are mapped to HTTP by
    :meth:`authsvc.services._shared.base.BaseService.translate_exceptions`;
    anything unrecognised becomes an opaque 500.
    """
    from authsvc.services._shared.base import BaseService
    from authsvc.services._shared.errors import ServiceError

    @app.errorhandler(APIError)
    def handle_api_error(err: APIError):
        return problem(err.status_code, err.code, err.message, err.details)

    @app.errorhandler(ServiceError)
    def handle_service_error(err: ServiceError):
        translated = BaseService.translate_exceptions(err)
        return handle_api_error(translated)

    @app.errorhandler(HTTPException)
    def handle_http_exception(err: HTTPException):
        status = int(err.code or HTTPStatus.INTERNAL_SERVER_ERROR)
        code = _HTTP_CODES.get(status, "error")
        if status == HTTPStatus.NOT_FOUND:
            message = f"Route '{request.path}' not found"
        else:
            message = (err.description or code.replace("_", " ").capitalize()).strip()
        return problem(status, code, message)

    @app.errorhandler(MarshmallowValidationError)
    def handle_validation_error(err: MarshmallowValidationError):
        return problem(
            HTTPStatus.UNPROCESSABLE_ENTITY,
            "validation_error",
            "Validation failed",
            {"errors": err.messages},
        )

    @app.errorhandler(Exception)
    def handle_unexpected_error(err: Exception):
        # Internal detail stays in the log only.
        return problem(
            HTTPStatus.INTERNAL_SERVER_ERROR,
            "internal_server_error",
            "Unexpected error",
            exc_info=True,
        )

    _register_jwt_loaders()


def _register_jwt_loaders() -> None:
    """Render ``flask-jwt-extended`` rejections on ``/me`` as 401 problems."""
    from authsvc.core.extensions import jwt

    @jwt.unauthorized_loader
    def _missing_token(reason: str):
        return problem(HTTPStatus.UNAUTHORIZED, "unauthorized", reason)

    @jwt.invalid_token_loader
    def _invalid_token(reason: str):
        return problem(HTTPStatus.UNAUTHORIZED, "invalid_token", "Invalid token")

    @jwt.expired_token_loader
    def _expired_token(jwt_header: dict[str, Any], jwt_payload: dict[str, Any]):
        return problem(HTTPStatus.UNAUTHORIZED, "token_expired", "Token has expired")
