"""Logging setup: JSON or console output, correlated by request id.

Every record passing through the stdout handler carries ``request_id`` and,
inside a request, the calling client's ``app_type`` and ``device_id`` taken
from the identification headers. Auth events add ``user_id``,
``session_id`` or ``reset_id`` through ``extra``.
"""

from __future__ import annotations

import json
import logging
import re
import sys
from datetime import datetime, timezone
from typing import Any
from uuid import uuid4

from flask import Flask, has_request_context, request

REQUEST_ID_HEADER = "X-Request-ID"
_INBOUND_ID_HEADERS = (REQUEST_ID_HEADER, "X-Correlation-ID")
# Caller-supplied ids are echoed back, so keep them short and header-safe.
_SAFE_REQUEST_ID = re.compile(r"^[A-Za-z0-9._:-]{1,128}$")
_ENVIRON_KEY = "authsvc.request_id"

EXTRA_KEYS = ("endpoint", "elapsed_ms", "event", "user_id", "session_id", "reset_id")

CONSOLE_FORMAT = "%(asctime)s %(levelname)-7s [%(request_id)s] %(name)s: %(message)s"


def ensure_request_id() -> str:
    """Return the id correlating this request's logs and responses.

    The first call in a request adopts a well-formed ``X-Request-ID`` (or
    ``X-Correlation-ID``) header, otherwise mints a UUID4, and caches the
    result in the WSGI environ so it never outlives the request, even under a
    long-lived app context. Outside a request every call mints a new id.
    """
    if not has_request_context():
        return str(uuid4())
    cached = request.environ.get(_ENVIRON_KEY)
    if cached:
        return cached
    request_id = next(
        (
            value
            for value in (request.headers.get(h) for h in _INBOUND_ID_HEADERS)
            if value and _SAFE_REQUEST_ID.match(value)
        ),
        None,
    ) or str(uuid4())
    request.environ[_ENVIRON_KEY] = request_id
    return request_id


class RequestContextFilter(logging.Filter):
    """Stamp request id and client identity onto each record."""

    def filter(self, record: logging.LogRecord) -> bool:
        if has_request_context():
            record.request_id = ensure_request_id()
            record.app_type = request.headers.get("X-App-Type")
            record.device_id = request.headers.get("X-Device-ID")
        else:
            record.request_id = getattr(record, "request_id", None)
        return True


class JSONFormatter(logging.Formatter):
    """One JSON object per line."""

    def format(self, record: logging.LogRecord) -> str:
        payload: dict[str, Any] = {
            "time": datetime.fromtimestamp(record.created, timezone.utc).isoformat(timespec="milliseconds"),
            "level": record.levelname,
            "name": record.name,
            "message": record.getMessage(),
            "request_id": getattr(record, "request_id", None),
        }
        for key in ("app_type", "device_id"):
            value = getattr(record, key, None)
            if value:
                payload[key] = value
        payload.update({key: getattr(record, key) for key in EXTRA_KEYS if hasattr(record, key)})
        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)
        return json.dumps(payload, default=str)


def build_formatter(fmt: str = "json") -> logging.Formatter:
    """Return the formatter named by ``LOG_FORMAT`` (``json`` or ``console``).

    :raises ValueError: On an unknown format name.
    """
    formatters = {"json": JSONFormatter, "console": lambda: logging.Formatter(CONSOLE_FORMAT)}
    try:
        return formatters[(fmt or "json").strip().lower()]()
    except KeyError:
        raise ValueError(f"Unknown LOG_FORMAT: {fmt!r} (expected 'json' or 'console')") from None


def configure_logging(level: str | int = "INFO", fmt: str = "json") -> None:
    """Replace root handlers with a single stdout handler."""
    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(build_formatter(fmt))
    handler.addFilter(RequestContextFilter())

    root = logging.getLogger()
    root.handlers[:] = [handler]
    root.setLevel(level.upper() if isinstance(level, str) else level)


def init_app(app: Flask) -> None:
    """Seed the request id early and echo it on every response."""
    app.logger.addFilter(RequestContextFilter())

    @app.before_request
    def _seed_request_id() -> None:
        ensure_request_id()

    @app.after_request
    def _echo_request_id(response):
        response.headers.setdefault(REQUEST_ID_HEADER, ensure_request_id())
        return response


__all__ = ["build_formatter", "configure_logging", "ensure_request_id", "init_app"]
