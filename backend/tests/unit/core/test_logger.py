"""Unit tests for the logging utility."""

from __future__ import annotations

import json
import logging

import pytest

from authsvc.core.logger import JSONFormatter, build_formatter, configure_logging, ensure_request_id


@pytest.fixture()
def restore_root_logger():
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield
    root.handlers[:] = handlers
    root.setLevel(level)


def test_configure_logging_sets_level(restore_root_logger) -> None:
    """``configure_logging`` should set the root logger level."""

    # Act
    configure_logging("DEBUG", "console")

    # Assert
    root = logging.getLogger()
    assert root.level == logging.DEBUG
    assert len(root.handlers) == 1


def test_build_formatter_rejects_unknown_format() -> None:
    assert isinstance(build_formatter("JSON"), JSONFormatter)
    with pytest.raises(ValueError):
        build_formatter("xml")


def test_json_formatter_includes_extra_fields() -> None:
    record = logging.LogRecord("authsvc.test", logging.INFO, __file__, 1, "login.failed", (), None)
    record.request_id = "req-1"
    record.user_id = "u-1"
    record.event = "login"

    payload = json.loads(JSONFormatter().format(record))

    assert payload["message"] == "login.failed"
    assert payload["level"] == "INFO"
    assert payload["request_id"] == "req-1"
    assert payload["user_id"] == "u-1"
    assert payload["event"] == "login"
    assert "session_id" not in payload


def test_request_id_is_scoped_to_each_request(app) -> None:
    with app.app_context():
        with app.test_request_context(headers={"X-Request-ID": "first-req"}):
            assert ensure_request_id() == "first-req"
        with app.test_request_context(headers={"X-Request-ID": "second-req"}):
            assert ensure_request_id() == "second-req"
        with app.test_request_context():
            minted = ensure_request_id()
            assert minted not in {"first-req", "second-req"}
            assert ensure_request_id() == minted


def test_unsafe_inbound_request_id_is_replaced(app) -> None:
    with app.test_request_context(headers={"X-Request-ID": "bad id with spaces"}):
        assert ensure_request_id() != "bad id with spaces"
