"""Pytest fixtures configuring an isolated transactional database layer.

Each test runs inside a SAVEPOINT-backed transaction against an in-memory
SQLite database so data changes never leak between cases. Redis is replaced
by a per-test :class:`fakeredis.FakeRedis` instance.
"""

from __future__ import annotations

import os

import fakeredis
import pytest
from sqlalchemy import event
from sqlalchemy.orm import scoped_session, sessionmaker

from authsvc.api.deps import RESET_DELIVERY_KEY
from authsvc.core.config import TestingConfig
from authsvc.core.extensions import REDIS_EXTENSION_KEY
from authsvc.core.extensions import db as _db  # Flask-SQLAlchemy instance
from authsvc.factory import create_app  # application factory under test

CLIENT_HEADERS = {
    "X-App-Version": "1.4.0",
    "X-App-Type": "web",
    "X-Device-ID": "device-test-1",
}


class TestConfig(TestingConfig):
    """Testing configuration for creating the Flask app.

    Notes
    -----
    - Uses an in-memory SQLite database for speed.
    - Keeps client-header enforcement on so the gate is exercised.
    - Avoids hitting external services (no Redis URL).
    """

    SQLALCHEMY_DATABASE_URI = "sqlite:///:memory:"
    REDIS_URL = None
    REQUIRE_CLIENT_HEADERS = True
    LOG_LEVEL = "WARNING"


@pytest.fixture(scope="session")
def app():
    """Create a Flask application configured for testing.

    Returns
    -------
    flask.Flask
        Application instance with :class:`TestConfig` applied.
    """
    # Ensure env-based config does not leak into tests
    os.environ.pop("DATABASE_URL", None)
    app = create_app(TestConfig)
    app.logger.setLevel("WARNING")
    return app


@pytest.fixture(scope="session")
def db(app):
    """Create database tables once per test session.

    Yields
    ------
    flask_sqlalchemy.SQLAlchemy
        Database extension bound to the testing application.
    """
    with app.app_context():
        _db.create_all()
        yield _db
        _db.session.remove()
        _db.drop_all()


@pytest.fixture(scope="session")
def connection(db):
    """Keep a dedicated DBAPI connection open for the whole session."""
    conn = db.engine.connect()
    try:
        yield conn
    finally:
        conn.close()


@pytest.fixture(scope="function")
def session(db, connection):
    """Provide a SQLAlchemy session wrapped in a nested transaction.

    Notes
    -----
    The fixture mirrors the SQLAlchemy 2.0 pattern for transactional tests: it
    begins a top-level transaction, starts a SAVEPOINT per test, and reinstalls
    the SAVEPOINT whenever SQLAlchemy ends one. Store commits only release
    their own SAVEPOINT, so everything is rolled back after the test.
    """
    top_trans = connection.begin()

    SessionFactory = sessionmaker(bind=connection, future=True)
    scoped = scoped_session(SessionFactory)

    nested = connection.begin_nested()

    @event.listens_for(scoped(), "after_transaction_end")
    def _restart_savepoint(sess, trans):  # pragma: no cover
        if trans.nested and not trans._parent.nested:
            nonlocal nested
            nested = connection.begin_nested()

    # Monkey-patch db.session so app code uses this scoped session
    original_session = db.session
    db.session.remove()
    db.session = scoped

    try:
        yield scoped
    finally:
        scoped.remove()
        db.session = original_session
        top_trans.rollback()


@pytest.fixture()
def redis_client(app):
    """Install a fresh in-memory Redis as the app's refresh-token cache."""
    client = fakeredis.FakeRedis()
    app.extensions[REDIS_EXTENSION_KEY] = client
    try:
        yield client
    finally:
        app.extensions.pop(REDIS_EXTENSION_KEY, None)
        client.flushall()


@pytest.fixture()
def client(app, session, redis_client):
    """Flask test client sending the required client-identification headers."""
    test_client = app.test_client()
    for name, value in CLIENT_HEADERS.items():
        test_client.environ_base["HTTP_" + name.upper().replace("-", "_")] = value
    return test_client


@pytest.fixture()
def sent_resets(app):
    """Capture password-reset deliveries as ``(user, token)`` pairs."""
    outbox: list[tuple[object, str]] = []
    app.extensions[RESET_DELIVERY_KEY] = lambda user, token: outbox.append((user, token))
    try:
        yield outbox
    finally:
        app.extensions.pop(RESET_DELIVERY_KEY, None)


@pytest.fixture(scope="session")
def faker():
    """Provide a :class:`faker.Faker` instance seeded for deterministic tests."""
    from faker import Faker

    fk = Faker()
    Faker.seed(1337)
    return fk


# -- Hook up Factory Boy to pytest SQLAlchemy session --------------------------
@pytest.fixture(autouse=True)
def _factories_session(session):
    """Wire Factory Boy's session helper to the transactional session fixture."""
    from tests.factories import SQLAlchemySession

    SQLAlchemySession.set(session)
    yield
