from __future__ import annotations

import threading
from collections.abc import Sequence
from datetime import UTC, datetime
from typing import Protocol
from uuid import uuid4

from authsvc.services._shared.dto import SessionRecord
from authsvc.services._shared.errors import NotFoundError


class SessionStore(Protocol):
    """
    Durable audit trail of issued refresh tokens.

    Only digests are stored. This store is never consulted to verify a
    refresh token; the refresh cache is.
    """

    def create_session(self, user_id: str, token_hash: str, expires_at: datetime) -> SessionRecord:
        ...

    def get_session_by_id(self, session_id: str) -> SessionRecord: ...

    def get_sessions_by_user_id(self, user_id: str) -> Sequence[SessionRecord]:
        """Return the user's sessions, newest first (empty when none)."""
        ...

    def delete_session(self, session_id: str) -> None: ...

    def delete_expired_sessions(self) -> int:
        """Remove sessions past ``expires_at``. :returns: Rows removed."""
        ...


class InMemorySessionStore(SessionStore):
    """
    In-memory session store.

    ``fail_next_create`` lets tests simulate a durable-store outage on the
    next :meth:`create_session` call.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._rows: dict[str, SessionRecord] = {}
        self.fail_next_create: Exception | None = None

    def create_session(self, user_id: str, token_hash: str, expires_at: datetime) -> SessionRecord:
        with self._lock:
            if self.fail_next_create is not None:
                exc, self.fail_next_create = self.fail_next_create, None
                raise exc
            record = SessionRecord(
                id=str(uuid4()),
                user_id=user_id,
                token_hash=token_hash,
                expires_at=expires_at,
                created_at=datetime.now(UTC),
            )
            self._rows[record.id] = record
            return record

    def get_session_by_id(self, session_id: str) -> SessionRecord:
        with self._lock:
            record = self._rows.get(session_id)
        if record is None:
            raise NotFoundError("Session", session_id)
        return record

    def get_sessions_by_user_id(self, user_id: str) -> Sequence[SessionRecord]:
        with self._lock:
            rows = [r for r in self._rows.values() if r.user_id == user_id]
        # dict preserves insertion order; reverse gives newest first on ties
        return sorted(reversed(rows), key=lambda r: r.created_at, reverse=True)

    def delete_session(self, session_id: str) -> None:
        with self._lock:
            if self._rows.pop(session_id, None) is None:
                raise NotFoundError("Session", session_id)

    def delete_expired_sessions(self) -> int:
        now = datetime.now(UTC)
        with self._lock:
            expired = [sid for sid, r in self._rows.items() if r.expires_at < now]
            for sid in expired:
                del self._rows[sid]
        return len(expired)
