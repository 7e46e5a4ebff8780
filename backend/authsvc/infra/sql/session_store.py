from __future__ import annotations

from collections.abc import Sequence
from datetime import datetime

from authsvc.models.base import as_utc, utcnow
from authsvc.models.session import UserSession
from authsvc.services._shared.dto import SessionRecord
from authsvc.services._shared.errors import NotFoundError
from authsvc.services._shared.ports import SessionStore

from ._base import SQLStore


def to_session_record(row: UserSession) -> SessionRecord:
    return SessionRecord(
        id=row.id,
        user_id=row.user_id,
        token_hash=row.token_hash,
        expires_at=as_utc(row.expires_at),
        created_at=as_utc(row.created_at),
    )


class SQLAlchemySessionStore(SQLStore, SessionStore):
    """:class:`SessionStore` over the ``user_sessions`` table."""

    entity = "Session"

    def create_session(self, user_id: str, token_hash: str, expires_at: datetime) -> SessionRecord:
        with self.uow() as uow:
            row = UserSession(user_id=user_id, token_hash=token_hash, expires_at=expires_at)
            uow.sessions.add(row)
            return to_session_record(row)

    def get_session_by_id(self, session_id: str) -> SessionRecord:
        with self.uow() as uow:
            row = uow.sessions.get(session_id)
            if row is None:
                raise NotFoundError("Session", session_id)
            return to_session_record(row)

    def get_sessions_by_user_id(self, user_id: str) -> Sequence[SessionRecord]:
        with self.uow() as uow:
            return [to_session_record(row) for row in uow.sessions.list_for_user(user_id)]

    def delete_session(self, session_id: str) -> None:
        with self.uow() as uow:
            row = uow.sessions.get(session_id)
            if row is None:
                raise NotFoundError("Session", session_id)
            uow.sessions.delete(row)

    def delete_expired_sessions(self) -> int:
        with self.uow() as uow:
            return uow.sessions.delete_expired(utcnow())
