from __future__ import annotations

import threading
from dataclasses import replace
from datetime import UTC, datetime
from typing import Protocol
from uuid import uuid4

from authsvc.services._shared.dto import PasswordResetRecord
from authsvc.services._shared.errors import ConflictError, NotFoundError


class PasswordResetStore(Protocol):
    """
    Durable store of outstanding password resets, keyed by token digest.
    """

    def create_password_reset(
        self, user_id: str, token_hash: str, expires_at: datetime
    ) -> PasswordResetRecord: ...

    def get_password_reset_by_token(self, token_hash: str) -> PasswordResetRecord:
        """:raises NotFoundError: When no reset has this digest."""
        ...

    def mark_password_reset_as_used(self, reset_id: str) -> None:
        """
        Flip ``used`` to ``True``.

        :raises NotFoundError: Unknown id.
        :raises ConflictError: Already used.
        """
        ...

    def delete_expired_password_resets(self) -> int:
        """Remove resets past ``expires_at``. :returns: Rows removed."""
        ...


class InMemoryPasswordResetStore(PasswordResetStore):
    """Thread-safe in-memory password reset store."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._rows: dict[str, PasswordResetRecord] = {}

    def create_password_reset(
        self, user_id: str, token_hash: str, expires_at: datetime
    ) -> PasswordResetRecord:
        with self._lock:
            if any(r.token_hash == token_hash for r in self._rows.values()):
                raise ConflictError("PasswordReset", "duplicate token")
            record = PasswordResetRecord(
                id=str(uuid4()),
                user_id=user_id,
                token_hash=token_hash,
                expires_at=expires_at,
                used=False,
                created_at=datetime.now(UTC),
            )
            self._rows[record.id] = record
            return record

    def get_password_reset_by_token(self, token_hash: str) -> PasswordResetRecord:
        with self._lock:
            record = next((r for r in self._rows.values() if r.token_hash == token_hash), None)
        if record is None:
            raise NotFoundError("PasswordReset", token_hash[:8])
        return record

    def mark_password_reset_as_used(self, reset_id: str) -> None:
        with self._lock:
            record = self._rows.get(reset_id)
            if record is None:
                raise NotFoundError("PasswordReset", reset_id)
            if record.used:
                raise ConflictError("PasswordReset", "already used")
            self._rows[reset_id] = replace(record, used=True)

    def delete_expired_password_resets(self) -> int:
        now = datetime.now(UTC)
        with self._lock:
            expired = [rid for rid, r in self._rows.items() if r.expires_at < now]
            for rid in expired:
                del self._rows[rid]
        return len(expired)
