from __future__ import annotations

from datetime import datetime

from authsvc.models.base import as_utc, utcnow
from authsvc.models.password_reset import PasswordReset
from authsvc.services._shared.dto import PasswordResetRecord
from authsvc.services._shared.errors import ConflictError, NotFoundError
from authsvc.services._shared.ports import PasswordResetStore

from ._base import SQLStore


def to_reset_record(row: PasswordReset) -> PasswordResetRecord:
    return PasswordResetRecord(
        id=row.id,
        user_id=row.user_id,
        token_hash=row.token_hash,
        expires_at=as_utc(row.expires_at),
        used=bool(row.used),
        created_at=as_utc(row.created_at),
    )


class SQLAlchemyPasswordResetStore(SQLStore, PasswordResetStore):
    """:class:`PasswordResetStore` over the ``password_resets`` table."""

    entity = "PasswordReset"
    unique_constraints = (("uq_password_resets_token_hash", "duplicate token"),)

    def create_password_reset(
        self, user_id: str, token_hash: str, expires_at: datetime
    ) -> PasswordResetRecord:
        with self.uow() as uow:
            row = PasswordReset(user_id=user_id, token_hash=token_hash, expires_at=expires_at)
            uow.password_resets.add(row)
            return to_reset_record(row)

    def get_password_reset_by_token(self, token_hash: str) -> PasswordResetRecord:
        with self.uow() as uow:
            row = uow.password_resets.get_by_token_hash(token_hash)
            if row is None:
                raise NotFoundError("PasswordReset", token_hash[:8])
            return to_reset_record(row)

    def mark_password_reset_as_used(self, reset_id: str) -> None:
        with self.uow() as uow:
            if uow.password_resets.mark_used(reset_id) == 1:
                return
            if uow.password_resets.get(reset_id) is None:
                raise NotFoundError("PasswordReset", reset_id)
            raise ConflictError("PasswordReset", "already used")

    def delete_expired_password_resets(self) -> int:
        with self.uow() as uow:
            return uow.password_resets.delete_expired(utcnow())
