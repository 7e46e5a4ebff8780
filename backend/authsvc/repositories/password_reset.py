"""Persistence for :class:`PasswordReset` rows."""

from __future__ import annotations

from sqlalchemy import select, update

from authsvc.models.password_reset import PasswordReset
from authsvc.repositories.base import ExpiringRepository


class PasswordResetRepository(ExpiringRepository[PasswordReset]):
    """Password reset tokens, addressed by the digest of the raw token."""

    model = PasswordReset

    def get_by_token_hash(self, token_hash: str) -> PasswordReset | None:
        stmt = select(PasswordReset).where(PasswordReset.token_hash == token_hash)
        return self.session.execute(stmt).scalar_one_or_none()

    def mark_used(self, reset_id: str) -> int:
        """
        Flip ``used`` from ``False`` to ``True``.

        The ``used = false`` guard lets only one of several concurrent
        confirmations win.

        :returns: Number of rows updated (0 or 1).
        """
        result = self.session.execute(
            update(PasswordReset)
            .where(PasswordReset.id == reset_id, PasswordReset.used.is_(False))
            .values(used=True)
            .execution_options(synchronize_session=False)
        )
        return int(result.rowcount or 0)
