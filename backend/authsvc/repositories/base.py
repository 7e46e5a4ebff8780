"""Shared persistence helpers for the SQLAlchemy repositories.

Repositories only stage and query rows. Transactions belong to the unit of
work that owns the session, so nothing here commits or rolls back.
"""

from __future__ import annotations

from collections.abc import Mapping
from datetime import datetime
from typing import Any, ClassVar, Generic, TypeVar, cast

from sqlalchemy import delete
from sqlalchemy.orm import Session

from authsvc.core.extensions import db

E = TypeVar("E")


class BaseRepository(Generic[E]):
    """Primary-key CRUD for one mapped class.

    Subclasses set ``model`` and, when rows may be edited in place, the
    ``updatable`` whitelist consulted by :meth:`assign_updates`.
    """

    model: ClassVar[type[Any]]
    updatable: ClassVar[frozenset[str]] = frozenset()

    def __init__(self, session: Session | None = None) -> None:
        self._session = session

    @property
    def session(self) -> Session:
        """The injected session, or the Flask-scoped one."""
        return self._session if self._session is not None else cast(Session, db.session)

    def add(self, instance: E) -> E:
        """Stage ``instance`` and flush so constraint violations surface here."""
        self.session.add(instance)
        self.session.flush()
        return instance

    def get(self, entity_id: str) -> E | None:
        return cast(E | None, self.session.get(self.model, entity_id))

    def delete(self, instance: E) -> None:
        self.session.delete(instance)
        self.session.flush()

    def flush(self) -> None:
        self.session.flush()

    def assign_updates(self, instance: E, fields: Mapping[str, Any]) -> E:
        """Set whitelisted attributes on ``instance`` and flush.

        ``setattr`` is used so the model's ``@validates`` hooks still run.

        :raises ValueError: If any key is outside ``updatable``.
        """
        rejected = sorted(set(fields) - self.updatable)
        if rejected:
            raise ValueError(f"Fields not updatable on {self.model.__name__}: {rejected}")
        for key, value in fields.items():
            setattr(instance, key, value)
        self.session.flush()
        return instance


class ExpiringRepository(BaseRepository[E]):
    """Repository over rows carrying an ``expires_at`` column."""

    def delete_expired(self, now: datetime) -> int:
        """Bulk-delete rows that expired before ``now``.

        :returns: Number of rows removed.
        """
        result = self.session.execute(
            delete(self.model)
            .where(self.model.expires_at < now)
            .execution_options(synchronize_session=False)
        )
        return int(result.rowcount or 0)
