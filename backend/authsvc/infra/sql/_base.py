"""Shared plumbing for the SQLAlchemy store adapters."""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterator
from contextlib import contextmanager

from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from authsvc.services._shared.errors import ConflictError, StoreError, violates
from authsvc.uow.sqlalchemy_uow import SQLAlchemyUnitOfWork

log = logging.getLogger(__name__)

UowFactory = Callable[[], SQLAlchemyUnitOfWork]


class SQLStore:
    """
    Base for stores that run each call in its own Unit of Work.

    :param uow_factory: Builds a fresh :class:`SQLAlchemyUnitOfWork`; defaults
        to one bound to the Flask-scoped session.
    """

    #: ``(constraint_name, detail)`` pairs mapped to :class:`ConflictError`.
    unique_constraints: tuple[tuple[str, str], ...] = ()
    entity: str = "Entity"

    def __init__(self, uow_factory: UowFactory | None = None) -> None:
        self._uow_factory = uow_factory or SQLAlchemyUnitOfWork

    @contextmanager
    def uow(self) -> Iterator[SQLAlchemyUnitOfWork]:
        """
        Open a Unit of Work and translate driver errors.

        Commit happens when the block exits cleanly; commit-time failures are
        translated too.

        :raises ConflictError: On a known unique-constraint violation.
        :raises StoreError: On any other SQLAlchemy failure.
        """
        try:
            with self._uow_factory() as uow:
                yield uow
        except IntegrityError as exc:
            for constraint, detail in self.unique_constraints:
                if violates(exc, constraint):
                    raise ConflictError(self.entity, detail) from exc
            log.error("%s integrity error", self.entity, exc_info=True)
            raise StoreError(f"{self.entity} integrity error") from exc
        except SQLAlchemyError as exc:
            log.error("%s store failure", self.entity, exc_info=True)
            raise StoreError(f"{self.entity} store failure") from exc
