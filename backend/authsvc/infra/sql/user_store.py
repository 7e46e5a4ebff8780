from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from authsvc.models.base import as_utc
from authsvc.models.user import User
from authsvc.services._shared.dto import NewUser, UserRecord
from authsvc.services._shared.errors import NotFoundError
from authsvc.services._shared.ports import UserStore

from ._base import SQLStore


def to_user_record(user: User) -> UserRecord:
    """Map ORM ``User`` to :class:`UserRecord`."""
    return UserRecord(
        id=user.id,
        email=user.email,
        name=user.name,
        password_hash=user.password_hash,
        is_active=bool(user.is_active),
        created_at=as_utc(user.created_at),
        updated_at=as_utc(user.updated_at),
    )


class SQLAlchemyUserStore(SQLStore, UserStore):
    """:class:`UserStore` over the ``users`` table."""

    entity = "User"
    unique_constraints = (("uq_users_email", "email already registered"),)

    def create_user(self, new: NewUser) -> UserRecord:
        with self.uow() as uow:
            user = User(
                email=new.email,
                name=new.name,
                password_hash=new.password_hash,
                is_active=new.is_active,
            )
            uow.users.add(user)
            return to_user_record(user)

    def get_user_by_id(self, user_id: str) -> UserRecord:
        with self.uow() as uow:
            user = uow.users.get(user_id)
            if user is None:
                raise NotFoundError("User", user_id)
            return to_user_record(user)

    def get_user_by_email(self, email: str) -> UserRecord:
        with self.uow() as uow:
            user = uow.users.get_by_email(email)
            if user is None:
                raise NotFoundError("User", email)
            return to_user_record(user)

    def update_user(self, user_id: str, fields: Mapping[str, Any]) -> UserRecord:
        with self.uow() as uow:
            user = uow.users.get(user_id)
            if user is None:
                raise NotFoundError("User", user_id)
            uow.users.assign_updates(user, fields)
            return to_user_record(user)

    def delete_user(self, user_id: str) -> None:
        with self.uow() as uow:
            user = uow.users.get(user_id)
            if user is None:
                raise NotFoundError("User", user_id)
            uow.users.delete(user)

    def update_password(self, user_id: str, password_hash: str) -> None:
        with self.uow() as uow:
            user = uow.users.get(user_id)
            if user is None:
                raise NotFoundError("User", user_id)
            uow.users.set_password_hash(user, password_hash)
