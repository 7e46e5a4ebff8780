from __future__ import annotations

import threading
from collections.abc import Mapping
from dataclasses import replace
from datetime import UTC, datetime
from typing import Any, Protocol
from uuid import uuid4

from authsvc.services._shared.dto import NewUser, UserRecord
from authsvc.services._shared.errors import ConflictError, NotFoundError

UPDATABLE_USER_FIELDS = frozenset({"email", "name", "is_active"})


class UserStore(Protocol):
    """
    Durable store of user identities.

    Lookups raise :class:`NotFoundError` on absence; creating or renaming to
    an email that is already taken raises :class:`ConflictError`.
    """

    def create_user(self, new: NewUser) -> UserRecord: ...

    def get_user_by_id(self, user_id: str) -> UserRecord: ...

    def get_user_by_email(self, email: str) -> UserRecord: ...

    def update_user(self, user_id: str, fields: Mapping[str, Any]) -> UserRecord:
        """Update whitelisted fields (``email``, ``name``, ``is_active``)."""
        ...

    def delete_user(self, user_id: str) -> None: ...

    def update_password(self, user_id: str, password_hash: str) -> None:
        """Replace the stored hash with an already computed one."""
        ...


class InMemoryUserStore(UserStore):
    """Thread-safe in-memory user store for tests and local runs."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._by_id: dict[str, UserRecord] = {}

    def _find_email(self, email: str) -> UserRecord | None:
        email = email.strip().lower()
        return next((u for u in self._by_id.values() if u.email == email), None)

    def create_user(self, new: NewUser) -> UserRecord:
        with self._lock:
            if self._find_email(new.email) is not None:
                raise ConflictError("User", "email already registered")
            now = datetime.now(UTC)
            record = UserRecord(
                id=str(uuid4()),
                email=new.email.strip().lower(),
                name=new.name,
                password_hash=new.password_hash,
                is_active=new.is_active,
                created_at=now,
                updated_at=now,
            )
            self._by_id[record.id] = record
            return record

    def get_user_by_id(self, user_id: str) -> UserRecord:
        with self._lock:
            record = self._by_id.get(user_id)
        if record is None:
            raise NotFoundError("User", user_id)
        return record

    def get_user_by_email(self, email: str) -> UserRecord:
        with self._lock:
            record = self._find_email(email)
        if record is None:
            raise NotFoundError("User", email)
        return record

    def update_user(self, user_id: str, fields: Mapping[str, Any]) -> UserRecord:
        unknown = set(fields) - UPDATABLE_USER_FIELDS
        if unknown:
            raise ValueError(f"Unknown or non-updatable fields: {sorted(unknown)}")
        with self._lock:
            record = self._by_id.get(user_id)
            if record is None:
                raise NotFoundError("User", user_id)
            if "email" in fields:
                other = self._find_email(str(fields["email"]))
                if other is not None and other.id != user_id:
                    raise ConflictError("User", "email already registered")
            changes = dict(fields)
            if "email" in changes:
                changes["email"] = str(changes["email"]).strip().lower()
            record = replace(record, **changes, updated_at=datetime.now(UTC))
            self._by_id[user_id] = record
            return record

    def delete_user(self, user_id: str) -> None:
        with self._lock:
            if self._by_id.pop(user_id, None) is None:
                raise NotFoundError("User", user_id)

    def update_password(self, user_id: str, password_hash: str) -> None:
        with self._lock:
            record = self._by_id.get(user_id)
            if record is None:
                raise NotFoundError("User", user_id)
            self._by_id[user_id] = replace(
                record, password_hash=password_hash, updated_at=datetime.now(UTC)
            )
