from __future__ import annotations

import threading
from datetime import UTC, datetime, timedelta
from typing import Final, Protocol

from authsvc.services._shared.errors import NotFoundError

REFRESH_TOKEN_KEY_PREFIX: Final[str] = "refresh_token:"


class RefreshTokenCache(Protocol):
    """
    Fast lookup of the one live refresh token per user.

    A new login or refresh overwrites the entry (last writer wins). This is
    the authority consulted when a refresh token is presented.
    """

    def set_refresh_token(self, user_id: str, token: str, ttl: timedelta) -> None: ...

    def get_refresh_token(self, user_id: str) -> str:
        """:raises NotFoundError: When no live entry exists."""
        ...

    def delete_refresh_token(self, user_id: str) -> None:
        """Remove the entry; a missing entry is not an error."""
        ...

    def delete_all_user_refresh_tokens(self, user_id: str) -> int:
        """Remove every key prefixed with the user id. :returns: Keys removed."""
        ...


class InMemoryRefreshTokenCache(RefreshTokenCache):
    """
    In-memory cache honouring TTLs lazily on read.

    ``fail_next_set`` / ``fail_next_delete`` let tests simulate cache
    outages on the next matching call.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._entries: dict[str, tuple[str, datetime]] = {}
        self.fail_next_set: Exception | None = None
        self.fail_next_delete: Exception | None = None

    @staticmethod
    def _k(user_id: str) -> str:
        return f"{REFRESH_TOKEN_KEY_PREFIX}{user_id}"

    def set_refresh_token(self, user_id: str, token: str, ttl: timedelta) -> None:
        with self._lock:
            if self.fail_next_set is not None:
                exc, self.fail_next_set = self.fail_next_set, None
                raise exc
            self._entries[self._k(user_id)] = (token, datetime.now(UTC) + ttl)

    def get_refresh_token(self, user_id: str) -> str:
        key = self._k(user_id)
        with self._lock:
            entry = self._entries.get(key)
            if entry is not None and entry[1] <= datetime.now(UTC):
                del self._entries[key]
                entry = None
        if entry is None:
            raise NotFoundError("RefreshToken", user_id)
        return entry[0]

    def delete_refresh_token(self, user_id: str) -> None:
        with self._lock:
            if self.fail_next_delete is not None:
                exc, self.fail_next_delete = self.fail_next_delete, None
                raise exc
            self._entries.pop(self._k(user_id), None)

    def delete_all_user_refresh_tokens(self, user_id: str) -> int:
        prefix = self._k(user_id)
        with self._lock:
            keys = [k for k in self._entries if k.startswith(prefix)]
            for key in keys:
                del self._entries[key]
        return len(keys)
