# comments in English; reST docstrings
from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import timedelta

import redis  # type: ignore[import-untyped]
from redis.exceptions import RedisError  # type: ignore[import-untyped]

from authsvc.services._shared.errors import NotFoundError, StoreError
from authsvc.services._shared.ports import REFRESH_TOKEN_KEY_PREFIX, RefreshTokenCache

log = logging.getLogger(__name__)


@dataclass(slots=True)
class RedisRefreshTokenCache(RefreshTokenCache):
    """
    Redis-backed refresh token cache.

    One string key per user, ``refresh_token:<user_id>``, holding the raw
    token with a TTL equal to the refresh lifetime.

    :param r: A Redis client (already connected).
    :param scan_count: ``COUNT`` hint for prefix scans.
    """

    r: redis.Redis
    scan_count: int = 100

    # -------------------- helpers --------------------

    @staticmethod
    def _k(user_id: str) -> str:
        return f"{REFRESH_TOKEN_KEY_PREFIX}{user_id}"

    @staticmethod
    def _ttl_seconds(ttl: timedelta) -> int:
        return max(1, int(ttl.total_seconds()))

    # -------------------- API ------------------------

    def set_refresh_token(self, user_id: str, token: str, ttl: timedelta) -> None:
        """Store (or overwrite) the user's live refresh token."""
        try:
            self.r.set(self._k(user_id), token, ex=self._ttl_seconds(ttl))
        except RedisError as exc:
            raise StoreError(f"refresh cache write failed: {exc}") from exc

    def get_refresh_token(self, user_id: str) -> str:
        try:
            raw = self.r.get(self._k(user_id))
        except RedisError as exc:
            raise StoreError(f"refresh cache read failed: {exc}") from exc
        if raw is None:
            raise NotFoundError("RefreshToken", user_id)
        return raw.decode("utf-8") if isinstance(raw, bytes) else str(raw)

    def delete_refresh_token(self, user_id: str) -> None:
        try:
            self.r.delete(self._k(user_id))
        except RedisError as exc:
            raise StoreError(f"refresh cache delete failed: {exc}") from exc

    def delete_all_user_refresh_tokens(self, user_id: str) -> int:
        """
        Delete every key under ``refresh_token:<user_id>*``.

        Uses ``SCAN`` rather than ``KEYS`` so large keyspaces do not block the
        server. Deletes are pipelined.
        """
        pattern = f"{self._k(user_id)}*"
        try:
            keys = list(self.r.scan_iter(match=pattern, count=self.scan_count))
            if not keys:
                return 0
            pipe = self.r.pipeline(transaction=False)
            for key in keys:
                pipe.delete(key)
            removed = sum(int(n) for n in pipe.execute())
        except RedisError as exc:
            raise StoreError(f"refresh cache bulk delete failed: {exc}") from exc
        log.debug("refresh_cache.purged", extra={"user_id": user_id, "event": "purge"})
        return removed
