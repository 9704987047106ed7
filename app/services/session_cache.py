from __future__ import annotations

import json
import logging
from datetime import datetime, timedelta, timezone
from threading import Lock
from typing import Callable, Protocol

import redis

from app.core.config import settings

_LOG = logging.getLogger("app.session_cache")
_REDIS_KEY_PREFIX = "session:"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class SessionCache(Protocol):
    def get(self, token: str) -> dict | None:
        ...

    def put(self, token: str, principal: dict, *, ttl_seconds: int) -> None:
        ...

    def invalidate(self, token: str) -> None:
        ...

    def clear(self) -> None:
        ...


class InMemorySessionCache:
    def __init__(self, clock: Callable[[], datetime] = _utcnow):
        self._data: dict[str, tuple[dict, datetime]] = {}
        self._lock = Lock()
        self._clock = clock

    def get(self, token: str) -> dict | None:
        now = self._clock()
        with self._lock:
            entry = self._data.get(token)
            if entry is None:
                return None
            principal, expires_at = entry
            if expires_at <= now:
                del self._data[token]
                return None
            return dict(principal)

    def put(self, token: str, principal: dict, *, ttl_seconds: int) -> None:
        if ttl_seconds <= 0:
            return
        now = self._clock()
        expires_at = now + timedelta(seconds=int(ttl_seconds))
        with self._lock:
            # Tokens that are never presented again are dropped here.
            for stale in [key for key, (_, expiry) in self._data.items() if expiry <= now]:
                del self._data[stale]
            self._data[token] = (dict(principal), expires_at)

    def invalidate(self, token: str) -> None:
        with self._lock:
            self._data.pop(token, None)

    def clear(self) -> None:
        with self._lock:
            self._data.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._data)


class RedisSessionCache:
    def __init__(self, client: redis.Redis):
        self.client = client

    def get(self, token: str) -> dict | None:
        raw = self.client.get(_REDIS_KEY_PREFIX + token)
        if not raw:
            return None
        try:
            return json.loads(raw)
        except ValueError:
            self.client.delete(_REDIS_KEY_PREFIX + token)
            return None

    def put(self, token: str, principal: dict, *, ttl_seconds: int) -> None:
        if ttl_seconds <= 0:
            return
        self.client.set(_REDIS_KEY_PREFIX + token, json.dumps(principal), ex=int(ttl_seconds))

    def invalidate(self, token: str) -> None:
        self.client.delete(_REDIS_KEY_PREFIX + token)

    def clear(self) -> None:
        for key in self.client.scan_iter(match=_REDIS_KEY_PREFIX + "*"):
            self.client.delete(key)


def build_session_cache(redis_url: str | None = None) -> SessionCache:
    url = settings.REDIS_URL if redis_url is None else redis_url
    if not url:
        return InMemorySessionCache()
    try:
        client = redis.Redis.from_url(
            url,
            decode_responses=True,
            socket_timeout=0.4,
            socket_connect_timeout=0.4,
        )
        client.ping()
        return RedisSessionCache(client)
    except Exception:
        _LOG.warning("Redis session cache unavailable; fallback to in-memory cache")
        return InMemorySessionCache()
