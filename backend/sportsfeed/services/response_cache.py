"""
backend/sportsfeed/services/response_cache.py

Purpose:
    Short-TTL in-memory cache for canonical results, keyed by operation and
    parameters, with a per-key lock so concurrent identical requests trigger
    one provider walk. Best-effort only: a miss just re-runs the fallback
    chain, and nothing survives a restart.

Dependencies:
    - asyncio
    - sportsfeed.config
"""

from __future__ import annotations

import asyncio
import time
from contextlib import asynccontextmanager
from dataclasses import dataclass
from typing import Any, AsyncIterator, Iterator

from sportsfeed.config import settings


@dataclass
class CacheEntry:
    key: str
    data: list[Any]
    timestamp: float
    ttl: float

    def is_fresh(self, now: float) -> bool:
        return (now - self.timestamp) < self.ttl


def default_ttls() -> dict[str, float]:
    return {
        "live": float(settings.CACHE_TTL_LIVE_SECONDS),
        "upcoming": float(settings.CACHE_TTL_UPCOMING_SECONDS),
        "odds": float(settings.CACHE_TTL_ODDS_SECONDS),
        "standings": float(settings.CACHE_TTL_STANDINGS_SECONDS),
        "leagues": float(settings.CACHE_TTL_LEAGUES_SECONDS),
    }


def make_key(operation: str, *parts: Any) -> str:
    """`live:39:-:football` style key; None parts become "-"."""
    return ":".join([operation, *("-" if p is None else str(p).strip().lower() for p in parts)])


class ResponseCache:
    """TTL cache with mutex for thundering herd protection."""

    def __init__(self, ttls: dict[str, float] | None = None, default_ttl: float = 120.0):
        self._ttls = dict(ttls) if ttls is not None else default_ttls()
        self._default_ttl = default_ttl
        self._data: dict[str, CacheEntry] = {}
        self._locks: dict[str, asyncio.Lock] = {}
        self._lock_users: dict[str, int] = {}

    def ttl_for(self, key: str) -> float:
        operation = key.split(":", 1)[0]
        return self._ttls.get(operation, self._default_ttl)

    def get(self, key: str) -> list[Any] | None:
        entry = self._data.get(key)
        if entry is None:
            return None
        if not entry.is_fresh(time.monotonic()):
            del self._data[key]
            return None
        return entry.data

    def set(self, key: str, data: list[Any]) -> None:
        now = time.monotonic()
        self._data[key] = CacheEntry(key=key, data=list(data), timestamp=now, ttl=self.ttl_for(key))
        self._cleanup(now)

    def invalidate(self, key: str | None = None) -> None:
        if key is None:
            self._data.clear()
            return
        self._data.pop(key, None)

    def fresh_entries(self, operation: str | None = None) -> Iterator[CacheEntry]:
        now = time.monotonic()
        prefix = f"{operation}:" if operation else ""
        for entry in list(self._data.values()):
            if entry.key.startswith(prefix) and entry.is_fresh(now):
                yield entry

    def _cleanup(self, now: float) -> None:
        """Remove expired entries to prevent unbounded memory growth."""
        expired = [k for k, v in self._data.items() if not v.is_fresh(now)]
        for k in expired:
            del self._data[k]
            lock = self._locks.get(k)
            if lock is not None and not lock.locked() and k not in self._lock_users:
                del self._locks[k]

    def lock(self, key: str) -> asyncio.Lock:
        if key not in self._locks:
            self._locks[key] = asyncio.Lock()
        return self._locks[key]

    @asynccontextmanager
    async def single_flight(self, key: str) -> AsyncIterator[None]:
        """Hold the per-key lock; it is dropped once no caller holds or waits on it."""
        lock = self.lock(key)
        self._lock_users[key] = self._lock_users.get(key, 0) + 1
        try:
            async with lock:
                yield
        finally:
            remaining = self._lock_users[key] - 1
            if remaining:
                self._lock_users[key] = remaining
            else:
                del self._lock_users[key]
                if self._locks.get(key) is lock:
                    del self._locks[key]

    def __len__(self) -> int:
        return len(self._data)
