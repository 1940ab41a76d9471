"""
backend/sportsfeed/services/provider_health.py

Purpose:
    Cross-process provider health store and circuit breaker. One document per
    provider in `provider_health`; the failure counter is bumped with an
    atomic `$inc` and the CLOSED -> OPEN transition is a conditional update,
    so concurrent workers racing on the same outage open the circuit once.
    OPEN closes again on a timer (`disabled_until`), not via a probe.

Dependencies:
    - motor (via sportsfeed.database)
    - pymongo
    - sportsfeed.config
"""

from __future__ import annotations

import logging
from datetime import timedelta

from pymongo import ReturnDocument
from pymongo.errors import PyMongoError

import sportsfeed.database as _db
from sportsfeed.config import settings
from sportsfeed.models.canonical import ProviderHealthRecord
from sportsfeed.utils import ensure_utc, utcnow

logger = logging.getLogger("sportsfeed.provider_health")

_AUTH_STATUSES = {401, 403}


def _norm(provider: str) -> str:
    return str(provider or "").strip().lower()


class ProviderHealthTracker:
    """Failure/success counters per provider with a timed circuit breaker.

    Store errors are logged and swallowed: health is advisory, a broken
    health store must not take the data path down with it. Without a
    database connection every call is a no-op and no provider is disabled.
    """

    def __init__(
        self,
        *,
        threshold: int | None = None,
        window_seconds: int | None = None,
        cooldown_seconds: int | None = None,
        rate_limit_cooldown_seconds: int | None = None,
        auth_cooldown_seconds: int | None = None,
        record_ttl_seconds: int | None = None,
    ) -> None:
        self.threshold = max(1, int(threshold or settings.HEALTH_FAILURE_THRESHOLD))
        self.window = timedelta(seconds=window_seconds or settings.HEALTH_FAILURE_WINDOW_SECONDS)
        self.cooldown = timedelta(seconds=cooldown_seconds or settings.HEALTH_COOLDOWN_SECONDS)
        self.rate_limit_cooldown = timedelta(
            seconds=rate_limit_cooldown_seconds or settings.HEALTH_RATE_LIMIT_COOLDOWN_SECONDS
        )
        self.auth_cooldown = timedelta(seconds=auth_cooldown_seconds or settings.HEALTH_AUTH_COOLDOWN_SECONDS)
        self.record_ttl = timedelta(seconds=record_ttl_seconds or settings.HEALTH_RECORD_TTL_SECONDS)

    def _collection(self):
        if _db.db is None:
            return None
        return _db.db.provider_health

    def cooldown_for(self, status_code: int | None) -> timedelta:
        if status_code in _AUTH_STATUSES:
            return self.auth_cooldown
        if status_code == 429:
            return self.rate_limit_cooldown
        return self.cooldown

    async def mark_failure(self, provider: str, status_code: int | None, message: str) -> None:
        col = self._collection()
        if col is None:
            return
        name = _norm(provider)
        now = utcnow()
        try:
            # Failures older than the window do not count towards the threshold.
            await col.update_one(
                {"_id": name, "window_started_at": {"$lt": now - self.window}},
                {"$set": {"failures": 0, "window_started_at": now}},
            )
            doc = await col.find_one_and_update(
                {"_id": name},
                {
                    "$inc": {"failures": 1},
                    "$set": {
                        "ok": False,
                        "message": str(message or "")[:500],
                        "status_code": status_code,
                        "misconfigured": False,
                        "timestamp": now,
                        "expires_at": now + self.record_ttl,
                    },
                    "$setOnInsert": {"provider_name": name, "window_started_at": now},
                },
                upsert=True,
                return_document=ReturnDocument.AFTER,
            )
            disabled_until = (doc or {}).get("disabled_until")
            if disabled_until and ensure_utc(disabled_until) > now:
                # In-flight calls failing while the circuit is open do not count
                # towards the next opening.
                await col.update_one(
                    {"_id": name, "disabled_until": {"$gt": now}},
                    {"$set": {"failures": 0, "window_started_at": now}},
                )
                return

            failures = int((doc or {}).get("failures") or 0)
            if failures < self.threshold:
                return

            until = now + self.cooldown_for(status_code)
            # Compare-and-set: only the worker that sees the circuit closed opens it.
            result = await col.update_one(
                {
                    "_id": name,
                    "$or": [{"disabled_until": None}, {"disabled_until": {"$lte": now}}],
                },
                {
                    "$set": {
                        "disabled_until": until,
                        "failures": 0,
                        "window_started_at": now,
                        "expires_at": max(until, now + self.record_ttl),
                    }
                },
            )
            if result.modified_count:
                logger.warning(
                    "Circuit OPEN for %s until %s after %d failures (last: HTTP %s %s)",
                    name, until.isoformat(), failures, status_code, message,
                )
        except PyMongoError as exc:
            logger.error("Health store unavailable, failure for %s not recorded: %s", name, exc)

    async def mark_success(self, provider: str, message: str = "ok") -> None:
        name = _norm(provider)
        now = utcnow()
        await self._write_snapshot(
            name,
            {
                "ok": True,
                "message": str(message or ""),
                "status_code": None,
                "failures": 0,
                "window_started_at": now,
                "disabled_until": None,
                "misconfigured": False,
                "timestamp": now,
                "expires_at": now + self.record_ttl,
            },
            on_insert={"provider_name": name},
        )

    async def record_empty(self, provider: str, message: str) -> None:
        """Successful call without data: visible in diagnostics, not a breaker failure."""
        name = _norm(provider)
        now = utcnow()
        await self._write_snapshot(
            name,
            {
                "ok": False,
                "message": str(message or ""),
                "status_code": None,
                "misconfigured": False,
                "timestamp": now,
                "expires_at": now + self.record_ttl,
            },
            on_insert={"provider_name": name, "failures": 0, "window_started_at": now},
        )

    async def record_misconfigured(self, provider: str, message: str) -> None:
        name = _norm(provider)
        now = utcnow()
        await self._write_snapshot(
            name,
            {
                "ok": False,
                "message": str(message or ""),
                "status_code": None,
                "misconfigured": True,
                "timestamp": now,
                "expires_at": now + self.record_ttl,
            },
            on_insert={"provider_name": name, "failures": 0, "window_started_at": now},
        )

    async def _write_snapshot(self, name: str, fields: dict, *, on_insert: dict) -> None:
        col = self._collection()
        if col is None:
            return
        try:
            await col.update_one(
                {"_id": name},
                {"$set": fields, "$setOnInsert": on_insert},
                upsert=True,
            )
        except PyMongoError as exc:
            logger.error("Health store unavailable, snapshot for %s not written: %s", name, exc)

    async def is_disabled(self, provider: str) -> bool:
        col = self._collection()
        if col is None:
            return False
        try:
            doc = await col.find_one({"_id": _norm(provider)}, {"disabled_until": 1})
        except PyMongoError as exc:
            logger.error("Health store unavailable, treating %s as enabled: %s", provider, exc)
            return False
        until = (doc or {}).get("disabled_until")
        return bool(until) and ensure_utc(until) > utcnow()

    async def get_record(self, provider: str) -> ProviderHealthRecord | None:
        col = self._collection()
        if col is None:
            return None
        try:
            doc = await col.find_one({"_id": _norm(provider)})
        except PyMongoError as exc:
            logger.error("Health store unavailable: %s", exc)
            return None
        return self._to_record(doc)

    async def list_records(self) -> list[ProviderHealthRecord]:
        col = self._collection()
        if col is None:
            return []
        try:
            docs = await col.find({}).to_list(length=500)
        except PyMongoError as exc:
            logger.error("Health store unavailable: %s", exc)
            return []
        records = [self._to_record(doc) for doc in docs]
        return sorted((r for r in records if r is not None), key=lambda r: r.provider_name)

    async def clear(self, provider: str) -> None:
        col = self._collection()
        if col is None:
            return
        try:
            await col.delete_one({"_id": _norm(provider)})
        except PyMongoError as exc:
            logger.error("Health store unavailable, %s not cleared: %s", provider, exc)

    def _to_record(self, doc: dict | None) -> ProviderHealthRecord | None:
        if not doc:
            return None
        now = utcnow()
        # The TTL monitor runs about once a minute; do not serve expired records meanwhile.
        expires_at = doc.get("expires_at")
        if expires_at and ensure_utc(expires_at) <= now:
            return None
        disabled_until = doc.get("disabled_until")
        if disabled_until:
            disabled_until = ensure_utc(disabled_until)
            if disabled_until <= now:
                disabled_until = None
        timestamp = doc.get("timestamp")
        return ProviderHealthRecord(
            provider_name=str(doc.get("provider_name") or doc.get("_id")),
            ok=bool(doc.get("ok")),
            message=str(doc.get("message") or ""),
            timestamp=ensure_utc(timestamp) if timestamp else now,
            status_code=doc.get("status_code"),
            failures=int(doc.get("failures") or 0),
            disabled_until=disabled_until,
            misconfigured=bool(doc.get("misconfigured")),
        )


provider_health = ProviderHealthTracker()
