"""
backend/sportsfeed/services/provider_toggle.py

Purpose:
    Provider enablement: static `PROVIDERS_DISABLED` from settings plus an
    operator override persisted in `provider_toggles` (DB > ENV > enabled).
    Overrides are cached briefly so the aggregator's gate stays a dict
    lookup on the hot path.

Dependencies:
    - sportsfeed.database
    - sportsfeed.config
    - pymongo
"""

from __future__ import annotations

import logging
import time
from typing import Any

from pymongo.errors import PyMongoError

import sportsfeed.database as _db
from sportsfeed.config import settings
from sportsfeed.utils import utcnow

logger = logging.getLogger("sportsfeed.provider_toggle")


def _norm_provider(provider: str) -> str:
    return str(provider or "").strip().lower()


class ProviderToggleService:
    def __init__(self, cache_ttl: float | None = None) -> None:
        self._cache_ttl = float(settings.PROVIDER_TOGGLE_CACHE_TTL if cache_ttl is None else cache_ttl)
        self._overrides: dict[str, bool] = {}
        self._loaded_at: float | None = None

    def invalidate(self) -> None:
        self._loaded_at = None

    async def _load_overrides(self) -> dict[str, bool]:
        now = time.monotonic()
        if self._loaded_at is not None and (now - self._loaded_at) < self._cache_ttl:
            return self._overrides
        if _db.db is None:
            self._overrides = {}
            self._loaded_at = now
            return self._overrides
        try:
            docs = await _db.db.provider_toggles.find({}, {"enabled": 1}).to_list(length=200)
        except PyMongoError as exc:
            # Keep the last known overrides; retry on the next call.
            logger.error("Could not load provider toggles: %s", exc)
            return self._overrides
        self._overrides = {
            _norm_provider(doc.get("_id")): bool(doc.get("enabled"))
            for doc in docs
            if isinstance(doc.get("enabled"), bool)
        }
        self._loaded_at = now
        return self._overrides

    async def is_enabled(self, provider: str) -> bool:
        name = _norm_provider(provider)
        overrides = await self._load_overrides()
        if name in overrides:
            return overrides[name]
        return name not in settings.disabled_providers()

    async def set_override(self, provider: str, enabled: bool | None, *, actor: str | None = None) -> dict[str, Any]:
        """Force a provider on/off; `None` removes the override (back to settings)."""
        name = _norm_provider(provider)
        if not name:
            raise ValueError("provider name is required")
        if _db.db is None:
            raise RuntimeError("database not connected")
        if enabled is None:
            await _db.db.provider_toggles.delete_one({"_id": name})
        else:
            await _db.db.provider_toggles.update_one(
                {"_id": name},
                {"$set": {"enabled": bool(enabled), "updated_at": utcnow(), "updated_by": actor}},
                upsert=True,
            )
        self.invalidate()
        logger.info("Provider toggle %s -> %s (by %s)", name, enabled, actor or "unknown")
        return await self.get_state(name)

    async def get_state(self, provider: str) -> dict[str, Any]:
        name = _norm_provider(provider)
        overrides = await self._load_overrides()
        static_enabled = name not in settings.disabled_providers()
        return {
            "provider": name,
            "enabled": overrides.get(name, static_enabled),
            "source": "db" if name in overrides else "env",
            "static_enabled": static_enabled,
            "override": overrides.get(name),
        }

    async def list_states(self, providers: list[str]) -> list[dict[str, Any]]:
        return [await self.get_state(name) for name in providers]


provider_toggle_service = ProviderToggleService()
