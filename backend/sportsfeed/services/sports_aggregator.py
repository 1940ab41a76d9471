"""
backend/sportsfeed/services/sports_aggregator.py

Purpose:
    Orchestrator for live matches, upcoming fixtures, odds, standings and
    leagues. One generic loop walks the configured provider priority list
    for an operation:
    cache -> enablement gate -> circuit breaker gate -> adapter -> normalizer.
    The first non-empty result wins and is cached; every attempt is written
    to the health store. Provider errors never reach the caller; when every
    provider fails or is skipped the result is an empty list.

Dependencies:
    - sportsfeed.providers.*
    - sportsfeed.services.normalizer
    - sportsfeed.services.response_cache
    - sportsfeed.services.provider_health
    - sportsfeed.services.provider_toggle
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Iterable

from sportsfeed.config import settings
from sportsfeed.config_leagues import resolve_league_key
from sportsfeed.models.canonical import CanonicalRecord, League, Match, OddsQuote, StandingsRow
from sportsfeed.providers.api_sports import ApiSportsProvider
from sportsfeed.providers.base import (
    OPERATION_KIND,
    BaseProvider,
    FetchParams,
    Operation,
    ProviderRegistry,
    StickyStrategyCache,
)
from sportsfeed.providers.demo import DemoProvider
from sportsfeed.providers.errors import ProviderConfigError, ProviderError, ProviderRequestError
from sportsfeed.providers.espn import ESPNProvider
from sportsfeed.providers.football_data import FootballDataProvider
from sportsfeed.providers.openligadb import OpenLigaDBProvider
from sportsfeed.providers.sportmonks import SportmonksProvider
from sportsfeed.services.normalizer import normalize_many
from sportsfeed.services.provider_health import ProviderHealthTracker, provider_health
from sportsfeed.services.provider_toggle import ProviderToggleService, provider_toggle_service
from sportsfeed.services.response_cache import ResponseCache, make_key

logger = logging.getLogger("sportsfeed.aggregator")

_DEFAULT_ADAPTERS: tuple[type[BaseProvider], ...] = (
    FootballDataProvider,
    SportmonksProvider,
    ApiSportsProvider,
    OpenLigaDBProvider,
    ESPNProvider,
)


def build_default_registry(sticky: StickyStrategyCache, *, include_demo: bool | None = None) -> ProviderRegistry:
    registry = ProviderRegistry()
    for adapter_cls in _DEFAULT_ADAPTERS:
        registry.register(adapter_cls(sticky=sticky))
    if settings.DEMO_DATA_ENABLED if include_demo is None else include_demo:
        registry.register(DemoProvider(sticky=sticky))
    return registry


def _check_id(value: Any, *, field: str = "league_id", allow_none: bool = False) -> str | None:
    if value is None:
        if allow_none:
            return None
        raise TypeError(f"{field} is required")
    if isinstance(value, bool) or not isinstance(value, (str, int)):
        raise TypeError(f"{field} must be str or int, got {type(value).__name__}")
    text = str(value).strip()
    if not text:
        raise ValueError(f"{field} must not be blank")
    return text


def _check_season(season: Any) -> str | None:
    if season is None:
        return None
    if isinstance(season, bool) or not isinstance(season, (str, int)):
        raise TypeError(f"season must be str or int, got {type(season).__name__}")
    return str(season).strip() or None


def _check_sport(sport: Any) -> str:
    if not isinstance(sport, str):
        raise TypeError(f"sport must be str, got {type(sport).__name__}")
    text = sport.strip().lower()
    if not text:
        raise ValueError("sport must not be blank")
    return text


class SportsAggregator:
    """Owns the response cache and the adapters; the adapters share one
    sticky-strategy cache.

    Not shared across event loops. Health and toggles are shared stores and
    are injected so tests can run against fakes.
    """

    def __init__(
        self,
        registry: ProviderRegistry,
        *,
        priorities: dict[Operation, list[str]] | None = None,
        cache: ResponseCache | None = None,
        health: ProviderHealthTracker | None = None,
        toggles: ProviderToggleService | None = None,
    ) -> None:
        self.registry = registry
        self.cache = cache if cache is not None else ResponseCache()
        self.health = health if health is not None else provider_health
        self.toggles = toggles if toggles is not None else provider_toggle_service
        self._priorities = {op: [n.strip().lower() for n in names] for op, names in (priorities or {}).items()}
        self._misconfigured: dict[str, str] = {}

    @classmethod
    def from_settings(cls) -> "SportsAggregator":
        return cls(build_default_registry(StickyStrategyCache()))

    def priority(self, operation: Operation) -> list[str]:
        if operation in self._priorities:
            return list(self._priorities[operation])
        return settings.provider_priority(operation.value)

    # ---- Public operations ----

    async def get_live_matches(
        self,
        league_id: str | int | None,
        *,
        sport: str = "football",
        timeout: float | None = None,
    ) -> list[Match]:
        """Live matches for one league; `None` asks providers for all leagues."""
        params = FetchParams(league_id=_check_id(league_id, allow_none=True), sport=_check_sport(sport))
        return await self._run(Operation.LIVE, params, timeout=timeout)

    async def get_upcoming_matches(
        self,
        league_id: str | int,
        *,
        sport: str = "football",
        timeout: float | None = None,
    ) -> list[Match]:
        """Scheduled fixtures for one league over the next few days."""
        params = FetchParams(league_id=_check_id(league_id), sport=_check_sport(sport))
        return await self._run(Operation.UPCOMING, params, timeout=timeout)

    async def get_odds(
        self,
        league_id: str | int,
        *,
        sport: str = "football",
        timeout: float | None = None,
    ) -> list[OddsQuote]:
        params = FetchParams(league_id=_check_id(league_id), sport=_check_sport(sport))
        return await self._run(Operation.ODDS, params, timeout=timeout)

    async def get_standings(
        self,
        league_id: str | int,
        season: str | int | None = None,
        *,
        sport: str = "football",
        timeout: float | None = None,
    ) -> list[StandingsRow]:
        params = FetchParams(
            league_id=_check_id(league_id),
            sport=_check_sport(sport),
            season=_check_season(season),
        )
        return await self._run(Operation.STANDINGS, params, timeout=timeout)

    async def get_leagues(self, sport: str = "football", *, timeout: float | None = None) -> list[League]:
        return await self._run(Operation.LEAGUES, FetchParams(sport=_check_sport(sport)), timeout=timeout)

    async def get_all_live_matches(
        self,
        league_ids: Iterable[str | int],
        *,
        sport: str = "football",
        timeout: float | None = None,
    ) -> list[Match]:
        """Live matches across several leagues, fetched concurrently."""
        ids = [_check_id(league_id) for league_id in league_ids]
        _check_sport(sport)
        results = await asyncio.gather(
            *(self.get_live_matches(league_id, sport=sport, timeout=timeout) for league_id in ids)
        )
        return _merge_matches(results)

    async def get_fixtures(
        self,
        league_id: str | int | None = None,
        *,
        sport: str = "football",
        timeout: float | None = None,
    ) -> list[Match]:
        """Upcoming fixtures for one league, or for every popular league when
        no league is given (PREFETCH_LEAGUE_IDS).
        """
        if league_id is not None:
            return await self.get_upcoming_matches(league_id, sport=sport, timeout=timeout)
        _check_sport(sport)
        results = await asyncio.gather(
            *(
                self.get_upcoming_matches(popular, sport=sport, timeout=timeout)
                for popular in settings.prefetch_league_ids()
            )
        )
        return _merge_matches(results)

    def get_match_by_id(self, match_id: str | int) -> Match | None:
        """Look a match up in the live results still held in the cache."""
        wanted = _check_id(match_id, field="match_id")
        for entry in self.cache.fresh_entries(Operation.LIVE.value):
            for match in entry.data:
                if isinstance(match, Match) and match.id == wanted:
                    return match
        return None

    async def get_provider_health(self) -> list[dict[str, Any]]:
        out: list[dict[str, Any]] = []
        for adapter in self.registry:
            record = await self.health.get_record(adapter.name)
            out.append({
                "provider": adapter.name,
                "enabled": await self.toggles.is_enabled(adapter.name),
                "configured": adapter.is_configured() and adapter.name not in self._misconfigured,
                "capabilities": sorted(op.value for op in adapter.capabilities),
                "sticky_strategy": adapter.sticky_strategy(),
                "ok": record.ok if record else None,
                "message": record.message if record else self._misconfigured.get(adapter.name, ""),
                "timestamp": record.timestamp if record else None,
                "status_code": record.status_code if record else None,
                "failures": record.failures if record else 0,
                "disabled_until": record.disabled_until if record else None,
            })
        return out

    async def aclose(self) -> None:
        for adapter in self.registry:
            await adapter.aclose()

    # ---- Provider walk ----

    def _cache_key(self, operation: Operation, params: FetchParams) -> str:
        league = params.league_id
        if league is not None:
            league = resolve_league_key(league) or league
        return make_key(operation.value, league, params.season, params.sport)

    async def _run(self, operation: Operation, params: FetchParams, *, timeout: float | None) -> list[Any]:
        key = self._cache_key(operation, params)
        cached = self.cache.get(key)
        if cached is not None:
            return list(cached)

        async with self.cache.single_flight(key):
            # Another request may have filled the entry while we waited.
            cached = self.cache.get(key)
            if cached is not None:
                return list(cached)
            if timeout is None:
                return await self._walk(operation, params, key)
            try:
                return await asyncio.wait_for(self._walk(operation, params, key), timeout)
            except asyncio.TimeoutError:
                logger.warning("%s for %s abandoned after %.1fs", operation.value, key, timeout)
                return []

    async def _walk(self, operation: Operation, params: FetchParams, key: str) -> list[CanonicalRecord]:
        kind = OPERATION_KIND[operation]
        for name in self.priority(operation):
            adapter = self.registry.get(name)
            if adapter is None or operation not in adapter.capabilities:
                continue
            if name in self._misconfigured:
                continue
            if not await self.toggles.is_enabled(name):
                logger.debug("Skipping %s for %s: disabled by configuration", name, operation.value)
                continue
            if not adapter.is_configured():
                await self._mark_misconfigured(name, f"{name} credentials missing")
                continue
            if await self.health.is_disabled(name):
                logger.info("Skipping %s for %s: circuit open", name, operation.value)
                continue

            try:
                raw = await adapter.fetch(operation, params)
            except ProviderConfigError as exc:
                await self._mark_misconfigured(name, str(exc))
                continue
            except ProviderRequestError as exc:
                logger.warning("Provider %s failed for %s (HTTP %s): %s", name, key, exc.status_code, exc)
                await self.health.mark_failure(name, exc.status_code, str(exc))
                continue
            except ProviderError as exc:
                logger.warning("Provider %s rejected %s: %s", name, key, exc)
                await self.health.mark_failure(name, None, str(exc))
                continue
            except Exception as exc:
                logger.exception("Provider %s crashed for %s", name, key)
                await self.health.mark_failure(name, None, f"{type(exc).__name__}: {exc}")
                continue

            records = normalize_many(raw)
            if not records:
                message = f"empty {kind.value} result" if not raw else f"{len(raw)} {kind.value} records, none mappable"
                logger.info("Provider %s returned no data for %s (%s)", name, key, message)
                await self.health.record_empty(name, message)
                continue

            self.cache.set(key, records)
            await self.health.mark_success(name, f"{len(records)} {kind.value} records")
            logger.info("%s served by %s (%d records)", key, name, len(records))
            return list(records)

        logger.info("No provider returned data for %s", key)
        return []

    async def _mark_misconfigured(self, name: str, message: str) -> None:
        self._misconfigured[name] = message
        logger.error("Provider %s needs configuration, skipping for this run: %s", name, message)
        await self.health.record_misconfigured(name, message)



def _merge_matches(results: Iterable[list[Match]]) -> list[Match]:
    """Concatenate per-league results, keeping one copy of each provider match id."""
    seen: set[tuple[str, str]] = set()
    merged: list[Match] = []
    for matches in results:
        for match in matches:
            if match.id is not None:
                marker = (match.provider, match.id)
                if marker in seen:
                    continue
                seen.add(marker)
            merged.append(match)
    return merged

_aggregator: SportsAggregator | None = None


def get_aggregator() -> SportsAggregator:
    global _aggregator
    if _aggregator is None:
        _aggregator = SportsAggregator.from_settings()
    return _aggregator


async def shutdown_aggregator() -> None:
    global _aggregator
    if _aggregator is not None:
        await _aggregator.aclose()
    _aggregator = None
