"""
backend/sportsfeed/providers/base.py

Purpose:
    Generic provider-adapter harness: operation/tag enums, the tagged raw
    record passed from adapters to the normalizer, adaptive auth strategies
    with a sticky-winner cache, and the registry that validates capabilities
    once at registration time.

Dependencies:
    - sportsfeed.providers.http_client
    - sportsfeed.providers.errors
"""

from __future__ import annotations

import logging
from abc import ABC
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Iterable, Mapping

from sportsfeed.providers.errors import (
    ProviderCapabilityError,
    ProviderConfigError,
    ProviderRequestError,
    ProviderResponseError,
)
from sportsfeed.providers.http_client import ResilientClient

logger = logging.getLogger("sportsfeed.providers")


class Operation(str, Enum):
    LIVE = "live"
    UPCOMING = "upcoming"
    ODDS = "odds"
    STANDINGS = "standings"
    LEAGUES = "leagues"


class RecordKind(str, Enum):
    MATCH = "match"
    ODDS = "odds"
    STANDINGS = "standings"
    LEAGUE = "league"


class ProviderTag(str, Enum):
    """Closed set of payload dialects the normalizer knows how to map."""

    FOOTBALL_DATA = "football_data"
    SPORTMONKS = "sportmonks"
    API_SPORTS = "api_sports"
    OPENLIGADB = "openligadb"
    ESPN = "espn"
    DEMO = "demo"


OPERATION_KIND: dict[Operation, RecordKind] = {
    Operation.LIVE: RecordKind.MATCH,
    Operation.UPCOMING: RecordKind.MATCH,
    Operation.ODDS: RecordKind.ODDS,
    Operation.STANDINGS: RecordKind.STANDINGS,
    Operation.LEAGUES: RecordKind.LEAGUE,
}

_OPERATION_METHOD: dict[Operation, str] = {
    Operation.LIVE: "fetch_live",
    Operation.UPCOMING: "fetch_upcoming",
    Operation.ODDS: "fetch_odds",
    Operation.STANDINGS: "fetch_standings",
    Operation.LEAGUES: "fetch_leagues",
}


@dataclass(frozen=True)
class FetchParams:
    league_id: str | None = None
    sport: str = "football"
    season: str | None = None


@dataclass(frozen=True)
class RawRecord:
    """A provider payload that still carries the dialect it was fetched in."""

    tag: ProviderTag
    kind: RecordKind
    source: str
    payload: Any


@dataclass(frozen=True)
class AuthStrategy:
    """One way to reach the same data: a base URL plus auth headers/query."""

    name: str
    base_url: str
    headers: Mapping[str, str] = field(default_factory=dict)
    params: Mapping[str, str] = field(default_factory=dict)


class StickyStrategyCache:
    """Remembers, per provider, which auth strategy last succeeded.

    Owned by one aggregator and injected into its adapters so separate
    aggregator instances never share this state.
    """

    def __init__(self) -> None:
        self._winners: dict[str, str] = {}

    def get(self, provider: str) -> str | None:
        return self._winners.get(provider)

    def remember(self, provider: str, strategy: str) -> None:
        self._winners[provider] = strategy

    def forget(self, provider: str) -> None:
        self._winners.pop(provider, None)

    def snapshot(self) -> dict[str, str]:
        return dict(self._winners)


class BaseProvider(ABC):
    """Abstract base class for sports data adapters.

    Subclasses set `name`, `tag` and `capabilities`, and override the fetch
    method of every declared capability. Each fetch returns tagged raw records;
    mapping to canonical records is the normalizer's job.
    """

    name: str = ""
    tag: ProviderTag
    capabilities: frozenset[Operation] = frozenset()

    def __init__(
        self,
        client: ResilientClient | None = None,
        sticky: StickyStrategyCache | None = None,
    ) -> None:
        self._client = client or ResilientClient(self.name)
        self._sticky = sticky or StickyStrategyCache()

    def is_configured(self) -> bool:
        """False when credentials are missing; checked before any network call."""
        return True

    def strategies(self) -> list[AuthStrategy]:
        return []

    async def fetch(self, operation: Operation, params: FetchParams) -> list[RawRecord]:
        if operation not in self.capabilities:
            raise ProviderCapabilityError(f"{self.name} does not support {operation.value}")
        method = getattr(self, _OPERATION_METHOD[operation])
        return await method(params)

    async def fetch_live(self, params: FetchParams) -> list[RawRecord]:
        raise ProviderCapabilityError(f"{self.name} does not support live matches")

    async def fetch_upcoming(self, params: FetchParams) -> list[RawRecord]:
        raise ProviderCapabilityError(f"{self.name} does not support upcoming fixtures")

    async def fetch_odds(self, params: FetchParams) -> list[RawRecord]:
        raise ProviderCapabilityError(f"{self.name} does not support odds")

    async def fetch_standings(self, params: FetchParams) -> list[RawRecord]:
        raise ProviderCapabilityError(f"{self.name} does not support standings")

    async def fetch_leagues(self, params: FetchParams) -> list[RawRecord]:
        raise ProviderCapabilityError(f"{self.name} does not support leagues")

    def sticky_strategy(self) -> str | None:
        """Name of the auth strategy that answered last, if any."""
        return self._sticky.get(self.name)

    def _records(self, kind: RecordKind, items: Iterable[Any]) -> list[RawRecord]:
        return [
            RawRecord(tag=self.tag, kind=kind, source=self.name, payload=item)
            for item in items
            if isinstance(item, dict)
        ]

    def _require(self, value: str | None, setting_name: str) -> str:
        text = str(value or "").strip()
        if not text:
            raise ProviderConfigError(f"{setting_name} is missing.")
        return text

    def _check_payload(self, payload: Any) -> None:
        """Raise ProviderResponseError for a 2xx body that is really an error.

        Raising here makes the strategy loop move on to the next strategy.
        """

    def _ordered_strategies(self) -> list[AuthStrategy]:
        strategies = self.strategies()
        sticky = self._sticky.get(self.name)
        if not sticky:
            return strategies
        first = [s for s in strategies if s.name == sticky]
        rest = [s for s in strategies if s.name != sticky]
        return first + rest

    async def _fetch_with_strategies(
        self,
        path: str,
        *,
        params: dict[str, Any] | None = None,
        max_retries: int | None = None,
    ) -> Any:
        """Try the sticky strategy first, then the rest; remember the winner."""
        strategies = self._ordered_strategies()
        if not strategies:
            raise ProviderConfigError(f"{self.name}: no usable auth strategy configured.")

        last_exc: ProviderRequestError | ProviderResponseError | None = None
        for strategy in strategies:
            url = f"{strategy.base_url.rstrip('/')}/{path.lstrip('/')}"
            query = dict(params or {})
            query.update(strategy.params)
            try:
                payload = await self._client.fetch(
                    url,
                    params=query,
                    headers=dict(strategy.headers),
                    max_retries=max_retries,
                )
                self._check_payload(payload)
            except (ProviderRequestError, ProviderResponseError) as exc:
                last_exc = exc
                if self._sticky.get(self.name) == strategy.name:
                    self._sticky.forget(self.name)
                logger.debug("%s strategy %s failed: %s", self.name, strategy.name, exc)
                continue
            if self._sticky.get(self.name) != strategy.name:
                logger.info("%s: using strategy %s", self.name, strategy.name)
            self._sticky.remember(self.name, strategy.name)
            return payload

        raise last_exc or ProviderRequestError(f"{self.name}: all strategies failed")

    async def aclose(self) -> None:
        await self._client.aclose()


def extract_items(payload: Any, *keys: str) -> list[Any]:
    """Pull the record list out of a provider envelope.

    A bare list is returned as-is; for a dict the first key holding a list
    wins. Anything else (plain-text error bodies, null) yields [].
    """
    if isinstance(payload, list):
        return payload
    if not isinstance(payload, dict):
        if payload:
            logger.warning("Unexpected provider payload type %s", type(payload).__name__)
        return []
    for key in keys:
        value = payload.get(key)
        if isinstance(value, list):
            return value
    return []


def implemented_capabilities(adapter: BaseProvider) -> set[Operation]:
    found: set[Operation] = set()
    for operation, method_name in _OPERATION_METHOD.items():
        impl = getattr(type(adapter), method_name, None)
        if impl is not None and impl is not getattr(BaseProvider, method_name):
            found.add(operation)
    return found


class ProviderRegistry:
    """Name -> adapter table; capability declarations are verified here, once."""

    def __init__(self) -> None:
        self._adapters: dict[str, BaseProvider] = {}

    def register(self, adapter: BaseProvider) -> None:
        name = str(adapter.name or "").strip().lower()
        if not name:
            raise ValueError("Provider adapter must declare a name")
        if name in self._adapters:
            raise ValueError(f"Duplicate adapter registration: {name}")
        missing = set(adapter.capabilities) - implemented_capabilities(adapter)
        if missing:
            raise ProviderCapabilityError(
                f"{name} declares {sorted(op.value for op in missing)} without implementing them"
            )
        self._adapters[name] = adapter

    def get(self, name: str) -> BaseProvider | None:
        return self._adapters.get(str(name or "").strip().lower())

    def names(self) -> list[str]:
        return list(self._adapters)

    def supporting(self, operation: Operation) -> list[str]:
        return [name for name, adapter in self._adapters.items() if operation in adapter.capabilities]

    def __iter__(self):
        return iter(self._adapters.values())

    def __len__(self) -> int:
        return len(self._adapters)
