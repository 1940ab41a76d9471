"""
backend/sportsfeed/providers/api_sports.py

Purpose:
    API-Football (api-sports.io) adapter. The same v3 API is reachable
    directly (x-apisports-key) or through the RapidAPI gateway
    (X-RapidAPI-Key / X-RapidAPI-Host); whichever answered last is tried
    first on the next call.

Dependencies:
    - sportsfeed.config
    - sportsfeed.config_leagues
    - sportsfeed.providers.base
"""

from __future__ import annotations

import logging
from typing import Any

from sportsfeed.config import settings
from sportsfeed.config_leagues import provider_league_code
from sportsfeed.providers.base import (
    AuthStrategy,
    BaseProvider,
    FetchParams,
    Operation,
    ProviderTag,
    RawRecord,
    RecordKind,
    extract_items,
)
from sportsfeed.providers.errors import ProviderResponseError
from sportsfeed.utils import utcnow

logger = logging.getLogger("sportsfeed.api_sports")

PROVIDER_NAME = "api_sports"

_MAX_LIVE_FIXTURES = 50


def _current_season() -> int:
    """European season year: 2025 for the 2025/26 season (starts July)."""
    now = utcnow()
    return now.year if now.month >= 7 else now.year - 1


class ApiSportsProvider(BaseProvider):
    """API-Football v3 with direct and RapidAPI auth strategies."""

    name = PROVIDER_NAME
    tag = ProviderTag.API_SPORTS
    capabilities = frozenset({Operation.LIVE, Operation.ODDS, Operation.STANDINGS, Operation.LEAGUES})

    def is_configured(self) -> bool:
        return bool(settings.API_FOOTBALL_KEY.strip() or settings.RAPIDAPI_KEY.strip())

    def strategies(self) -> list[AuthStrategy]:
        direct_key = settings.API_FOOTBALL_KEY.strip()
        gateway_key = settings.RAPIDAPI_KEY.strip() or direct_key
        self._require(direct_key or gateway_key, "API_FOOTBALL_KEY")

        out: list[AuthStrategy] = []
        if direct_key and settings.API_FOOTBALL_BASE_URL:
            out.append(
                AuthStrategy(
                    name="direct",
                    base_url=settings.API_FOOTBALL_BASE_URL,
                    headers={"x-apisports-key": direct_key},
                )
            )
        if gateway_key and settings.API_FOOTBALL_RAPIDAPI_BASE_URL:
            out.append(
                AuthStrategy(
                    name="rapidapi",
                    base_url=settings.API_FOOTBALL_RAPIDAPI_BASE_URL,
                    headers={
                        "X-RapidAPI-Key": gateway_key,
                        "X-RapidAPI-Host": settings.API_FOOTBALL_RAPIDAPI_HOST,
                    },
                )
            )
        return out

    def _check_payload(self, payload: Any) -> None:
        if not isinstance(payload, dict):
            return
        errors = payload.get("errors")
        # Bad keys and exhausted plans answer 200 with a non-empty `errors`.
        if errors:
            raise ProviderResponseError(f"api-sports returned errors: {errors}")

    def _league_code(self, params: FetchParams) -> str | None:
        if params.league_id is None:
            return None
        return provider_league_code(params.league_id, PROVIDER_NAME)

    def _season(self, params: FetchParams) -> str:
        return str(params.season) if params.season else str(_current_season())

    async def fetch_live(self, params: FetchParams) -> list[RawRecord]:
        if params.league_id is None:
            live = "all"
        else:
            live = self._league_code(params)
            if not live:
                return []
        payload = await self._fetch_with_strategies("fixtures", params={"live": live}, max_retries=2)
        items = extract_items(payload, "response")[:_MAX_LIVE_FIXTURES]
        return self._records(RecordKind.MATCH, items)

    async def fetch_odds(self, params: FetchParams) -> list[RawRecord]:
        league = self._league_code(params)
        if not league:
            return []
        payload = await self._fetch_with_strategies(
            "odds",
            params={"league": league, "season": self._season(params)},
            max_retries=2,
        )
        return self._records(RecordKind.ODDS, extract_items(payload, "response"))

    async def fetch_standings(self, params: FetchParams) -> list[RawRecord]:
        league = self._league_code(params)
        if not league:
            return []
        payload = await self._fetch_with_strategies(
            "standings",
            params={"league": league, "season": self._season(params)},
        )
        rows: list[Any] = []
        for entry in extract_items(payload, "response"):
            league_block = entry.get("league") if isinstance(entry, dict) else None
            groups = league_block.get("standings") if isinstance(league_block, dict) else None
            if isinstance(groups, list) and groups:
                # Group-stage competitions return one table per group; keep the first.
                first = groups[0]
                rows = first if isinstance(first, list) else groups
                break
        return self._records(RecordKind.STANDINGS, rows)

    async def fetch_leagues(self, params: FetchParams) -> list[RawRecord]:
        payload = await self._fetch_with_strategies("leagues", params={"type": "league", "current": "true"})
        return self._records(RecordKind.LEAGUE, extract_items(payload, "response"))
