"""
backend/sportsfeed/providers/sportmonks.py

Purpose:
    Sportmonks v3 adapter for in-play and upcoming fixtures, pre-match odds
    (via fixture includes), league tables and league discovery. The same API accepts the
    token as an Authorization header or as an `api_token` query parameter;
    both are kept as strategies so a proxy that strips headers does not take
    the provider down.

Dependencies:
    - sportsfeed.config
    - sportsfeed.config_leagues
    - sportsfeed.providers.base
"""

from __future__ import annotations

import logging
from datetime import timedelta

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

logger = logging.getLogger("sportsfeed.sportmonks")

PROVIDER_NAME = "sportmonks"

_MATCH_INCLUDE = "participants;scores;state;league;venue"
_ODDS_INCLUDE = "participants;odds.bookmaker;odds.market"
_STANDINGS_INCLUDE = "participant;details"
_ODDS_LOOKAHEAD_DAYS = 3
_UPCOMING_LOOKAHEAD_DAYS = 7
_NOT_STARTED_STATE_ID = 1


class SportmonksProvider(BaseProvider):
    """HTTP adapter for Sportmonks football endpoints."""

    name = PROVIDER_NAME
    tag = ProviderTag.SPORTMONKS
    capabilities = frozenset(
        {Operation.LIVE, Operation.UPCOMING, Operation.ODDS, Operation.STANDINGS, Operation.LEAGUES}
    )

    def is_configured(self) -> bool:
        return bool(settings.SM_API_KEY.strip())

    def strategies(self) -> list[AuthStrategy]:
        api_key = self._require(settings.SM_API_KEY, "SM_API_KEY")
        base_url = self._require(settings.SPORTMONKS_BASE_URL, "SPORTMONKS_BASE_URL")
        return [
            AuthStrategy(name="auth_header", base_url=base_url, headers={"Authorization": api_key}),
            AuthStrategy(name="query_token", base_url=base_url, params={"api_token": api_key}),
        ]

    def _check_payload(self, payload) -> None:
        if isinstance(payload, dict) and payload.get("message") and "data" not in payload:
            # Subscription/plan errors come back as 200 with only a message.
            raise ProviderResponseError(f"sportmonks: {payload.get('message')}")

    async def _get_data(self, path: str, params: dict[str, str]) -> list:
        payload = await self._fetch_with_strategies(path, params=params)
        return extract_items(payload, "data")

    async def fetch_live(self, params: FetchParams) -> list[RawRecord]:
        query = {"include": _MATCH_INCLUDE}
        if params.league_id is not None:
            league = provider_league_code(params.league_id, PROVIDER_NAME)
            if not league:
                return []
            query["filters"] = f"fixtureLeagues:{league}"
        items = await self._get_data("football/livescores/inplay", query)
        return self._records(RecordKind.MATCH, items)

    async def fetch_upcoming(self, params: FetchParams) -> list[RawRecord]:
        league = provider_league_code(params.league_id, PROVIDER_NAME) if params.league_id else None
        if not league:
            return []
        today = utcnow().date()
        until = today + timedelta(days=_UPCOMING_LOOKAHEAD_DAYS)
        items = await self._get_data(
            f"football/fixtures/between/{today.isoformat()}/{until.isoformat()}",
            {"include": _MATCH_INCLUDE, "filters": f"fixtureLeagues:{league}"},
        )
        scheduled = [
            item for item in items
            if isinstance(item, dict) and item.get("state_id") == _NOT_STARTED_STATE_ID
        ]
        return self._records(RecordKind.MATCH, scheduled)

    async def fetch_odds(self, params: FetchParams) -> list[RawRecord]:
        league = provider_league_code(params.league_id, PROVIDER_NAME) if params.league_id else None
        if not league:
            return []
        today = utcnow().date()
        until = today + timedelta(days=_ODDS_LOOKAHEAD_DAYS)
        items = await self._get_data(
            f"football/fixtures/between/{today.isoformat()}/{until.isoformat()}",
            {"include": _ODDS_INCLUDE, "filters": f"fixtureLeagues:{league}"},
        )
        with_odds = [item for item in items if isinstance(item, dict) and item.get("odds")]
        return self._records(RecordKind.ODDS, with_odds)

    async def fetch_standings(self, params: FetchParams) -> list[RawRecord]:
        league = provider_league_code(params.league_id, PROVIDER_NAME) if params.league_id else None
        if not league:
            return []
        query = {"include": _STANDINGS_INCLUDE}
        if params.season:
            season_id = await self._season_id(league, params.season)
            if season_id is None:
                return []
            path = f"football/standings/seasons/{season_id}"
        else:
            path = f"football/standings/live/leagues/{league}"
        items = await self._get_data(path, query)
        return self._records(RecordKind.STANDINGS, items)

    async def _season_id(self, league: str, season: str) -> str | None:
        """Sportmonks season ids are global; find the one of `league` named
        after the season year ("2024" matches "2024/2025" and "2024").
        """
        payload = await self._fetch_with_strategies(f"football/leagues/{league}", params={"include": "seasons"})
        data = payload.get("data") if isinstance(payload, dict) else None
        seasons = data.get("seasons") if isinstance(data, dict) else None
        wanted = str(season).strip()
        for entry in seasons or []:
            if not isinstance(entry, dict) or entry.get("id") is None:
                continue
            name = str(entry.get("name") or "").strip()
            if name == wanted or name.split("/", 1)[0] == wanted:
                return str(entry["id"])
        logger.info("sportmonks: league %s has no season %s", league, wanted)
        return None

    async def fetch_leagues(self, params: FetchParams) -> list[RawRecord]:
        items = await self._get_data("football/leagues", {"include": "country"})
        return self._records(RecordKind.LEAGUE, items)
