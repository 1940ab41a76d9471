"""
backend/sportsfeed/providers/football_data.py

Purpose:
    Adapter for football-data.org v4: live matches per competition (or the
    global matches endpoint), the coming week's fixtures, league tables and
    the competition list.

Dependencies:
    - sportsfeed.config
    - sportsfeed.config_leagues
    - sportsfeed.providers.base
"""

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
from sportsfeed.utils import utcnow

logger = logging.getLogger("sportsfeed.football_data")

PROVIDER_NAME = "football_data"

_LIVE_STATUSES = {"LIVE", "IN_PLAY", "PAUSED"}
_UPCOMING_STATUSES = {"SCHEDULED", "TIMED"}
_UPCOMING_LOOKAHEAD_DAYS = 7


class FootballDataProvider(BaseProvider):
    """football-data.org provider for live scores and tables (X-Auth-Token)."""

    name = PROVIDER_NAME
    tag = ProviderTag.FOOTBALL_DATA
    capabilities = frozenset({Operation.LIVE, Operation.UPCOMING, Operation.STANDINGS, Operation.LEAGUES})

    def is_configured(self) -> bool:
        return bool(settings.FOOTBALL_DATA_ORG_API_KEY.strip())

    def strategies(self) -> list[AuthStrategy]:
        api_key = self._require(settings.FOOTBALL_DATA_ORG_API_KEY, "FOOTBALL_DATA_ORG_API_KEY")
        base_url = self._require(settings.FOOTBALL_DATA_ORG_BASE_URL, "FOOTBALL_DATA_ORG_BASE_URL")
        return [AuthStrategy(name="token_header", base_url=base_url, headers={"X-Auth-Token": api_key})]

    async def fetch_live(self, params: FetchParams) -> list[RawRecord]:
        if params.league_id is None:
            # Global endpoint: one call instead of one per competition.
            today = utcnow().date()
            payload = await self._fetch_with_strategies(
                "matches",
                params={"dateFrom": today.isoformat(), "dateTo": (today + timedelta(days=1)).isoformat()},
            )
            matches = [
                m for m in extract_items(payload, "matches")
                if isinstance(m, dict) and str(m.get("status") or "").upper() in _LIVE_STATUSES
            ]
            return self._records(RecordKind.MATCH, matches)

        competition = provider_league_code(params.league_id, PROVIDER_NAME)
        if not competition:
            return []
        payload = await self._fetch_with_strategies(
            f"competitions/{competition}/matches",
            params={"status": "LIVE"},
            max_retries=2,
        )
        return self._records(RecordKind.MATCH, extract_items(payload, "matches"))

    async def fetch_upcoming(self, params: FetchParams) -> list[RawRecord]:
        competition = provider_league_code(params.league_id, PROVIDER_NAME) if params.league_id else None
        if not competition:
            return []
        today = utcnow().date()
        payload = await self._fetch_with_strategies(
            f"competitions/{competition}/matches",
            params={
                "dateFrom": today.isoformat(),
                "dateTo": (today + timedelta(days=_UPCOMING_LOOKAHEAD_DAYS)).isoformat(),
            },
        )
        scheduled = [
            m for m in extract_items(payload, "matches")
            if isinstance(m, dict) and str(m.get("status") or "").upper() in _UPCOMING_STATUSES
        ]
        return self._records(RecordKind.MATCH, scheduled)

    async def fetch_standings(self, params: FetchParams) -> list[RawRecord]:
        competition = provider_league_code(params.league_id, PROVIDER_NAME) if params.league_id else None
        if not competition:
            return []
        query = {"season": str(params.season)} if params.season else None
        payload = await self._fetch_with_strategies(
            f"competitions/{competition}/standings",
            params=query,
            max_retries=2,
        )
        groups = [g for g in extract_items(payload, "standings") if isinstance(g, dict)]
        # Prefer the overall table; home/away splits come as separate groups.
        total = [g for g in groups if str(g.get("type") or "TOTAL").upper() == "TOTAL"] or groups
        table = total[0].get("table") if total else None
        return self._records(RecordKind.STANDINGS, table if isinstance(table, list) else [])

    async def fetch_leagues(self, params: FetchParams) -> list[RawRecord]:
        payload = await self._fetch_with_strategies("competitions")
        competitions = [
            c for c in extract_items(payload, "competitions")
            if isinstance(c, dict) and str(c.get("type") or "LEAGUE").upper() == "LEAGUE"
        ]
        return self._records(RecordKind.LEAGUE, competitions)
