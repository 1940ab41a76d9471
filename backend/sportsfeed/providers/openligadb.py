"""
backend/sportsfeed/providers/openligadb.py

Purpose:
    OpenLigaDB adapter for German competitions (Bundesliga, 2. Bundesliga):
    matches of the current matchday that are under way, and league tables.
    Free API, no key.

Dependencies:
    - sportsfeed.config
    - sportsfeed.config_leagues
    - sportsfeed.providers.base
"""

import logging
from datetime import datetime

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
from sportsfeed.utils import ensure_utc, utcnow

logger = logging.getLogger("sportsfeed.openligadb")

PROVIDER_NAME = "openligadb"


def _current_season() -> int:
    """Bundesliga season year: 2025 for the 2025/26 season (starts July)."""
    now = utcnow()
    return now.year if now.month >= 7 else now.year - 1


def _kicked_off(match: dict, now: datetime) -> bool:
    raw = match.get("matchDateTimeUTC")
    if not raw:
        return False
    try:
        kickoff = ensure_utc(datetime.fromisoformat(str(raw).replace("Z", "+00:00")))
    except ValueError:
        return False
    return kickoff <= now


class OpenLigaDBProvider(BaseProvider):
    """OpenLigaDB: free, no API key, Bundesliga scores and tables."""

    name = PROVIDER_NAME
    tag = ProviderTag.OPENLIGADB
    capabilities = frozenset({Operation.LIVE, Operation.STANDINGS})

    def strategies(self) -> list[AuthStrategy]:
        base_url = self._require(settings.OPENLIGADB_BASE_URL, "OPENLIGADB_BASE_URL")
        return [AuthStrategy(name="public", base_url=base_url)]

    async def fetch_live(self, params: FetchParams) -> list[RawRecord]:
        shortcut = provider_league_code(params.league_id, PROVIDER_NAME) if params.league_id else None
        if not shortcut:
            return []
        payload = await self._fetch_with_strategies(f"getmatchdata/{shortcut}", max_retries=2)
        now = utcnow()
        running = [
            m for m in extract_items(payload)
            if isinstance(m, dict) and not m.get("matchIsFinished") and _kicked_off(m, now)
        ]
        return self._records(RecordKind.MATCH, running)

    async def fetch_standings(self, params: FetchParams) -> list[RawRecord]:
        shortcut = provider_league_code(params.league_id, PROVIDER_NAME) if params.league_id else None
        if not shortcut:
            return []
        season = params.season or _current_season()
        payload = await self._fetch_with_strategies(f"getbltable/{shortcut}/{season}")
        return self._records(RecordKind.STANDINGS, extract_items(payload))
