import logging

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

logger = logging.getLogger("sportsfeed.espn")

PROVIDER_NAME = "espn"


class ESPNProvider(BaseProvider):
    """ESPN public soccer API: free, no key, scoreboard and tables."""

    name = PROVIDER_NAME
    tag = ProviderTag.ESPN
    capabilities = frozenset({Operation.LIVE, Operation.STANDINGS})

    def strategies(self) -> list[AuthStrategy]:
        base_url = self._require(settings.ESPN_BASE_URL, "ESPN_BASE_URL")
        return [AuthStrategy(name="public", base_url=base_url)]

    async def fetch_live(self, params: FetchParams) -> list[RawRecord]:
        code = provider_league_code(params.league_id, PROVIDER_NAME) if params.league_id else None
        if not code:
            return []
        payload = await self._fetch_with_strategies(
            f"site/v2/sports/soccer/{code}/scoreboard",
            max_retries=2,
        )
        live = []
        for event in extract_items(payload, "events"):
            if not isinstance(event, dict):
                continue
            state = ((event.get("status") or {}).get("type") or {}).get("state")
            # "pre", "in", "post"
            if state == "in":
                live.append(event)
        return self._records(RecordKind.MATCH, live)

    async def fetch_standings(self, params: FetchParams) -> list[RawRecord]:
        code = provider_league_code(params.league_id, PROVIDER_NAME) if params.league_id else None
        if not code:
            return []
        query = {"season": str(params.season)} if params.season else None
        payload = await self._fetch_with_strategies(f"v2/sports/soccer/{code}/standings", params=query)

        entries: list = []
        children = payload.get("children") if isinstance(payload, dict) else None
        for child in children or []:
            if not isinstance(child, dict):
                continue
            table = child.get("standings") or {}
            entries.extend(extract_items(table, "entries"))
        return self._records(RecordKind.STANDINGS, entries)
