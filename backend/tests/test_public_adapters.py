"""
backend/tests/test_public_adapters.py

Purpose:
    Request building and payload selection of the individual adapters
    against mocked upstream responses.
"""

from __future__ import annotations

from datetime import datetime, timezone

import httpx
import pytest

from sportsfeed.config import settings
from sportsfeed.providers import api_sports as api_sports_module
from sportsfeed.providers import football_data as football_data_module
from sportsfeed.providers import openligadb as openligadb_module
from sportsfeed.providers import sportmonks as sportmonks_module
from sportsfeed.providers.api_sports import ApiSportsProvider
from sportsfeed.providers.base import FetchParams, Operation
from sportsfeed.providers.demo import DemoProvider
from sportsfeed.providers.espn import ESPNProvider
from sportsfeed.providers.football_data import FootballDataProvider
from sportsfeed.providers.http_client import ResilientClient
from sportsfeed.providers.openligadb import OpenLigaDBProvider
from sportsfeed.providers.sportmonks import SportmonksProvider
from sportsfeed.services.normalizer import normalize_many

NOW = datetime(2025, 9, 13, 14, 0, tzinfo=timezone.utc)


def _client(name: str, handler, seen: list[httpx.Request]) -> ResilientClient:
    def _record(request: httpx.Request):
        seen.append(request)
        return handler(request)

    return ResilientClient(name, transport=httpx.MockTransport(_record))


@pytest.mark.asyncio
async def test_openligadb_live_keeps_started_unfinished_matches(monkeypatch):
    monkeypatch.setattr(openligadb_module, "utcnow", lambda: NOW)
    payload = [
        {"matchID": 1, "matchIsFinished": False, "matchDateTimeUTC": "2025-09-13T13:30:00Z",
         "team1": {"teamName": "FC Bayern"}, "team2": {"teamName": "Werder Bremen"}},
        {"matchID": 2, "matchIsFinished": True, "matchDateTimeUTC": "2025-09-13T11:30:00Z"},
        {"matchID": 3, "matchIsFinished": False, "matchDateTimeUTC": "2025-09-13T16:30:00Z"},
        {"matchID": 4, "matchIsFinished": False, "matchDateTimeUTC": "not a date"},
    ]
    seen: list[httpx.Request] = []
    provider = OpenLigaDBProvider(client=_client("openligadb", lambda r: httpx.Response(200, json=payload), seen))

    records = await provider.fetch(Operation.LIVE, FetchParams(league_id="78"))

    assert [r.payload["matchID"] for r in records] == [1]
    assert seen[0].url.path == "/getmatchdata/bl1"
    # Premier League is not on OpenLigaDB: no request at all
    assert await provider.fetch(Operation.LIVE, FetchParams(league_id="39")) == []
    assert len(seen) == 1
    await provider.aclose()


@pytest.mark.asyncio
async def test_openligadb_standings_default_season(monkeypatch):
    monkeypatch.setattr(openligadb_module, "utcnow", lambda: NOW)
    seen: list[httpx.Request] = []
    table = [{"teamName": "FC Bayern", "points": 12, "matches": 4, "won": 4, "draw": 0, "lost": 0, "goalDiff": 11}]
    provider = OpenLigaDBProvider(client=_client("openligadb", lambda r: httpx.Response(200, json=table), seen))

    records = await provider.fetch(Operation.STANDINGS, FetchParams(league_id="bl1"))
    rows = normalize_many(records)

    assert seen[0].url.path == "/getbltable/bl1/2025"
    assert (rows[0].team_name, rows[0].points, rows[0].goal_diff) == ("FC Bayern", 12, 11)
    await provider.aclose()


@pytest.mark.asyncio
async def test_espn_live_and_standings():
    scoreboard = {
        "events": [
            {"id": "1", "status": {"type": {"state": "in"}}},
            {"id": "2", "status": {"type": {"state": "post"}}},
            {"id": "3", "status": {"type": {"state": "pre"}}},
        ]
    }
    standings = {
        "children": [
            {"standings": {"entries": [{"team": {"displayName": "Arsenal"}, "stats": []}]}},
            {"standings": {"entries": [{"team": {"displayName": "Chelsea"}, "stats": []}]}},
            "garbage",
        ]
    }

    def handler(request: httpx.Request):
        if request.url.path.endswith("/scoreboard"):
            return httpx.Response(200, json=scoreboard)
        return httpx.Response(200, json=standings)

    seen: list[httpx.Request] = []
    provider = ESPNProvider(client=_client("espn", handler, seen))

    live = await provider.fetch(Operation.LIVE, FetchParams(league_id="PL"))
    assert [r.payload["id"] for r in live] == ["1"]
    assert seen[0].url.path == "/apis/site/v2/sports/soccer/eng.1/scoreboard"

    table = await provider.fetch(Operation.STANDINGS, FetchParams(league_id="39"))
    assert [r.payload["team"]["displayName"] for r in table] == ["Arsenal", "Chelsea"]
    assert seen[1].url.path == "/apis/v2/sports/soccer/eng.1/standings"
    await provider.aclose()


@pytest.mark.asyncio
async def test_football_data_standings_picks_total_table(monkeypatch):
    monkeypatch.setattr(settings, "FOOTBALL_DATA_ORG_API_KEY", "fd-key")
    payload = {
        "standings": [
            {"type": "HOME", "table": [{"position": 1, "team": {"name": "Home Kings"}}]},
            {"type": "TOTAL", "table": [{"position": 1, "team": {"name": "Arsenal FC"}, "points": 30}]},
        ]
    }
    seen: list[httpx.Request] = []
    provider = FootballDataProvider(client=_client("football_data", lambda r: httpx.Response(200, json=payload), seen))

    records = await provider.fetch(Operation.STANDINGS, FetchParams(league_id="39", season="2024"))

    assert [r.payload["team"]["name"] for r in records] == ["Arsenal FC"]
    assert seen[0].url.path == "/v4/competitions/PL/standings"
    assert seen[0].url.params["season"] == "2024"
    assert seen[0].headers["X-Auth-Token"] == "fd-key"
    await provider.aclose()


@pytest.mark.asyncio
async def test_api_sports_odds_uses_current_season(monkeypatch):
    monkeypatch.setattr(settings, "API_FOOTBALL_KEY", "direct-key")
    monkeypatch.setattr(settings, "RAPIDAPI_KEY", "")
    monkeypatch.setattr(api_sports_module, "utcnow", lambda: datetime(2026, 2, 1, tzinfo=timezone.utc))
    seen: list[httpx.Request] = []
    provider = ApiSportsProvider(
        client=_client("api_sports", lambda r: httpx.Response(200, json={"errors": [], "response": []}), seen)
    )

    assert await provider.fetch(Operation.ODDS, FetchParams(league_id="78")) == []
    assert seen[0].url.params["league"] == "78"
    assert seen[0].url.params["season"] == "2025"
    await provider.aclose()


@pytest.mark.asyncio
async def test_demo_provider_is_deterministic():
    provider = DemoProvider()
    first = normalize_many(await provider.fetch(Operation.LIVE, FetchParams(league_id="PL")))
    second = normalize_many(await provider.fetch(Operation.LIVE, FetchParams(league_id="PL")))
    assert first == second
    assert (first[0].home, first[0].away) == ("Arsenal", "Chelsea")
    # second fixture only carries a title
    assert (first[1].home, first[1].away) == ("Liverpool", "Manchester City")
    assert all(m.provider == "demo" for m in first)

    quotes = normalize_many(await provider.fetch(Operation.ODDS, FetchParams(league_id="39")))
    assert [o.price for o in quotes[0].bookmakers[0].markets[0].outcomes] == [2.1, 3.4, 3.2]
    await provider.aclose()


@pytest.mark.asyncio
async def test_football_data_leagues_keep_league_competitions(monkeypatch):
    monkeypatch.setattr(settings, "FOOTBALL_DATA_ORG_API_KEY", "fd-key")
    payload = {
        "competitions": [
            {"code": "PL", "name": "Premier League", "type": "LEAGUE", "area": {"name": "England"}},
            {"code": "FAC", "name": "FA Cup", "type": "CUP", "area": {"name": "England"}},
        ]
    }
    seen: list[httpx.Request] = []
    provider = FootballDataProvider(client=_client("football_data", lambda r: httpx.Response(200, json=payload), seen))

    leagues = normalize_many(await provider.fetch(Operation.LEAGUES, FetchParams()))

    assert [(l.id, l.name, l.country) for l in leagues] == [("PL", "Premier League", "England")]
    assert seen[0].url.path == "/v4/competitions"
    await provider.aclose()


@pytest.mark.asyncio
async def test_sportmonks_season_standings_stay_within_league(monkeypatch):
    monkeypatch.setattr(settings, "SM_API_KEY", "sm-key")
    league_payload = {
        "data": {
            "id": 8,
            "name": "Premier League",
            "seasons": [
                {"id": 21646, "name": "2023/2024"},
                {"id": 23614, "name": "2024/2025"},
            ],
        }
    }
    table_payload = {"data": [{"position": 1, "participant": {"name": "Liverpool"}, "points": 84}]}

    def handler(request: httpx.Request):
        if request.url.path.endswith("/football/leagues/8"):
            return httpx.Response(200, json=league_payload)
        return httpx.Response(200, json=table_payload)

    seen: list[httpx.Request] = []
    provider = SportmonksProvider(client=_client("sportmonks", handler, seen))

    records = await provider.fetch(Operation.STANDINGS, FetchParams(league_id="PL", season="2024"))

    assert [r.payload["participant"]["name"] for r in records] == ["Liverpool"]
    assert seen[0].url.path == "/v3/football/leagues/8"
    assert seen[1].url.path == "/v3/football/standings/seasons/23614"

    # a season the league never had yields nothing, not another league's table
    seen.clear()
    assert await provider.fetch(Operation.STANDINGS, FetchParams(league_id="PL", season="1999")) == []
    assert [r.url.path for r in seen] == ["/v3/football/leagues/8"]
    await provider.aclose()


@pytest.mark.asyncio
async def test_sportmonks_upcoming_keeps_not_started_fixtures(monkeypatch):
    monkeypatch.setattr(settings, "SM_API_KEY", "sm-key")
    monkeypatch.setattr(sportmonks_module, "utcnow", lambda: NOW)
    payload = {"data": [{"id": 1, "state_id": 1}, {"id": 2, "state_id": 5}, {"id": 3, "state_id": 2}]}
    seen: list[httpx.Request] = []
    provider = SportmonksProvider(client=_client("sportmonks", lambda r: httpx.Response(200, json=payload), seen))

    records = await provider.fetch(Operation.UPCOMING, FetchParams(league_id="39"))

    assert [r.payload["id"] for r in records] == [1]
    assert seen[0].url.path == "/v3/football/fixtures/between/2025-09-13/2025-09-20"
    assert seen[0].url.params["filters"] == "fixtureLeagues:8"
    await provider.aclose()


@pytest.mark.asyncio
async def test_football_data_upcoming_keeps_scheduled_matches(monkeypatch):
    monkeypatch.setattr(settings, "FOOTBALL_DATA_ORG_API_KEY", "fd-key")
    monkeypatch.setattr(football_data_module, "utcnow", lambda: NOW)
    payload = {
        "matches": [
            {"id": 1, "status": "TIMED", "homeTeam": {"name": "Arsenal FC"}, "awayTeam": {"name": "Chelsea FC"},
             "utcDate": "2025-09-14T15:30:00Z"},
            {"id": 2, "status": "FINISHED"},
            {"id": 3, "status": "IN_PLAY"},
        ]
    }
    seen: list[httpx.Request] = []
    provider = FootballDataProvider(client=_client("football_data", lambda r: httpx.Response(200, json=payload), seen))

    fixtures = normalize_many(await provider.fetch(Operation.UPCOMING, FetchParams(league_id="PL")))

    assert [(m.id, m.home, m.time) for m in fixtures] == [("1", "Arsenal FC", "2025-09-14 15:30 UTC")]
    assert seen[0].url.path == "/v4/competitions/PL/matches"
    assert seen[0].url.params["dateFrom"] == "2025-09-13"
    assert seen[0].url.params["dateTo"] == "2025-09-20"
    await provider.aclose()
