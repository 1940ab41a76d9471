"""
backend/tests/test_provider_strategies.py

Purpose:
    Adaptive auth strategies: sticky winner first, fall-through on failure,
    error payloads treated as strategy failures, and config errors before
    any network call.

Dependencies:
    - sportsfeed.providers.*
"""

from __future__ import annotations

import httpx
import pytest

from sportsfeed.config import settings
from sportsfeed.providers import http_client as http_module
from sportsfeed.providers.api_sports import ApiSportsProvider
from sportsfeed.providers.base import FetchParams, Operation, RecordKind, StickyStrategyCache
from sportsfeed.providers.errors import ProviderConfigError, ProviderRequestError
from sportsfeed.providers.football_data import FootballDataProvider
from sportsfeed.providers.http_client import ResilientClient
from sportsfeed.providers.sportmonks import SportmonksProvider


@pytest.fixture(autouse=True)
def _no_sleep(monkeypatch):
    async def _fake_sleep(seconds: float) -> None:
        return None

    monkeypatch.setattr(http_module.asyncio, "sleep", _fake_sleep)


def _standings_payload() -> dict:
    return {
        "errors": [],
        "response": [
            {
                "league": {
                    "id": 39,
                    "standings": [[{"rank": 1, "team": {"name": "Arsenal"}, "points": 30}]],
                }
            }
        ],
    }


@pytest.mark.asyncio
async def test_api_sports_falls_through_to_gateway_and_sticks(monkeypatch):
    monkeypatch.setattr(settings, "API_FOOTBALL_KEY", "direct-key")
    monkeypatch.setattr(settings, "RAPIDAPI_KEY", "gateway-key")
    hosts: list[str] = []

    def handler(request: httpx.Request):
        hosts.append(request.url.host)
        if request.url.host == "v3.football.api-sports.io":
            assert request.headers["x-apisports-key"] == "direct-key"
            return httpx.Response(403, text="forbidden")
        assert request.headers["X-RapidAPI-Key"] == "gateway-key"
        return httpx.Response(200, json=_standings_payload())

    sticky = StickyStrategyCache()
    client = ResilientClient("api_sports", transport=httpx.MockTransport(handler))
    provider = ApiSportsProvider(client=client, sticky=sticky)

    records = await provider.fetch(Operation.STANDINGS, FetchParams(league_id="PL", season="2025"))
    assert [r.payload["team"]["name"] for r in records] == ["Arsenal"]
    assert records[0].kind == RecordKind.STANDINGS
    assert sticky.get("api_sports") == "rapidapi"
    assert hosts.count("v3.football.api-sports.io") == 3

    hosts.clear()
    await provider.fetch(Operation.STANDINGS, FetchParams(league_id="39", season="2025"))
    # the sticky strategy is tried first, the direct one is not touched again
    assert hosts == ["api-football-v1.p.rapidapi.com"]
    await provider.aclose()


@pytest.mark.asyncio
async def test_api_sports_errors_payload_moves_to_next_strategy(monkeypatch):
    monkeypatch.setattr(settings, "API_FOOTBALL_KEY", "direct-key")
    monkeypatch.setattr(settings, "RAPIDAPI_KEY", "")

    def handler(request: httpx.Request):
        if request.url.host == "v3.football.api-sports.io":
            return httpx.Response(200, json={"errors": {"requests": "limit reached"}, "response": []})
        return httpx.Response(200, json={"errors": [], "response": [{"fixture": {"id": 7}}]})

    sticky = StickyStrategyCache()
    provider = ApiSportsProvider(
        client=ResilientClient("api_sports", transport=httpx.MockTransport(handler)),
        sticky=sticky,
    )
    records = await provider.fetch(Operation.LIVE, FetchParams(league_id="39"))
    assert [r.payload["fixture"]["id"] for r in records] == [7]
    assert sticky.get("api_sports") == "rapidapi"
    await provider.aclose()


@pytest.mark.asyncio
async def test_failed_sticky_strategy_is_forgotten(monkeypatch):
    monkeypatch.setattr(settings, "SM_API_KEY", "sm-key")
    state = {"header_ok": True}

    def handler(request: httpx.Request):
        via_header = "authorization" in request.headers
        if via_header and not state["header_ok"]:
            return httpx.Response(200, json={"message": "You do not have access to this endpoint."})
        return httpx.Response(200, json={"data": [{"id": 1, "name": "Premier League"}]})

    sticky = StickyStrategyCache()
    provider = SportmonksProvider(
        client=ResilientClient("sportmonks", transport=httpx.MockTransport(handler)),
        sticky=sticky,
    )
    await provider.fetch(Operation.LEAGUES, FetchParams())
    assert sticky.get("sportmonks") == "auth_header"

    state["header_ok"] = False
    records = await provider.fetch(Operation.LEAGUES, FetchParams())
    assert records and records[0].payload["name"] == "Premier League"
    assert sticky.get("sportmonks") == "query_token"
    await provider.aclose()


@pytest.mark.asyncio
async def test_all_strategies_failing_raises_last_error(monkeypatch):
    monkeypatch.setattr(settings, "SM_API_KEY", "sm-key")
    provider = SportmonksProvider(
        client=ResilientClient("sportmonks", transport=httpx.MockTransport(lambda r: httpx.Response(500))),
        sticky=StickyStrategyCache(),
    )
    with pytest.raises(ProviderRequestError) as exc_info:
        await provider.fetch(Operation.LIVE, FetchParams(league_id="39"))
    assert exc_info.value.status_code == 500
    await provider.aclose()


@pytest.mark.asyncio
async def test_missing_key_fails_before_network(monkeypatch):
    monkeypatch.setattr(settings, "FOOTBALL_DATA_ORG_API_KEY", "")
    calls: list[httpx.Request] = []

    def handler(request):
        calls.append(request)
        return httpx.Response(200, json={})

    provider = FootballDataProvider(client=ResilientClient("football_data", transport=httpx.MockTransport(handler)))
    assert provider.is_configured() is False
    with pytest.raises(ProviderConfigError):
        await provider.fetch(Operation.LIVE, FetchParams(league_id="PL"))
    assert calls == []
    await provider.aclose()


@pytest.mark.asyncio
async def test_unmapped_league_returns_empty_without_request(monkeypatch):
    monkeypatch.setattr(settings, "FOOTBALL_DATA_ORG_API_KEY", "fd-key")
    calls: list[httpx.Request] = []

    def handler(request):
        calls.append(request)
        return httpx.Response(200, json={"matches": []})

    provider = FootballDataProvider(client=ResilientClient("football_data", transport=httpx.MockTransport(handler)))
    # 2. Bundesliga is not covered by the football-data.org free tier mapping
    assert await provider.fetch(Operation.LIVE, FetchParams(league_id="79")) == []
    assert calls == []
    await provider.aclose()


def test_sticky_caches_are_independent():
    first, second = StickyStrategyCache(), StickyStrategyCache()
    first.remember("api_sports", "rapidapi")
    assert second.get("api_sports") is None
    assert first.snapshot() == {"api_sports": "rapidapi"}
