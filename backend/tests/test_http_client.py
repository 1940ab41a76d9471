"""
backend/tests/test_http_client.py

Purpose:
    Retry/backoff contract of the resilient fetch client: JSON vs text
    bodies, 429 and HTTP error backoff, network errors, and the error raised
    once attempts are exhausted.

Dependencies:
    - sportsfeed.providers.http_client
"""

from __future__ import annotations

import httpx
import pytest

from sportsfeed.providers import http_client as http_module
from sportsfeed.providers.errors import ProviderRateLimited, ProviderRequestError
from sportsfeed.providers.http_client import ResilientClient


def _client(handler) -> ResilientClient:
    return ResilientClient("test", max_retries=3, transport=httpx.MockTransport(handler))


@pytest.fixture
def sleeps(monkeypatch) -> list[float]:
    recorded: list[float] = []

    async def _fake_sleep(seconds: float) -> None:
        recorded.append(seconds)

    monkeypatch.setattr(http_module.asyncio, "sleep", _fake_sleep)
    return recorded


@pytest.mark.asyncio
async def test_fetch_returns_json(sleeps):
    client = _client(lambda request: httpx.Response(200, json={"matches": [1, 2]}))
    assert await client.fetch("https://api.example/matches") == {"matches": [1, 2]}
    assert sleeps == []
    await client.aclose()


@pytest.mark.asyncio
async def test_fetch_returns_text_for_non_json_body(sleeps):
    client = _client(lambda request: httpx.Response(200, text="Invalid API key"))
    assert await client.fetch("https://api.example/matches") == "Invalid API key"
    await client.aclose()


@pytest.mark.asyncio
async def test_http_errors_back_off_and_raise_with_last_status(sleeps):
    calls = {"n": 0}

    def handler(request):
        calls["n"] += 1
        return httpx.Response(500, text="x" * 500)

    client = _client(handler)
    with pytest.raises(ProviderRequestError) as exc_info:
        await client.fetch("https://api.example/matches?apiKey=secret")

    assert calls["n"] == 3
    # no sleep after the final attempt
    assert sleeps == [2.0, 4.0]
    assert exc_info.value.status_code == 500
    message = str(exc_info.value)
    assert message.startswith("HTTP 500")
    assert message.count("x") == 200
    await client.aclose()


@pytest.mark.asyncio
async def test_rate_limit_then_success(sleeps):
    responses = [httpx.Response(429), httpx.Response(200, json={"ok": True})]
    client = _client(lambda request: responses.pop(0))

    assert await client.fetch("https://api.example/odds") == {"ok": True}
    assert sleeps == [0.5]
    await client.aclose()


@pytest.mark.asyncio
async def test_persistent_rate_limit_raises_rate_limited(sleeps):
    client = _client(lambda request: httpx.Response(429))
    with pytest.raises(ProviderRateLimited) as exc_info:
        await client.fetch("https://api.example/odds")
    assert exc_info.value.status_code == 429
    assert sleeps == [0.5, 1.0]
    await client.aclose()


@pytest.mark.asyncio
async def test_network_errors_use_linear_backoff(sleeps):
    def handler(request):
        raise httpx.ConnectError("connection refused", request=request)

    client = _client(handler)
    with pytest.raises(ProviderRequestError) as exc_info:
        await client.fetch("https://api.example/live")
    assert exc_info.value.status_code is None
    assert "ConnectError" in str(exc_info.value)
    assert sleeps == [0.5, 1.0]
    await client.aclose()


@pytest.mark.asyncio
async def test_per_call_max_retries_overrides_default(sleeps):
    calls = {"n": 0}

    def handler(request):
        calls["n"] += 1
        return httpx.Response(503)

    client = _client(handler)
    with pytest.raises(ProviderRequestError):
        await client.fetch("https://api.example/live", max_retries=1)
    assert calls["n"] == 1
    assert sleeps == []
    await client.aclose()


@pytest.mark.asyncio
async def test_recovers_after_transient_failure(sleeps):
    responses = [httpx.Response(502, text="bad gateway"), httpx.Response(200, json=[{"id": 1}])]
    client = _client(lambda request: responses.pop(0))
    assert await client.fetch("https://api.example/live") == [{"id": 1}]
    assert sleeps == [2.0]
    await client.aclose()


def test_safe_url_strips_query():
    assert http_module._safe_url("https://api.example/v3/odds?api_token=secret") == "https://api.example/v3/odds"
