"""
backend/tests/test_provider_registry.py

Purpose:
    Capability declarations are validated once, at registration time.
"""

from __future__ import annotations

import pytest

from sportsfeed.providers.base import (
    BaseProvider,
    FetchParams,
    Operation,
    ProviderRegistry,
    ProviderTag,
    RecordKind,
    StickyStrategyCache,
    implemented_capabilities,
)
from sportsfeed.providers.errors import ProviderCapabilityError
from sportsfeed.services.sports_aggregator import build_default_registry


class _LiveOnly(BaseProvider):
    name = "live_only"
    tag = ProviderTag.DEMO
    capabilities = frozenset({Operation.LIVE})

    async def fetch_live(self, params: FetchParams):
        return self._records(RecordKind.MATCH, [{"home": "A", "away": "B"}, "not-a-dict"])


class _Overclaiming(BaseProvider):
    name = "overclaiming"
    tag = ProviderTag.DEMO
    capabilities = frozenset({Operation.LIVE, Operation.ODDS})

    async def fetch_live(self, params: FetchParams):
        return []


def test_register_rejects_undeclared_implementation():
    registry = ProviderRegistry()
    with pytest.raises(ProviderCapabilityError, match="odds"):
        registry.register(_Overclaiming())


def test_register_rejects_duplicates_and_blank_names():
    registry = ProviderRegistry()
    registry.register(_LiveOnly())
    with pytest.raises(ValueError):
        registry.register(_LiveOnly())

    class _Nameless(_LiveOnly):
        name = ""

    with pytest.raises(ValueError):
        registry.register(_Nameless())


def test_supporting_lists_capable_adapters():
    registry = ProviderRegistry()
    registry.register(_LiveOnly())
    assert registry.supporting(Operation.LIVE) == ["live_only"]
    assert registry.supporting(Operation.ODDS) == []
    assert registry.get("LIVE_ONLY") is not None
    assert len(registry) == 1


@pytest.mark.asyncio
async def test_fetch_of_undeclared_capability_raises():
    adapter = _LiveOnly()
    with pytest.raises(ProviderCapabilityError):
        await adapter.fetch(Operation.STANDINGS, FetchParams(league_id="39"))

    records = await adapter.fetch(Operation.LIVE, FetchParams(league_id="39"))
    # non-dict payload items are dropped at the source
    assert len(records) == 1
    assert records[0].tag == ProviderTag.DEMO
    assert records[0].source == "live_only"
    await adapter.aclose()


@pytest.mark.asyncio
async def test_default_registry_shares_one_sticky_cache():
    sticky = StickyStrategyCache()
    registry = build_default_registry(sticky, include_demo=True)
    assert registry.names() == ["football_data", "sportmonks", "api_sports", "openligadb", "espn", "demo"]
    for adapter in registry:
        assert adapter._sticky is sticky
        assert set(adapter.capabilities) <= implemented_capabilities(adapter)
        await adapter.aclose()


@pytest.mark.asyncio
async def test_default_registry_excludes_demo_unless_enabled():
    registry = build_default_registry(StickyStrategyCache(), include_demo=False)
    assert "demo" not in registry.names()
    for adapter in registry:
        await adapter.aclose()
