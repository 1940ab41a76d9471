from __future__ import annotations

import pytest

from sportsfeed.workers import prefetch as prefetch_module


class _RecordingAggregator:
    def __init__(self, result):
        self.calls = []
        self._result = result

    async def get_all_live_matches(self, league_ids):
        self.calls.append(list(league_ids))
        return self._result


@pytest.mark.asyncio
async def test_prefetch_warms_configured_leagues(monkeypatch):
    aggregator = _RecordingAggregator(result=["m1", "m2"])
    monkeypatch.setattr(prefetch_module.settings, "PREFETCH_LEAGUE_IDS", "39, 78,,")
    monkeypatch.setattr(prefetch_module, "get_aggregator", lambda: aggregator)

    assert await prefetch_module.prefetch_live_matches() == 2
    assert aggregator.calls == [["39", "78"]]


@pytest.mark.asyncio
async def test_prefetch_without_leagues_is_noop(monkeypatch):
    aggregator = _RecordingAggregator(result=[])
    monkeypatch.setattr(prefetch_module.settings, "PREFETCH_LEAGUE_IDS", "")
    monkeypatch.setattr(prefetch_module, "get_aggregator", lambda: aggregator)

    assert await prefetch_module.prefetch_live_matches() == 0
    assert aggregator.calls == []
