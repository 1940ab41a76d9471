"""
backend/tests/test_tools_provider_check.py

Purpose:
    The operator CLI under tools/ resolves backend/ from its own location and
    classifies adapter outcomes.
"""

from __future__ import annotations

import importlib
import sys
from pathlib import Path

import pytest

from sportsfeed.config import settings
from sportsfeed.providers.base import FetchParams, Operation
from sportsfeed.providers.demo import DemoProvider
from sportsfeed.providers.sportmonks import SportmonksProvider

_REPO_ROOT = Path(__file__).resolve().parents[2]


def _load_tool(monkeypatch, tmp_path):
    monkeypatch.chdir(tmp_path)
    monkeypatch.delitem(sys.modules, "tools.probe_providers", raising=False)
    return importlib.import_module("tools.probe_providers")


def test_backend_path_does_not_depend_on_cwd(monkeypatch, tmp_path):
    tool = _load_tool(monkeypatch, tmp_path)
    assert tool._backend == _REPO_ROOT / "backend"
    assert str(_REPO_ROOT / "backend") in sys.path


@pytest.mark.asyncio
async def test_outcomes_are_classified(monkeypatch, tmp_path):
    tool = _load_tool(monkeypatch, tmp_path)
    monkeypatch.setattr(settings, "SM_API_KEY", "")

    demo = DemoProvider()
    status, detail = await tool._probe(demo, Operation.LIVE, FetchParams(league_id="39"), write_health=False)
    assert status == "OK"
    assert "Arsenal" in detail

    unconfigured = SportmonksProvider()
    status, _ = await tool._probe(unconfigured, Operation.LIVE, FetchParams(league_id="39"), write_health=False)
    assert status == "CONFIG"

    await demo.aclose()
    await unconfigured.aclose()
