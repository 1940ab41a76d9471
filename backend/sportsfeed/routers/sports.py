"""
backend/sportsfeed/routers/sports.py

Purpose:
    Read endpoints for canonical sports data: live matches (per league or
    across several), upcoming fixtures, odds, standings and the league list.
    Responses never include the provider `raw` payload.

Dependencies:
    - sportsfeed.services.sports_aggregator
"""

from typing import Any, Iterable

from fastapi import APIRouter, Depends, HTTPException, Query
from pydantic import BaseModel

from sportsfeed.config import settings
from sportsfeed.services.sports_aggregator import SportsAggregator, get_aggregator

router = APIRouter(prefix="/api/sports", tags=["sports"])


def _public(records: Iterable[BaseModel]) -> list[dict[str, Any]]:
    return [record.model_dump(mode="json", exclude={"raw"}) for record in records]


@router.get("/live")
async def live_matches_all(
    league_ids: str | None = Query(None, description="Comma-separated league ids"),
    sport: str = "football",
    aggregator: SportsAggregator = Depends(get_aggregator),
):
    ids = [part.strip() for part in league_ids.split(",") if part.strip()] if league_ids else []
    matches = await aggregator.get_all_live_matches(ids or settings.prefetch_league_ids(), sport=sport)
    return {"items": _public(matches)}


@router.get("/live/{league_id}")
async def live_matches(
    league_id: str,
    sport: str = "football",
    aggregator: SportsAggregator = Depends(get_aggregator),
):
    return {"items": _public(await aggregator.get_live_matches(league_id, sport=sport))}


@router.get("/upcoming")
async def upcoming_fixtures_popular(sport: str = "football", aggregator: SportsAggregator = Depends(get_aggregator)):
    return {"items": _public(await aggregator.get_fixtures(sport=sport))}


@router.get("/upcoming/{league_id}")
async def upcoming_fixtures(
    league_id: str,
    sport: str = "football",
    aggregator: SportsAggregator = Depends(get_aggregator),
):
    return {"items": _public(await aggregator.get_fixtures(league_id, sport=sport))}


@router.get("/matches/{match_id}")
async def match_detail(match_id: str, aggregator: SportsAggregator = Depends(get_aggregator)):
    match = aggregator.get_match_by_id(match_id)
    if match is None:
        raise HTTPException(status_code=404, detail="Match not found.")
    return match.model_dump(mode="json", exclude={"raw"})


@router.get("/odds/{league_id}")
async def odds(
    league_id: str,
    sport: str = "football",
    aggregator: SportsAggregator = Depends(get_aggregator),
):
    return {"items": _public(await aggregator.get_odds(league_id, sport=sport))}


@router.get("/standings/{league_id}")
async def standings(
    league_id: str,
    season: str | None = None,
    sport: str = "football",
    aggregator: SportsAggregator = Depends(get_aggregator),
):
    return {"items": _public(await aggregator.get_standings(league_id, season, sport=sport))}


@router.get("/leagues")
async def leagues(sport: str = "football", aggregator: SportsAggregator = Depends(get_aggregator)):
    return {"items": _public(await aggregator.get_leagues(sport))}
