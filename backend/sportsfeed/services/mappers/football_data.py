"""
backend/sportsfeed/services/mappers/football_data.py

Purpose:
    football-data.org v4 payloads -> canonical Match / StandingsRow / League.

Dependencies:
    - sportsfeed.models.canonical
    - sportsfeed.services.mappers.common
"""

from __future__ import annotations

from typing import Any

from sportsfeed.models.canonical import League, Match, MatchStatus, StandingsRow
from sportsfeed.services.mappers.common import (
    as_int,
    as_optional_int,
    as_str,
    dig,
    first_text,
    kickoff_display,
    minute_display,
    pick_teams,
)

_STATUS_MAP = {
    "SCHEDULED": MatchStatus.SCHEDULED,
    "TIMED": MatchStatus.SCHEDULED,
    "POSTPONED": MatchStatus.SCHEDULED,
    "IN_PLAY": MatchStatus.LIVE,
    "PAUSED": MatchStatus.LIVE,
    "LIVE": MatchStatus.LIVE,
    "FINISHED": MatchStatus.FINISHED,
    "AWARDED": MatchStatus.FINISHED,
}


def map_match(item: dict[str, Any], source: str) -> Match:
    home, away = pick_teams(
        first_text(dig(item, "homeTeam", "name"), dig(item, "homeTeam", "shortName")),
        first_text(dig(item, "awayTeam", "name"), dig(item, "awayTeam", "shortName")),
    )
    status = _STATUS_MAP.get(str(item.get("status") or "").upper(), MatchStatus.UNKNOWN)
    time_text = minute_display(item.get("minute")) if status == MatchStatus.LIVE else None
    return Match(
        id=as_str(item.get("id")),
        home=home,
        away=away,
        home_score=as_optional_int(dig(item, "score", "fullTime", "home")),
        away_score=as_optional_int(dig(item, "score", "fullTime", "away")),
        status=status,
        time=time_text or kickoff_display(item.get("utcDate")) or "TBA",
        venue=as_str(item.get("venue")),
        league=as_str(dig(item, "competition", "name")),
        provider=source,
        raw=item,
    )


def map_standings(item: dict[str, Any], source: str) -> StandingsRow:
    return StandingsRow(
        position=as_int(item.get("position")),
        team_name=first_text(dig(item, "team", "name"), dig(item, "team", "shortName"), default="Unknown"),
        played=as_int(item.get("playedGames")),
        won=as_int(item.get("won")),
        drawn=as_int(item.get("draw")),
        lost=as_int(item.get("lost")),
        goal_diff=as_int(item.get("goalDifference")),
        points=as_int(item.get("points")),
        provider=source,
        raw=item,
    )


def map_league(item: dict[str, Any], source: str) -> League:
    return League(
        id=first_text(item.get("code"), item.get("id"), default=""),
        name=first_text(item.get("name"), default="Unknown"),
        country=as_str(dig(item, "area", "name")),
        provider=source,
        raw=item,
    )
