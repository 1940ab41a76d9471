"""
backend/sportsfeed/services/mappers/openligadb.py

Purpose:
    OpenLigaDB match and table payloads -> canonical records.

Dependencies:
    - sportsfeed.models.canonical
    - sportsfeed.services.mappers.common
"""

from __future__ import annotations

from typing import Any

from sportsfeed.models.canonical import Match, MatchStatus, StandingsRow
from sportsfeed.services.mappers.common import (
    as_int,
    as_optional_int,
    as_str,
    dig,
    first_text,
    kickoff_display,
    pick_teams,
)

# resultTypeID 2 = "Endergebnis" (full time), 1 = half time
_RESULT_FULL_TIME = 2


def _score(item: dict[str, Any]) -> tuple[int | None, int | None]:
    # Running matches: the last goal entry carries the current score.
    goals = [g for g in item.get("goals") or [] if isinstance(g, dict)]
    if goals:
        last = goals[-1]
        return as_optional_int(last.get("scoreTeam1")), as_optional_int(last.get("scoreTeam2"))

    results = [r for r in item.get("matchResults") or [] if isinstance(r, dict)]
    if not results:
        return None, None
    final = next((r for r in results if as_optional_int(r.get("resultTypeID")) == _RESULT_FULL_TIME), None)
    chosen = final or max(results, key=lambda r: as_int(r.get("resultOrderID")))
    return as_optional_int(chosen.get("pointsTeam1")), as_optional_int(chosen.get("pointsTeam2"))


def _status(item: dict[str, Any]) -> MatchStatus:
    if item.get("matchIsFinished") is True:
        return MatchStatus.FINISHED
    if item.get("goals") or item.get("matchResults"):
        return MatchStatus.LIVE
    kickoff = as_str(item.get("matchDateTimeUTC"))
    updated = as_str(item.get("lastUpdateDateTime"))
    # Feed updates after kickoff only happen for running matches.
    if kickoff and updated and updated[:19] >= kickoff[:19]:
        return MatchStatus.LIVE
    return MatchStatus.SCHEDULED if kickoff else MatchStatus.UNKNOWN


def map_match(item: dict[str, Any], source: str) -> Match:
    home, away = pick_teams(
        first_text(dig(item, "team1", "teamName"), dig(item, "team1", "shortName")),
        first_text(dig(item, "team2", "teamName"), dig(item, "team2", "shortName")),
    )
    home_score, away_score = _score(item)
    return Match(
        id=as_str(item.get("matchID")),
        home=home,
        away=away,
        home_score=home_score,
        away_score=away_score,
        status=_status(item),
        time=kickoff_display(item.get("matchDateTimeUTC")) or "TBA",
        venue=first_text(dig(item, "location", "locationStadium"), dig(item, "location", "locationCity")),
        league=as_str(item.get("leagueName")),
        provider=source,
        raw=item,
    )


def map_standings(item: dict[str, Any], source: str) -> StandingsRow:
    return StandingsRow(
        team_name=first_text(item.get("teamName"), item.get("shortName"), default="Unknown"),
        played=as_int(item.get("matches")),
        won=as_int(item.get("won")),
        drawn=as_int(item.get("draw")),
        lost=as_int(item.get("lost")),
        goal_diff=as_int(item.get("goalDiff")),
        points=as_int(item.get("points")),
        provider=source,
        raw=item,
    )
