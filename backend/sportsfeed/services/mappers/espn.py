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

_STATE_MAP = {
    "pre": MatchStatus.SCHEDULED,
    "in": MatchStatus.LIVE,
    "post": MatchStatus.FINISHED,
}


def _competitors(event: dict[str, Any]) -> tuple[dict[str, Any], dict[str, Any]]:
    competitors = [c for c in dig(event, "competitions", 0, "competitors", default=[]) if isinstance(c, dict)]
    home = next((c for c in competitors if c.get("homeAway") == "home"), None)
    away = next((c for c in competitors if c.get("homeAway") == "away"), None)
    # ESPN: competitors[0] is usually home
    if home is None and competitors:
        home = competitors[0]
    if away is None and len(competitors) > 1:
        away = competitors[1]
    return home or {}, away or {}


def map_match(item: dict[str, Any], source: str) -> Match:
    home_c, away_c = _competitors(item)
    # event.name reads "Chelsea at Arsenal" (away at home)
    home, away = pick_teams(
        dig(home_c, "team", "displayName"),
        dig(away_c, "team", "displayName"),
        item.get("name"),
    )
    status = _STATE_MAP.get(str(dig(item, "status", "type", "state") or ""), MatchStatus.UNKNOWN)
    time_text = as_str(dig(item, "status", "displayClock")) if status == MatchStatus.LIVE else None
    return Match(
        id=as_str(item.get("id")),
        home=home,
        away=away,
        home_score=as_optional_int(home_c.get("score")),
        away_score=as_optional_int(away_c.get("score")),
        status=status,
        time=time_text or kickoff_display(item.get("date")) or "TBA",
        venue=as_str(dig(item, "competitions", 0, "venue", "fullName")),
        league=as_str(dig(item, "league", "name")),
        provider=source,
        raw=item,
    )


def map_standings(item: dict[str, Any], source: str) -> StandingsRow:
    stats: dict[str, Any] = {}
    for stat in item.get("stats") or []:
        name = as_str(dig(stat, "name"))
        if name:
            stats[name] = dig(stat, "value")
    return StandingsRow(
        position=as_int(stats.get("rank")),
        team_name=first_text(dig(item, "team", "displayName"), dig(item, "team", "name"), default="Unknown"),
        played=as_int(stats.get("gamesPlayed")),
        won=as_int(stats.get("wins")),
        drawn=as_int(stats.get("ties")),
        lost=as_int(stats.get("losses")),
        goal_diff=as_int(stats.get("pointDifferential")),
        points=as_int(stats.get("points")),
        provider=source,
        raw=item,
    )
