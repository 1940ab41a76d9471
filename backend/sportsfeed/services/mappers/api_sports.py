"""
backend/sportsfeed/services/mappers/api_sports.py

Purpose:
    API-Football v3 payloads (fixtures, odds, standings, leagues) -> canonical
    records.

Dependencies:
    - sportsfeed.models.canonical
    - sportsfeed.services.mappers.common
"""

from __future__ import annotations

from typing import Any

from sportsfeed.models.canonical import (
    Bookmaker,
    League,
    Market,
    Match,
    MatchStatus,
    OddsQuote,
    Outcome,
    StandingsRow,
)
from sportsfeed.services.mappers.common import (
    as_int,
    as_optional_int,
    as_str,
    dig,
    first_text,
    kickoff_display,
    minute_display,
    pick_teams,
    to_price,
)

_STATUS_MAP = {
    "TBD": MatchStatus.SCHEDULED,
    "NS": MatchStatus.SCHEDULED,
    "1H": MatchStatus.LIVE,
    "HT": MatchStatus.LIVE,
    "2H": MatchStatus.LIVE,
    "ET": MatchStatus.LIVE,
    "BT": MatchStatus.LIVE,
    "P": MatchStatus.LIVE,
    "LIVE": MatchStatus.LIVE,
    "INT": MatchStatus.LIVE,
    "SUSP": MatchStatus.LIVE,
    "FT": MatchStatus.FINISHED,
    "AET": MatchStatus.FINISHED,
    "PEN": MatchStatus.FINISHED,
    "AWD": MatchStatus.FINISHED,
    "WO": MatchStatus.FINISHED,
}


def map_match(item: dict[str, Any], source: str) -> Match:
    home, away = pick_teams(dig(item, "teams", "home", "name"), dig(item, "teams", "away", "name"))
    status = _STATUS_MAP.get(str(dig(item, "fixture", "status", "short") or "").upper(), MatchStatus.UNKNOWN)
    time_text = None
    if status == MatchStatus.LIVE:
        time_text = minute_display(dig(item, "fixture", "status", "elapsed")) or as_str(
            dig(item, "fixture", "status", "long")
        )
    return Match(
        id=as_str(dig(item, "fixture", "id")),
        home=home,
        away=away,
        home_score=as_optional_int(dig(item, "goals", "home")),
        away_score=as_optional_int(dig(item, "goals", "away")),
        status=status,
        time=time_text or kickoff_display(dig(item, "fixture", "date")) or "TBA",
        venue=as_str(dig(item, "fixture", "venue", "name")),
        league=as_str(dig(item, "league", "name")),
        provider=source,
        raw=item,
    )


def map_odds(item: dict[str, Any], source: str) -> OddsQuote:
    bookmakers: list[Bookmaker] = []
    for book in item.get("bookmakers") or []:
        if not isinstance(book, dict):
            continue
        markets: list[Market] = []
        for bet in book.get("bets") or []:
            if not isinstance(bet, dict):
                continue
            outcomes = [
                Outcome(name=first_text(value.get("value"), default="?"), price=to_price(value.get("odd")))
                for value in bet.get("values") or []
                if isinstance(value, dict)
            ]
            markets.append(
                Market(
                    key=first_text(bet.get("id"), default="unknown"),
                    label=first_text(bet.get("name"), default="Unknown"),
                    outcomes=outcomes,
                )
            )
        bookmakers.append(
            Bookmaker(
                title=first_text(book.get("name"), book.get("id"), default="Unknown"),
                last_update=as_str(item.get("update")),
                markets=markets,
            )
        )
    home, away = pick_teams(dig(item, "teams", "home", "name"), dig(item, "teams", "away", "name"))
    return OddsQuote(
        fixture_id=as_str(dig(item, "fixture", "id")),
        home=home,
        away=away,
        bookmakers=bookmakers,
        provider=source,
        raw=item,
    )


def map_standings(item: dict[str, Any], source: str) -> StandingsRow:
    return StandingsRow(
        position=as_int(item.get("rank")),
        team_name=first_text(dig(item, "team", "name"), default="Unknown"),
        played=as_int(dig(item, "all", "played")),
        won=as_int(dig(item, "all", "win")),
        drawn=as_int(dig(item, "all", "draw")),
        lost=as_int(dig(item, "all", "lose")),
        goal_diff=as_int(item.get("goalsDiff")),
        points=as_int(item.get("points")),
        provider=source,
        raw=item,
    )


def map_league(item: dict[str, Any], source: str) -> League:
    return League(
        id=first_text(dig(item, "league", "id"), default=""),
        name=first_text(dig(item, "league", "name"), default="Unknown"),
        country=as_str(dig(item, "country", "name")),
        provider=source,
        raw=item,
    )
