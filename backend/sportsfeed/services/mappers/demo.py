"""
backend/sportsfeed/services/mappers/demo.py

Purpose:
    Flat demo-shaped payloads -> canonical records. Also the shape used by
    hand-written fixtures: {id, home, away, score: {home, away}, status,
    time, venue, league, title}.

Dependencies:
    - sportsfeed.models.canonical
    - sportsfeed.services.mappers.common
"""

from __future__ import annotations

from typing import Any

from sportsfeed.models.canonical import (
    Bookmaker,
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
    pick_teams,
    to_price,
)


def _status(value: Any) -> MatchStatus:
    try:
        return MatchStatus(str(value or "").upper())
    except ValueError:
        return MatchStatus.UNKNOWN


def map_match(item: dict[str, Any], source: str) -> Match:
    home, away = pick_teams(item.get("home"), item.get("away"), item.get("title"))
    return Match(
        id=as_str(item.get("id")),
        home=home,
        away=away,
        home_score=as_optional_int(dig(item, "score", "home")),
        away_score=as_optional_int(dig(item, "score", "away")),
        status=_status(item.get("status")),
        time=first_text(item.get("time"), default="TBA"),
        venue=as_str(item.get("venue")),
        league=as_str(item.get("league")),
        provider=source,
        raw=item,
    )


def map_odds(item: dict[str, Any], source: str) -> OddsQuote:
    bookmakers = []
    for book in item.get("bookmakers") or []:
        if not isinstance(book, dict):
            continue
        markets = []
        for market in book.get("markets") or []:
            if not isinstance(market, dict):
                continue
            outcomes = [
                Outcome(name=first_text(o.get("name"), default="?"), price=to_price(o.get("price")))
                for o in market.get("outcomes") or []
                if isinstance(o, dict)
            ]
            key = first_text(market.get("key"), default="unknown")
            markets.append(Market(key=key, label=first_text(market.get("label"), default=key), outcomes=outcomes))
        bookmakers.append(
            Bookmaker(
                title=first_text(book.get("title"), default="Unknown"),
                last_update=as_str(book.get("last_update")),
                markets=markets,
            )
        )
    home, away = pick_teams(item.get("home"), item.get("away"), item.get("title"))
    return OddsQuote(
        fixture_id=as_str(item.get("id")),
        home=home,
        away=away,
        bookmakers=bookmakers,
        provider=source,
        raw=item,
    )


def map_standings(item: dict[str, Any], source: str) -> StandingsRow:
    return StandingsRow(
        position=as_int(item.get("position")),
        team_name=first_text(item.get("team"), item.get("team_name"), default="Unknown"),
        played=as_int(item.get("played")),
        won=as_int(item.get("won")),
        drawn=as_int(item.get("drawn")),
        lost=as_int(item.get("lost")),
        goal_diff=as_int(item.get("goal_diff")),
        points=as_int(item.get("points")),
        provider=source,
        raw=item,
    )
