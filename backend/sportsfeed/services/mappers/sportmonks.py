"""
backend/sportsfeed/services/mappers/sportmonks.py

Purpose:
    Sportmonks v3 payloads (with participants/scores/state/odds includes)
    -> canonical records.

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

# state_id -> status (1 NS, 2 1st half, 3 HT, 4 break, 5 FT, 6 ET, 7 AET,
# 8 FT_PEN, 9 penalties, 21 ET break, 22 2nd half, 25 pen break)
_STATE_MAP = {
    1: MatchStatus.SCHEDULED,
    2: MatchStatus.LIVE,
    3: MatchStatus.LIVE,
    4: MatchStatus.LIVE,
    5: MatchStatus.FINISHED,
    6: MatchStatus.LIVE,
    7: MatchStatus.FINISHED,
    8: MatchStatus.FINISHED,
    9: MatchStatus.LIVE,
    21: MatchStatus.LIVE,
    22: MatchStatus.LIVE,
    25: MatchStatus.LIVE,
}

# standings detail type ids
_DETAIL_PLAYED = 129
_DETAIL_WON = 130
_DETAIL_DRAWN = 131
_DETAIL_LOST = 132
_DETAIL_GOAL_DIFF = 179


def _participant(item: dict[str, Any], location: str) -> dict[str, Any]:
    for participant in item.get("participants") or []:
        if isinstance(participant, dict) and dig(participant, "meta", "location") == location:
            return participant
    return {}


def _current_goals(item: dict[str, Any], location: str) -> int | None:
    for score in item.get("scores") or []:
        if not isinstance(score, dict) or score.get("description") != "CURRENT":
            continue
        if dig(score, "score", "participant") == location:
            return as_optional_int(dig(score, "score", "goals"))
    return None


def _status(item: dict[str, Any]) -> MatchStatus:
    state_id = as_optional_int(item.get("state_id")) or as_optional_int(dig(item, "state", "id"))
    if state_id in _STATE_MAP:
        return _STATE_MAP[state_id]
    short = str(dig(item, "state", "short_name") or dig(item, "state", "developer_name") or "").upper()
    if short.startswith("INPLAY") or short in {"HT", "1ST", "2ND", "ET"}:
        return MatchStatus.LIVE
    if short in {"FT", "AET", "FT_PEN"}:
        return MatchStatus.FINISHED
    if short == "NS":
        return MatchStatus.SCHEDULED
    return MatchStatus.UNKNOWN


def map_match(item: dict[str, Any], source: str) -> Match:
    home, away = pick_teams(
        _participant(item, "home").get("name"),
        _participant(item, "away").get("name"),
        item.get("name"),
    )
    status = _status(item)
    time_text = None
    if status == MatchStatus.LIVE:
        time_text = minute_display(item.get("minute")) or as_str(dig(item, "state", "name"))
    return Match(
        id=as_str(item.get("id")),
        home=home,
        away=away,
        home_score=_current_goals(item, "home"),
        away_score=_current_goals(item, "away"),
        status=status,
        time=time_text or kickoff_display(item.get("starting_at")) or "TBA",
        venue=as_str(dig(item, "venue", "name")),
        league=as_str(dig(item, "league", "name")),
        provider=source,
        raw=item,
    )


def map_odds(item: dict[str, Any], source: str) -> OddsQuote:
    home, away = pick_teams(
        _participant(item, "home").get("name"),
        _participant(item, "away").get("name"),
        item.get("name"),
    )
    # odds arrive flat: one entry per (bookmaker, market, outcome)
    books: dict[str, dict[str, Any]] = {}
    for odd in item.get("odds") or []:
        if not isinstance(odd, dict):
            continue
        book_key = str(odd.get("bookmaker_id") or dig(odd, "bookmaker", "id") or "unknown")
        book = books.setdefault(book_key, {
            "title": first_text(dig(odd, "bookmaker", "name"), default=f"Bookmaker {book_key}"),
            "last_update": as_str(odd.get("latest_bookmaker_update")),
            "markets": {},
        })
        market_key = str(odd.get("market_id") or dig(odd, "market", "id") or "unknown")
        market = book["markets"].setdefault(market_key, {
            "label": first_text(
                dig(odd, "market", "name"),
                odd.get("market_description"),
                default=market_key,
            ),
            "outcomes": [],
        })
        market["outcomes"].append(
            Outcome(
                name=first_text(odd.get("label"), odd.get("name"), default="?"),
                price=to_price(odd.get("value")),
            )
        )

    bookmakers = [
        Bookmaker(
            title=book["title"],
            last_update=book["last_update"],
            markets=[
                Market(key=key, label=market["label"], outcomes=market["outcomes"])
                for key, market in book["markets"].items()
            ],
        )
        for book in books.values()
    ]
    return OddsQuote(
        fixture_id=as_str(item.get("id")),
        home=home,
        away=away,
        bookmakers=bookmakers,
        provider=source,
        raw=item,
    )


def map_standings(item: dict[str, Any], source: str) -> StandingsRow:
    details: dict[int, Any] = {}
    for detail in item.get("details") or []:
        type_id = as_optional_int(dig(detail, "type_id"))
        if type_id is not None:
            details[type_id] = dig(detail, "value")
    return StandingsRow(
        position=as_int(item.get("position")),
        team_name=first_text(dig(item, "participant", "name"), default="Unknown"),
        played=as_int(details.get(_DETAIL_PLAYED)),
        won=as_int(details.get(_DETAIL_WON)),
        drawn=as_int(details.get(_DETAIL_DRAWN)),
        lost=as_int(details.get(_DETAIL_LOST)),
        goal_diff=as_int(details.get(_DETAIL_GOAL_DIFF)),
        points=as_int(item.get("points")),
        provider=source,
        raw=item,
    )


def map_league(item: dict[str, Any], source: str) -> League:
    return League(
        id=first_text(item.get("id"), default=""),
        name=first_text(item.get("name"), default="Unknown"),
        country=as_str(dig(item, "country", "name")),
        provider=source,
        raw=item,
    )
