"""
backend/sportsfeed/providers/demo.py

Purpose:
    Synthetic fixtures for local development and UI work. Registered only
    when DEMO_DATA_ENABLED is set; it is an ordinary provider at the end of
    the priority list, never a silent fallback for real data.

Dependencies:
    - sportsfeed.config_leagues
    - sportsfeed.providers.base
"""

from __future__ import annotations

from sportsfeed.config_leagues import LEAGUES, league_name, resolve_league_key
from sportsfeed.providers.base import (
    BaseProvider,
    FetchParams,
    Operation,
    ProviderTag,
    RawRecord,
    RecordKind,
)

PROVIDER_NAME = "demo"

_DEMO_TEAMS: dict[str, list[str]] = {
    "39": ["Arsenal", "Chelsea", "Liverpool", "Manchester City"],
    "140": ["Real Madrid", "Barcelona", "Atletico Madrid", "Sevilla"],
    "135": ["Inter", "Milan", "Juventus", "Napoli"],
    "61": ["Paris Saint-Germain", "Marseille", "Lyon", "Monaco"],
    "78": ["Bayern Munich", "Borussia Dortmund", "RB Leipzig", "Bayer Leverkusen"],
    "79": ["Hamburger SV", "Schalke 04", "Hertha BSC", "Fortuna Dusseldorf"],
    "2": ["Real Madrid", "Manchester City", "Bayern Munich", "Inter"],
}


def _teams(league_id: str | None) -> tuple[str, list[str]]:
    key = resolve_league_key(league_id) if league_id else None
    if key is None:
        key = next(iter(LEAGUES))
    return key, _DEMO_TEAMS.get(key, _DEMO_TEAMS["39"])


class DemoProvider(BaseProvider):
    """Deterministic demo data in a flat, provider-neutral shape."""

    name = PROVIDER_NAME
    tag = ProviderTag.DEMO
    capabilities = frozenset({Operation.LIVE, Operation.UPCOMING, Operation.ODDS, Operation.STANDINGS})

    async def fetch_live(self, params: FetchParams) -> list[RawRecord]:
        key, teams = _teams(params.league_id)
        items = [
            {
                "id": f"demo-{key}-1",
                "home": teams[0],
                "away": teams[1],
                "score": {"home": 1, "away": 0},
                "status": "LIVE",
                "time": "34'",
                "venue": "Demo Stadium",
                "league": league_name(key),
            },
            {
                "id": f"demo-{key}-2",
                "title": f"{teams[2]} vs {teams[3]}",
                "score": {"home": 2, "away": 2},
                "status": "LIVE",
                "time": "71'",
                "league": league_name(key),
            },
        ]
        return self._records(RecordKind.MATCH, items)

    async def fetch_upcoming(self, params: FetchParams) -> list[RawRecord]:
        key, teams = _teams(params.league_id)
        items = [
            {
                "id": f"demo-{key}-3",
                "home": teams[1],
                "away": teams[2],
                "status": "SCHEDULED",
                "time": "Sat 15:00",
                "league": league_name(key),
            },
            {
                "id": f"demo-{key}-4",
                "home": teams[3],
                "away": teams[0],
                "status": "SCHEDULED",
                "time": "Sun 17:30",
                "league": league_name(key),
            },
        ]
        return self._records(RecordKind.MATCH, items)

    async def fetch_odds(self, params: FetchParams) -> list[RawRecord]:
        key, teams = _teams(params.league_id)
        items = [
            {
                "id": f"demo-{key}-1",
                "home": teams[0],
                "away": teams[1],
                "bookmakers": [
                    {
                        "title": "Demo Book",
                        "last_update": None,
                        "markets": [
                            {
                                "key": "h2h",
                                "label": "Match Winner",
                                "outcomes": [
                                    {"name": teams[0], "price": 2.1},
                                    {"name": "Draw", "price": 3.4},
                                    {"name": teams[1], "price": 3.2},
                                ],
                            }
                        ],
                    }
                ],
            }
        ]
        return self._records(RecordKind.ODDS, items)

    async def fetch_standings(self, params: FetchParams) -> list[RawRecord]:
        _, teams = _teams(params.league_id)
        items = []
        for position, team in enumerate(teams, start=1):
            won = len(teams) - position
            items.append({
                "position": position,
                "team": team,
                "played": len(teams) - 1,
                "won": won,
                "drawn": 0,
                "lost": len(teams) - 1 - won,
                "goal_diff": 2 * won - (len(teams) - 1),
                "points": 3 * won,
            })
        return self._records(RecordKind.STANDINGS, items)
