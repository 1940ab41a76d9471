"""
backend/sportsfeed/config_leagues.py

Purpose:
    Static league catalog. Callers pass an opaque league id (API-Football
    numbering, or any alias below); each provider adapter translates it into
    its own competition code. A provider without an entry does not cover
    that league.
"""

from __future__ import annotations

LEAGUES: dict[str, dict] = {
    "39": {
        "name": "Premier League",
        "country": "England",
        "aliases": ["PL", "EPL", "soccer_epl", "eng.1"],
        "codes": {
            "api_sports": "39",
            "football_data": "PL",
            "sportmonks": "8",
            "espn": "eng.1",
        },
    },
    "140": {
        "name": "La Liga",
        "country": "Spain",
        "aliases": ["PD", "LALIGA", "soccer_spain_la_liga", "esp.1"],
        "codes": {
            "api_sports": "140",
            "football_data": "PD",
            "sportmonks": "564",
            "espn": "esp.1",
        },
    },
    "135": {
        "name": "Serie A",
        "country": "Italy",
        "aliases": ["SA", "SERIEA", "soccer_italy_serie_a", "ita.1"],
        "codes": {
            "api_sports": "135",
            "football_data": "SA",
            "sportmonks": "384",
            "espn": "ita.1",
        },
    },
    "61": {
        "name": "Ligue 1",
        "country": "France",
        "aliases": ["FL1", "LIGUE1", "soccer_france_ligue_one", "fra.1"],
        "codes": {
            "api_sports": "61",
            "football_data": "FL1",
            "sportmonks": "301",
            "espn": "fra.1",
        },
    },
    "78": {
        "name": "Bundesliga",
        "country": "Germany",
        "aliases": ["BL1", "bl1", "soccer_germany_bundesliga", "ger.1"],
        "codes": {
            "api_sports": "78",
            "football_data": "BL1",
            "sportmonks": "82",
            "openligadb": "bl1",
            "espn": "ger.1",
        },
    },
    "79": {
        "name": "2. Bundesliga",
        "country": "Germany",
        "aliases": ["BL2", "bl2", "soccer_germany_bundesliga2", "ger.2"],
        "codes": {
            "api_sports": "79",
            "sportmonks": "85",
            "openligadb": "bl2",
            "espn": "ger.2",
        },
    },
    "2": {
        "name": "Champions League",
        "country": "Europe",
        "aliases": ["CL", "UCL", "soccer_uefa_champs_league", "uefa.champions"],
        "codes": {
            "api_sports": "2",
            "football_data": "CL",
            "sportmonks": "2",
            "espn": "uefa.champions",
        },
    },
}

_ALIAS_INDEX: dict[str, str] = {}
for _key, _entry in LEAGUES.items():
    _ALIAS_INDEX[_key.lower()] = _key
    for _alias in _entry["aliases"]:
        _ALIAS_INDEX[_alias.lower()] = _key


def resolve_league_key(league_id: str | int) -> str | None:
    """Return the catalog key for an id or alias, or None when unknown."""
    return _ALIAS_INDEX.get(str(league_id).strip().lower())


def provider_league_code(league_id: str | int, provider: str) -> str | None:
    key = resolve_league_key(league_id)
    if key is None:
        return None
    return LEAGUES[key]["codes"].get(provider)


def league_name(league_id: str | int) -> str | None:
    key = resolve_league_key(league_id)
    return LEAGUES[key]["name"] if key else None
