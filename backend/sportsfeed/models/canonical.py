"""
backend/sportsfeed/models/canonical.py

Purpose:
    Canonical records every provider payload is normalized into. Callers only
    ever consume these shapes; `raw` keeps the provider payload for
    diagnostics and is excluded from API responses.

Dependencies:
    - pydantic
"""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Any

from pydantic import BaseModel, Field, field_validator


class MatchStatus(str, Enum):
    SCHEDULED = "SCHEDULED"
    LIVE = "LIVE"
    FINISHED = "FINISHED"
    UNKNOWN = "UNKNOWN"


class Match(BaseModel):
    id: str | None = None
    home: str = "Home"
    away: str = "Away"
    home_score: int | None = None
    away_score: int | None = None
    status: MatchStatus = MatchStatus.UNKNOWN
    time: str = "TBA"
    venue: str | None = None
    league: str | None = None
    provider: str
    raw: dict[str, Any] = Field(default_factory=dict, repr=False)

    @field_validator("home", mode="before")
    @classmethod
    def _home_not_blank(cls, value: Any) -> str:
        text = str(value).strip() if value is not None else ""
        return text or "Home"

    @field_validator("away", mode="before")
    @classmethod
    def _away_not_blank(cls, value: Any) -> str:
        text = str(value).strip() if value is not None else ""
        return text or "Away"


class Outcome(BaseModel):
    name: str
    price: float | None = None


class Market(BaseModel):
    key: str
    label: str
    outcomes: list[Outcome] = Field(default_factory=list)


class Bookmaker(BaseModel):
    title: str
    last_update: str | None = None
    markets: list[Market] = Field(default_factory=list)


class OddsQuote(BaseModel):
    fixture_id: str | None = None
    home: str | None = None
    away: str | None = None
    bookmakers: list[Bookmaker] = Field(default_factory=list)
    provider: str
    raw: dict[str, Any] = Field(default_factory=dict, repr=False)


class StandingsRow(BaseModel):
    position: int = 0
    team_name: str
    played: int = 0
    won: int = 0
    drawn: int = 0
    lost: int = 0
    goal_diff: int = 0
    points: int = 0
    provider: str
    raw: dict[str, Any] = Field(default_factory=dict, repr=False)


class League(BaseModel):
    id: str
    name: str
    country: str | None = None
    provider: str
    raw: dict[str, Any] = Field(default_factory=dict, repr=False)


class ProviderHealthRecord(BaseModel):
    provider_name: str
    ok: bool
    message: str = ""
    timestamp: datetime
    status_code: int | None = None
    failures: int = 0
    disabled_until: datetime | None = None
    misconfigured: bool = False


CanonicalRecord = Match | OddsQuote | StandingsRow | League
