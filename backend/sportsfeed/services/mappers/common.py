"""
backend/sportsfeed/services/mappers/common.py

Purpose:
    Guarded field access shared by the per-provider mappers. Upstream
    payloads are untyped and drift between API versions, so every read goes
    through these helpers and falls back to a documented default instead of
    raising.
"""

from __future__ import annotations

import math
from datetime import datetime, timezone
from typing import Any

from sportsfeed.utils import ensure_utc

# Order matters: " vs. " before " vs ", and " - " last because team names
# such as "Saint-Etienne" contain a bare hyphen.
_TITLE_SEPARATORS = (" vs. ", " vs ", " v ", " - ")
_AWAY_AT_HOME = " at "


def dig(obj: Any, *path: str | int, default: Any = None) -> Any:
    """Walk dict keys / list indexes; any miss returns `default`."""
    current = obj
    for step in path:
        if isinstance(step, int):
            if not isinstance(current, list) or not -len(current) <= step < len(current):
                return default
            current = current[step]
        else:
            if not isinstance(current, dict):
                return default
            current = current.get(step)
        if current is None:
            return default
    return current


def as_str(value: Any) -> str | None:
    if value is None or isinstance(value, (dict, list)):
        return None
    text = str(value).strip()
    return text or None


def as_optional_int(value: Any) -> int | None:
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return int(value) if math.isfinite(value) else None
    text = str(value).strip()
    if not text:
        return None
    try:
        return int(float(text))
    except ValueError:
        return None


def as_int(value: Any, default: int = 0) -> int:
    parsed = as_optional_int(value)
    return default if parsed is None else parsed


def to_price(value: Any) -> float | None:
    """Decimal odd as float, or None. Placeholders like "-" or "N/A" map to None."""
    if value is None or isinstance(value, bool):
        return None
    try:
        price = float(str(value).strip()) if not isinstance(value, (int, float)) else float(value)
    except ValueError:
        return None
    if not math.isfinite(price) or price <= 0:
        return None
    return price


def split_title(title: Any) -> tuple[str | None, str | None]:
    """Parse "Home vs Away" style titles. ESPN's "Away at Home" is swapped."""
    text = as_str(title)
    if not text:
        return None, None
    lowered = text.lower()
    for sep in _TITLE_SEPARATORS:
        idx = lowered.find(sep)
        if idx > 0:
            return as_str(text[:idx]), as_str(text[idx + len(sep):])
    idx = lowered.find(_AWAY_AT_HOME)
    if idx > 0:
        return as_str(text[idx + len(_AWAY_AT_HOME):]), as_str(text[:idx])
    return None, None


def pick_teams(home: Any, away: Any, *titles: Any) -> tuple[str | None, str | None]:
    """Structured names first, then the first title that parses."""
    home_name, away_name = as_str(home), as_str(away)
    if home_name and away_name:
        return home_name, away_name
    for title in titles:
        parsed_home, parsed_away = split_title(title)
        if parsed_home or parsed_away:
            return home_name or parsed_home, away_name or parsed_away
    return home_name, away_name


def minute_display(minute: Any) -> str | None:
    value = as_optional_int(minute)
    return f"{value}'" if value is not None and value >= 0 else None


def kickoff_display(value: Any) -> str | None:
    """ISO timestamp -> "YYYY-MM-DD HH:MM UTC"; unparseable input -> None."""
    text = as_str(value)
    if not text:
        return None
    try:
        parsed = datetime.fromisoformat(text.replace("Z", "+00:00"))
    except ValueError:
        return None
    return ensure_utc(parsed).astimezone(timezone.utc).strftime("%Y-%m-%d %H:%M UTC")


def first_text(*values: Any, default: str | None = None) -> str | None:
    for value in values:
        text = as_str(value)
        if text:
            return text
    return default
