"""
backend/sportsfeed/services/normalizer.py

Purpose:
    Tagged dispatch from RawRecord to canonical record. Every record carries
    the dialect (ProviderTag) it was fetched in, so the mapping is selected
    from a closed table instead of guessed from the payload shape.

Dependencies:
    - sportsfeed.providers.base
    - sportsfeed.services.mappers
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Iterable

from sportsfeed.models.canonical import CanonicalRecord
from sportsfeed.providers.base import ProviderTag, RawRecord, RecordKind
from sportsfeed.services.mappers import api_sports, demo, espn, football_data, openligadb, sportmonks

logger = logging.getLogger("sportsfeed.normalizer")

Mapper = Callable[[dict[str, Any], str], CanonicalRecord]

_MAPPERS: dict[tuple[ProviderTag, RecordKind], Mapper] = {
    (ProviderTag.FOOTBALL_DATA, RecordKind.MATCH): football_data.map_match,
    (ProviderTag.FOOTBALL_DATA, RecordKind.STANDINGS): football_data.map_standings,
    (ProviderTag.FOOTBALL_DATA, RecordKind.LEAGUE): football_data.map_league,
    (ProviderTag.SPORTMONKS, RecordKind.MATCH): sportmonks.map_match,
    (ProviderTag.SPORTMONKS, RecordKind.ODDS): sportmonks.map_odds,
    (ProviderTag.SPORTMONKS, RecordKind.STANDINGS): sportmonks.map_standings,
    (ProviderTag.SPORTMONKS, RecordKind.LEAGUE): sportmonks.map_league,
    (ProviderTag.API_SPORTS, RecordKind.MATCH): api_sports.map_match,
    (ProviderTag.API_SPORTS, RecordKind.ODDS): api_sports.map_odds,
    (ProviderTag.API_SPORTS, RecordKind.STANDINGS): api_sports.map_standings,
    (ProviderTag.API_SPORTS, RecordKind.LEAGUE): api_sports.map_league,
    (ProviderTag.OPENLIGADB, RecordKind.MATCH): openligadb.map_match,
    (ProviderTag.OPENLIGADB, RecordKind.STANDINGS): openligadb.map_standings,
    (ProviderTag.ESPN, RecordKind.MATCH): espn.map_match,
    (ProviderTag.ESPN, RecordKind.STANDINGS): espn.map_standings,
    (ProviderTag.DEMO, RecordKind.MATCH): demo.map_match,
    (ProviderTag.DEMO, RecordKind.ODDS): demo.map_odds,
    (ProviderTag.DEMO, RecordKind.STANDINGS): demo.map_standings,
}


def supports(tag: ProviderTag, kind: RecordKind) -> bool:
    return (tag, kind) in _MAPPERS


def normalize(record: RawRecord) -> CanonicalRecord:
    """Map one tagged raw record. Pure: same input, same output."""
    mapper = _MAPPERS.get((record.tag, record.kind))
    if mapper is None:
        raise LookupError(f"No mapping for {record.tag.value}/{record.kind.value}")
    payload = record.payload if isinstance(record.payload, dict) else {}
    return mapper(payload, record.source)


def normalize_many(records: Iterable[RawRecord]) -> list[CanonicalRecord]:
    """Normalize a batch; a record whose mapping fails is logged and dropped."""
    out: list[CanonicalRecord] = []
    for record in records:
        try:
            out.append(normalize(record))
        except Exception:
            logger.warning(
                "Dropping unmappable %s record from %s",
                record.kind.value, record.source, exc_info=True,
            )
    return out
