"""
backend/sportsfeed/services/mappers/__init__.py

Purpose:
    Per-provider mapping modules for the response normalizer.
"""

from sportsfeed.services.mappers import api_sports, demo, espn, football_data, openligadb, sportmonks

__all__ = [
    "api_sports",
    "demo",
    "espn",
    "football_data",
    "openligadb",
    "sportmonks",
]
