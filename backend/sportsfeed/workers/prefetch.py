"""
backend/sportsfeed/workers/prefetch.py

Purpose:
    Scheduled cache warm-up: fetch live matches for the configured popular
    leagues so user requests are served from the response cache.

Dependencies:
    - sportsfeed.services.sports_aggregator
    - sportsfeed.config
"""

import logging

from sportsfeed.config import settings
from sportsfeed.services.sports_aggregator import get_aggregator

logger = logging.getLogger("sportsfeed.workers.prefetch")


async def prefetch_live_matches() -> int:
    league_ids = settings.prefetch_league_ids()
    if not league_ids:
        return 0
    matches = await get_aggregator().get_all_live_matches(league_ids)
    logger.info("Prefetch: %d live matches across %d leagues", len(matches), len(league_ids))
    return len(matches)
