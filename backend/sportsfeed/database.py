"""
backend/sportsfeed/database.py

Purpose:
    MongoDB connection bootstrap and index management for the shared
    provider state (health / circuit breaker, runtime toggles).

Dependencies:
    - motor.motor_asyncio
    - pymongo
    - sportsfeed.config
"""

import logging

from motor.motor_asyncio import AsyncIOMotorClient, AsyncIOMotorDatabase
from pymongo.errors import OperationFailure

from sportsfeed.config import settings

client: AsyncIOMotorClient = None
db: AsyncIOMotorDatabase = None

logger = logging.getLogger("sportsfeed.database")


async def connect_db() -> None:
    global client, db
    client = AsyncIOMotorClient(
        settings.MONGO_URI,
        maxPoolSize=25,
        minPoolSize=1,
    )
    db = client[settings.MONGO_DB]
    await _ensure_indexes()


async def close_db() -> None:
    global client, db
    if client:
        client.close()
    client = None
    db = None


async def get_db() -> AsyncIOMotorDatabase:
    return db


async def _ensure_indexes() -> None:
    """Create indexes on startup. Idempotent."""

    # ---- Provider health (advisory, expires on its own) ----
    try:
        await db.provider_health.create_index("expires_at", expireAfterSeconds=0)
    except OperationFailure as exc:
        logger.warning("Skipped provider_health TTL index: %s", exc)
    await db.provider_health.create_index("disabled_until", sparse=True)

    # ---- Provider toggles (operator overrides) ----
    await db.provider_toggles.create_index("updated_at")
