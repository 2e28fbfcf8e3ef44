"""
MongoDB access for SafeTrails (Motor, async).

Collections:
  posts     — published travel posts, location insights stored inline
  likes     — one document per (post_id, user_id); unique index
  profiles  — one display profile per user_id; unique index

Lifecycle: main.lifespan calls connect_to_mongo() on startup, which pings
the server and ensures the indexes below, and close_mongo_connection() on
shutdown. Routes receive the database through the get_db() dependency and
must treat None as "database down".
"""

import logging
import re

import certifi
from motor.motor_asyncio import AsyncIOMotorClient, AsyncIOMotorDatabase
from pymongo import ASCENDING, DESCENDING

from safetrails.core.config import settings

logger = logging.getLogger(__name__)

# (collection, keys, options). The like toggle relies on the unique likes index.
INDEXES: list[tuple[str, list[tuple[str, int]], dict]] = [
    ("posts",    [("status", ASCENDING), ("created_at", DESCENDING)], {}),
    ("posts",    [("user_id", ASCENDING), ("status", ASCENDING)],     {}),
    ("posts",    [("safety_level", ASCENDING)],                      {}),
    ("likes",    [("post_id", ASCENDING), ("user_id", ASCENDING)],   {"unique": True}),
    ("profiles", [("user_id", ASCENDING)],                           {"unique": True}),
]


class DatabaseClient:
    """Connected client and selected database; both None while disconnected."""

    client: AsyncIOMotorClient | None = None
    db: AsyncIOMotorDatabase | None = None


db_client = DatabaseClient()


async def ensure_indexes(db) -> None:
    """Create every index in INDEXES (no-op for indexes that already exist)."""
    for collection, keys, options in INDEXES:
        await db[collection].create_index(keys, **options)
    logger.info("Ensured %d indexes", len(INDEXES))


async def connect_to_mongo() -> None:
    """
    Open the client, ping it and ensure indexes.

    Never raises: on failure the service keeps running with db_client.db
    set to None, reads degrade to empty results and writes answer 503.
    """
    logger.info("Connecting to MongoDB at %s", _redact_uri(settings.mongo_uri))
    try:
        client = AsyncIOMotorClient(
            settings.mongo_uri,
            serverSelectionTimeoutMS=5000,
            tlsCAFile=certifi.where(),
        )
        await client.admin.command("ping")
    except Exception as exc:
        logger.warning("MongoDB unavailable at startup, running without a database: %s", exc)
        db_client.client = None
        db_client.db = None
        return

    db_client.client = client
    db_client.db = client[settings.mongo_db_name]
    logger.info("MongoDB connected (db: %s)", settings.mongo_db_name)

    try:
        await ensure_indexes(db_client.db)
    except Exception as exc:
        logger.warning("Index creation failed: %s", exc)


async def close_mongo_connection() -> None:
    if db_client.client is not None:
        db_client.client.close()
        db_client.client = None
        db_client.db = None
        logger.info("MongoDB connection closed")


def get_db() -> AsyncIOMotorDatabase | None:
    """FastAPI dependency: the current database, or None when it is down."""
    return db_client.db


def _redact_uri(uri: str) -> str:
    """Replace user:password in a connection URI before it is logged."""
    return re.sub(r"://[^:]+:[^@]+@", "://<redacted>@", uri)
