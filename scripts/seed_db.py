#!/usr/bin/env python3
"""
seed_db.py — Populate MongoDB with sample travel posts for local development.

Inserts:
  - A profile for each of two demo authors
  - A handful of published posts by them, each classified with the real
    location classifier
  - The indexes the API queries rely on

Usage:
    python scripts/seed_db.py

Requires the package installed (pip install -e .) and MongoDB running
locally (or MONGO_URI / MONGO_DB_NAME set).

Safe to re-run: deletes seed posts, their likes and the seed profiles
first, then re-inserts.
"""

import asyncio
from datetime import datetime, timedelta, timezone

from motor.motor_asyncio import AsyncIOMotorClient

from safetrails.core.config import settings
from safetrails.core.database import ensure_indexes
from safetrails.services.location_classifier import classify

SEED_AUTHOR_PREFIX = "seed-author-"

_FILLER = (
    " We set off before sunrise, kept an eye on the sky, carried more water "
    "than we thought we needed and checked in with locals before every leg."
)

SEED_AUTHORS = {"1": "Asha", "2": "Tomas"}

# (author suffix, title, location, days ago, views, likes, tags)
SAMPLE_POSTS = [
    ("1", "Ten days above the clouds", "Spiti Valley trek",    3,   840, 12, ["himalaya", "trek"]),
    ("1", "Slow mornings in Panjim",   "Goa Beach",            45,  310, 4,  ["beach"]),
    ("1", "Camel caravan at dusk",     "Thar Desert crossing", 90,  120, 2,  ["desert"]),
    ("2", "Tram lines and bakeries",   "Lisbon old town",      10,  95,  1,  ["city", "food"]),
    ("2", "Cliffs and lighthouses",    "Algarve coast",        200, 40,  0,  ["coast"]),
]


def _build_profiles(now: datetime) -> list[dict]:
    return [
        {"user_id": SEED_AUTHOR_PREFIX + suffix, "name": name, "bio": None, "avatar": None, "updated_at": now}
        for suffix, name in SEED_AUTHORS.items()
    ]


def _build_docs(now: datetime) -> list[dict]:
    docs = []
    for suffix, title, location, days_ago, views, likes, tags in SAMPLE_POSTS:
        created_at = now - timedelta(days=days_ago)
        insights = classify(location, now=created_at)
        docs.append({
            "user_id":     SEED_AUTHOR_PREFIX + suffix,
            "author_name": SEED_AUTHORS[suffix],
            "title":       title,
            "location":    location,
            "content":     f"{title} in {location}." + _FILLER,
            "img_url":     None,
            "tags":        tags,
            "status":      "published",
            "views":       views,
            "likes":       likes,
            **insights.model_dump(),
            "created_at":  created_at,
        })
    return docs


async def clear_seed_data(db) -> tuple[int, int, int]:
    """Delete seed posts, every like on them and the seed profiles."""
    seed_filter = {"user_id": {"$regex": f"^{SEED_AUTHOR_PREFIX}"}}
    old_ids = [str(doc["_id"]) async for doc in db["posts"].find(seed_filter, {"_id": 1})]
    likes = await db["likes"].delete_many({"post_id": {"$in": old_ids}})
    posts = await db["posts"].delete_many(seed_filter)
    profiles = await db["profiles"].delete_many(seed_filter)
    return posts.deleted_count, likes.deleted_count, profiles.deleted_count


async def seed() -> None:
    print("Connecting to MongoDB...")
    client = AsyncIOMotorClient(settings.mongo_uri)
    db = client[settings.mongo_db_name]

    try:
        await client.admin.command("ping")
        print("Connected.")

        # ─── Clean up previous seed data ──────────────────────────────────────
        posts, likes, profiles = await clear_seed_data(db)
        print(f"Removed {posts} seed posts, {likes} likes and {profiles} profiles.")

        # ─── Insert sample data ───────────────────────────────────────────────
        now = datetime.now(tz=timezone.utc)
        await db.profiles.insert_many(_build_profiles(now))
        result = await db.posts.insert_many(_build_docs(now))
        print(f"Inserted {len(result.inserted_ids)} posts.")

        await ensure_indexes(db)
        print("Indexes ensured.")

        print("\nSeed complete! Posts per safety level:")
        pipeline = [{"$group": {"_id": "$safety_level", "count": {"$sum": 1}}}]
        async for doc in db.posts.aggregate(pipeline):
            print(f"  {doc['_id']}: {doc['count']} posts")

    finally:
        client.close()


if __name__ == "__main__":
    asyncio.run(seed())
