"""
post_store.py — MongoDB document helpers shared by the post, author and
safety routes.

Posts are stored flat: the nine LocationInsights fields sit next to the
post's own fields so listing and filtering by safety_level need no joins.
"""

import logging
from datetime import datetime, timezone
from typing import Optional

from bson import ObjectId
from bson.errors import InvalidId
from fastapi import HTTPException

from safetrails.models.post import PostOut
from safetrails.models.profile import DEFAULT_AUTHOR_NAME, AuthorProfile

logger = logging.getLogger(__name__)

POSTS = "posts"
LIKES = "likes"
PROFILES = "profiles"
PUBLISHED = "published"


def doc_to_post(doc: dict) -> PostOut:
    """Convert a raw MongoDB document to a PostOut model."""
    return PostOut(
        id=str(doc["_id"]),
        user_id=doc.get("user_id"),
        author_name=doc.get("author_name") or DEFAULT_AUTHOR_NAME,
        title=doc.get("title", ""),
        location=doc.get("location", ""),
        content=doc.get("content", ""),
        img_url=doc.get("img_url"),
        tags=doc.get("tags") or [],
        status=doc.get("status", PUBLISHED),
        views=doc.get("views") or 0,
        likes=doc.get("likes") or 0,
        weather_condition=doc.get("weather_condition"),
        weather_risk_score=doc.get("weather_risk_score"),
        weather_risk_level=doc.get("weather_risk_level"),
        terrain_type=doc.get("terrain_type"),
        terrain_risk_score=doc.get("terrain_risk_score"),
        terrain_risk_level=doc.get("terrain_risk_level"),
        safety_score=doc.get("safety_score"),
        safety_level=doc.get("safety_level"),
        calculated_at=doc.get("calculated_at"),
        created_at=doc.get("created_at", datetime.now(tz=timezone.utc)),
    )


def validate_oid(post_id: str) -> ObjectId:
    try:
        return ObjectId(post_id)
    except (InvalidId, TypeError):
        raise HTTPException(status_code=422, detail="Invalid post ID format")


async def find_post(db, post_id: str) -> dict:
    """Fetch one post document or raise 404."""
    doc = await db[POSTS].find_one({"_id": validate_oid(post_id)})
    if not doc:
        raise HTTPException(status_code=404, detail="Post not found")
    return doc


async def find_author_posts(db, user_id: Optional[str]) -> list[dict]:
    """All published posts by *user_id*, newest first. Empty when DB is down."""
    if db is None or not user_id:
        return []
    cursor = db[POSTS].find({"user_id": user_id, "status": PUBLISHED}).sort("created_at", -1)
    return [doc async for doc in cursor]


def docs_to_posts(docs: list[dict]) -> list[PostOut]:
    """Convert documents, skipping any that no longer fit the schema."""
    items = []
    for doc in docs:
        try:
            items.append(doc_to_post(doc))
        except Exception as exc:
            logger.warning("Skipping malformed post doc: %s", exc)
    return items


async def find_profile(db, user_id: Optional[str]) -> Optional[AuthorProfile]:
    """The stored profile for *user_id*; None if there is none or the DB is down."""
    if db is None or not user_id:
        return None
    doc = await db[PROFILES].find_one({"user_id": user_id})
    if not doc:
        return None
    return AuthorProfile(
        user_id=user_id,
        name=doc.get("name") or DEFAULT_AUTHOR_NAME,
        bio=doc.get("bio"),
        avatar=doc.get("avatar"),
        updated_at=doc.get("updated_at"),
    )
