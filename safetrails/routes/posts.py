"""
posts.py — Travel post routes.

Routes:
  POST /api/v1/posts               — publish a post (classifies its location)
  GET  /api/v1/posts               — list published posts (paginated, searchable)
  GET  /api/v1/posts/{id}          — single post + author panel (profile, trust)
  POST /api/v1/posts/{id}/view     — count one view
  POST /api/v1/posts/{id}/like     — toggle the caller's like
  GET  /api/v1/posts/{id}/like     — has the caller liked this post?

Publishing and liking require a Bearer token; reads are public.

HOW PUBLISHING WORKS
────────────────────
1. PostCreate validates the body (location present, content ≥ 100 chars,
   tags normalised).
2. classify() turns the location into a LocationInsights snapshot.
3. The snapshot is flattened into the post document, which starts with
   views = likes = 0 and status = "published". author_name is copied from
   the caller's profile; the request body cannot set it.

The snapshot is never recomputed. The author trust score, on the other
hand, is rebuilt from the author's current posts every time a post is read.
"""

import logging
import re
from datetime import datetime, timezone
from math import ceil
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Request
from pymongo.errors import DuplicateKeyError

from safetrails.core.config import settings
from safetrails.core.database import get_db
from safetrails.core.rate_limit import limiter
from safetrails.core.security import CurrentUserId, OptionalUserId
from safetrails.models.post import (
    LikeStatus,
    PostCreate,
    PostDetail,
    PostListResponse,
    PostOut,
    ViewCount,
)
from safetrails.models.profile import DEFAULT_AUTHOR_NAME
from safetrails.models.trust import AuthorPanel
from safetrails.services.location_classifier import classify
from safetrails.services.post_store import (
    LIKES,
    POSTS,
    PUBLISHED,
    doc_to_post,
    docs_to_posts,
    find_author_posts,
    find_post,
    find_profile,
)
from safetrails.services.trust_aggregator import aggregate

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1/posts", tags=["posts"])


def _require_db(db):
    if db is None:
        raise HTTPException(status_code=503, detail="Database unavailable")
    return db


# ── Publish ───────────────────────────────────────────────────────────────────

@router.post("", response_model=PostOut, status_code=201)
@limiter.limit(settings.post_rate_limit)
async def create_post(
    request: Request,
    payload: PostCreate,
    user_id: CurrentUserId,
    db=Depends(get_db),
):
    """Publish a post with a location insights snapshot taken now."""
    _require_db(db)

    now = datetime.now(tz=timezone.utc)
    insights = classify(payload.location, now=now)
    profile = await find_profile(db, user_id)

    doc = {
        **payload.model_dump(),
        "author_name": profile.name if profile else DEFAULT_AUTHOR_NAME,
        "user_id":     user_id,
        "status":      PUBLISHED,
        "views":       0,
        "likes":       0,
        **insights.model_dump(),
        "created_at":  now,
    }
    result = await db[POSTS].insert_one(doc)
    doc["_id"] = result.inserted_id

    logger.info(
        "Post %s published by %s at %r (%s, safety %d)",
        result.inserted_id, user_id, payload.location,
        insights.safety_level, insights.safety_score,
    )
    return doc_to_post(doc)


# ── Read ──────────────────────────────────────────────────────────────────────

@router.get("", response_model=PostListResponse)
async def list_posts(
    page:         int           = Query(default=1, ge=1),
    limit:        int           = Query(default=10, ge=1, le=100),
    q:            Optional[str] = Query(default=None, max_length=200),
    safety_level: Optional[str] = Query(default=None),
    user_id:      Optional[str] = Query(default=None),
    db=Depends(get_db),
):
    """Return published posts, newest first, optionally searched or filtered."""
    if db is None:
        return PostListResponse(items=[], total=0, page=page, limit=limit, pages=0)

    query: dict = {"status": PUBLISHED}
    if safety_level and safety_level.upper() != "ALL":
        query["safety_level"] = safety_level.upper()
    if user_id:
        query["user_id"] = user_id
    if q and q.strip():
        pattern = re.escape(q.strip())
        query["$or"] = [
            {"title":    {"$regex": pattern, "$options": "i"}},
            {"location": {"$regex": pattern, "$options": "i"}},
            {"content":  {"$regex": pattern, "$options": "i"}},
        ]

    skip = (page - 1) * limit
    total = await db[POSTS].count_documents(query)
    cursor = db[POSTS].find(query).sort("created_at", -1).skip(skip).limit(limit)
    items = docs_to_posts([doc async for doc in cursor])

    pages = ceil(total / limit) if total else 0
    return PostListResponse(items=items, total=total, page=page, limit=limit, pages=pages)


@router.get("/{post_id}", response_model=PostDetail)
async def get_post(post_id: str, db=Depends(get_db)):
    """Retrieve a single post with its author's live trust summary."""
    _require_db(db)

    doc = await find_post(db, post_id)
    author_id = doc.get("user_id")
    trust = aggregate(await find_author_posts(db, author_id))
    profile = await find_profile(db, author_id)

    post = doc_to_post(doc)
    author = AuthorPanel(
        user_id=author_id,
        name=profile.name if profile else post.author_name,
        avatar=profile.avatar if profile else None,
        trust=trust,
    )
    return PostDetail(**post.model_dump(), author=author)


# ── Engagement ────────────────────────────────────────────────────────────────

@router.post("/{post_id}/view", response_model=ViewCount)
async def record_view(post_id: str, db=Depends(get_db)):
    """Increment the post's view counter by one."""
    _require_db(db)

    doc = await find_post(db, post_id)
    await db[POSTS].update_one({"_id": doc["_id"]}, {"$inc": {"views": 1}})
    doc = await find_post(db, post_id)
    return ViewCount(post_id=post_id, views=doc.get("views") or 0)


@router.post("/{post_id}/like", response_model=LikeStatus)
async def toggle_like(post_id: str, user_id: CurrentUserId, db=Depends(get_db)):
    """Like the post, or remove the caller's existing like."""
    _require_db(db)

    doc = await find_post(db, post_id)
    existing = await db[LIKES].find_one({"post_id": post_id, "user_id": user_id})

    # The counter only moves when this request's delete/insert changed the
    # likes collection; a concurrent toggle that lost the race leaves it alone.
    if existing:
        removed = await db[LIKES].delete_one({"_id": existing["_id"]})
        if removed.deleted_count == 1:
            await db[POSTS].update_one(
                {"_id": doc["_id"], "likes": {"$gt": 0}},
                {"$inc": {"likes": -1}},
            )
        liked = False
    else:
        try:
            await db[LIKES].insert_one({
                "post_id":    post_id,
                "user_id":    user_id,
                "created_at": datetime.now(tz=timezone.utc),
            })
        except DuplicateKeyError:
            logger.info("Like by %s on %s already recorded", user_id, post_id)
        else:
            await db[POSTS].update_one({"_id": doc["_id"]}, {"$inc": {"likes": 1}})
        liked = True

    doc = await find_post(db, post_id)
    return LikeStatus(post_id=post_id, liked=liked, likes=doc.get("likes") or 0)


@router.get("/{post_id}/like", response_model=LikeStatus)
async def get_like_status(post_id: str, user_id: OptionalUserId, db=Depends(get_db)):
    """Report whether the caller (if any) has liked the post."""
    _require_db(db)

    doc = await find_post(db, post_id)
    liked = False
    if user_id:
        liked = await db[LIKES].find_one({"post_id": post_id, "user_id": user_id}) is not None
    return LikeStatus(post_id=post_id, liked=liked, likes=doc.get("likes") or 0)
