"""
authors.py — Author profile routes.

Routes:
  GET /api/v1/authors/{user_id}/posts    — the author's published posts
  GET /api/v1/authors/{user_id}/trust    — live AuthorTrustSummary
  GET /api/v1/authors/{user_id}/profile  — display name, bio, avatar
  PUT /api/v1/authors/{user_id}/profile  — create or replace own profile

The trust summary is recomputed from the author's current posts on every
request; there is no stored trust score to keep in sync.

Only the token's own user may write a profile (403 otherwise). Saving a
profile does not rename existing posts: their author_name is the name at
publish time, while the post detail author panel shows the current name.
"""

import logging
from datetime import datetime, timezone

from fastapi import APIRouter, Depends, HTTPException

from safetrails.core.database import get_db
from safetrails.core.security import CurrentUserId
from safetrails.models.post import PostOut
from safetrails.models.profile import AuthorProfile, ProfileUpdate
from safetrails.models.trust import AuthorTrustSummary
from safetrails.services.post_store import (
    PROFILES,
    docs_to_posts,
    find_author_posts,
    find_profile,
)
from safetrails.services.trust_aggregator import aggregate

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1/authors", tags=["authors"])


@router.get("/{user_id}/posts", response_model=list[PostOut])
async def list_author_posts(user_id: str, db=Depends(get_db)):
    """Published posts by *user_id*, newest first."""
    return docs_to_posts(await find_author_posts(db, user_id))


@router.get("/{user_id}/trust", response_model=AuthorTrustSummary)
async def get_author_trust(user_id: str, db=Depends(get_db)):
    """Trust score and supporting totals for *user_id*."""
    posts = await find_author_posts(db, user_id)
    summary = aggregate(posts)
    logger.debug("Trust for %s over %d posts: %d", user_id, len(posts), summary.trust_score)
    return summary


@router.get("/{user_id}/profile", response_model=AuthorProfile)
async def get_author_profile(user_id: str, db=Depends(get_db)):
    """Stored profile, or the default (Anonymous, no avatar) when none exists."""
    return await find_profile(db, user_id) or AuthorProfile(user_id=user_id)


@router.put("/{user_id}/profile", response_model=AuthorProfile)
async def put_author_profile(
    user_id: str,
    payload: ProfileUpdate,
    caller_id: CurrentUserId,
    db=Depends(get_db),
):
    if caller_id != user_id:
        raise HTTPException(status_code=403, detail="You can only edit your own profile")
    if db is None:
        raise HTTPException(status_code=503, detail="Database unavailable")

    now = datetime.now(tz=timezone.utc)
    await db[PROFILES].update_one(
        {"user_id": user_id},
        {"$set": {**payload.model_dump(), "updated_at": now}},
        upsert=True,
    )
    logger.info("Profile saved for %s", user_id)
    return AuthorProfile(user_id=user_id, **payload.model_dump(), updated_at=now)
