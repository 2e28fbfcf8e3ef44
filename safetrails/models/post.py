"""
post.py — Pydantic schemas for travel posts, likes and the safety board.

PostCreate        — what the client sends to publish
PostOut           — stored post as returned by the API (insights flattened)
PostDetail        — PostOut plus the author trust panel
PostListResponse  — paginated listing
LikeStatus        — result of a like toggle / lookup
LocationSafety    — one row of the per-location safety board
"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field, field_validator

from safetrails.models.insights import RiskLevel, SafetyLevel, TerrainType
from safetrails.models.profile import DEFAULT_AUTHOR_NAME
from safetrails.models.trust import AuthorPanel

MIN_CONTENT_LENGTH = 100


# ── Request ───────────────────────────────────────────────────────────────────

class PostCreate(BaseModel):
    """Payload for POST /api/v1/posts."""

    title:       str = Field(..., min_length=1, max_length=200)
    location:    str = Field(..., max_length=200)
    content:     str = Field(..., max_length=20_000)
    img_url:     Optional[str] = Field(default=None, max_length=2000)
    tags:        list[str] = Field(default_factory=list, max_length=20)

    @field_validator("location")
    @classmethod
    def _location_required(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("Location is required")
        return value

    @field_validator("content")
    @classmethod
    def _content_long_enough(cls, value: str) -> str:
        if len(value.strip()) < MIN_CONTENT_LENGTH:
            raise ValueError(f"Post content must be at least {MIN_CONTENT_LENGTH} characters.")
        return value

    @field_validator("tags")
    @classmethod
    def _normalise_tags(cls, value: list[str]) -> list[str]:
        # trimmed, lower-cased, first occurrence wins
        seen: list[str] = []
        for tag in value:
            tag = tag.strip().lower()
            if tag and tag not in seen:
                seen.append(tag)
        return seen


# ── Stored post ───────────────────────────────────────────────────────────────

class PostOut(BaseModel):
    """A published post with its location insights snapshot."""

    id:          str
    user_id:     Optional[str] = None
    author_name: str = DEFAULT_AUTHOR_NAME
    title:       str
    location:    str
    content:     str
    img_url:     Optional[str] = None
    tags:        list[str] = Field(default_factory=list)
    status:      str = "published"
    views:       int = 0
    likes:       int = 0

    weather_condition:  Optional[str] = None
    weather_risk_score: Optional[int] = None
    weather_risk_level: Optional[RiskLevel] = None
    terrain_type:       Optional[TerrainType] = None
    terrain_risk_score: Optional[int] = None
    terrain_risk_level: Optional[RiskLevel] = None
    safety_score:       Optional[int] = None
    safety_level:       Optional[str] = None
    calculated_at:      Optional[datetime] = None

    created_at: datetime


class PostDetail(PostOut):
    author: AuthorPanel


class PostListResponse(BaseModel):
    items: list[PostOut]
    total: int
    page:  int
    limit: int
    pages: int


# ── Likes / views ─────────────────────────────────────────────────────────────

class LikeStatus(BaseModel):
    post_id: str
    liked:   bool
    likes:   int


class ViewCount(BaseModel):
    post_id: str
    views:   int


# ── Safety board ──────────────────────────────────────────────────────────────

class LocationSafety(BaseModel):
    """Rollup of every published post for one location label."""

    location:             str
    post_count:           int
    average_safety_score: int = Field(ge=0, le=100)
    safety_level:         SafetyLevel
    terrain_type:         Optional[TerrainType] = None
    terrain_risk_level:   Optional[RiskLevel] = None
    weather_risk_level:   Optional[RiskLevel] = None
