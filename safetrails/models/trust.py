"""
trust.py — Author trust models.
"""

from typing import Optional

from pydantic import BaseModel, Field

from safetrails.models.profile import DEFAULT_AUTHOR_NAME


class AuthorTrustSummary(BaseModel):
    """Trust score plus the totals it was derived from. Never stored."""

    trust_score:  int = Field(default=50, ge=0, le=100)
    total_views:  int = 0
    total_likes:  int = 0
    safe_posts:   int = 0
    unsafe_posts: int = 0


class AuthorPanel(BaseModel):
    """Author block shown alongside a single post."""

    user_id: Optional[str] = None
    name:    str = DEFAULT_AUTHOR_NAME
    avatar:  Optional[str] = None
    trust:   AuthorTrustSummary = Field(default_factory=AuthorTrustSummary)
