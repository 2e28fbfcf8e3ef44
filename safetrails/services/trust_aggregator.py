"""
trust_aggregator.py — Author Trust Aggregator.

Derives an author's 0–100 trust score from the live set of their posts.
Nothing is cached or stored: the summary is rebuilt from scratch on every
call, so a new like or a new post is reflected immediately.

RULES
─────
  Everyone starts at 50, then:
    + 1 per 100 total views          (max +20)
    + 2 per like                     (max +20)
    + 5 per SAFE post                (max +20)
    -10 per UNSAFE post              (no floor until the final clamp)
    + 5 once if any post is younger than 30 days
  Final score is clamped to [0, 100].

Posts may be raw MongoDB documents (dicts) or any object with views,
likes, safety_level and created_at attributes. Missing or malformed
numbers count as 0 and unreadable timestamps are never "recent", so the
function never raises on bad input.

TESTING
────────
    pytest tests/test_trust_aggregator.py -v
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from datetime import datetime, timedelta, timezone
from typing import Any, Optional

from safetrails.models.trust import AuthorTrustSummary

# ── Weights ───────────────────────────────────────────────────────────────────

BASELINE_TRUST      = 50
_VIEWS_PER_POINT    = 100
_MAX_VIEWS_BONUS    = 20
_POINTS_PER_LIKE    = 2
_MAX_LIKES_BONUS    = 20
_POINTS_PER_SAFE    = 5
_MAX_SAFE_BONUS     = 20
_UNSAFE_PENALTY     = 10
_RECENCY_BONUS      = 5
_RECENCY_WINDOW     = timedelta(days=30)

_SAFE_LEVEL   = "SAFE"
_UNSAFE_LEVEL = "UNSAFE"


# ── Field access helpers ──────────────────────────────────────────────────────

def _field(post: Any, name: str) -> Any:
    if isinstance(post, Mapping):
        return post.get(name)
    return getattr(post, name, None)


def _count(value: Any) -> int:
    """Coerce a stored counter to a non-negative int (bad values → 0)."""
    if value is None or isinstance(value, bool):
        return 0
    try:
        return max(0, int(value))
    except (TypeError, ValueError, OverflowError):
        return 0


def _as_utc(value: Any) -> Optional[datetime]:
    """Accept a datetime or ISO-8601 string; naive values are taken as UTC."""
    if isinstance(value, str):
        try:
            value = datetime.fromisoformat(value.replace("Z", "+00:00"))
        except ValueError:
            return None
    if not isinstance(value, datetime):
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def is_recent(created_at: Any, now: datetime) -> bool:
    """True when created_at falls strictly inside the trailing 30-day window."""
    when = _as_utc(created_at)
    if when is None:
        return False
    return _as_utc(now) - when < _RECENCY_WINDOW


# ── Public entry point ────────────────────────────────────────────────────────

def aggregate(posts: Iterable[Any], now: Optional[datetime] = None) -> AuthorTrustSummary:
    """
    Compute the AuthorTrustSummary for one author's posts.

    *now* anchors the recency window (defaults to the current UTC time).
    """
    posts = list(posts or [])
    if not posts:
        return AuthorTrustSummary(trust_score=BASELINE_TRUST)

    if now is None:
        now = datetime.now(tz=timezone.utc)

    total_views  = sum(_count(_field(p, "views")) for p in posts)
    total_likes  = sum(_count(_field(p, "likes")) for p in posts)
    safe_posts   = sum(1 for p in posts if _field(p, "safety_level") == _SAFE_LEVEL)
    unsafe_posts = sum(1 for p in posts if _field(p, "safety_level") == _UNSAFE_LEVEL)

    trust = BASELINE_TRUST

    # Rewards
    trust += min(total_views // _VIEWS_PER_POINT, _MAX_VIEWS_BONUS)
    trust += min(total_likes * _POINTS_PER_LIKE, _MAX_LIKES_BONUS)
    trust += min(safe_posts * _POINTS_PER_SAFE, _MAX_SAFE_BONUS)

    # Penalties
    trust -= unsafe_posts * _UNSAFE_PENALTY

    # Activity bonus, applied once
    if any(is_recent(_field(p, "created_at"), now) for p in posts):
        trust += _RECENCY_BONUS

    return AuthorTrustSummary(
        trust_score=max(0, min(100, trust)),
        total_views=total_views,
        total_likes=total_likes,
        safe_posts=safe_posts,
        unsafe_posts=unsafe_posts,
    )
