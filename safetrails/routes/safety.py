"""
safety.py — Location safety board.

Routes:
  GET /api/v1/safety  — one row per location, safest first

Each row rolls up every published post for that location label (matched
case-insensitively): how many posts, their average safety score, and the
terrain / weather levels of the most recent one. The row's safety_level is
derived from the average with the same thresholds the classifier uses.
"""

import logging

from fastapi import APIRouter, Depends, Query

from safetrails.core.database import get_db
from safetrails.models.post import LocationSafety
from safetrails.services.location_classifier import safety_level
from safetrails.services.post_store import POSTS, PUBLISHED

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1/safety", tags=["safety"])


def build_safety_board(docs: list[dict]) -> list[LocationSafety]:
    """
    Group post documents by location and rank the groups by average safety.

    *docs* must be ordered newest first so the first document seen for a
    location supplies its latest terrain / weather levels.
    """
    groups: dict[str, dict] = {}
    for doc in docs:
        label = (doc.get("location") or "").strip()
        score = doc.get("safety_score")
        if not label or not isinstance(score, int):
            continue
        key = label.lower()
        if key not in groups:
            groups[key] = {"latest": doc, "label": label, "scores": []}
        groups[key]["scores"].append(score)

    board = []
    for group in groups.values():
        latest = group["latest"]
        average = round(sum(group["scores"]) / len(group["scores"]))
        board.append(LocationSafety(
            location=group["label"],
            post_count=len(group["scores"]),
            average_safety_score=average,
            safety_level=safety_level(average),
            terrain_type=latest.get("terrain_type"),
            terrain_risk_level=latest.get("terrain_risk_level"),
            weather_risk_level=latest.get("weather_risk_level"),
        ))

    board.sort(key=lambda row: row.average_safety_score, reverse=True)
    return board


@router.get("", response_model=list[LocationSafety])
async def get_safety_board(
    limit: int = Query(default=50, ge=1, le=200),
    db=Depends(get_db),
):
    """Return the per-location safety rollup, safest locations first."""
    if db is None:
        return []

    cursor = db[POSTS].find({"status": PUBLISHED}).sort("created_at", -1)
    try:
        docs = [doc async for doc in cursor]
    except Exception as exc:
        logger.warning("Safety board query failed: %s", exc)
        return []

    return build_safety_board(docs)[:limit]
