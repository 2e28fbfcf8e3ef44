"""
location_insights.py — Location safety lookup.

Routes:
  GET /api/v1/location-insights?location=...  — classify a location label

The web client calls this while the user fills in the create-post form, to
preview the safety badge before publishing. POST /api/v1/posts runs the
same classifier server-side, so the preview and the stored snapshot agree.

A missing, empty or whitespace-only location is a client error:
  400  {"error": "Location is required"}
Any other string is classified, whatever its length.

Manual test:
  curl "http://localhost:8000/api/v1/location-insights?location=Spiti%20Valley%20trek"
"""

import logging
from typing import Optional

from fastapi import APIRouter, Query, Request
from fastapi.responses import JSONResponse

from safetrails.core.config import settings
from safetrails.core.rate_limit import limiter
from safetrails.models.insights import LocationInsights
from safetrails.services.location_classifier import classify

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1/location-insights", tags=["insights"])

LOCATION_REQUIRED = "Location is required"


@router.get(
    "",
    response_model=LocationInsights,
    responses={400: {"description": LOCATION_REQUIRED}},
)
@limiter.limit(settings.insights_rate_limit)
async def get_location_insights(
    request: Request,
    location: Optional[str] = Query(default=None, description="Free-text location label"),
):
    """Return terrain, weather and overall safety scores for *location*."""
    if not location or not location.strip():
        return JSONResponse(status_code=400, content={"error": LOCATION_REQUIRED})

    insights = classify(location)
    logger.debug(
        "Classified %r → %s (safety %d, %s)",
        location, insights.terrain_type, insights.safety_score, insights.safety_level,
    )
    return insights
