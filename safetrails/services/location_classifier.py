"""
location_classifier.py — Location Risk Classifier.

Turns a free-text location label into a LocationInsights snapshot:
terrain category, terrain and weather risk, and an overall safety score.
Called once per post at creation time and by GET /api/v1/location-insights.

HOW IT WORKS
────────────
1. Terrain: the label is matched against _TERRAIN_RULES in order
   (case-insensitive substring search). First match wins, so
   "Desert mountain valley" is mountain, not desert. No match → urban.
2. Terrain risk comes from _TERRAIN_RISK.
3. Weather comes from a WeatherSource. The default TerrainWeatherSource
   reports "Clear" and a risk derived from the terrain type; swap in a
   live feed by passing weather=... without touching the terrain rules.
4. safety_score = max(0, 100 - terrain_risk - weather_risk).
5. Every *_level is derived from its score through a threshold table.

USAGE
─────
    from safetrails.services.location_classifier import classify

    insights = classify("Spiti Valley trek")
    # insights.terrain_type  → "mountain"
    # insights.safety_score  → 0
    # insights.safety_level  → "RISKY"

The classifier never validates its input; callers reject a missing
location before calling it.
"""

from __future__ import annotations

import re
from datetime import datetime, timezone
from typing import Optional, Protocol

from safetrails.models.insights import (
    LocationInsights,
    RiskLevel,
    SafetyLevel,
    TerrainType,
    WeatherReading,
)

# ── Terrain rules (evaluated in order, first match wins) ──────────────────────

_TERRAIN_RULES: list[tuple[re.Pattern[str], TerrainType]] = [
    (re.compile(r"mountain|trek|himalaya|valley", re.IGNORECASE), "mountain"),
    (re.compile(r"desert",                        re.IGNORECASE), "desert"),
    (re.compile(r"beach|coast",                   re.IGNORECASE), "coastal"),
]
_DEFAULT_TERRAIN: TerrainType = "urban"

# ── Score tables ──────────────────────────────────────────────────────────────

_TERRAIN_RISK: dict[str, int] = {"mountain": 70, "desert": 60, "coastal": 30, "urban": 30}
_WEATHER_RISK: dict[str, int] = {"mountain": 60, "desert": 25, "coastal": 25, "urban": 25}

DEFAULT_WEATHER_CONDITION = "Clear"

# ── Level thresholds (strict greater-than, checked top-down) ──────────────────

_TERRAIN_RISK_THRESHOLDS: list[tuple[int, RiskLevel]] = [
    (65, "high"),
    (40, "medium"),
]

# Weather tops out at "medium" even for a substituted WeatherSource.
_WEATHER_RISK_THRESHOLDS: list[tuple[int, RiskLevel]] = [
    (55, "medium"),
]

_SAFETY_THRESHOLDS: list[tuple[int, SafetyLevel]] = [
    (70, "SAFE"),
    (40, "MODERATE"),
]


# ── Weather sources ───────────────────────────────────────────────────────────

class WeatherSource(Protocol):
    """Anything that can report current weather risk for a location."""

    def assess(self, location: str, terrain_type: TerrainType) -> WeatherReading: ...


class TerrainWeatherSource:
    """Placeholder source: fixed "Clear" condition, risk looked up by terrain."""

    def assess(self, location: str, terrain_type: TerrainType) -> WeatherReading:
        return WeatherReading(
            condition=DEFAULT_WEATHER_CONDITION,
            risk_score=_WEATHER_RISK[terrain_type],
        )


default_weather_source = TerrainWeatherSource()


# ── Pure scoring functions ────────────────────────────────────────────────────

def infer_terrain(location: str) -> TerrainType:
    """Return the terrain type of the first rule whose pattern occurs in *location*."""
    for pattern, terrain in _TERRAIN_RULES:
        if pattern.search(location):
            return terrain
    return _DEFAULT_TERRAIN


def terrain_risk_score(terrain_type: TerrainType) -> int:
    return _TERRAIN_RISK[terrain_type]


def terrain_risk_level(score: int) -> RiskLevel:
    """Map a terrain risk score → 'low' | 'medium' | 'high'."""
    for threshold, level in _TERRAIN_RISK_THRESHOLDS:
        if score > threshold:
            return level
    return "low"


def weather_risk_level(score: int) -> RiskLevel:
    """Map a weather risk score → 'low' | 'medium'."""
    for threshold, level in _WEATHER_RISK_THRESHOLDS:
        if score > threshold:
            return level
    return "low"


def compute_safety_score(terrain_risk: int, weather_risk: int) -> int:
    """Overall safety, floored at 0."""
    return max(0, 100 - terrain_risk - weather_risk)


def safety_level(score: int) -> SafetyLevel:
    """Map a safety score → 'SAFE' | 'MODERATE' | 'RISKY'."""
    for threshold, level in _SAFETY_THRESHOLDS:
        if score > threshold:
            return level
    return "RISKY"


# ── Public entry point ────────────────────────────────────────────────────────

def classify(
    location: str,
    now: Optional[datetime] = None,
    weather: Optional[WeatherSource] = None,
) -> LocationInsights:
    """
    Build the LocationInsights snapshot for *location*.

    *now* becomes calculated_at (defaults to the current UTC time) and
    *weather* overrides the terrain-derived weather placeholder. Both are
    injectable so the result is deterministic in tests.
    """
    if now is None:
        now = datetime.now(tz=timezone.utc)
    source = weather or default_weather_source

    terrain = infer_terrain(location)
    terrain_score = terrain_risk_score(terrain)

    reading = source.assess(location, terrain)
    weather_score = max(0, min(100, int(reading.risk_score)))

    score = compute_safety_score(terrain_score, weather_score)

    return LocationInsights(
        weather_condition=reading.condition,
        weather_risk_score=weather_score,
        weather_risk_level=weather_risk_level(weather_score),
        terrain_type=terrain,
        terrain_risk_score=terrain_score,
        terrain_risk_level=terrain_risk_level(terrain_score),
        safety_score=score,
        safety_level=safety_level(score),
        calculated_at=now,
    )
