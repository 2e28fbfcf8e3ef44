"""
insights.py — Pydantic models for location safety insights.

LocationInsights is the classifier's output. The same nine fields are
flattened into every stored post document and returned verbatim by
GET /api/v1/location-insights.
"""

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field


# ── Enumerations ──────────────────────────────────────────────────────────────

TerrainType = Literal["urban", "mountain", "desert", "coastal"]
RiskLevel = Literal["low", "medium", "high"]
SafetyLevel = Literal["SAFE", "MODERATE", "RISKY"]


class WeatherReading(BaseModel):
    """What a weather source reports for one location."""

    condition: str
    risk_score: int


class LocationInsights(BaseModel):
    """Risk breakdown for a single location, frozen once computed."""

    model_config = ConfigDict(frozen=True)

    weather_condition:  str
    weather_risk_score: int = Field(ge=0, le=100)
    weather_risk_level: RiskLevel

    terrain_type:       TerrainType
    terrain_risk_score: int = Field(ge=0, le=100)
    terrain_risk_level: RiskLevel

    safety_score:       int = Field(ge=0, le=100)
    safety_level:       SafetyLevel

    calculated_at:      datetime
