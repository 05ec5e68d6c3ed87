"""
Strava schemas.

Pydantic models for activities, sync requests and token-proxy actions.
"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class ActivityRecord(BaseModel):
    """
    One activity in the local schema.

    Built either from a stored row (canonical list) or straight from a
    normalized provider record (degraded mode, nothing persisted).
    """

    model_config = ConfigDict(from_attributes=True)

    external_id: int
    user_id: str
    name: str = ""
    activity_type: str = "Unknown"
    distance_m: float = 0
    moving_time_s: int = 0
    elapsed_time_s: int = 0
    elevation_gain_m: float = 0
    start_date: datetime
    avg_speed_mps: float = 0
    max_speed_mps: float = 0
    avg_heartrate: Optional[float] = None
    max_heartrate: Optional[float] = None
    polyline: Optional[str] = None


class StravaConnectRequest(BaseModel):
    """Authorization code returned by the Strava redirect."""

    code: str


class StravaSyncRequest(BaseModel):
    """Which pages of the provider feed to pull."""

    page: int = Field(default=1, ge=1)
    per_page: int = Field(default=30, ge=1, le=200)
    pages: int = Field(default=1, ge=1, le=20)


class StravaAuthAction(BaseModel):
    """Body of the token-proxy endpoint."""

    action: Optional[str] = None  # exchange | refresh | fetch_activities
    code: Optional[str] = None
    refresh_token: Optional[str] = None
    access_token: Optional[str] = None
    page: Optional[int] = None
    per_page: Optional[int] = None


class MonthlyDistance(BaseModel):
    month: str  # "M/YYYY"
    distance_km: float
    count: int


class ActivityStats(BaseModel):
    """Aggregate numbers shown on the dashboard."""

    total_activities: int
    total_distance_m: float
    total_moving_time_s: int
    total_elevation_m: float
    average_speed_kmh: float
    by_month: list[MonthlyDistance] = Field(default_factory=list)
