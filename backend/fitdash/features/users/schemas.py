"""
Profile schemas.

Pydantic models for profile responses.
"""

from pydantic import BaseModel, ConfigDict
from typing import Optional


class ProfileResponse(BaseModel):
    """Public part of a profile. Tokens are never serialized."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    email: Optional[str] = None
    strava_athlete_id: Optional[int] = None
    strava_token_expires_at: Optional[int] = None
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    profile_picture: Optional[str] = None
