"""
Garmin schemas.

Fields are optional so that missing values are reported as a 400
ValidationError by the connection rather than rejected by FastAPI.
"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict


class GarminConnectRequest(BaseModel):
    email: Optional[str] = None
    password: Optional[str] = None


class GarminSyncRequest(BaseModel):
    normalized_email: Optional[str] = None


class GarminAuthAction(BaseModel):
    """Body of the Garmin action endpoint."""

    action: Optional[str] = None  # setup | sync
    email: Optional[str] = None
    password: Optional[str] = None
    normalized_email: Optional[str] = None


class GarminCredentialResponse(BaseModel):
    """Stored credential without the password."""

    model_config = ConfigDict(from_attributes=True)

    email: str
    normalized_email: str
    last_sync_at: Optional[datetime] = None
