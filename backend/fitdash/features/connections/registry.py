"""
Provider lookup.

Kept out of the package __init__ so that provider modules can import
connections.base without a cycle.
"""

from typing import Optional

import httpx
from sqlalchemy.ext.asyncio import AsyncSession

from fitdash.features.garmin.connection import GarminConnection
from fitdash.features.strava.client import StravaClient
from fitdash.features.strava.connection import StravaConnection
from fitdash.features.strava.oauth import StravaOAuth
from fitdash.shared.exceptions import ValidationError
from .base import Provider, ProviderConnection


def get_connection(
    provider: Provider | str,
    db: AsyncSession,
    http_client: Optional[httpx.AsyncClient] = None
) -> ProviderConnection:
    """
    Build the connection for a provider.

    Raises:
        ValidationError: Unknown provider name
    """
    try:
        provider = Provider(provider)
    except ValueError as e:
        raise ValidationError(f"Unknown provider: {provider}") from e

    if provider is Provider.STRAVA:
        return StravaConnection(
            db,
            oauth=StravaOAuth(http_client),
            client=StravaClient(http_client),
        )
    return GarminConnection(db)
