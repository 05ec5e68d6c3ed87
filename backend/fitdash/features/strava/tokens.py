"""
Token freshness and refresh.

The stored access token is used as-is until its expiry passes; after
that the refresh grant is run and the whole returned triple replaces the
stored one. A failed refresh leaves the store untouched.
"""

import logging
import time
from dataclasses import dataclass
from typing import Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from fitdash.features.users import Profile, ProfileRepository
from fitdash.shared.exceptions import PersistenceError, TokenRefreshFailed
from .oauth import StravaOAuth, StravaOAuthError

logger = logging.getLogger(__name__)


def is_token_expired(expires_at: int, now: Optional[float] = None) -> bool:
    """
    True when the access token expiry is in the past.

    Args:
        expires_at: Expiry as epoch seconds
        now: Current time as epoch seconds (defaults to time.time())
    """
    now_ms = (time.time() if now is None else now) * 1000
    return expires_at * 1000 < now_ms


@dataclass(frozen=True)
class TokenSet:
    """OAuth token triple."""

    access_token: str
    refresh_token: str
    expires_at: int

    @classmethod
    def from_response(cls, payload: dict) -> "TokenSet":
        """
        Build from a token endpoint response.

        Raises:
            ValueError: If any part of the triple is missing
        """
        access_token = payload.get("access_token")
        refresh_token = payload.get("refresh_token")
        expires_at = payload.get("expires_at")
        if not access_token or not refresh_token or expires_at is None:
            raise ValueError("Invalid token response")
        return cls(access_token, refresh_token, int(expires_at))


class TokenRefresher:
    """
    Keeps a profile's Strava access token usable.

    Usage:
        refresher = TokenRefresher(db)
        access_token = await refresher.ensure_fresh(profile)
    """

    def __init__(self, db: AsyncSession, oauth: Optional[StravaOAuth] = None):
        self.profiles = ProfileRepository(db)
        self.oauth = oauth or StravaOAuth()

    async def ensure_fresh(self, profile: Profile, now: Optional[float] = None) -> str:
        """
        Return a usable access token, refreshing first if it expired.

        Raises:
            TokenRefreshFailed: If the refresh grant fails
            PersistenceError: If the refreshed triple could not be stored
        """
        expires_at = profile.strava_token_expires_at
        if expires_at is not None and not is_token_expired(expires_at, now):
            return profile.strava_access_token

        logger.info(f"Refreshing Strava token for user {profile.id}")
        tokens = await self.refresh(profile)
        return tokens.access_token

    async def refresh(self, profile: Profile) -> TokenSet:
        """
        Run the refresh grant and persist the new triple.

        Raises:
            TokenRefreshFailed: Remote rejection, network error or malformed
                response; the stored tokens are not modified
            PersistenceError: If writing the new triple failed
        """
        if not profile.strava_refresh_token:
            raise TokenRefreshFailed("No Strava refresh token stored")

        try:
            payload = await self.oauth.refresh_token(profile.strava_refresh_token)
            tokens = TokenSet.from_response(payload)
        except (StravaOAuthError, ValueError, TypeError) as e:
            logger.warning(f"Strava token refresh failed for user {profile.id}: {e}")
            raise TokenRefreshFailed(f"Failed to refresh Strava token: {e}") from e

        try:
            await self.profiles.update_tokens(
                profile,
                access_token=tokens.access_token,
                refresh_token=tokens.refresh_token,
                expires_at=tokens.expires_at,
            )
            await self.profiles.commit()
        except SQLAlchemyError as e:
            await self.profiles.rollback()
            logger.error(f"Could not store refreshed token for user {profile.id}: {e}")
            raise PersistenceError("Failed to store refreshed Strava token") from e

        return tokens
