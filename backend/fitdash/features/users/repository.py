"""
Profile repository.

Token store for the Strava connection: the token triple and athlete
identity live on the profile row.
"""

from datetime import datetime

from sqlalchemy.ext.asyncio import AsyncSession

from fitdash.shared.repository import BaseRepository
from .models import Profile

STRAVA_FIELDS = (
    "strava_athlete_id",
    "strava_access_token",
    "strava_refresh_token",
    "strava_token_expires_at",
)


class ProfileRepository(BaseRepository[Profile]):
    """Repository for user profiles."""

    def __init__(self, db: AsyncSession):
        super().__init__(db, Profile)

    async def get_by_user_id(self, user_id: str) -> Profile | None:
        return await self.get_by(id=user_id)

    async def get_or_create(self, user_id: str, email: str | None = None) -> Profile:
        """
        Get the profile for a user, creating an empty one if missing.

        Args:
            user_id: Identity service user id
            email: Email to store on a new profile

        Returns:
            Existing or newly flushed profile
        """
        profile = await self.get_by_user_id(user_id)
        if profile is None:
            profile = await self.create(id=user_id, email=email)
        return profile

    async def save_connection(
        self,
        user_id: str,
        email: str | None,
        access_token: str,
        refresh_token: str,
        expires_at: int,
        athlete: dict,
    ) -> Profile:
        """
        Store a freshly exchanged token triple and athlete identity.

        Args:
            user_id: Identity service user id
            email: User email (only used when the profile is new)
            access_token: Strava access token
            refresh_token: Strava refresh token
            expires_at: Access token expiry (epoch seconds)
            athlete: Athlete summary from the token response

        Returns:
            Updated profile
        """
        profile = await self.get_or_create(user_id, email)
        return await self.update(
            profile,
            strava_athlete_id=athlete["id"],
            strava_access_token=access_token,
            strava_refresh_token=refresh_token,
            strava_token_expires_at=expires_at,
            first_name=athlete.get("firstname"),
            last_name=athlete.get("lastname"),
            profile_picture=athlete.get("profile"),
            updated_at=datetime.utcnow(),
        )

    async def update_tokens(
        self,
        profile: Profile,
        access_token: str,
        refresh_token: str,
        expires_at: int
    ) -> Profile:
        """Overwrite the whole token triple after a refresh."""
        return await self.update(
            profile,
            strava_access_token=access_token,
            strava_refresh_token=refresh_token,
            strava_token_expires_at=expires_at,
            updated_at=datetime.utcnow(),
        )

    async def clear_connection(self, profile: Profile) -> Profile:
        """Null the token triple and athlete id (disconnect)."""
        values = {field: None for field in STRAVA_FIELDS}
        return await self.update(profile, updated_at=datetime.utcnow(), **values)
