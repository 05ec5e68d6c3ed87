"""
Garmin credential repository.
"""

from datetime import datetime

from sqlalchemy.ext.asyncio import AsyncSession

from fitdash.shared.repository import BaseRepository
from .models import GarminCredential


class GarminCredentialRepository(BaseRepository[GarminCredential]):
    """Repository for stored Garmin logins."""

    def __init__(self, db: AsyncSession):
        super().__init__(db, GarminCredential)

    async def get_by_user_id(self, user_id: str) -> GarminCredential | None:
        return await self.get_by(user_id=user_id)

    async def save_for_user(
        self,
        user_id: str,
        email: str,
        password_encrypted: str,
        normalized_email: str
    ) -> GarminCredential:
        """
        Create or replace the user's credential (one per user).

        Args:
            user_id: Owner
            email: Garmin account email
            password_encrypted: Encrypted password
            normalized_email: Correlation key derived from the email

        Returns:
            Stored credential
        """
        values = {
            "email": email,
            "password_encrypted": password_encrypted,
            "normalized_email": normalized_email,
            "updated_at": datetime.utcnow(),
        }
        existing = await self.get_by_user_id(user_id)
        if existing is not None:
            return await self.update(existing, **values)
        return await self.create(user_id=user_id, **values)

    async def mark_synced(self, user_id: str, normalized_email: str) -> GarminCredential | None:
        """
        Stamp last_sync_at on the credential matching user and key.

        Returns:
            Updated credential, None if no credential matches
        """
        credential = await self.get_by(user_id=user_id, normalized_email=normalized_email)
        if credential is None:
            return None
        now = datetime.utcnow()
        return await self.update(credential, last_sync_at=now, updated_at=now)
