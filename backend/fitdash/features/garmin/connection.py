"""
Garmin connection lifecycle.

Garmin is credential based: connect stores the login, sync only records
when the last sync was requested, disconnect deletes the login.
"""

import logging
from typing import TYPE_CHECKING, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from fitdash.features.connections.base import (
    ActionResult,
    ConnectionState,
    Notice,
    Provider,
    ProviderConnection,
)
from fitdash.shared.exceptions import NotConnectedError, PersistenceError, ValidationError
from .crypto import CredentialCipher, normalize_email
from .repository import GarminCredentialRepository
from .schemas import GarminConnectRequest, GarminCredentialResponse, GarminSyncRequest

if TYPE_CHECKING:
    from fitdash.features.connections.session import SessionContext

logger = logging.getLogger(__name__)


class GarminConnection(ProviderConnection):
    """
    Garmin account lifecycle for one session.

    Usage:
        connection = GarminConnection(db)
        result = await connection.connect(session, GarminConnectRequest(email=..., password=...))
    """

    provider = Provider.GARMIN

    def __init__(self, db: AsyncSession, cipher: Optional[CredentialCipher] = None):
        self.credentials = GarminCredentialRepository(db)
        self._cipher = cipher

    @property
    def cipher(self) -> CredentialCipher:
        if self._cipher is None:
            self._cipher = CredentialCipher.from_settings()
        return self._cipher

    async def status(self, session: "SessionContext") -> ConnectionState:
        credential = await self.credentials.get_by_user_id(session.user_id)
        state = ConnectionState.CONNECTED if credential else ConnectionState.DISCONNECTED
        session.set_state(self.provider, state)
        return state

    async def credential(self, session: "SessionContext") -> Optional[GarminCredentialResponse]:
        credential = await self.credentials.get_by_user_id(session.user_id)
        return GarminCredentialResponse.model_validate(credential) if credential else None

    async def connect(
        self,
        session: "SessionContext",
        request: GarminConnectRequest
    ) -> ActionResult:
        """
        Store (or replace) the user's Garmin login.

        Raises:
            ValidationError: If email or password is missing
        """
        if not request.email or not request.password:
            raise ValidationError("Missing required parameters")

        normalized = normalize_email(request.email)
        password_encrypted = self.cipher.encrypt(request.password)

        try:
            credential = await self.credentials.save_for_user(
                session.user_id,
                email=request.email,
                password_encrypted=password_encrypted,
                normalized_email=normalized,
            )
            await self.credentials.commit()
        except SQLAlchemyError as e:
            await self.credentials.rollback()
            logger.error(f"Error storing Garmin credentials for user {session.user_id}: {e}")
            raise PersistenceError("Failed to store credentials") from e

        session.set_state(self.provider, ConnectionState.CONNECTED)
        logger.info(f"Garmin connected for user {session.user_id}")

        return ActionResult(
            ok=True,
            state=ConnectionState.CONNECTED,
            notice=Notice("Success!", "Your Garmin account has been connected."),
            data={"credential": GarminCredentialResponse.model_validate(credential)},
        )

    async def sync(
        self,
        session: "SessionContext",
        request: Optional[GarminSyncRequest] = None
    ) -> ActionResult:
        """
        Record a sync request for the credential matching the key.

        Raises:
            ValidationError: If normalized_email is missing
            NotConnectedError: If no credential matches
        """
        if request is None or not request.normalized_email:
            raise ValidationError("Missing normalized_email parameter")

        existing = await self.credentials.get_by_user_id(session.user_id)
        if existing is None or existing.normalized_email != request.normalized_email:
            raise NotConnectedError("Garmin account is not connected")

        session.set_state(self.provider, ConnectionState.SYNCING)
        try:
            credential = await self.credentials.mark_synced(
                session.user_id, request.normalized_email
            )
            await self.credentials.commit()
        except SQLAlchemyError as e:
            await self.credentials.rollback()
            logger.error(f"Error updating Garmin sync status for user {session.user_id}: {e}")
            raise PersistenceError("Failed to update sync status") from e
        finally:
            session.set_state(self.provider, ConnectionState.CONNECTED)

        return ActionResult(
            ok=True,
            state=ConnectionState.CONNECTED,
            notice=Notice("Sync Started", "Your Garmin data synchronization has been initiated."),
            data={"last_sync_at": credential.last_sync_at.isoformat()},
        )

    async def disconnect(self, session: "SessionContext") -> ActionResult:
        credential = await self.credentials.get_by_user_id(session.user_id)
        if credential is not None:
            try:
                await self.credentials.delete(credential)
                await self.credentials.commit()
            except SQLAlchemyError as e:
                await self.credentials.rollback()
                logger.error(f"Error deleting Garmin credentials for user {session.user_id}: {e}")
                raise PersistenceError("Failed to disconnect your Garmin account") from e

        session.set_state(self.provider, ConnectionState.DISCONNECTED)
        logger.info(f"Garmin disconnected for user {session.user_id}")

        return ActionResult(
            ok=True,
            state=ConnectionState.DISCONNECTED,
            notice=Notice("Success!", "Your Garmin account has been disconnected."),
        )
