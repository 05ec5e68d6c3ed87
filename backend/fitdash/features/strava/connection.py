"""
Strava connection lifecycle.

Connect:    authorization code -> token triple + athlete stored
Sync:       expiry check -> refresh if needed -> fetch pages -> reconcile
Disconnect: token triple and athlete id cleared, activities kept

Sync failures are reported in the ActionResult; the connection stays
CONNECTED and the session keeps its previous activity list.
"""

import logging
from typing import Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from fitdash.config import settings
from fitdash.features.connections.base import (
    ActionResult,
    ConnectionState,
    Notice,
    Provider,
    ProviderConnection,
)
from fitdash.features.connections.session import SessionContext, sessions
from fitdash.features.users import ProfileRepository, ProfileResponse
from fitdash.shared.exceptions import (
    FitDashError,
    NotConnectedError,
    PersistenceError,
    TokenRefreshFailed,
    UpstreamError,
)
from .client import StravaClient
from .oauth import StravaOAuth, StravaOAuthError
from .reconciler import ActivityReconciler
from .schemas import StravaConnectRequest, StravaSyncRequest
from .tokens import TokenRefresher, TokenSet

logger = logging.getLogger(__name__)


class StravaConnection(ProviderConnection):
    """
    Strava account lifecycle for one session.

    Usage:
        connection = StravaConnection(db)
        result = await connection.sync(session, StravaSyncRequest(page=1))
    """

    provider = Provider.STRAVA

    def __init__(
        self,
        db: AsyncSession,
        oauth: Optional[StravaOAuth] = None,
        client: Optional[StravaClient] = None,
    ):
        self.profiles = ProfileRepository(db)
        self.oauth = oauth or StravaOAuth()
        self.client = client or StravaClient()
        self.refresher = TokenRefresher(db, self.oauth)
        self.reconciler = ActivityReconciler(db)

    # -------------------------------------------------------------------------
    # State
    # -------------------------------------------------------------------------

    async def status(self, session: SessionContext) -> ConnectionState:
        current = session.state(self.provider)
        if current == ConnectionState.SYNCING:
            return current
        if current == ConnectionState.CONNECTING and sessions.is_authorizing(session.user_id):
            return current

        profile = await self.profiles.get_by_user_id(session.user_id)
        state = (
            ConnectionState.CONNECTED
            if profile is not None and profile.strava_connected
            else ConnectionState.DISCONNECTED
        )
        session.set_state(self.provider, state)
        return state

    def authorization_url(self, redirect_uri: str, state: str) -> str:
        """Strava authorize URL for the redirect that starts connecting."""
        return self.oauth.get_authorization_url(redirect_uri, state=state)

    # -------------------------------------------------------------------------
    # Connect
    # -------------------------------------------------------------------------

    async def connect(
        self,
        session: SessionContext,
        request: StravaConnectRequest
    ) -> ActionResult:
        """
        Exchange the authorization code and store tokens and athlete.

        Nothing is written unless the exchange fully succeeded.
        """
        session.set_state(self.provider, ConnectionState.CONNECTING)

        try:
            payload = await self.oauth.exchange_code(request.code)
            tokens = TokenSet.from_response(payload)
            athlete = payload["athlete"]
            if not isinstance(athlete, dict) or athlete.get("id") is None:
                raise ValueError("Invalid response from Strava authentication")
        except StravaOAuthError as e:
            return self._connect_failed(session, e)
        except (KeyError, TypeError, ValueError):
            return self._connect_failed(
                session,
                StravaOAuthError("Invalid response from Strava authentication", status_code=502)
            )

        try:
            profile = await self.profiles.save_connection(
                session.user_id,
                session.email,
                access_token=tokens.access_token,
                refresh_token=tokens.refresh_token,
                expires_at=tokens.expires_at,
                athlete=athlete,
            )
            await self.profiles.commit()
        except SQLAlchemyError as e:
            await self.profiles.rollback()
            logger.error(f"Could not store Strava connection for user {session.user_id}: {e}")
            return self._connect_failed(session, PersistenceError("Failed to save Strava connection"))

        session.set_state(self.provider, ConnectionState.CONNECTED)
        logger.info(f"Strava connected: user={session.user_id}, athlete_id={athlete['id']}")

        return ActionResult(
            ok=True,
            state=ConnectionState.CONNECTED,
            notice=Notice("Success!", "Your Strava account has been connected."),
            data={"profile": ProfileResponse.model_validate(profile)},
        )

    def _connect_failed(self, session: SessionContext, error: FitDashError) -> ActionResult:
        logger.warning(f"Strava connect failed for user {session.user_id}: {error.message}")
        session.set_state(self.provider, ConnectionState.DISCONNECTED)
        return ActionResult.failure(ConnectionState.DISCONNECTED, "Connection Failed", error)

    # -------------------------------------------------------------------------
    # Sync
    # -------------------------------------------------------------------------

    async def sync(
        self,
        session: SessionContext,
        request: Optional[StravaSyncRequest] = None
    ) -> ActionResult:
        """
        Refresh the token if needed, fetch the requested pages and reconcile.

        Raises:
            NotConnectedError: If no Strava account is linked
        """
        request = request or StravaSyncRequest()

        profile = await self.profiles.get_by_user_id(session.user_id)
        if profile is None or not profile.strava_connected:
            raise NotConnectedError("Strava account is not connected")

        session.set_state(self.provider, ConnectionState.SYNCING)
        try:
            return await self._run_sync(session, profile, request)
        finally:
            session.set_state(self.provider, ConnectionState.CONNECTED)

    async def _run_sync(self, session: SessionContext, profile, request: StravaSyncRequest) -> ActionResult:
        try:
            access_token = await self.refresher.ensure_fresh(profile)
        except (TokenRefreshFailed, PersistenceError) as e:
            return self._sync_failed(
                session,
                e,
                reauthorize=isinstance(e, TokenRefreshFailed)
            )

        raw_activities: list[dict] = []
        try:
            for page in range(request.page, request.page + request.pages):
                batch = await self.client.fetch_page(access_token, page, request.per_page)
                raw_activities.extend(batch)
                if len(batch) < request.per_page:
                    break
        except UpstreamError as e:
            return self._sync_failed(session, e)

        try:
            result = await self.reconciler.reconcile(session.user_id, raw_activities)
        except PersistenceError as e:
            return self._sync_failed(session, e)

        session.remember_activities(result.activities)

        if result.persisted:
            notice = Notice("Sync complete", f"Fetched {len(raw_activities)} activities from Strava.")
        else:
            notice = Notice(
                "Sync incomplete",
                "Activities were loaded but could not be saved.",
                level="error",
            )

        return ActionResult(
            ok=True,
            state=ConnectionState.CONNECTED,
            notice=notice,
            data={
                "fetched": len(raw_activities),
                "persisted": result.persisted,
                "activities": result.activities,
            },
        )

    def _sync_failed(
        self,
        session: SessionContext,
        error: FitDashError,
        reauthorize: bool = False
    ) -> ActionResult:
        logger.warning(f"Strava sync failed for user {session.user_id}: {error.message}")
        return ActionResult.failure(
            ConnectionState.CONNECTED,
            "Sync Failed",
            error,
            reauthorize=reauthorize,
            activities=session.activities,
        )

    # -------------------------------------------------------------------------
    # Disconnect
    # -------------------------------------------------------------------------

    async def disconnect(self, session: SessionContext) -> ActionResult:
        """Clear the stored token triple. Synced activities are kept."""
        profile = await self.profiles.get_by_user_id(session.user_id)

        if profile is not None and profile.strava_connected:
            if settings.strava_revoke_on_disconnect and profile.strava_access_token:
                try:
                    await self.oauth.deauthorize(profile.strava_access_token)
                except StravaOAuthError as e:
                    logger.warning(f"Strava deauthorize failed: {e}")

            try:
                await self.profiles.clear_connection(profile)
                await self.profiles.commit()
            except SQLAlchemyError as e:
                await self.profiles.rollback()
                logger.error(f"Could not clear Strava connection for user {session.user_id}: {e}")
                return ActionResult.failure(
                    ConnectionState.CONNECTED,
                    "Error",
                    PersistenceError("Failed to disconnect your Strava account"),
                )

        session.set_state(self.provider, ConnectionState.DISCONNECTED)
        logger.info(f"Strava disconnected for user {session.user_id}")

        return ActionResult(
            ok=True,
            state=ConnectionState.DISCONNECTED,
            notice=Notice("Success!", "Your Strava account has been disconnected."),
        )
