"""
Strava Routes

Endpoints for Strava integration:
- /strava/authorize - Start the OAuth redirect
- /strava/callback - Handle the OAuth redirect back
- /strava/connect - Exchange a code for the caller
- /strava/auth - Token proxy (exchange / refresh / fetch_activities)
- /strava/status - Connection status
- /strava/sync - Refresh, fetch and reconcile activities
- /strava/disconnect - Clear stored tokens
- /strava/activities - Stored activities
- /strava/stats - Aggregate statistics
"""

import html
import logging
from typing import Optional

import httpx
from fastapi import APIRouter, Depends, Query
from fastapi.responses import RedirectResponse, HTMLResponse
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from fitdash.config import settings
from fitdash.db.session import get_async_db
from fitdash.features.auth import get_http_client, get_session
from fitdash.features.connections import ConnectionState, Provider, SessionContext, sessions
from fitdash.features.connections.registry import get_connection
from fitdash.features.strava import (
    ActivityRecord,
    ActivityRepository,
    StravaAuthAction,
    StravaClient,
    StravaConnectRequest,
    StravaOAuth,
    StravaSyncRequest,
    summarize,
)
from fitdash.features.strava.connection import StravaConnection
from fitdash.features.users import ProfileRepository, ProfileResponse
from fitdash.shared.exceptions import FitDashError, ValidationError
from .common import action_response

logger = logging.getLogger(__name__)

router = APIRouter()

SUCCESS_REDIRECT_SECONDS = 2
FAILURE_REDIRECT_SECONDS = 3


# =============================================================================
# Dependencies
# =============================================================================

def get_strava_connection(
    db: AsyncSession = Depends(get_async_db),
    http_client: httpx.AsyncClient = Depends(get_http_client),
) -> StravaConnection:
    return get_connection(Provider.STRAVA, db, http_client)


def get_strava_oauth(http_client: httpx.AsyncClient = Depends(get_http_client)) -> StravaOAuth:
    return StravaOAuth(http_client)


def get_strava_client(http_client: httpx.AsyncClient = Depends(get_http_client)) -> StravaClient:
    return StravaClient(http_client)


# =============================================================================
# OAuth Flow
# =============================================================================

@router.get("/strava/authorize")
async def strava_authorize(
    redirect: bool = Query(default=True, description="Redirect, or return the URL as JSON"),
    session: SessionContext = Depends(get_session),
    connection: StravaConnection = Depends(get_strava_connection),
):
    """Start the Strava OAuth flow for the caller."""
    if not settings.strava_client_id:
        raise FitDashError("Strava integration not configured", status_code=503)

    state = sessions.begin_authorization(session)
    auth_url = connection.authorization_url(settings.strava_redirect_uri, state)

    logger.info(f"Strava OAuth initiated for user {session.user_id}")

    if redirect:
        return RedirectResponse(url=auth_url)
    return {"url": auth_url}


@router.get("/strava/callback", response_class=HTMLResponse)
async def strava_callback(
    code: Optional[str] = Query(None),
    state: Optional[str] = Query(None),
    error: Optional[str] = Query(None),
    connection: StravaConnection = Depends(get_strava_connection),
):
    """
    Handle the Strava redirect.

    Exchanges the code, then sends the browser to the dashboard or back
    to the landing page after a short delay.
    """
    session = sessions.complete_authorization(state)

    if error:
        logger.warning(f"Strava OAuth error: {error}")
        if session is not None:
            session.set_state(Provider.STRAVA, ConnectionState.DISCONNECTED)
        return _redirect_page("Authorization was denied or an error occurred.", success=False)

    if session is None:
        logger.warning("Invalid OAuth state")
        return _redirect_page("Invalid session. Please try again.", success=False)

    if not code:
        session.set_state(Provider.STRAVA, ConnectionState.DISCONNECTED)
        return _redirect_page("No authorization code received.", success=False)

    result = await connection.connect(session, StravaConnectRequest(code=code))
    if result.ok:
        return _redirect_page("Successfully connected to Strava! Redirecting...", success=True)
    return _redirect_page("Failed to connect to Strava. Please try again.", success=False)


@router.post("/strava/connect")
async def strava_connect(
    body: StravaConnectRequest,
    session: SessionContext = Depends(get_session),
    connection: StravaConnection = Depends(get_strava_connection),
):
    """Exchange an authorization code received by the frontend."""
    return action_response(await connection.connect(session, body))


# =============================================================================
# Token Proxy
# =============================================================================

@router.post("/strava/auth")
async def strava_auth_action(
    body: StravaAuthAction,
    oauth: StravaOAuth = Depends(get_strava_oauth),
    client: StravaClient = Depends(get_strava_client),
):
    """
    Proxy to Strava's token and activity endpoints.

    Provider responses are returned as-is; a message/errors body from
    the token endpoint becomes 400 {"error": message}.
    """
    if body.action == "exchange":
        if not body.code:
            raise ValidationError("Authorization code is required")
        logger.info("Exchanging authorization code for tokens")
        return await oauth.exchange_code(body.code)

    if body.action == "refresh":
        if not body.refresh_token:
            raise ValidationError("Refresh token is required")
        logger.info("Refreshing access token")
        return await oauth.refresh_token(body.refresh_token)

    if body.action == "fetch_activities":
        if not body.access_token:
            raise ValidationError("Access token is required")
        return await client.fetch_page(
            body.access_token,
            page=body.page or 1,
            per_page=body.per_page or 30,
        )

    raise ValidationError("Invalid action")


# =============================================================================
# Status, Sync & Disconnect
# =============================================================================

@router.get("/strava/status")
async def strava_status(
    session: SessionContext = Depends(get_session),
    connection: StravaConnection = Depends(get_strava_connection),
    db: AsyncSession = Depends(get_async_db),
):
    """Connection state and public profile of the caller."""
    state = await connection.status(session)
    profile = await ProfileRepository(db).get_by_user_id(session.user_id)

    return {
        "state": state.value,
        "connected": state in (ConnectionState.CONNECTED, ConnectionState.SYNCING),
        "profile": (
            ProfileResponse.model_validate(profile).model_dump(mode="json")
            if profile is not None else None
        ),
    }


@router.post("/strava/sync")
async def strava_sync(
    page: int = Query(1, ge=1),
    per_page: int = Query(30, ge=1, le=200),
    pages: int = Query(1, ge=1, le=20),
    session: SessionContext = Depends(get_session),
    connection: StravaConnection = Depends(get_strava_connection),
):
    """Refresh the token if needed, pull the requested pages and reconcile."""
    request = StravaSyncRequest(page=page, per_page=per_page, pages=pages)
    return action_response(await connection.sync(session, request))


@router.post("/strava/disconnect")
async def strava_disconnect(
    session: SessionContext = Depends(get_session),
    connection: StravaConnection = Depends(get_strava_connection),
):
    """Clear stored tokens. Synced activities are kept."""
    return action_response(await connection.disconnect(session))


# =============================================================================
# Activities & Stats
# =============================================================================

@router.get("/strava/activities")
async def strava_activities(
    activity_type: Optional[str] = Query(None, description="Filter by type: Run, Ride, Hike"),
    limit: int = Query(50, ge=1, le=200),
    offset: int = Query(0, ge=0),
    session: SessionContext = Depends(get_session),
    db: AsyncSession = Depends(get_async_db),
):
    """
    Stored activities, newest first.

    If the store cannot be read, the session's last known-good list is
    returned with stale=true.
    """
    repository = ActivityRepository(db)
    try:
        rows = await repository.list_for_user(
            session.user_id, activity_type=activity_type, limit=limit, offset=offset
        )
        total = await repository.count_for_user(session.user_id, activity_type=activity_type)
    except SQLAlchemyError as e:
        logger.error(f"Failed to read activities for user {session.user_id}: {e}")
        return {
            "activities": [a.model_dump(mode="json") for a in session.activities],
            "total_count": len(session.activities),
            "stale": True,
        }

    activities = [ActivityRecord.model_validate(row) for row in rows]
    if offset == 0 and activity_type is None:
        session.remember_activities(activities)

    return {
        "activities": [a.model_dump(mode="json") for a in activities],
        "total_count": total,
        "stale": False,
    }


@router.get("/strava/stats")
async def strava_stats(
    session: SessionContext = Depends(get_session),
    db: AsyncSession = Depends(get_async_db),
):
    """Totals and monthly distance over all stored activities."""
    try:
        rows = await ActivityRepository(db).list_for_user(session.user_id)
        activities = [ActivityRecord.model_validate(row) for row in rows]
    except SQLAlchemyError as e:
        logger.error(f"Failed to read activities for user {session.user_id}: {e}")
        activities = session.activities

    return summarize(activities).model_dump(mode="json")


# =============================================================================
# Helper Functions
# =============================================================================

def _redirect_page(message: str, success: bool) -> HTMLResponse:
    """Status page that forwards the browser after a fixed delay."""
    target = settings.dashboard_url if success else settings.landing_url
    delay = SUCCESS_REDIRECT_SECONDS if success else FAILURE_REDIRECT_SECONDS
    target = html.escape(target, quote=True)
    page = f"""
    <!DOCTYPE html>
    <html>
    <head>
        <meta charset="utf-8">
        <meta name="viewport" content="width=device-width, initial-scale=1">
        <meta http-equiv="refresh" content="{delay};url={target}">
        <title>Connecting to Strava</title>
        <style>
            body {{
                font-family: -apple-system, BlinkMacSystemFont, 'Segoe UI', Roboto, sans-serif;
                display: flex;
                justify-content: center;
                align-items: center;
                min-height: 100vh;
                margin: 0;
                background: linear-gradient(135deg, #fc4c02 0%, #ff6b35 100%);
            }}
            .card {{
                background: white;
                border-radius: 16px;
                padding: 40px;
                text-align: center;
                box-shadow: 0 10px 40px rgba(0,0,0,0.2);
                max-width: 400px;
            }}
            h1 {{ color: #333; margin: 0 0 10px; }}
            p {{ color: #666; margin: 0; }}
        </style>
    </head>
    <body>
        <div class="card">
            <h1>Connecting to Strava</h1>
            <p>{html.escape(message)}</p>
        </div>
    </body>
    </html>
    """
    return HTMLResponse(content=page, status_code=200 if success else 400)
