"""
Garmin Routes

Endpoints for Garmin integration:
- /garmin/auth - Credential actions (setup / sync)
- /garmin/status - Connection status
- /garmin - Remove stored credentials
"""

import logging

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from fitdash.db.session import get_async_db
from fitdash.features.auth import get_session
from fitdash.features.connections import ConnectionState, Provider, SessionContext
from fitdash.features.connections.registry import get_connection
from fitdash.features.garmin import GarminAuthAction, GarminConnectRequest, GarminSyncRequest
from fitdash.features.garmin.connection import GarminConnection
from fitdash.shared.exceptions import ValidationError
from .common import action_response

logger = logging.getLogger(__name__)

router = APIRouter()


def get_garmin_connection(db: AsyncSession = Depends(get_async_db)) -> GarminConnection:
    return get_connection(Provider.GARMIN, db)


@router.post("/garmin/auth")
async def garmin_auth_action(
    body: GarminAuthAction,
    session: SessionContext = Depends(get_session),
    connection: GarminConnection = Depends(get_garmin_connection),
):
    """
    Garmin credential actions.

    setup stores the login, sync records a sync request for the
    credential identified by normalized_email.
    """
    if body.action == "setup":
        request = GarminConnectRequest(email=body.email, password=body.password)
        return action_response(await connection.connect(session, request))

    if body.action == "sync":
        request = GarminSyncRequest(normalized_email=body.normalized_email)
        return action_response(await connection.sync(session, request))

    raise ValidationError("Invalid action")


@router.get("/garmin/status")
async def garmin_status(
    session: SessionContext = Depends(get_session),
    connection: GarminConnection = Depends(get_garmin_connection),
):
    """Connection state and stored login (without password)."""
    state = await connection.status(session)
    credential = await connection.credential(session)

    return {
        "state": state.value,
        "connected": state == ConnectionState.CONNECTED,
        "credential": credential.model_dump(mode="json") if credential else None,
    }


@router.delete("/garmin")
async def garmin_disconnect(
    session: SessionContext = Depends(get_session),
    connection: GarminConnection = Depends(get_garmin_connection),
):
    """Delete the stored Garmin login."""
    return action_response(await connection.disconnect(session))
