"""
FastAPI dependencies for authenticated requests.
"""

from typing import AsyncGenerator, Optional

import httpx
from fastapi import Depends, Header

from fitdash.config import settings
from fitdash.features.connections.session import SessionContext, sessions
from .identity import AuthenticatedUser, IdentityClient


async def get_http_client() -> AsyncGenerator[httpx.AsyncClient, None]:
    """Outbound HTTP client shared by the services of one request."""
    async with httpx.AsyncClient(timeout=settings.strava_http_timeout_seconds) as client:
        yield client


def get_identity_client(
    http_client: httpx.AsyncClient = Depends(get_http_client)
) -> IdentityClient:
    return IdentityClient(http_client)


def bearer_token(authorization: Optional[str]) -> Optional[str]:
    """Extract the token from an 'Authorization: Bearer ...' header."""
    if not authorization:
        return None
    scheme, _, token = authorization.partition(" ")
    if scheme.lower() != "bearer":
        return None
    return token.strip() or None


async def get_current_user(
    authorization: Optional[str] = Header(default=None),
    identity: IdentityClient = Depends(get_identity_client),
) -> AuthenticatedUser:
    """Validated caller; raises AuthenticationError (401) otherwise."""
    return await identity.get_user(bearer_token(authorization))


async def get_session(
    user: AuthenticatedUser = Depends(get_current_user)
) -> SessionContext:
    """Session context of the caller, opened on first authenticated request."""
    return sessions.open(user.id, user.email)
