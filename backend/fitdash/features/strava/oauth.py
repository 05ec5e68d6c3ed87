"""
Strava OAuth flow.

Handles:
- Authorization URL generation
- Code exchange for tokens
- Token refresh
- Token revocation (deauthorization)
"""

import logging
from typing import Optional
from urllib.parse import urlencode

import httpx

from fitdash.config import settings
from fitdash.shared.exceptions import FitDashError
from fitdash.shared.http import http_session, error_message

logger = logging.getLogger(__name__)


class StravaOAuthError(FitDashError):
    """Token endpoint rejected the grant or could not be reached."""

    status_code = 400


class StravaOAuth:
    """
    Strava OAuth handler.

    Usage:
        oauth = StravaOAuth()
        auth_url = oauth.get_authorization_url(
            redirect_uri="https://example.com/callback",
            state="..."
        )
        tokens = await oauth.exchange_code(code)
        tokens = await oauth.refresh_token(refresh_token)
    """

    AUTHORIZE_URL = "https://www.strava.com/oauth/authorize"
    TOKEN_URL = "https://www.strava.com/oauth/token"
    DEAUTHORIZE_URL = "https://www.strava.com/oauth/deauthorize"

    def __init__(
        self,
        http_client: Optional[httpx.AsyncClient] = None,
        client_id: Optional[str] = None,
        client_secret: Optional[str] = None,
    ):
        self._http = http_client
        self.client_id = client_id or settings.strava_client_id
        self.client_secret = client_secret or settings.strava_client_secret
        self.timeout = settings.strava_http_timeout_seconds

    def get_authorization_url(
        self,
        redirect_uri: str,
        state: Optional[str] = None,
        scope: Optional[str] = None
    ) -> str:
        """
        Generate Strava OAuth authorization URL.

        Args:
            redirect_uri: URL to redirect after authorization
            state: Optional state parameter for CSRF protection
            scope: OAuth scope (default: STRAVA_SCOPE setting)

        Returns:
            Authorization URL string
        """
        params = {
            "client_id": self.client_id,
            "redirect_uri": redirect_uri,
            "response_type": "code",
            "approval_prompt": "auto",
            "scope": scope or settings.strava_scope,
        }
        if state:
            params["state"] = state

        return f"{self.AUTHORIZE_URL}?{urlencode(params)}"

    async def exchange_code(self, code: str) -> dict:
        """
        Exchange authorization code for tokens.

        Returns:
            {
                "access_token": "...",
                "refresh_token": "...",
                "expires_at": 1234567890,
                "athlete": {"id": 123, "firstname": "...", ...}
            }

        Raises:
            StravaOAuthError: If token exchange fails
        """
        return await self._token_request(
            {"code": code, "grant_type": "authorization_code"},
            "Token exchange"
        )

    async def refresh_token(self, refresh_token: str) -> dict:
        """
        Refresh an expired access token.

        Strava may rotate the refresh token; callers must persist the
        returned one.

        Raises:
            StravaOAuthError: If token refresh fails
        """
        return await self._token_request(
            {"refresh_token": refresh_token, "grant_type": "refresh_token"},
            "Token refresh"
        )

    async def deauthorize(self, access_token: str) -> bool:
        """Revoke Strava access. Returns True if Strava accepted it."""
        async with http_session(self._http, self.timeout) as client:
            try:
                response = await client.post(
                    self.DEAUTHORIZE_URL,
                    headers={"Authorization": f"Bearer {access_token}"}
                )
            except httpx.HTTPError as e:
                raise StravaOAuthError(f"Deauthorization failed: {e}", status_code=502) from e
        return response.status_code == 200

    async def _token_request(self, grant: dict, label: str) -> dict:
        data = {
            "client_id": self.client_id,
            "client_secret": self.client_secret,
            **grant,
        }
        async with http_session(self._http, self.timeout) as client:
            try:
                response = await client.post(self.TOKEN_URL, data=data)
            except httpx.TimeoutException as e:
                raise StravaOAuthError(f"{label} timed out", status_code=504) from e
            except httpx.HTTPError as e:
                raise StravaOAuthError(f"{label} failed: {e}", status_code=502) from e

        try:
            payload = response.json()
        except ValueError:
            payload = None

        message = error_message(payload)
        if message:
            logger.error(f"Strava {label.lower()} rejected: {message}")
            raise StravaOAuthError(message)

        if response.status_code != 200 or not isinstance(payload, dict):
            logger.error(f"Strava {label.lower()} failed: {response.status_code}")
            raise StravaOAuthError(
                f"{label} failed: {response.status_code}",
                status_code=response.status_code if response.status_code >= 400 else 502
            )

        return payload
