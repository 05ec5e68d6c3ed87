"""
Identity service client.

Bearer tokens are issued by an external identity service; this client
asks it who the token belongs to.
"""

import logging
from dataclasses import dataclass
from typing import Optional

import httpx

from fitdash.config import settings
from fitdash.shared.exceptions import AuthenticationError, FitDashError, UpstreamError
from fitdash.shared.http import http_session

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AuthenticatedUser:
    id: str
    email: Optional[str] = None


class IdentityClient:
    """
    Validates bearer tokens against GET {auth_url}/auth/v1/user.

    Usage:
        identity = IdentityClient()
        user = await identity.get_user(token)
    """

    USER_ENDPOINT = "/auth/v1/user"

    def __init__(
        self,
        http_client: Optional[httpx.AsyncClient] = None,
        base_url: Optional[str] = None,
        api_key: Optional[str] = None,
        timeout: float = 10.0,
    ):
        self._http = http_client
        self.base_url = (base_url or settings.auth_url or "").rstrip("/")
        self.api_key = api_key or settings.auth_api_key
        self.timeout = timeout

    async def get_user(self, token: Optional[str]) -> AuthenticatedUser:
        """
        Resolve a bearer token to its user.

        Raises:
            AuthenticationError: Missing, invalid or expired token
            UpstreamError: Identity service unreachable or failing
        """
        if not token:
            raise AuthenticationError("Authentication error")
        if not self.base_url:
            raise FitDashError("Identity service not configured", status_code=503)

        headers = {"Authorization": f"Bearer {token}"}
        if self.api_key:
            headers["apikey"] = self.api_key

        async with http_session(self._http, self.timeout) as client:
            try:
                response = await client.get(f"{self.base_url}{self.USER_ENDPOINT}", headers=headers)
            except httpx.HTTPError as e:
                logger.error(f"Identity service unreachable: {e}")
                raise UpstreamError("Identity service unavailable", status=502) from e

        if response.status_code in (401, 403, 404):
            raise AuthenticationError("Authentication error")
        if not response.is_success:
            raise UpstreamError(
                f"Identity service error: {response.status_code}",
                status=response.status_code
            )

        try:
            data = response.json()
        except ValueError as e:
            raise UpstreamError("Identity service returned invalid JSON", status=502) from e

        user_id = data.get("id") if isinstance(data, dict) else None
        if not user_id:
            raise AuthenticationError("Authentication error")

        return AuthenticatedUser(id=str(user_id), email=data.get("email"))
