"""
Strava API client.

Thin proxy over the paginated activity feed. No pagination state is kept
between calls beyond the page number the caller passes in.

Strava API Limits:
- 200 requests per 15 minutes
- 2,000 requests per day
Limits are enforced by Strava; usage headers are logged only.
"""

import logging
from typing import Optional

import httpx

from fitdash.config import settings
from fitdash.shared.exceptions import UpstreamError
from fitdash.shared.http import http_session

logger = logging.getLogger(__name__)


class StravaClient:
    """
    Async client for the Strava REST API.

    The access token must already be fresh; see TokenRefresher.

    Usage:
        client = StravaClient()
        activities = await client.fetch_page(access_token, page=1)
    """

    API_URL = "https://www.strava.com/api/v3"
    MAX_PER_PAGE = 200

    def __init__(self, http_client: Optional[httpx.AsyncClient] = None):
        self._http = http_client
        self.timeout = settings.strava_http_timeout_seconds

    async def _api_request(
        self,
        method: str,
        endpoint: str,
        access_token: str,
        params: Optional[dict] = None
    ):
        """
        Make an authenticated API request.

        Raises:
            UpstreamError: Non-success status (status preserved), timeout
                (504) or transport failure (502)
        """
        async with http_session(self._http, self.timeout) as client:
            try:
                response = await client.request(
                    method=method,
                    url=f"{self.API_URL}{endpoint}",
                    headers={"Authorization": f"Bearer {access_token}"},
                    params=params
                )
            except httpx.TimeoutException as e:
                raise UpstreamError("Strava API timed out", status=504) from e
            except httpx.HTTPError as e:
                raise UpstreamError(f"Strava API unreachable: {e}", status=502) from e

        if "X-RateLimit-Limit" in response.headers:
            logger.debug(
                f"Strava rate limit: {response.headers.get('X-RateLimit-Usage')} "
                f"/ {response.headers.get('X-RateLimit-Limit')}"
            )

        if not response.is_success:
            logger.error(f"Strava API error on {endpoint}: {response.status_code}")
            raise UpstreamError(
                f"Strava API error: {response.status_code}",
                status=response.status_code
            )

        try:
            return response.json()
        except ValueError as e:
            raise UpstreamError("Strava API returned invalid JSON", status=502) from e

    async def fetch_page(
        self,
        access_token: str,
        page: int = 1,
        per_page: int = 30
    ) -> list[dict]:
        """
        Get one page of the athlete's activities, newest first.

        Args:
            access_token: Valid access token
            page: Page number (1-based)
            per_page: Results per page (max 200)

        Returns:
            Provider activity objects, unmodified
        """
        params = {"page": page, "per_page": min(per_page, self.MAX_PER_PAGE)}
        data = await self._api_request("GET", "/athlete/activities", access_token, params)

        if not isinstance(data, list):
            raise UpstreamError("Unexpected Strava activities payload", status=502)

        logger.info(f"Fetched {len(data)} Strava activities (page {page})")
        return data
