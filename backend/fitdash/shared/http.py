"""
HTTP client helpers.

Services accept an optional shared httpx.AsyncClient (tests inject one
backed by httpx.MockTransport); without it a short-lived client is opened
per call.
"""

from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional

import httpx


@asynccontextmanager
async def http_session(
    client: Optional[httpx.AsyncClient],
    timeout: float
) -> AsyncIterator[httpx.AsyncClient]:
    """Yield the injected client, or a temporary one closed on exit."""
    if client is not None:
        yield client
        return

    async with httpx.AsyncClient(timeout=timeout) as temporary:
        yield temporary


def error_message(payload: object) -> Optional[str]:
    """
    Extract a provider error from a JSON body.

    OAuth endpoints report failures as {"message": ..., "errors": [...]};
    either field marks the response as failed.
    """
    if not isinstance(payload, dict):
        return None
    if "errors" in payload or payload.get("message"):
        return str(payload.get("message") or "Authorization failed")
    return None
