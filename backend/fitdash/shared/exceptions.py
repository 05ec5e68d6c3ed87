"""
Error taxonomy.

Every domain failure that can reach an HTTP client derives from
FitDashError and carries the status code it is rendered with.
The API layer turns these into {"error": message} responses.
"""

from typing import Optional


class FitDashError(Exception):
    """Base application error."""

    status_code: int = 500

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code


class AuthenticationError(FitDashError):
    """Missing or invalid bearer token."""

    status_code = 401


class ValidationError(FitDashError):
    """Required request fields are missing or malformed."""

    status_code = 400


class NotConnectedError(ValidationError):
    """Action requires a linked provider account."""


class UpstreamError(FitDashError):
    """Remote provider answered with a non-success status."""

    status_code = 502

    def __init__(self, message: str, status: int = 502):
        super().__init__(message, status_code=status)

    @property
    def status(self) -> int:
        return self.status_code


class PersistenceError(FitDashError):
    """Storage read/write failure that could not be degraded."""

    status_code = 500


class TokenRefreshFailed(FitDashError):
    """Refresh grant was rejected or could not be completed."""

    status_code = 400
