"""
Shared utilities (NOT business logic).

Usage:
    from fitdash.shared import BaseRepository
    from fitdash.shared.exceptions import UpstreamError
"""
from .repository import BaseRepository
from .exceptions import (
    FitDashError,
    AuthenticationError,
    ValidationError,
    NotConnectedError,
    UpstreamError,
    PersistenceError,
    TokenRefreshFailed,
)

__all__ = [
    "BaseRepository",
    "FitDashError",
    "AuthenticationError",
    "ValidationError",
    "NotConnectedError",
    "UpstreamError",
    "PersistenceError",
    "TokenRefreshFailed",
]
