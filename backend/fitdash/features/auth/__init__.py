"""
Authentication against the external identity service.

Usage:
    from fitdash.features.auth import get_current_user, get_session
"""

from .identity import AuthenticatedUser, IdentityClient
from .dependencies import (
    bearer_token,
    get_current_user,
    get_http_client,
    get_identity_client,
    get_session,
)

__all__ = [
    "AuthenticatedUser",
    "IdentityClient",
    "bearer_token",
    "get_current_user",
    "get_http_client",
    "get_identity_client",
    "get_session",
]
