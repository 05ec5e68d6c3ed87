"""
Provider connections.

Usage:
    from fitdash.features.connections import ConnectionState, sessions
    from fitdash.features.connections.registry import get_connection

Components:
- ProviderConnection: connect / sync / disconnect interface
- SessionContext: per-user session state (login to logout)
- SessionRegistry: open session contexts and pending OAuth redirects
"""

from .base import (
    ActionResult,
    ConnectionState,
    Notice,
    Provider,
    ProviderConnection,
)
from .session import SessionContext, SessionRegistry, sessions

__all__ = [
    "ActionResult",
    "ConnectionState",
    "Notice",
    "Provider",
    "ProviderConnection",
    "SessionContext",
    "SessionRegistry",
    "sessions",
]
