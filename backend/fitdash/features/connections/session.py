"""
Session context.

Holds what the dashboard knows about a logged-in user between requests:
connection state per provider and the last known-good activity list.
A context is opened on login (first authenticated request) and torn down
on logout, or dropped after SESSION_IDLE_TTL without requests.
Contexts of different users share nothing.
"""

import logging
import secrets
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Optional

from fitdash.features.strava.schemas import ActivityRecord
from .base import ConnectionState, Provider

logger = logging.getLogger(__name__)

# Pending OAuth redirects older than this are dropped
AUTHORIZATION_TTL = timedelta(minutes=10)

# Contexts without requests for this long are dropped
SESSION_IDLE_TTL = timedelta(hours=12)


@dataclass
class SessionContext:
    """Per-user dashboard session."""

    user_id: str
    email: Optional[str] = None
    states: dict[Provider, ConnectionState] = field(default_factory=dict)
    activities: list[ActivityRecord] = field(default_factory=list)
    opened_at: datetime = field(default_factory=datetime.utcnow)
    last_seen_at: datetime = field(default_factory=datetime.utcnow)

    def state(self, provider: Provider) -> ConnectionState:
        return self.states.get(provider, ConnectionState.DISCONNECTED)

    def set_state(self, provider: Provider, state: ConnectionState) -> None:
        previous = self.state(provider)
        if previous != state:
            logger.debug(f"{provider.value} {previous.value} -> {state.value} for user {self.user_id}")
        self.states[provider] = state

    def remember_activities(self, activities: list[ActivityRecord]) -> None:
        """Replace the known-good list shown on the dashboard."""
        self.activities = list(activities)


class SessionRegistry:
    """
    In-memory registry of open session contexts.

    Also tracks pending OAuth redirects: the state parameter sent to
    Strava maps back to the session that started the redirect.
    """

    def __init__(self):
        self._sessions: dict[str, SessionContext] = {}
        self._authorizations: dict[str, tuple[str, datetime]] = {}

    def open(self, user_id: str, email: Optional[str] = None) -> SessionContext:
        """Return the user's context, creating it on first use (login)."""
        self._expire_sessions()
        self._expire_authorizations()

        session = self._sessions.get(user_id)
        if session is None:
            session = SessionContext(user_id=user_id, email=email)
            self._sessions[user_id] = session
            logger.info(f"Session opened for user {user_id}")
        session.last_seen_at = datetime.utcnow()
        return session

    def get(self, user_id: str) -> Optional[SessionContext]:
        return self._sessions.get(user_id)

    def close(self, user_id: str) -> bool:
        """Tear down the user's context (logout)."""
        self._authorizations = {
            state: entry for state, entry in self._authorizations.items()
            if entry[0] != user_id
        }
        session = self._sessions.pop(user_id, None)
        if session is None:
            return False
        logger.info(f"Session closed for user {user_id}")
        return True

    def begin_authorization(self, session: SessionContext) -> str:
        """Register an OAuth redirect and return its state token."""
        self._expire_authorizations()
        state = secrets.token_urlsafe(32)
        self._authorizations[state] = (session.user_id, datetime.utcnow())
        session.set_state(Provider.STRAVA, ConnectionState.CONNECTING)
        return state

    def complete_authorization(self, state: Optional[str]) -> Optional[SessionContext]:
        """Resolve a callback state token to its session (single use)."""
        self._expire_authorizations()
        if not state or state not in self._authorizations:
            return None
        user_id, _ = self._authorizations.pop(state)
        return self.open(user_id)

    def is_authorizing(self, user_id: str) -> bool:
        """True while the user has an OAuth redirect that can still complete."""
        self._expire_authorizations()
        return any(entry[0] == user_id for entry in self._authorizations.values())

    def _expire_authorizations(self) -> None:
        cutoff = datetime.utcnow() - AUTHORIZATION_TTL
        expired = {entry[0] for entry in self._authorizations.values() if entry[1] <= cutoff}
        if not expired:
            return

        self._authorizations = {
            state: entry for state, entry in self._authorizations.items()
            if entry[1] > cutoff
        }
        pending = {entry[0] for entry in self._authorizations.values()}
        for user_id in expired - pending:
            session = self._sessions.get(user_id)
            if session is not None and session.state(Provider.STRAVA) == ConnectionState.CONNECTING:
                session.set_state(Provider.STRAVA, ConnectionState.DISCONNECTED)
                logger.info(f"Strava authorization abandoned by user {user_id}")

    def _expire_sessions(self) -> None:
        cutoff = datetime.utcnow() - SESSION_IDLE_TTL
        idle = [user_id for user_id, s in self._sessions.items() if s.last_seen_at <= cutoff]
        for user_id in idle:
            self.close(user_id)
            logger.info(f"Session expired for user {user_id}")


# Global registry instance
sessions = SessionRegistry()
