"""
Provider connection interface.

Strava and Garmin expose the same capability set to the dashboard:
status, connect, sync and disconnect. Each action reports its outcome as
an ActionResult carrying a transient notice for the UI.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel

from fitdash.shared.exceptions import FitDashError


class Provider(str, Enum):
    STRAVA = "strava"
    GARMIN = "garmin"


class ConnectionState(str, Enum):
    """
    Per-user, per-provider connection state.

    DISCONNECTED -> CONNECTING   authorization redirect started
    CONNECTING   -> CONNECTED    code exchanged and tokens stored
    CONNECTING   -> DISCONNECTED any connect step failed
    CONNECTED    -> SYNCING      sync requested
    SYNCING      -> CONNECTED    sync finished, successful or not
    CONNECTED    -> DISCONNECTED disconnect
    """

    DISCONNECTED = "disconnected"
    CONNECTING = "connecting"
    CONNECTED = "connected"
    SYNCING = "syncing"


@dataclass
class Notice:
    """Transient notification shown after a user action."""

    title: str
    message: str
    level: str = "info"  # info | error


@dataclass
class ActionResult:
    """Outcome of connect / sync / disconnect."""

    ok: bool
    state: ConnectionState
    notice: Notice
    data: dict[str, Any] = field(default_factory=dict)
    error: Optional[FitDashError] = None

    @property
    def status_code(self) -> int:
        return 200 if self.ok or self.error is None else self.error.status_code

    @classmethod
    def failure(
        cls,
        state: ConnectionState,
        title: str,
        error: FitDashError,
        **data: Any
    ) -> "ActionResult":
        return cls(
            ok=False,
            state=state,
            notice=Notice(title, error.message, level="error"),
            data=data,
            error=error,
        )

    def to_payload(self) -> dict[str, Any]:
        """JSON-ready representation for API responses."""
        payload = {
            "ok": self.ok,
            "state": self.state.value,
            "notice": {
                "title": self.notice.title,
                "message": self.notice.message,
                "level": self.notice.level,
            },
        }
        for key, value in self.data.items():
            if isinstance(value, BaseModel):
                value = value.model_dump(mode="json")
            elif isinstance(value, list):
                value = [
                    item.model_dump(mode="json") if isinstance(item, BaseModel) else item
                    for item in value
                ]
            payload[key] = value
        if self.error is not None:
            payload["error"] = self.error.message
        return payload


class ProviderConnection(ABC):
    """Lifecycle of one provider account for the session's user."""

    provider: Provider

    @abstractmethod
    async def status(self, session) -> ConnectionState:
        """Current connection state, derived from storage."""

    @abstractmethod
    async def connect(self, session, request: BaseModel) -> ActionResult:
        """Link the provider account."""

    @abstractmethod
    async def sync(self, session, request: Optional[BaseModel] = None) -> ActionResult:
        """Pull data from the provider."""

    @abstractmethod
    async def disconnect(self, session) -> ActionResult:
        """Unlink the provider account."""
