"""
Strava integration module.

Usage:
    from fitdash.features.strava import StravaOAuth, StravaClient, ActivityReconciler
    from fitdash.features.strava.connection import StravaConnection

Components:
- StravaOAuth: OAuth flow (auth URL, token exchange, refresh, deauthorize)
- TokenRefresher: expiry check and refresh-token grant
- StravaClient: paginated activity feed
- ActivityReconciler: normalize, upsert by external id, read back
- StravaConnection: connect / sync / disconnect lifecycle

Models:
- Activity: Synced activity data
"""

from .models import Activity
from .schemas import (
    ActivityRecord,
    ActivityStats,
    MonthlyDistance,
    StravaAuthAction,
    StravaConnectRequest,
    StravaSyncRequest,
)
from .oauth import StravaOAuth, StravaOAuthError
from .tokens import TokenRefresher, TokenSet, is_token_expired
from .client import StravaClient
from .repository import ActivityRepository
from .reconciler import ActivityReconciler, ReconcileResult, normalize_activity
from .stats import summarize, monthly_distance

__all__ = [
    # Models
    "Activity",
    # Schemas
    "ActivityRecord",
    "ActivityStats",
    "MonthlyDistance",
    "StravaAuthAction",
    "StravaConnectRequest",
    "StravaSyncRequest",
    # OAuth & tokens
    "StravaOAuth",
    "StravaOAuthError",
    "TokenRefresher",
    "TokenSet",
    "is_token_expired",
    # Client
    "StravaClient",
    # Persistence
    "ActivityRepository",
    "ActivityReconciler",
    "ReconcileResult",
    "normalize_activity",
    # Stats
    "summarize",
    "monthly_distance",
]
