"""
Activity reconciliation.

Turns a page (or several) of raw Strava activities into the canonical,
persisted activity list of a user:

1. normalize provider records into the local schema
2. bulk upsert keyed on the external activity id (last write wins)
3. read back the user's full history, newest first

Storage failures do not abort a sync: the normalized records are
returned instead so the dashboard can still show them.
"""

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Iterable, Optional

from pydantic import ValidationError
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from fitdash.shared.exceptions import PersistenceError
from .repository import ActivityRepository
from .schemas import ActivityRecord

logger = logging.getLogger(__name__)


@dataclass
class ReconcileResult:
    """
    Outcome of one reconciliation.

    persisted is False in degraded mode, when activities are the
    normalized input rather than what the store holds.
    """

    activities: list[ActivityRecord]
    upserted: int = 0
    persisted: bool = True


def parse_start_date(value: str) -> datetime:
    """Parse an ISO 8601 timestamp into naive UTC."""
    parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    if parsed.tzinfo is not None:
        parsed = parsed.astimezone(timezone.utc).replace(tzinfo=None)
    return parsed


def normalize_activity(user_id: str, data: dict) -> Optional[ActivityRecord]:
    """
    Map one Strava activity object onto the local schema.

    Returns None for records that cannot be keyed or ordered (no id or
    no parseable start_date) or whose fields have the wrong type.
    """
    if not isinstance(data, dict):
        logger.warning(f"Skipping Strava activity of type {type(data).__name__}")
        return None

    external_id = data.get("id")
    if external_id is None:
        logger.warning("Skipping Strava activity without id")
        return None

    try:
        start_date = parse_start_date(data["start_date"])
    except (KeyError, TypeError, ValueError):
        logger.warning(f"Skipping Strava activity {external_id}: bad start_date")
        return None

    route = data.get("map") or {}
    if not isinstance(route, dict):
        route = {}

    try:
        return ActivityRecord(
            external_id=int(external_id),
            user_id=user_id,
            name=data.get("name") or "",
            activity_type=data.get("type") or "Unknown",
            distance_m=data.get("distance") or 0,
            moving_time_s=data.get("moving_time") or 0,
            elapsed_time_s=data.get("elapsed_time") or 0,
            elevation_gain_m=data.get("total_elevation_gain") or 0,
            start_date=start_date,
            avg_speed_mps=data.get("average_speed") or 0,
            max_speed_mps=data.get("max_speed") or 0,
            avg_heartrate=data.get("average_heartrate"),
            max_heartrate=data.get("max_heartrate"),
            polyline=route.get("summary_polyline") or None,
        )
    except (TypeError, ValueError, ValidationError) as e:
        logger.warning(f"Skipping Strava activity {external_id}: invalid fields ({e})")
        return None


class ActivityReconciler:
    """
    Merges provider activities into the local store.

    Usage:
        reconciler = ActivityReconciler(db)
        result = await reconciler.reconcile(user_id, raw_activities)
    """

    def __init__(self, db: AsyncSession):
        self.activities = ActivityRepository(db)

    def normalize(self, user_id: str, raw_activities: Iterable[dict]) -> list[ActivityRecord]:
        records = (normalize_activity(user_id, data) for data in raw_activities)
        return [record for record in records if record is not None]

    async def stored(self, user_id: str) -> list[ActivityRecord]:
        """
        Canonical list: every stored activity of the user, newest first.

        Raises:
            PersistenceError: If the read fails
        """
        try:
            rows = await self.activities.list_for_user(user_id)
        except SQLAlchemyError as e:
            await self.activities.rollback()
            raise PersistenceError("Failed to read activities") from e
        return [ActivityRecord.model_validate(row) for row in rows]

    async def reconcile(self, user_id: str, raw_activities: list[dict]) -> ReconcileResult:
        """
        Upsert raw activities and return the canonical list.

        Empty input writes nothing and returns the stored set.

        Raises:
            PersistenceError: Only when there is nothing to fall back to
                (empty input and the read failed)
        """
        if not raw_activities:
            return ReconcileResult(await self.stored(user_id))

        records = self.normalize(user_id, raw_activities)

        try:
            upserted = await self.activities.upsert_many(user_id, records)
            await self.activities.commit()
        except SQLAlchemyError as e:
            await self.activities.rollback()
            logger.warning(
                f"Activity upsert failed for user {user_id}, "
                f"returning {len(records)} unsaved activities: {e}"
            )
            return ReconcileResult(records, upserted=0, persisted=False)

        try:
            canonical = await self.stored(user_id)
        except PersistenceError as e:
            logger.warning(f"Activity read-back failed for user {user_id}: {e.__cause__}")
            return ReconcileResult(records, upserted=upserted, persisted=False)

        logger.info(f"Reconciled {upserted} activities for user {user_id} ({len(canonical)} stored)")
        return ReconcileResult(canonical, upserted=upserted)
