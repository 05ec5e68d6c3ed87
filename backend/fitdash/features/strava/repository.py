"""
Activity repository.

Data access for synced activities, including the bulk upsert keyed on
(user_id, external_id).
"""

from datetime import datetime
from typing import Iterable

from sqlalchemy import select, desc, func
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.ext.asyncio import AsyncSession

from fitdash.shared.repository import BaseRepository
from .models import Activity
from .schemas import ActivityRecord

# Columns overwritten when an activity is synced again
UPSERT_COLUMNS = (
    "name",
    "activity_type",
    "start_date",
    "distance_m",
    "moving_time_s",
    "elapsed_time_s",
    "elevation_gain_m",
    "avg_speed_mps",
    "max_speed_mps",
    "avg_heartrate",
    "max_heartrate",
    "polyline",
    "synced_at",
)


class ActivityRepository(BaseRepository[Activity]):
    """Repository for synced activities."""

    def __init__(self, db: AsyncSession):
        super().__init__(db, Activity)

    def _insert(self):
        dialect = self.db.get_bind().dialect.name
        if dialect == "postgresql":
            return postgresql.insert
        if dialect == "sqlite":
            return sqlite.insert
        raise NotImplementedError(f"Upsert not supported for dialect {dialect!r}")

    async def upsert_many(self, user_id: str, records: Iterable[ActivityRecord]) -> int:
        """
        Insert or overwrite activities for one user.

        Last write wins on every mutable column. Records repeating an
        external id within the batch collapse to the last one.

        Args:
            user_id: Owner of the activities
            records: Normalized activities

        Returns:
            Number of rows written
        """
        synced_at = datetime.utcnow()
        rows = {}
        for record in records:
            row = record.model_dump()
            row["user_id"] = user_id
            row["synced_at"] = synced_at
            rows[record.external_id] = row

        if not rows:
            return 0

        insert = self._insert()
        stmt = insert(Activity).values(list(rows.values()))
        stmt = stmt.on_conflict_do_update(
            index_elements=["user_id", "external_id"],
            set_={column: stmt.excluded[column] for column in UPSERT_COLUMNS},
        )
        await self.db.execute(stmt)
        await self.db.flush()
        return len(rows)

    async def list_for_user(
        self,
        user_id: str,
        activity_type: str | None = None,
        limit: int | None = None,
        offset: int = 0
    ) -> list[Activity]:
        """
        Get a user's activities, newest first.

        Args:
            user_id: Owner
            activity_type: Filter by activity type (Run, Ride, ...)
            limit: Maximum rows (None for all)
            offset: Pagination offset
        """
        query = (
            select(Activity)
            .where(Activity.user_id == user_id)
            .order_by(desc(Activity.start_date), desc(Activity.external_id))
            .offset(offset)
            .execution_options(populate_existing=True)
        )
        if activity_type:
            query = query.where(Activity.activity_type == activity_type)
        if limit is not None:
            query = query.limit(limit)

        result = await self.db.execute(query)
        return list(result.scalars().all())

    async def count_for_user(self, user_id: str, activity_type: str | None = None) -> int:
        query = (
            select(func.count())
            .select_from(Activity)
            .where(Activity.user_id == user_id)
        )
        if activity_type:
            query = query.where(Activity.activity_type == activity_type)

        result = await self.db.execute(query)
        return result.scalar() or 0
