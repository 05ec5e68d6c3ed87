"""
Strava activity model.

Activities are keyed by (user_id, external_id): a re-sync overwrites the
existing row instead of inserting a duplicate. Rows are never deleted by
sync or disconnect.
"""

from datetime import datetime

from sqlalchemy import Column, String, DateTime, Integer, Float, BigInteger, Text, UniqueConstraint

from fitdash.models.base import Base


class Activity(Base):
    """Activity summary synced from Strava."""

    __tablename__ = "activities"
    __table_args__ = (
        UniqueConstraint("user_id", "external_id", name="uq_activities_user_external"),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(String(36), nullable=False, index=True)

    # Strava activity ID
    external_id = Column(BigInteger, nullable=False)

    # Activity info
    name = Column(String(255), nullable=False, default="")
    activity_type = Column(String(50), nullable=False)  # Run, Ride, Hike, etc.
    start_date = Column(DateTime, nullable=False, index=True)  # UTC

    # Core metrics
    distance_m = Column(Float, nullable=False, default=0)
    moving_time_s = Column(Integer, nullable=False, default=0)
    elapsed_time_s = Column(Integer, nullable=False, default=0)
    elevation_gain_m = Column(Float, nullable=False, default=0)

    # Speed (meters per second)
    avg_speed_mps = Column(Float, nullable=False, default=0)
    max_speed_mps = Column(Float, nullable=False, default=0)

    # Heart rate (if recorded)
    avg_heartrate = Column(Float, nullable=True)
    max_heartrate = Column(Float, nullable=True)

    # Encoded summary polyline
    polyline = Column(Text, nullable=True)

    # Sync metadata
    synced_at = Column(DateTime, default=datetime.utcnow)

    def __repr__(self):
        return f"<Activity {self.external_id} {self.activity_type} {self.distance_m}m>"
