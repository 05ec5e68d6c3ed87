"""
Aggregate activity statistics for the dashboard.
"""

from typing import Sequence

from .schemas import ActivityRecord, ActivityStats, MonthlyDistance


def monthly_distance(activities: Sequence[ActivityRecord]) -> list[MonthlyDistance]:
    """Distance (km) and count per calendar month, oldest month first."""
    buckets: dict[tuple[int, int], list[float]] = {}
    for activity in activities:
        key = (activity.start_date.year, activity.start_date.month)
        bucket = buckets.setdefault(key, [0.0, 0])
        bucket[0] += activity.distance_m / 1000
        bucket[1] += 1

    return [
        MonthlyDistance(
            month=f"{month}/{year}",
            distance_km=round(distance, 1),
            count=count,
        )
        for (year, month), (distance, count) in sorted(buckets.items())
    ]


def summarize(activities: Sequence[ActivityRecord]) -> ActivityStats:
    """Totals over a list of activities. Average speed is distance / moving time."""
    total_distance = sum(a.distance_m for a in activities)
    total_time = sum(a.moving_time_s for a in activities)
    total_elevation = sum(a.elevation_gain_m for a in activities)

    return ActivityStats(
        total_activities=len(activities),
        total_distance_m=total_distance,
        total_moving_time_s=total_time,
        total_elevation_m=total_elevation,
        average_speed_kmh=round(total_distance / total_time * 3.6, 2) if total_time else 0,
        by_month=monthly_distance(activities),
    )
