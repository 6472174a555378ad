"""Derived daily timeline and clock helpers."""

from __future__ import annotations

from typing import Iterable, Sequence

from daily_roadmap.const import (
    DEFAULT_START_MINUTES,
    MAX_START_MINUTES,
    MIN_DURATION_MINUTES,
)
from daily_roadmap.schema import Activity, ScheduledWindow


def order_activities(activities: Iterable[Activity]) -> list[Activity]:
    """Sort by ``sort_order``; ties keep their incoming order."""

    return sorted(activities, key=lambda activity: activity.sort_order)


def build_timeline(activities: Sequence[Activity], start_minutes: int) -> list[ScheduledWindow]:
    """Lay activities end to end starting at ``start_minutes``.

    Inputs are trusted: callers clamp the start time and durations.
    """

    windows: list[ScheduledWindow] = []
    cursor = start_minutes
    for activity in activities:
        end = cursor + activity.duration_minutes
        windows.append(ScheduledWindow(activity_id=activity.id, start_minutes=cursor, end_minutes=end))
        cursor = end
    return windows


def day_end(activities: Sequence[Activity], start_minutes: int) -> int:
    return start_minutes + total_minutes(activities)


def total_minutes(activities: Iterable[Activity]) -> int:
    return sum(activity.duration_minutes for activity in activities)


def clamp_start_minutes(minutes: int) -> int:
    return max(0, min(MAX_START_MINUTES, int(minutes)))


def adjust_start_minutes(current: int, delta: int) -> int:
    return clamp_start_minutes(current + delta)


def adjust_duration(current: int, delta: int) -> int:
    """Apply a duration step; never below the floor, no upper bound."""

    return max(MIN_DURATION_MINUTES, int(current) + int(delta))


def format_clock(minutes: int) -> str:
    # Days running past midnight show 24:00, 25:30, ... rather than wrapping.
    hours, mins = divmod(int(minutes), 60)
    return f"{hours:02d}:{mins:02d}"


def format_duration(minutes: int) -> str:
    hours, mins = divmod(int(minutes), 60)
    if hours == 0:
        return f"{mins}m"
    if mins == 0:
        return f"{hours}h"
    return f"{hours}h {mins}m"


def format_window(window: ScheduledWindow) -> str:
    return f"{format_clock(window.start_minutes)} - {format_clock(window.end_minutes)}"


def describe_timeline(activities: Sequence[Activity], start_minutes: int = DEFAULT_START_MINUTES) -> list[dict]:
    """Return display-ready rows pairing each activity with its window."""

    windows = build_timeline(activities, start_minutes)
    return [
        {
            "activity_id": activity.id,
            "title": activity.title,
            "duration": format_duration(activity.duration_minutes),
            "start": format_clock(window.start_minutes),
            "end": format_clock(window.end_minutes),
            "time_range": format_window(window),
        }
        for activity, window in zip(activities, windows)
    ]
