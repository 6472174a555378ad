"""Per-date and range-level completion statistics."""

from __future__ import annotations

import asyncio
from datetime import date, timedelta
from typing import Awaitable, Callable, Mapping, Sequence

import numpy as np

from daily_roadmap.const import DEFAULT_WEEK_DAYS, LOGGER, STATUS_UNKNOWN
from daily_roadmap.schema import Activity, DailySummary, RangeSummary

CompletionLoader = Callable[[date], Awaitable[Mapping[str, bool]]]

_MOTIVATION_TIERS = (
    (100, "complete", "Incredible! You've completed all tasks today!"),
    (75, "on_fire", "Almost there! You're on fire!"),
    (50, "strong", "Great progress! Keep going strong!"),
    (25, "momentum", "Nice momentum! Keep pushing forward!"),
    (0, "start", "Every journey begins with a single step. You've got this!"),
)


def completion_percentage(completed: int, total: int) -> int:
    """Integer percentage rounded half up; an empty list counts as 0%.

    Only a fully completed list reaches 100, so 199 of 200 reports 99.
    """

    denominator = max(total, 1)
    percentage = (200 * completed + denominator) // (2 * denominator)
    if completed < total:
        return min(percentage, 99)
    return percentage


def summarize_day(day: date, activities: Sequence[Activity], completion: Mapping[str, bool]) -> DailySummary:
    """Summarize one date against the current activity list.

    Records for activities no longer in the list are ignored so the
    numerator and denominator describe the same set.
    """

    current_ids = {activity.id for activity in activities}
    completed = sum(1 for activity_id, done in completion.items() if done and activity_id in current_ids)
    total = len(current_ids)
    return DailySummary(
        date=day,
        total_activities=total,
        completed_count=completed,
        percentage=completion_percentage(completed, total),
    )


def unknown_day(day: date, total: int) -> DailySummary:
    return DailySummary(date=day, total_activities=total, completed_count=0, percentage=0, status=STATUS_UNKNOWN)


def is_perfect(summary: DailySummary) -> bool:
    return summary.perfect


def week_dates(end: date, days: int = DEFAULT_WEEK_DAYS) -> list[date]:
    """Contiguous dates ending at ``end``, oldest first."""

    if days < 1:
        raise ValueError("days must be positive")
    return [end - timedelta(days=offset) for offset in range(days - 1, -1, -1)]


def combine(days: list[DailySummary]) -> RangeSummary:
    """Range totals over the dates whose load succeeded."""

    known = [summary for summary in days if summary.known]
    percentages = np.array([summary.percentage for summary in known], dtype=float)
    return RangeSummary(
        days=days,
        perfect_day_count=sum(1 for summary in known if summary.perfect),
        average_percentage=float(percentages.mean()) if percentages.size else 0.0,
        failed_dates=[summary.date for summary in days if not summary.known],
    )


async def summarize_range(
    dates: Sequence[date],
    activities: Sequence[Activity],
    loader: CompletionLoader,
) -> RangeSummary:
    """Load every date concurrently, wait for all, then summarize.

    A date whose load raised is reported with status ``unknown`` instead of
    as an empty day.
    """

    snapshot = tuple(activities)
    results = await asyncio.gather(*(loader(day) for day in dates), return_exceptions=True)

    days: list[DailySummary] = []
    for day, result in zip(dates, results):
        if isinstance(result, BaseException):
            if not isinstance(result, Exception):
                raise result
            LOGGER.warning("Completion for %s unavailable: %s", day.isoformat(), result)
            days.append(unknown_day(day, len(snapshot)))
            continue
        days.append(summarize_day(day, snapshot, result))
    return combine(days)


async def summarize_week(
    end: date,
    activities: Sequence[Activity],
    loader: CompletionLoader,
    days: int = DEFAULT_WEEK_DAYS,
) -> RangeSummary:
    return await summarize_range(week_dates(end, days), activities, loader)


def motivation_for(percentage: int) -> dict:
    """Encouragement tier for a day's completion percentage."""

    for threshold, tier, text in _MOTIVATION_TIERS:
        if percentage >= threshold:
            return {"tier": tier, "text": text}
    return {"tier": _MOTIVATION_TIERS[-1][1], "text": _MOTIVATION_TIERS[-1][2]}
