"""Core data schema for activities, progress and summaries."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from typing import Any, Optional

from daily_roadmap.const import STATUS_OK, STATUS_UNKNOWN


@dataclass(frozen=True)
class Activity:
    """A named, duration-bounded entry of the user's daily list."""

    id: str
    title: str
    duration_minutes: int
    icon_tag: str = "Target"
    color_tag: str = "sky-cyan"
    sort_order: int = 0
    notes: str = ""


@dataclass(frozen=True)
class DayStartSetting:
    owner: str
    date: date
    start_minutes: int


@dataclass(frozen=True)
class CompletionRecord:
    owner: str
    activity_id: str
    date: date
    completed: bool


@dataclass(frozen=True)
class ScheduledWindow:
    """Derived start/end pair for one activity; never persisted."""

    activity_id: str
    start_minutes: int
    end_minutes: int


@dataclass
class DailySummary:
    """Completion statistics for a single date."""

    date: date
    total_activities: int
    completed_count: int
    percentage: int
    status: str = STATUS_OK

    @property
    def known(self) -> bool:
        return self.status != STATUS_UNKNOWN

    @property
    def perfect(self) -> bool:
        return self.known and self.total_activities > 0 and self.completed_count == self.total_activities


@dataclass
class RangeSummary:
    """Per-date summaries for a contiguous range plus range-level totals."""

    days: list[DailySummary]
    perfect_day_count: int
    average_percentage: float
    failed_dates: list[date] = field(default_factory=list)


@dataclass
class StoreResult:
    """Outcome of a call that reached the store.

    Callers branch on ``ok`` to either keep or revert their local state.
    """

    ok: bool
    value: Any = None
    error: Optional[Exception] = None

    @classmethod
    def success(cls, value: Any = None) -> "StoreResult":
        return cls(ok=True, value=value)

    @classmethod
    def failure(cls, error: Exception) -> "StoreResult":
        return cls(ok=False, error=error)
