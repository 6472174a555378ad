"""Optimistic view state for one selected day."""

from __future__ import annotations

import asyncio
import itertools
from datetime import date
from typing import Optional

from daily_roadmap.activities import ActivityList
from daily_roadmap.aggregator import summarize_day
from daily_roadmap.const import LOGGER, START_STEP_MINUTES
from daily_roadmap.errors import TransientStoreError
from daily_roadmap.progress import ProgressStore, is_completed
from daily_roadmap.schema import DailySummary, ScheduledWindow, StoreResult
from daily_roadmap.timeline import adjust_start_minutes, build_timeline, clamp_start_minutes, day_end


class DaySession:
    """Local progress map and start time for ``day``.

    Mutations are applied locally, tracked as pending, and reconciled when
    the store answers: success keeps the local value, failure reverts it and
    adds a message to ``notices``. A pending mutation that has since been
    superseded by a newer one on the same key is not reverted.
    """

    def __init__(self, activity_list: ActivityList, progress_store: ProgressStore, day: date) -> None:
        self.activity_list = activity_list
        self.progress_store = progress_store
        self.day = day
        self.progress: dict[str, bool] = {}
        self.start_minutes = progress_store.default_start_minutes
        self.notices: list[str] = []
        self._pending: dict[tuple, int] = {}
        self._tokens = itertools.count(1)

    @property
    def pending(self) -> set[tuple]:
        return set(self._pending)

    async def open(self) -> StoreResult:
        """Load progress and start time for the current day together."""

        try:
            progress, start_minutes = await asyncio.gather(
                self.progress_store.load(self.day),
                self.progress_store.load_start_time(self.day),
            )
        except TransientStoreError as exc:
            self.notices.append(f"Could not load {self.day.isoformat()}: {exc}")
            return StoreResult.failure(exc)
        self.progress = dict(progress)
        self.start_minutes = start_minutes
        return StoreResult.success(self.day)

    async def select_date(self, day: date) -> StoreResult:
        self.day = day
        self.progress = {}
        self.start_minutes = self.progress_store.default_start_minutes
        self._pending.clear()
        return await self.open()

    def _begin(self, key: tuple) -> int:
        token = next(self._tokens)
        self._pending[key] = token
        return token

    def _settle(self, key: tuple, token: int) -> bool:
        """Clear the pending entry; True if this mutation was still the latest."""

        if self._pending.get(key) != token:
            return False
        del self._pending[key]
        return True

    async def toggle(self, activity_id: str) -> StoreResult:
        day = self.day
        previous = is_completed(self.progress, activity_id)
        key = ("completion", activity_id, day)
        token = self._begin(key)
        self.progress[activity_id] = not previous

        result = await self.progress_store.toggle(activity_id, day, previous)
        latest = self._settle(key, token)
        if not result.ok and latest and self.day == day:
            self.progress[activity_id] = previous
            self.notices.append(f"Could not save progress for {activity_id}; change reverted")
        return result

    async def set_start_time(self, start_minutes: int) -> StoreResult:
        day = self.day
        previous = self.start_minutes
        key = ("start_time", day)
        token = self._begin(key)
        self.start_minutes = clamp_start_minutes(start_minutes)

        result = await self.progress_store.save_start_time(day, self.start_minutes)
        latest = self._settle(key, token)
        if not result.ok and latest and self.day == day:
            LOGGER.warning("Start time change for %s reverted", day.isoformat())
            self.start_minutes = previous
            self.notices.append("Could not save start time; change reverted")
        return result

    async def adjust_start_time(self, delta: int = START_STEP_MINUTES) -> StoreResult:
        return await self.set_start_time(adjust_start_minutes(self.start_minutes, delta))

    async def reset_start_time(self) -> StoreResult:
        return await self.set_start_time(self.progress_store.default_start_minutes)

    def timeline(self) -> list[ScheduledWindow]:
        return build_timeline(self.activity_list.activities, self.start_minutes)

    def end_minutes(self) -> int:
        return day_end(self.activity_list.activities, self.start_minutes)

    def summary(self) -> DailySummary:
        return summarize_day(self.day, self.activity_list.activities, self.progress)

    def remaining(self) -> int:
        summary = self.summary()
        return summary.total_activities - summary.completed_count

    def pop_notices(self) -> list[str]:
        notices, self.notices = self.notices, []
        return notices

    def window_for(self, activity_id: str) -> Optional[ScheduledWindow]:
        for window in self.timeline():
            if window.activity_id == activity_id:
                return window
        return None
