"""In-memory persistence gateway, used by tests and the demo."""

from __future__ import annotations

import asyncio
import uuid
from collections import Counter, defaultdict
from dataclasses import replace
from datetime import date
from typing import Any, Iterable, Mapping, Optional

from daily_roadmap.errors import NotFoundError, TransientStoreError
from daily_roadmap.gateway import clean_fields
from daily_roadmap.schema import Activity, CompletionRecord, DayStartSetting


class MemoryGateway:
    """Dict-backed gateway keyed by (owner, id) and (owner, date).

    ``fail_next`` and ``failing_dates`` inject ``TransientStoreError`` so that
    revert and unknown-date paths can be exercised.
    """

    def __init__(self) -> None:
        self._activities: dict[str, dict[str, Activity]] = defaultdict(dict)
        self._inserted: dict[str, int] = {}
        self._completions: dict[tuple[str, str, date], CompletionRecord] = {}
        self._start_times: dict[tuple[str, date], DayStartSetting] = {}
        self._pending_failures: Counter = Counter()
        self._sequence = 0
        self.failing_dates: set[date] = set()
        self.calls: list[str] = []

    def fail_next(self, method: str, times: int = 1) -> None:
        self._pending_failures[method] += times

    async def _enter(self, method: str) -> None:
        self.calls.append(method)
        # Yield once so concurrent callers interleave as with a real store.
        await asyncio.sleep(0)
        if self._pending_failures[method] > 0:
            self._pending_failures[method] -= 1
            raise TransientStoreError(method, "injected failure")

    def _owned(self, owner: str, activity_id: str) -> Activity:
        try:
            return self._activities[owner][activity_id]
        except KeyError:
            raise NotFoundError(activity_id) from None

    async def list_activities(self, owner: str) -> list[Activity]:
        await self._enter("list_activities")
        items = self._activities[owner].values()
        return sorted(items, key=lambda a: (a.sort_order, self._inserted[a.id]))

    async def insert_activity(self, owner: str, fields: Mapping[str, Any]) -> Activity:
        await self._enter("insert_activity")
        activity = Activity(id=uuid.uuid4().hex, **clean_fields(fields))
        self._activities[owner][activity.id] = activity
        self._sequence += 1
        self._inserted[activity.id] = self._sequence
        return activity

    async def update_activity(self, owner: str, activity_id: str, fields: Mapping[str, Any]) -> None:
        await self._enter("update_activity")
        current = self._owned(owner, activity_id)
        self._activities[owner][activity_id] = replace(current, **clean_fields(fields))

    async def delete_activity(self, owner: str, activity_id: str) -> None:
        await self._enter("delete_activity")
        self._owned(owner, activity_id)
        del self._activities[owner][activity_id]

    async def bulk_set_sort_order(self, owner: str, ranks: Iterable[tuple[str, int]]) -> None:
        await self._enter("bulk_set_sort_order")
        owned = self._activities[owner]
        for activity_id, rank in ranks:
            # ids deleted meanwhile are skipped, like an UPDATE matching no row
            if activity_id in owned:
                owned[activity_id] = replace(owned[activity_id], sort_order=rank)

    async def load_completion(self, owner: str, day: date) -> dict[str, bool]:
        await self._enter("load_completion")
        if day in self.failing_dates:
            raise TransientStoreError("load_completion", f"date {day.isoformat()} unavailable")
        return {
            record.activity_id: record.completed
            for record in self._completions.values()
            if record.owner == owner and record.date == day
        }

    async def upsert_completion(self, owner: str, activity_id: str, day: date, completed: bool) -> None:
        await self._enter("upsert_completion")
        self._completions[(owner, activity_id, day)] = CompletionRecord(owner, activity_id, day, bool(completed))

    async def load_start_time(self, owner: str, day: date) -> Optional[int]:
        await self._enter("load_start_time")
        setting = self._start_times.get((owner, day))
        return None if setting is None else setting.start_minutes

    async def upsert_start_time(self, owner: str, day: date, start_minutes: int) -> None:
        await self._enter("upsert_start_time")
        self._start_times[(owner, day)] = DayStartSetting(owner, day, int(start_minutes))

    async def list_distinct_completion_dates(self, owner: str) -> set[date]:
        await self._enter("list_distinct_completion_dates")
        return {record.date for record in self._completions.values() if record.owner == owner}
