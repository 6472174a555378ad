"""Per-date completion state and day-start settings."""

from __future__ import annotations

from datetime import date
from typing import Iterable, Mapping

from daily_roadmap.const import DEFAULT_START_MINUTES, LOGGER
from daily_roadmap.errors import TransientStoreError
from daily_roadmap.gateway import PersistenceGateway
from daily_roadmap.schema import StoreResult
from daily_roadmap.timeline import clamp_start_minutes


def is_completed(progress: Mapping[str, bool], activity_id: str) -> bool:
    """Absent entries mean not completed."""

    return bool(progress.get(activity_id, False))


def neighbor_date(dates: list[date], current: date, direction: str) -> date:
    """Step through newest-first ``dates``; stays put at either end.

    ``prev`` moves to an older date, ``next`` to a newer one.
    """

    if direction not in ("prev", "next"):
        raise ValueError(f"direction must be 'prev' or 'next', got '{direction}'")
    if current not in dates:
        return current
    index = dates.index(current)
    if direction == "prev" and index < len(dates) - 1:
        return dates[index + 1]
    if direction == "next" and index > 0:
        return dates[index - 1]
    return current


class ProgressStore:
    """Loads and toggles completion maps for one owner, keyed by date.

    Nothing here looks at the current activity list; records for deleted
    activities are returned as-is and filtered by the aggregator.
    """

    def __init__(
        self,
        gateway: PersistenceGateway,
        owner: str,
        default_start_minutes: int = DEFAULT_START_MINUTES,
    ) -> None:
        self.gateway = gateway
        self.owner = owner
        self.default_start_minutes = clamp_start_minutes(default_start_minutes)

    async def load(self, day: date) -> dict[str, bool]:
        return await self.gateway.load_completion(self.owner, day)

    async def toggle(self, activity_id: str, day: date, previous_value: bool) -> StoreResult:
        """Persist the flipped value; the result carries the new value."""

        new_value = not previous_value
        try:
            await self.gateway.upsert_completion(self.owner, activity_id, day, new_value)
        except TransientStoreError as exc:
            LOGGER.warning("Toggle of %s on %s not saved: %s", activity_id, day.isoformat(), exc)
            return StoreResult.failure(exc)
        LOGGER.debug("Activity %s on %s set to %s", activity_id, day.isoformat(), new_value)
        return StoreResult.success(new_value)

    async def load_start_time(self, day: date) -> int:
        stored = await self.gateway.load_start_time(self.owner, day)
        return self.default_start_minutes if stored is None else int(stored)

    async def save_start_time(self, day: date, start_minutes: int) -> StoreResult:
        value = clamp_start_minutes(start_minutes)
        try:
            await self.gateway.upsert_start_time(self.owner, day, value)
        except TransientStoreError as exc:
            LOGGER.warning("Start time for %s not saved: %s", day.isoformat(), exc)
            return StoreResult.failure(exc)
        return StoreResult.success(value)

    async def reset_start_time(self, day: date) -> StoreResult:
        return await self.save_start_time(day, self.default_start_minutes)

    async def history_dates(self, today: date, extra: Iterable[date] = ()) -> list[date]:
        """Dates with any completion record, plus today, newest first."""

        dates = await self.gateway.list_distinct_completion_dates(self.owner)
        return sorted({today, *dates, *extra}, reverse=True)
