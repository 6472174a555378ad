"""Reordering of the activity list with dense rank write-back."""

from __future__ import annotations

from collections import Counter
from dataclasses import replace
from typing import Sequence, Union

from daily_roadmap.activities import ActivityList
from daily_roadmap.const import LOGGER
from daily_roadmap.errors import TransientStoreError, ValidationError
from daily_roadmap.schema import Activity, StoreResult


def _as_ids(sequence: Sequence[Union[Activity, str]]) -> list[str]:
    return [item.id if isinstance(item, Activity) else str(item) for item in sequence]


def dense_ranks(activity_ids: Sequence[str]) -> list[tuple[str, int]]:
    """Pair each id with its zero-based position."""

    return [(activity_id, rank) for rank, activity_id in enumerate(activity_ids)]


class ReorderEngine:
    """Applies a full new ordering and persists ranks 0..n-1.

    Every rank is rewritten on each call, moved or not, so the stored ranks
    stay a dense permutation. A drag gesture calls ``move`` once per slot
    crossed and each call persists immediately.
    """

    def __init__(self, activity_list: ActivityList) -> None:
        self.activity_list = activity_list

    async def reorder(self, new_sequence: Sequence[Union[Activity, str]]) -> StoreResult:
        current = self.activity_list.activities
        new_ids = _as_ids(new_sequence)
        if Counter(new_ids) != Counter(activity.id for activity in current):
            raise ValidationError("order", "must be a permutation of the current activities", new_ids)

        by_id = {activity.id: activity for activity in current}
        reordered = [replace(by_id[activity_id], sort_order=rank) for rank, activity_id in enumerate(new_ids)]
        self.activity_list.publish(reordered)
        self.activity_list.order_version += 1
        order_version = self.activity_list.order_version

        try:
            await self.activity_list.gateway.bulk_set_sort_order(self.activity_list.owner, dense_ranks(new_ids))
        except TransientStoreError as exc:
            # A newer ordering applied while this write was in flight wins.
            if self.activity_list.order_version == order_version:
                self._restore_order(current)
                LOGGER.warning("Reorder reverted: %s", exc)
            else:
                LOGGER.warning("Reorder write failed after a newer order was applied: %s", exc)
            return StoreResult.failure(exc)
        return StoreResult.success(self.activity_list.activities)

    def _restore_order(self, previous: Sequence[Activity]) -> None:
        """Put back the previous positions and ranks, keeping other field edits."""

        latest = {activity.id: activity for activity in self.activity_list.activities}
        restored = [
            replace(latest.pop(activity.id), sort_order=activity.sort_order)
            for activity in previous
            if activity.id in latest
        ]
        self.activity_list.publish([*restored, *latest.values()])

    async def move(self, from_index: int, to_index: int) -> StoreResult:
        """Move one activity to another slot and persist the whole order."""

        items = list(self.activity_list.activities)
        if not (0 <= from_index < len(items)) or not (0 <= to_index < len(items)):
            raise ValidationError("index", f"must be within 0..{len(items) - 1}", (from_index, to_index))
        if from_index == to_index:
            return StoreResult.success(self.activity_list.activities)
        moved = items.pop(from_index)
        items.insert(to_index, moved)
        return await self.reorder(items)

    async def move_up(self, activity_id: str) -> StoreResult:
        return await self._step(activity_id, -1)

    async def move_down(self, activity_id: str) -> StoreResult:
        return await self._step(activity_id, 1)

    async def normalize(self) -> StoreResult:
        """Rewrite ranks for the current order, closing gaps left by deletes."""

        return await self.reorder(self.activity_list.activities)

    async def _step(self, activity_id: str, offset: int) -> StoreResult:
        ids = [activity.id for activity in self.activity_list.activities]
        if activity_id not in ids:
            return StoreResult.success(self.activity_list.activities)
        index = ids.index(activity_id)
        target = index + offset
        if not 0 <= target < len(ids):
            return StoreResult.success(self.activity_list.activities)
        return await self.move(index, target)
