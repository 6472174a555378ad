"""Canonical activity list for one owner, with validation and CRUD."""

from __future__ import annotations

from dataclasses import replace
from typing import Iterable, Optional

from daily_roadmap.const import (
    COLOR_TAGS,
    DEFAULT_DURATION_MINUTES,
    ICON_TAGS,
    LOGGER,
    MAX_NOTES_LENGTH,
    MAX_TITLE_LENGTH,
    MIN_DURATION_MINUTES,
    SEED_ACTIVITIES,
)
from daily_roadmap.errors import NotFoundError, TransientStoreError, ValidationError
from daily_roadmap.gateway import PersistenceGateway
from daily_roadmap.schema import Activity, StoreResult
from daily_roadmap.timeline import adjust_duration, order_activities


def validate_title(title: str) -> str:
    cleaned = (title or "").strip()
    if not cleaned:
        raise ValidationError("title", "must not be empty", title)
    if len(cleaned) > MAX_TITLE_LENGTH:
        raise ValidationError("title", f"must be at most {MAX_TITLE_LENGTH} characters", title)
    return cleaned


def validate_duration(duration_minutes: int) -> int:
    if isinstance(duration_minutes, bool) or not isinstance(duration_minutes, int):
        raise ValidationError("duration_minutes", "must be an integer", duration_minutes)
    if duration_minutes < MIN_DURATION_MINUTES:
        raise ValidationError("duration_minutes", f"must be at least {MIN_DURATION_MINUTES}", duration_minutes)
    return duration_minutes


def validate_notes(notes: str) -> str:
    cleaned = (notes or "").strip()
    if len(cleaned) > MAX_NOTES_LENGTH:
        raise ValidationError("notes", f"must be at most {MAX_NOTES_LENGTH} characters", notes)
    return cleaned


def validate_icon(icon_tag: str) -> str:
    if icon_tag not in ICON_TAGS:
        raise ValidationError("icon_tag", f"unknown icon '{icon_tag}'", icon_tag)
    return icon_tag


class ActivityList:
    """Owns the in-memory activity sequence for a session.

    Every mutation publishes a fresh immutable snapshot and bumps ``version``.
    Edits are applied locally first and reverted if the store rejects them
    with ``TransientStoreError``; ``NotFoundError`` means the activity is
    already gone remotely, so the local copy is dropped and the call is a
    no-op.
    """

    def __init__(self, gateway: PersistenceGateway, owner: str) -> None:
        self.gateway = gateway
        self.owner = owner
        self._snapshot: tuple[Activity, ...] = ()
        self.version = 0
        # Bumped only by reorders; lets a failed reorder tell whether it was superseded.
        self.order_version = 0

    @property
    def activities(self) -> tuple[Activity, ...]:
        return self._snapshot

    def __len__(self) -> int:
        return len(self._snapshot)

    def ids(self) -> set[str]:
        return {activity.id for activity in self._snapshot}

    def get(self, activity_id: str) -> Optional[Activity]:
        for activity in self._snapshot:
            if activity.id == activity_id:
                return activity
        return None

    def publish(self, activities: Iterable[Activity]) -> tuple[Activity, ...]:
        self._snapshot = tuple(activities)
        self.version += 1
        return self._snapshot

    async def load(self) -> StoreResult:
        try:
            loaded = await self.gateway.list_activities(self.owner)
        except TransientStoreError as exc:
            LOGGER.warning("Could not load activities for %s: %s", self.owner, exc)
            return StoreResult.failure(exc)
        return StoreResult.success(self.publish(order_activities(loaded)))

    async def seed_defaults(self) -> StoreResult:
        """Insert the default set when the owner has no activities yet."""

        if self._snapshot:
            return StoreResult.success(self._snapshot)

        created: list[Activity] = []
        try:
            for rank, template in enumerate(SEED_ACTIVITIES):
                fields = {**template, "sort_order": rank, "notes": ""}
                created.append(await self.gateway.insert_activity(self.owner, fields))
        except TransientStoreError as exc:
            LOGGER.warning("Seeding stopped after %d of %d activities: %s", len(created), len(SEED_ACTIVITIES), exc)
            self.publish(created)
            return StoreResult.failure(exc)

        LOGGER.debug("Seeded %d default activities for %s", len(created), self.owner)
        return StoreResult.success(self.publish(created))

    async def add(
        self,
        title: str,
        duration_minutes: int = DEFAULT_DURATION_MINUTES,
        notes: str = "",
        icon_tag: Optional[str] = None,
        color_tag: Optional[str] = None,
    ) -> StoreResult:
        """Append a new activity at the end of the list."""

        position = len(self._snapshot)
        fields = {
            "title": validate_title(title),
            "duration_minutes": validate_duration(duration_minutes),
            "notes": validate_notes(notes),
            "icon_tag": validate_icon(icon_tag) if icon_tag else ICON_TAGS[position % len(ICON_TAGS)],
            "color_tag": color_tag or COLOR_TAGS[position % len(COLOR_TAGS)],
            "sort_order": position,
        }
        try:
            activity = await self.gateway.insert_activity(self.owner, fields)
        except TransientStoreError as exc:
            LOGGER.warning("Could not add activity '%s': %s", fields["title"], exc)
            return StoreResult.failure(exc)

        self.publish((*self._snapshot, activity))
        return StoreResult.success(activity)

    async def rename(self, activity_id: str, title: str) -> StoreResult:
        return await self._update(activity_id, title=validate_title(title))

    async def set_duration(self, activity_id: str, duration_minutes: int) -> StoreResult:
        return await self._update(activity_id, duration_minutes=validate_duration(duration_minutes))

    async def change_duration(self, activity_id: str, delta: int) -> StoreResult:
        """Step the duration by ``delta`` minutes, floored at the minimum."""

        current = self.get(activity_id)
        if current is None:
            return StoreResult.success(None)
        return await self._update(activity_id, duration_minutes=adjust_duration(current.duration_minutes, delta))

    async def edit_notes(self, activity_id: str, notes: str) -> StoreResult:
        return await self._update(activity_id, notes=validate_notes(notes))

    async def delete(self, activity_id: str) -> StoreResult:
        """Remove an activity; remaining ranks keep their gap until reordered."""

        position = self._index_of(activity_id)
        if position is None:
            return StoreResult.success(None)
        removed = self._snapshot[position]
        self.publish(a for a in self._snapshot if a.id != activity_id)

        try:
            await self.gateway.delete_activity(self.owner, activity_id)
        except NotFoundError:
            LOGGER.debug("Activity %s was already deleted", activity_id)
        except TransientStoreError as exc:
            LOGGER.warning("Delete of %s reverted: %s", activity_id, exc)
            restored = list(self._snapshot)
            restored.insert(min(position, len(restored)), removed)
            self.publish(restored)
            return StoreResult.failure(exc)
        return StoreResult.success(removed)

    def _index_of(self, activity_id: str) -> Optional[int]:
        for index, activity in enumerate(self._snapshot):
            if activity.id == activity_id:
                return index
        return None

    def _swap_in(self, activity: Activity) -> None:
        self.publish(activity if a.id == activity.id else a for a in self._snapshot)

    async def _update(self, activity_id: str, **fields) -> StoreResult:
        current = self.get(activity_id)
        if current is None:
            LOGGER.debug("Ignoring update of unknown activity %s", activity_id)
            return StoreResult.success(None)

        updated = replace(current, **fields)
        self._swap_in(updated)
        try:
            await self.gateway.update_activity(self.owner, activity_id, fields)
        except NotFoundError:
            LOGGER.debug("Activity %s vanished remotely; dropping local copy", activity_id)
            self.publish(a for a in self._snapshot if a.id != activity_id)
            return StoreResult.success(None)
        except TransientStoreError as exc:
            LOGGER.warning("Update of %s reverted: %s", activity_id, exc)
            latest = self.get(activity_id)
            if latest is not None:
                # Only undo fields this call wrote and nobody has written since.
                restored = {
                    name: getattr(current, name) for name, value in fields.items() if getattr(latest, name) == value
                }
                if restored:
                    self._swap_in(replace(latest, **restored))
            return StoreResult.failure(exc)
        return StoreResult.success(updated)
