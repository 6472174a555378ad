"""Persistence gateway contract consumed by the roadmap core.

Implementations live in ``daily_roadmap.adapters``. Every method is a
coroutine; failures surface as ``TransientStoreError`` and mutations of ids
the owner does not have raise ``NotFoundError``.
"""

from __future__ import annotations

from datetime import date
from typing import Any, Iterable, Mapping, Optional, Protocol

from daily_roadmap.schema import Activity

# Fields callers may pass to insert/update; ``id`` is always store-assigned.
ACTIVITY_FIELDS = ("title", "duration_minutes", "icon_tag", "color_tag", "sort_order", "notes")


class PersistenceGateway(Protocol):
    async def list_activities(self, owner: str) -> list[Activity]:
        """Return the owner's activities ordered by ``sort_order``."""

    async def insert_activity(self, owner: str, fields: Mapping[str, Any]) -> Activity:
        ...

    async def update_activity(self, owner: str, activity_id: str, fields: Mapping[str, Any]) -> None:
        ...

    async def delete_activity(self, owner: str, activity_id: str) -> None:
        ...

    async def bulk_set_sort_order(self, owner: str, ranks: Iterable[tuple[str, int]]) -> None:
        ...

    async def load_completion(self, owner: str, day: date) -> dict[str, bool]:
        ...

    async def upsert_completion(self, owner: str, activity_id: str, day: date, completed: bool) -> None:
        ...

    async def load_start_time(self, owner: str, day: date) -> Optional[int]:
        ...

    async def upsert_start_time(self, owner: str, day: date, start_minutes: int) -> None:
        ...

    async def list_distinct_completion_dates(self, owner: str) -> set[date]:
        ...


def clean_fields(fields: Mapping[str, Any]) -> dict[str, Any]:
    """Drop keys that are not writable activity columns."""

    return {key: value for key, value in fields.items() if key in ACTIVITY_FIELDS}
