"""SQLite persistence gateway used by the command line tool."""

from __future__ import annotations

import asyncio
import sqlite3
import uuid
from contextlib import contextmanager
from datetime import date
from typing import Any, Iterable, Iterator, Mapping, Optional

from daily_roadmap.const import LOGGER
from daily_roadmap.errors import NotFoundError, TransientStoreError
from daily_roadmap.gateway import clean_fields
from daily_roadmap.schema import Activity

_SCHEMA = (
    """
    CREATE TABLE IF NOT EXISTS activities (
        owner TEXT NOT NULL,
        id TEXT NOT NULL,
        title TEXT NOT NULL,
        duration_minutes INTEGER NOT NULL,
        icon_tag TEXT NOT NULL DEFAULT 'Target',
        color_tag TEXT NOT NULL DEFAULT 'sky-cyan',
        sort_order INTEGER NOT NULL DEFAULT 0,
        notes TEXT NOT NULL DEFAULT '',
        PRIMARY KEY (owner, id)
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS completions (
        owner TEXT NOT NULL,
        activity_id TEXT NOT NULL,
        day TEXT NOT NULL,
        completed INTEGER NOT NULL,
        PRIMARY KEY (owner, activity_id, day)
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS day_settings (
        owner TEXT NOT NULL,
        day TEXT NOT NULL,
        start_minutes INTEGER NOT NULL,
        PRIMARY KEY (owner, day)
    )
    """,
)

_ACTIVITY_COLUMNS = "id, title, duration_minutes, icon_tag, color_tag, sort_order, notes"


def _row_to_activity(row: tuple) -> Activity:
    activity_id, title, duration, icon_tag, color_tag, sort_order, notes = row
    return Activity(
        id=str(activity_id),
        title=str(title),
        duration_minutes=int(duration),
        icon_tag=str(icon_tag),
        color_tag=str(color_tag),
        sort_order=int(sort_order),
        notes=notes or "",
    )


class SqliteGateway:
    """Gateway over a single SQLite file.

    Each call opens its own connection inside a worker thread, commits on
    success and rolls back on error. ``sqlite3.Error`` is reported as
    ``TransientStoreError``.
    """

    def __init__(self, database_path: str) -> None:
        self.database_path = database_path

    @contextmanager
    def _connect(self, operation: str) -> Iterator[sqlite3.Connection]:
        try:
            conn = sqlite3.connect(self.database_path)
        except sqlite3.Error as exc:
            raise TransientStoreError(operation, str(exc)) from exc
        try:
            yield conn
            conn.commit()
        except sqlite3.Error as exc:
            conn.rollback()
            LOGGER.debug("SQLite %s failed: %s", operation, exc)
            raise TransientStoreError(operation, str(exc)) from exc
        except BaseException:
            conn.rollback()
            raise
        finally:
            conn.close()

    def init_db(self) -> None:
        with self._connect("init_db") as conn:
            for statement in _SCHEMA:
                conn.execute(statement)

    async def _run(self, func, *args):
        return await asyncio.to_thread(func, *args)

    # Activities

    def _list_activities(self, owner: str) -> list[Activity]:
        with self._connect("list_activities") as conn:
            rows = conn.execute(
                f"""
                SELECT {_ACTIVITY_COLUMNS}
                FROM activities
                WHERE owner=?
                ORDER BY sort_order ASC, rowid ASC
                """,
                (owner,),
            ).fetchall()
        return [_row_to_activity(row) for row in rows]

    async def list_activities(self, owner: str) -> list[Activity]:
        return await self._run(self._list_activities, owner)

    def _insert_activity(self, owner: str, fields: Mapping[str, Any]) -> Activity:
        activity = Activity(id=uuid.uuid4().hex, **clean_fields(fields))
        with self._connect("insert_activity") as conn:
            conn.execute(
                f"INSERT INTO activities (owner, {_ACTIVITY_COLUMNS}) VALUES (?, ?, ?, ?, ?, ?, ?, ?)",
                (
                    owner,
                    activity.id,
                    activity.title,
                    activity.duration_minutes,
                    activity.icon_tag,
                    activity.color_tag,
                    activity.sort_order,
                    activity.notes,
                ),
            )
        return activity

    async def insert_activity(self, owner: str, fields: Mapping[str, Any]) -> Activity:
        return await self._run(self._insert_activity, owner, fields)

    def _update_activity(self, owner: str, activity_id: str, fields: Mapping[str, Any]) -> None:
        values = clean_fields(fields)
        with self._connect("update_activity") as conn:
            if values:
                assignments = ", ".join(f"{column}=?" for column in values)
                cursor = conn.execute(
                    f"UPDATE activities SET {assignments} WHERE owner=? AND id=?",
                    (*values.values(), owner, activity_id),
                )
                matched = cursor.rowcount > 0
            else:
                row = conn.execute("SELECT 1 FROM activities WHERE owner=? AND id=?", (owner, activity_id)).fetchone()
                matched = row is not None
        if not matched:
            raise NotFoundError(activity_id)

    async def update_activity(self, owner: str, activity_id: str, fields: Mapping[str, Any]) -> None:
        await self._run(self._update_activity, owner, activity_id, fields)

    def _delete_activity(self, owner: str, activity_id: str) -> None:
        with self._connect("delete_activity") as conn:
            cursor = conn.execute("DELETE FROM activities WHERE owner=? AND id=?", (owner, activity_id))
            deleted = cursor.rowcount
        if not deleted:
            raise NotFoundError(activity_id)

    async def delete_activity(self, owner: str, activity_id: str) -> None:
        await self._run(self._delete_activity, owner, activity_id)

    def _bulk_set_sort_order(self, owner: str, ranks: list[tuple[str, int]]) -> None:
        with self._connect("bulk_set_sort_order") as conn:
            conn.executemany(
                "UPDATE activities SET sort_order=? WHERE owner=? AND id=?",
                [(rank, owner, activity_id) for activity_id, rank in ranks],
            )

    async def bulk_set_sort_order(self, owner: str, ranks: Iterable[tuple[str, int]]) -> None:
        await self._run(self._bulk_set_sort_order, owner, list(ranks))

    # Completion records

    def _load_completion(self, owner: str, day: date) -> dict[str, bool]:
        with self._connect("load_completion") as conn:
            rows = conn.execute(
                "SELECT activity_id, completed FROM completions WHERE owner=? AND day=?",
                (owner, day.isoformat()),
            ).fetchall()
        return {str(activity_id): bool(completed) for activity_id, completed in rows}

    async def load_completion(self, owner: str, day: date) -> dict[str, bool]:
        return await self._run(self._load_completion, owner, day)

    def _upsert_completion(self, owner: str, activity_id: str, day: date, completed: bool) -> None:
        with self._connect("upsert_completion") as conn:
            conn.execute(
                """
                INSERT INTO completions (owner, activity_id, day, completed)
                VALUES (?, ?, ?, ?)
                ON CONFLICT (owner, activity_id, day) DO UPDATE SET completed=excluded.completed
                """,
                (owner, activity_id, day.isoformat(), int(bool(completed))),
            )

    async def upsert_completion(self, owner: str, activity_id: str, day: date, completed: bool) -> None:
        await self._run(self._upsert_completion, owner, activity_id, day, completed)

    def _list_distinct_completion_dates(self, owner: str) -> set[date]:
        with self._connect("list_distinct_completion_dates") as conn:
            rows = conn.execute("SELECT DISTINCT day FROM completions WHERE owner=?", (owner,)).fetchall()
        return {date.fromisoformat(day) for (day,) in rows}

    async def list_distinct_completion_dates(self, owner: str) -> set[date]:
        return await self._run(self._list_distinct_completion_dates, owner)

    # Day settings

    def _load_start_time(self, owner: str, day: date) -> Optional[int]:
        with self._connect("load_start_time") as conn:
            row = conn.execute(
                "SELECT start_minutes FROM day_settings WHERE owner=? AND day=?",
                (owner, day.isoformat()),
            ).fetchone()
        return int(row[0]) if row else None

    async def load_start_time(self, owner: str, day: date) -> Optional[int]:
        return await self._run(self._load_start_time, owner, day)

    def _upsert_start_time(self, owner: str, day: date, start_minutes: int) -> None:
        with self._connect("upsert_start_time") as conn:
            conn.execute(
                """
                INSERT INTO day_settings (owner, day, start_minutes)
                VALUES (?, ?, ?)
                ON CONFLICT (owner, day) DO UPDATE SET start_minutes=excluded.start_minutes
                """,
                (owner, day.isoformat(), int(start_minutes)),
            )

    async def upsert_start_time(self, owner: str, day: date, start_minutes: int) -> None:
        await self._run(self._upsert_start_time, owner, day, start_minutes)
