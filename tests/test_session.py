import asyncio
from datetime import date

import pytest

from daily_roadmap.activities import ActivityList
from daily_roadmap.adapters.memory_adapter import MemoryGateway
from daily_roadmap.progress import ProgressStore
from daily_roadmap.session import DaySession

DAY = date(2024, 1, 10)


async def open_session(gateway, day=DAY):
    activity_list = ActivityList(gateway, "me")
    await activity_list.add("Exercise", 60)
    await activity_list.add("Reading", 30)
    session = DaySession(activity_list, ProgressStore(gateway, "me"), day)
    await session.open()
    return session


@pytest.mark.asyncio
async def test_toggle_keeps_local_value_on_success():
    gateway = MemoryGateway()
    session = await open_session(gateway)
    exercise = session.activity_list.activities[0].id

    await session.toggle(exercise)
    assert session.progress[exercise] is True
    assert session.pending == set()
    assert (await gateway.load_completion("me", DAY)) == {exercise: True}
    assert session.summary().percentage == 50
    assert session.remaining() == 1


@pytest.mark.asyncio
async def test_toggle_failure_reverts_and_notifies():
    gateway = MemoryGateway()
    session = await open_session(gateway)
    exercise = session.activity_list.activities[0].id
    gateway.fail_next("upsert_completion")

    result = await session.toggle(exercise)
    assert not result.ok
    assert session.progress[exercise] is False
    assert len(session.pop_notices()) == 1
    assert session.notices == []


@pytest.mark.asyncio
async def test_superseded_failure_does_not_revert_newer_toggle():
    gateway = MemoryGateway()
    session = await open_session(gateway)
    exercise = session.activity_list.activities[0].id
    gateway.fail_next("upsert_completion")

    # Both toggles flip locally before either request resolves.
    first = asyncio.ensure_future(session.toggle(exercise))
    second = asyncio.ensure_future(session.toggle(exercise))
    results = await asyncio.gather(first, second)

    assert [r.ok for r in results] == [False, True]
    assert session.progress[exercise] is False
    assert session.notices == []


@pytest.mark.asyncio
async def test_timeline_follows_start_time():
    gateway = MemoryGateway()
    session = await open_session(gateway)
    await session.adjust_start_time(60)
    windows = session.timeline()
    assert (windows[0].start_minutes, windows[-1].end_minutes) == (420, 510)
    assert session.end_minutes() == 510
    assert await gateway.load_start_time("me", DAY) == 420

    await session.reset_start_time()
    assert session.start_minutes == 360


@pytest.mark.asyncio
async def test_start_time_failure_reverts():
    gateway = MemoryGateway()
    session = await open_session(gateway)
    gateway.fail_next("upsert_start_time")
    result = await session.adjust_start_time(-15)
    assert not result.ok
    assert session.start_minutes == 360
    assert session.notices


@pytest.mark.asyncio
async def test_select_date_loads_that_day():
    gateway = MemoryGateway()
    session = await open_session(gateway)
    exercise = session.activity_list.activities[0].id
    other_day = date(2024, 1, 11)
    await gateway.upsert_completion("me", exercise, other_day, True)
    await gateway.upsert_start_time("me", other_day, 480)

    await session.select_date(other_day)
    assert session.progress == {exercise: True}
    assert session.start_minutes == 480
    assert session.window_for(exercise).start_minutes == 480


@pytest.mark.asyncio
async def test_deleted_activity_leaves_day_summary():
    gateway = MemoryGateway()
    session = await open_session(gateway)
    exercise, reading = (a.id for a in session.activity_list.activities)
    await session.toggle(exercise)
    await session.toggle(reading)
    assert session.summary().percentage == 100

    await session.activity_list.delete(exercise)
    await session.open()
    summary = session.summary()
    assert (summary.completed_count, summary.total_activities) == (1, 1)
    assert exercise in session.progress


@pytest.mark.asyncio
async def test_configured_default_start_applies_to_new_days_and_reset():
    gateway = MemoryGateway()
    activity_list = ActivityList(gateway, "me")
    await activity_list.add("Exercise", 60)
    store = ProgressStore(gateway, "me", default_start_minutes=420)
    session = DaySession(activity_list, store, DAY)
    await session.open()
    assert session.timeline()[0].start_minutes == 420

    await session.adjust_start_time(30)
    await session.reset_start_time()
    assert session.start_minutes == 420
    assert await gateway.load_start_time("me", DAY) == 420
