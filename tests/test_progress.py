from datetime import date

import pytest

from daily_roadmap.adapters.memory_adapter import MemoryGateway
from daily_roadmap.progress import ProgressStore, is_completed, neighbor_date

DAY = date(2024, 1, 10)


@pytest.mark.asyncio
async def test_toggle_twice_returns_to_initial_state():
    store = ProgressStore(MemoryGateway(), "me")
    progress = await store.load(DAY)
    assert not is_completed(progress, "exercise")

    first = await store.toggle("exercise", DAY, is_completed(progress, "exercise"))
    assert first.ok and first.value is True
    progress = await store.load(DAY)
    second = await store.toggle("exercise", DAY, is_completed(progress, "exercise"))
    assert second.value is False
    assert (await store.load(DAY)) == {"exercise": False}


@pytest.mark.asyncio
async def test_upsert_completion_is_idempotent():
    gateway = MemoryGateway()
    await gateway.upsert_completion("me", "exercise", DAY, True)
    once = await gateway.load_completion("me", DAY)
    await gateway.upsert_completion("me", "exercise", DAY, True)
    assert await gateway.load_completion("me", DAY) == once == {"exercise": True}


@pytest.mark.asyncio
async def test_toggle_failure_is_reported():
    gateway = MemoryGateway()
    gateway.fail_next("upsert_completion")
    result = await ProgressStore(gateway, "me").toggle("exercise", DAY, False)
    assert not result.ok
    assert await gateway.load_completion("me", DAY) == {}


@pytest.mark.asyncio
async def test_completion_is_scoped_by_owner_and_date():
    gateway = MemoryGateway()
    await ProgressStore(gateway, "me").toggle("exercise", DAY, False)
    assert await ProgressStore(gateway, "other").load(DAY) == {}
    assert await ProgressStore(gateway, "me").load(date(2024, 1, 11)) == {}


@pytest.mark.asyncio
async def test_start_time_defaults_and_clamps():
    store = ProgressStore(MemoryGateway(), "me")
    assert await store.load_start_time(DAY) == 360
    saved = await store.save_start_time(DAY, 1430)
    assert saved.value == 1380
    assert await store.load_start_time(DAY) == 1380
    await store.reset_start_time(DAY)
    assert await store.load_start_time(DAY) == 360


@pytest.mark.asyncio
async def test_history_dates_newest_first_with_today():
    gateway = MemoryGateway()
    store = ProgressStore(gateway, "me")
    await store.toggle("a", date(2024, 1, 2), False)
    await store.toggle("a", date(2024, 1, 5), False)
    dates = await store.history_dates(date(2024, 1, 10))
    assert dates == [date(2024, 1, 10), date(2024, 1, 5), date(2024, 1, 2)]

    assert neighbor_date(dates, dates[0], "prev") == dates[1]
    assert neighbor_date(dates, dates[0], "next") == dates[0]
    assert neighbor_date(dates, dates[-1], "prev") == dates[-1]
    with pytest.raises(ValueError):
        neighbor_date(dates, dates[0], "sideways")
