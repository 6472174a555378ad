import asyncio
from datetime import date, timedelta

import pytest

from daily_roadmap.aggregator import (
    completion_percentage,
    is_perfect,
    motivation_for,
    summarize_day,
    summarize_range,
    week_dates,
)
from daily_roadmap.errors import TransientStoreError
from daily_roadmap.schema import Activity


def four_activities():
    return [Activity(f"t{i}", f"Task {i}", 30, sort_order=i) for i in range(4)]


def test_percentage_rounds_half_up_and_stays_bounded():
    assert completion_percentage(1, 8) == 13
    assert completion_percentage(1, 3) == 33
    assert completion_percentage(2, 3) == 67
    assert completion_percentage(0, 0) == 0
    for total in list(range(0, 12)) + [199, 200, 201, 250]:
        for completed in range(0, total + 1):
            value = completion_percentage(completed, total)
            assert 0 <= value <= 100
            assert (value == 100) == (completed == total and total > 0)


def test_orphaned_records_are_ignored():
    activities = four_activities()[:2]
    summary = summarize_day(date(2024, 1, 10), activities, {"t0": True, "t3": True, "t1": False})
    assert summary.total_activities == 2
    assert summary.completed_count == 1
    assert summary.percentage == 50


def test_one_unfinished_of_many_is_not_perfect():
    activities = [Activity(f"t{i}", f"Task {i}", 15, sort_order=i) for i in range(200)]
    completion = {f"t{i}": True for i in range(199)}
    summary = summarize_day(date(2024, 1, 10), activities, completion)
    assert (summary.completed_count, summary.percentage) == (199, 99)
    assert not summary.perfect


def test_empty_list_is_never_perfect():
    summary = summarize_day(date(2024, 1, 10), [], {"gone": True})
    assert summary.percentage == 0
    assert not summary.perfect


def test_week_dates_end_on_given_day():
    days = week_dates(date(2024, 1, 10))
    assert len(days) == 7
    assert days[0] == date(2024, 1, 4)
    assert days[-1] == date(2024, 1, 10)
    with pytest.raises(ValueError):
        week_dates(date(2024, 1, 10), 0)


@pytest.mark.asyncio
async def test_week_with_one_perfect_day():
    activities = four_activities()
    days = week_dates(date(2024, 1, 10))
    records = {
        days[0]: {f"t{i}": True for i in range(4)},
        days[1]: {"t0": True, "t1": True, "t2": False},
    }

    async def loader(day):
        return records.get(day, {})

    week = await summarize_range(days, activities, loader)
    assert week.days[0].percentage == 100
    assert is_perfect(week.days[0])
    assert week.days[1].percentage == 50
    assert week.perfect_day_count == 1
    assert week.failed_dates == []
    assert week.average_percentage == pytest.approx(150 / 7)


@pytest.mark.asyncio
async def test_failed_date_is_unknown_not_zero():
    activities = four_activities()
    days = week_dates(date(2024, 1, 10), 3)

    async def loader(day):
        if day == days[1]:
            raise TransientStoreError("load_completion", "offline")
        return {f"t{i}": True for i in range(4)}

    week = await summarize_range(days, activities, loader)
    assert week.failed_dates == [days[1]]
    assert week.days[1].status == "unknown"
    assert not week.days[1].known
    assert week.perfect_day_count == 2
    assert week.average_percentage == 100.0


@pytest.mark.asyncio
async def test_range_loads_run_concurrently():
    started = []
    gate = asyncio.Event()
    days = [date(2024, 1, 1) + timedelta(days=i) for i in range(3)]

    async def loader(day):
        started.append(day)
        if len(started) == len(days):
            gate.set()
        await gate.wait()
        return {}

    week = await asyncio.wait_for(summarize_range(days, four_activities(), loader), timeout=1)
    assert sorted(started) == days
    assert [d.date for d in week.days] == days


def test_motivation_tiers():
    assert motivation_for(100)["tier"] == "complete"
    assert motivation_for(80)["tier"] == "on_fire"
    assert motivation_for(50)["tier"] == "strong"
    assert motivation_for(25)["tier"] == "momentum"
    assert motivation_for(0)["tier"] == "start"
