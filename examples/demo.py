"""Demo script for daily-roadmap."""

import asyncio
import sys
from datetime import date, timedelta
from pathlib import Path

sys.path.insert(0, str(Path(__file__).resolve().parents[1]))

from daily_roadmap.activities import ActivityList
from daily_roadmap.adapters.memory_adapter import MemoryGateway
from daily_roadmap.aggregator import summarize_week
from daily_roadmap.progress import ProgressStore
from daily_roadmap.reorder import ReorderEngine
from daily_roadmap.session import DaySession
from daily_roadmap.timeline import describe_timeline


async def main() -> None:
    gateway = MemoryGateway()
    activities = ActivityList(gateway, "demo")
    await activities.seed_defaults()
    await ReorderEngine(activities).move(1, 0)

    today = date.today()
    store = ProgressStore(gateway, "demo")
    session = DaySession(activities, store, today)
    await session.open()
    for activity in activities.activities[:3]:
        await session.toggle(activity.id)
    for activity in activities.activities:
        await store.toggle(activity.id, today - timedelta(days=1), False)

    for row in describe_timeline(activities.activities, session.start_minutes):
        print(row["time_range"], row["title"])
    print("Today:", session.summary())
    week = await summarize_week(today, activities.activities, store.load)
    print("Perfect days:", week.perfect_day_count, "average:", round(week.average_percentage, 1))


if __name__ == "__main__":
    asyncio.run(main())
