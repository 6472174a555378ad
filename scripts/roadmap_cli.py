"""Command line access to a SQLite-backed daily roadmap."""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys
from dataclasses import asdict
from datetime import date
from pathlib import Path

sys.path.insert(0, str(Path(__file__).resolve().parents[1]))

from daily_roadmap.activities import ActivityList
from daily_roadmap.adapters.sqlite_adapter import SqliteGateway
from daily_roadmap.aggregator import motivation_for, summarize_week
from daily_roadmap.config import load_config
from daily_roadmap.errors import RoadmapError
from daily_roadmap.progress import ProgressStore, neighbor_date
from daily_roadmap.reorder import ReorderEngine
from daily_roadmap.session import DaySession
from daily_roadmap.timeline import describe_timeline, format_clock, format_duration, total_minutes


def _parse_day(value: str | None) -> date:
    if not value:
        return date.today()
    try:
        return date.fromisoformat(value)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(f"invalid date '{value}', expected YYYY-MM-DD") from exc


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Plan and track a daily activity roadmap")
    parser.add_argument("--db", help="SQLite database path (default: $DAILY_ROADMAP_DB or roadmap.db)")
    parser.add_argument("--owner", help="Account key (default: $DAILY_ROADMAP_OWNER or 'me')")
    parser.add_argument("--date", type=_parse_day, default=None, help="Day to act on, YYYY-MM-DD (default: today)")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    sub = parser.add_subparsers(dest="command", required=True)

    sub.add_parser("show", help="Print the day's timeline and progress")

    add = sub.add_parser("add", help="Append an activity")
    add.add_argument("title")
    add.add_argument("--duration", type=int, default=60)
    add.add_argument("--notes", default="")

    toggle = sub.add_parser("toggle", help="Flip completion of an activity (by position, 1-based)")
    toggle.add_argument("position", type=int)

    rename = sub.add_parser("rename", help="Change an activity's title")
    rename.add_argument("position", type=int)
    rename.add_argument("title")

    notes = sub.add_parser("notes", help="Replace an activity's notes (empty string clears them)")
    notes.add_argument("position", type=int)
    notes.add_argument("text")

    duration = sub.add_parser("duration", help="Step an activity's duration by minutes, e.g. 15 or -15")
    duration.add_argument("position", type=int)
    duration.add_argument("delta", type=int)

    move = sub.add_parser("move", help="Move an activity between positions (1-based)")
    move.add_argument("source", type=int)
    move.add_argument("target", type=int)

    for name, text in (("up", "Move an activity one slot earlier"), ("down", "Move an activity one slot later")):
        step = sub.add_parser(name, help=text)
        step.add_argument("position", type=int)

    sub.add_parser("normalize", help="Rewrite ranks as 0..n-1 for the current order")

    start = sub.add_parser("start", help="Shift the day start by minutes, or reset it")
    start.add_argument("delta", nargs="?", type=int, default=0)
    start.add_argument("--reset", action="store_true")

    remove = sub.add_parser("delete", help="Delete an activity (by position, 1-based)")
    remove.add_argument("position", type=int)

    sub.add_parser("prev", help="Show the previous day that has any recorded progress")
    sub.add_parser("next", help="Show the next newer day that has any recorded progress")
    sub.add_parser("dates", help="List days with recorded progress, newest first")

    sub.add_parser("week", help="Print the rolling week summary as JSON")
    return parser


def _pick(activity_list: ActivityList, position: int) -> str:
    activities = activity_list.activities
    if not 1 <= position <= len(activities):
        raise ValueError(f"position must be between 1 and {len(activities)}")
    return activities[position - 1].id


def _print_day(session: DaySession) -> None:
    activities = session.activity_list.activities
    summary = session.summary()
    print(f"{session.day.isoformat()}  start {format_clock(session.start_minutes)}  end {format_clock(session.end_minutes())}")
    for index, (activity, row) in enumerate(zip(activities, describe_timeline(activities, session.start_minutes)), start=1):
        mark = "x" if session.progress.get(row["activity_id"]) else " "
        print(f"{index:>2}. [{mark}] {row['time_range']}  {row['title']} ({row['duration']})")
        if activity.notes:
            print(f"      {activity.notes}")
    print(
        f"{summary.completed_count} of {summary.total_activities} done ({summary.percentage}%), "
        f"planned {format_duration(total_minutes(activities))}"
    )
    print(motivation_for(summary.percentage)["text"])


async def _run(args: argparse.Namespace) -> int:
    config = load_config(database_path=args.db, owner=args.owner)
    gateway = SqliteGateway(config.database_path)
    await asyncio.to_thread(gateway.init_db)

    activity_list = ActivityList(gateway, config.owner)
    loaded = await activity_list.load()
    if not loaded.ok:
        raise loaded.error
    if not len(activity_list):
        await activity_list.seed_defaults()

    progress_store = ProgressStore(gateway, config.owner, config.default_start_minutes)
    session = DaySession(activity_list, progress_store, args.date or date.today())
    await session.open()
    reorder = ReorderEngine(activity_list)

    result = None
    if args.command == "add":
        result = await activity_list.add(args.title, args.duration, args.notes)
    elif args.command == "toggle":
        result = await session.toggle(_pick(activity_list, args.position))
    elif args.command == "rename":
        result = await activity_list.rename(_pick(activity_list, args.position), args.title)
    elif args.command == "notes":
        result = await activity_list.edit_notes(_pick(activity_list, args.position), args.text)
    elif args.command == "duration":
        result = await activity_list.change_duration(_pick(activity_list, args.position), args.delta)
    elif args.command == "move":
        result = await reorder.move(args.source - 1, args.target - 1)
    elif args.command == "up":
        result = await reorder.move_up(_pick(activity_list, args.position))
    elif args.command == "down":
        result = await reorder.move_down(_pick(activity_list, args.position))
    elif args.command == "normalize":
        result = await reorder.normalize()
    elif args.command == "start":
        result = await (session.reset_start_time() if args.reset else session.adjust_start_time(args.delta))
    elif args.command == "delete":
        result = await activity_list.delete(_pick(activity_list, args.position))
    elif args.command in ("prev", "next"):
        dates = await progress_store.history_dates(date.today(), extra=(session.day,))
        result = await session.select_date(neighbor_date(dates, session.day, args.command))
    elif args.command == "dates":
        for day in await progress_store.history_dates(date.today(), extra=(session.day,)):
            print(day.isoformat())
        return 0
    elif args.command == "week":
        week = await summarize_week(session.day, activity_list.activities, progress_store.load, config.week_days)
        report = asdict(week)
        print(json.dumps(report, indent=2, default=str))
        return 0

    for notice in session.pop_notices():
        print(f"! {notice}", file=sys.stderr)
    if result is not None and not result.ok:
        print(f"! {result.error}", file=sys.stderr)
        return 1
    _print_day(session)
    return 0


def main() -> None:
    parser = _build_parser()
    args = parser.parse_args()
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )
    try:
        code = asyncio.run(_run(args))
    except (RoadmapError, ValueError) as exc:
        parser.exit(2, f"error: {exc}\n")
    sys.exit(code)


if __name__ == "__main__":
    main()
