from datetime import date

import pytest

import roadmap_cli
from daily_roadmap.activities import ActivityList
from daily_roadmap.adapters.memory_adapter import MemoryGateway
from daily_roadmap.adapters.sqlite_adapter import SqliteGateway

EARLIER = date(2024, 1, 9)
LATER = date(2024, 1, 10)


@pytest.fixture
def run(tmp_path, monkeypatch):
    for name in ("DAILY_ROADMAP_WEEK_DAYS", "DAILY_ROADMAP_START_MINUTES"):
        monkeypatch.delenv(name, raising=False)
    db = str(tmp_path / "roadmap.db")

    async def invoke(*argv):
        args = roadmap_cli._build_parser().parse_args(["--db", db, "--owner", "me", *argv])
        return await roadmap_cli._run(args)

    invoke.db = db
    return invoke


async def stored(db):
    return await SqliteGateway(db).list_activities("me")


@pytest.mark.asyncio
async def test_fresh_database_is_created_and_seeded(run, capsys):
    assert await run("--date", LATER.isoformat(), "show") == 0
    out = capsys.readouterr().out
    assert out.startswith(f"{LATER.isoformat()}  start 06:00")
    assert len(await stored(run.db)) == 6


@pytest.mark.asyncio
async def test_rename_notes_and_duration_are_persisted(run):
    assert await run("rename", "1", "Sunrise walk") == 0
    assert await run("notes", "1", "bring water") == 0
    assert await run("duration", "2", "-15") == 0

    activities = await stored(run.db)
    assert activities[0].title == "Sunrise walk"
    assert activities[0].notes == "bring water"
    assert activities[1].duration_minutes == 45


@pytest.mark.asyncio
async def test_up_down_and_normalize_rewrite_ranks(run):
    await run("show")
    titles = [a.title for a in await stored(run.db)]

    assert await run("down", "1") == 0
    assert [a.title for a in await stored(run.db)][:2] == [titles[1], titles[0]]
    assert await run("up", "2") == 0
    assert [a.title for a in await stored(run.db)] == titles

    assert await run("delete", "3") == 0
    assert await run("normalize") == 0
    assert [a.sort_order for a in await stored(run.db)] == [0, 1, 2, 3, 4]


@pytest.mark.asyncio
async def test_prev_and_next_step_between_recorded_days(run, capsys):
    await run("--date", EARLIER.isoformat(), "toggle", "1")
    await run("--date", LATER.isoformat(), "toggle", "2")
    capsys.readouterr()

    assert await run("--date", LATER.isoformat(), "prev") == 0
    assert capsys.readouterr().out.startswith(EARLIER.isoformat())
    assert await run("--date", EARLIER.isoformat(), "next") == 0
    assert capsys.readouterr().out.startswith(LATER.isoformat())
    assert await run("--date", EARLIER.isoformat(), "prev") == 0
    assert capsys.readouterr().out.startswith(EARLIER.isoformat())

    assert await run("dates") == 0
    listed = capsys.readouterr().out.split()
    assert listed[-2:] == [LATER.isoformat(), EARLIER.isoformat()]


def test_position_out_of_range_is_rejected():
    with pytest.raises(ValueError):
        roadmap_cli._pick(ActivityList(MemoryGateway(), "me"), 1)
