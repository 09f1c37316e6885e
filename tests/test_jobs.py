"""Command-line job tests."""

from datetime import datetime, timedelta, timezone

import pytest
from sqlalchemy.exc import OperationalError

from app.jobs.finalize import build_parser, run
from app.services.finalizer import AttendanceFinalizer
from tests.factories import (add_checkin, count_absences, create_company,
                             create_team, create_worker)

# 05:00 Thu 2025-01-16 in Manila
EOD_MANILA = datetime(2025, 1, 15, 21, 0, tzinfo=timezone.utc)


def test_parser_defaults():
    args = build_parser().parse_args(["hourly"])
    assert args.mode == "hourly"
    assert args.force is False
    assert args.at is None


def test_parser_reads_instant_as_utc():
    args = build_parser().parse_args(["end-of-day", "--force", "--at", "2025-01-15T21:00:00"])
    assert args.force is True
    assert args.at == EOD_MANILA


def test_parser_converts_offset_instant_to_utc():
    args = build_parser().parse_args(["shift-end", "--at", "2025-01-16T05:00:00+08:00"])
    assert args.at == EOD_MANILA
    assert args.at.utcoffset() == timedelta(0)


@pytest.mark.parametrize("argv", [["weekly"], ["end-of-day", "--at", "yesterday"]])
def test_parser_rejects_bad_input(argv):
    with pytest.raises(SystemExit):
        build_parser().parse_args(argv)


@pytest.mark.asyncio
async def test_hourly_runs_both_sweeps(db_session, session_factory):
    company = await create_company(db_session)
    team = await create_team(db_session, company)
    worker = await create_worker(db_session, company, team)
    await add_checkin(db_session, worker, datetime(2025, 1, 2, 1, 0, tzinfo=timezone.utc))

    results, ok = await run("hourly", EOD_MANILA, False, session_factory)

    assert ok is True
    assert [stats.mode for stats in results] == ["end_of_day", "shift_end"]
    assert results[0].marked_absent == 1
    # 05:00 is not the 17:00 shift end
    assert results[1].teams_processed == 0
    assert await count_absences(session_factory, worker.id) == 1


@pytest.mark.asyncio
async def test_single_mode_runs_one_sweep(session_factory):
    results, ok = await run("shift-end", EOD_MANILA, True, session_factory)
    assert ok is True
    assert [stats.mode for stats in results] == ["shift_end"]


@pytest.mark.asyncio
async def test_failed_sweep_does_not_block_the_other(session_factory, monkeypatch):
    async def down(self, now, force_run=False):
        raise OperationalError("SELECT companies", {}, Exception("could not connect"))

    monkeypatch.setattr(AttendanceFinalizer, "finalize_end_of_day", down)

    results, ok = await run("hourly", EOD_MANILA, False, session_factory)

    assert ok is False
    assert [stats.mode for stats in results] == ["shift_end"]
