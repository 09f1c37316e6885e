"""Tests for the per-team daily rollup."""

from datetime import date, datetime, timezone

import pytest
from sqlalchemy import func, select

from app.models.attendance import DailyTeamSummary
from app.services.daily_summary import recalculate_daily_team_summary
from tests.factories import (add_attendance, add_checkin, add_holiday,
                             add_leave, create_company, create_team,
                             create_worker)

WED = date(2025, 1, 15)


async def _team_with_members(db_session, count=4):
    company = await create_company(db_session)
    team = await create_team(db_session, company)
    workers = [
        await create_worker(db_session, company, team, first_name=f"Worker{n}")
        for n in range(count)
    ]
    return company, team, workers


@pytest.mark.asyncio
async def test_summary_counts(db_session, session_factory):
    company, team, (green, yellow, on_leave, absent) = await _team_with_members(db_session)
    # Both inside Wed 2025-01-15 in Manila
    await add_checkin(db_session, green, datetime(2025, 1, 15, 0, 30, tzinfo=timezone.utc), status="GREEN", score=90)
    await add_checkin(db_session, yellow, datetime(2025, 1, 15, 1, 0, tzinfo=timezone.utc), status="YELLOW", score=60)
    # 23:00 Tue in Manila, belongs to the previous day
    await add_checkin(db_session, absent, datetime(2025, 1, 14, 15, 0, tzinfo=timezone.utc), status="RED", score=20)
    await add_leave(db_session, on_leave, WED, WED)
    await add_attendance(db_session, absent, WED, status="ABSENT")

    summary = await recalculate_daily_team_summary(session_factory, team.id, WED)

    assert summary.company_id == company.id
    assert summary.is_work_day is True
    assert summary.is_holiday is False
    assert summary.total_members == 4
    assert summary.on_leave_count == 1
    assert summary.expected_to_check_in == 3
    assert summary.checked_in_count == 2
    assert summary.not_checked_in_count == 1
    assert (summary.green_count, summary.yellow_count, summary.red_count) == (1, 1, 0)
    assert summary.absent_count == 1
    assert summary.excused_count == 0
    assert summary.avg_readiness_score == pytest.approx(75.0)
    assert summary.compliance_rate == pytest.approx(200 / 3)


@pytest.mark.asyncio
async def test_summary_is_upserted(db_session, session_factory):
    _, team, (first, second) = await _team_with_members(db_session, count=2)

    await recalculate_daily_team_summary(session_factory, team.id, WED)
    await add_checkin(db_session, first, datetime(2025, 1, 15, 0, 30, tzinfo=timezone.utc))
    summary = await recalculate_daily_team_summary(session_factory, team.id, WED)

    assert summary.checked_in_count == 1
    assert summary.compliance_rate == pytest.approx(50.0)
    async with session_factory() as session:
        rows = (await session.execute(select(func.count(DailyTeamSummary.id)))).scalar_one()
    assert rows == 1


@pytest.mark.asyncio
async def test_non_work_day_expects_nobody(db_session, session_factory):
    _, team, _ = await _team_with_members(db_session, count=2)

    summary = await recalculate_daily_team_summary(session_factory, team.id, date(2025, 1, 18))

    assert summary.is_work_day is False
    assert summary.total_members == 2
    assert summary.expected_to_check_in == 0
    assert summary.compliance_rate is None
    assert summary.avg_readiness_score is None


@pytest.mark.asyncio
async def test_holiday_expects_nobody(db_session, session_factory):
    company, team, _ = await _team_with_members(db_session, count=2)
    await add_holiday(db_session, company, WED)

    summary = await recalculate_daily_team_summary(session_factory, team.id, WED)

    assert summary.is_holiday is True
    assert summary.expected_to_check_in == 0
    assert summary.not_checked_in_count == 0


@pytest.mark.asyncio
async def test_excused_members_are_not_expected(db_session, session_factory):
    _, team, (excused, other) = await _team_with_members(db_session, count=2)
    await add_attendance(db_session, excused, WED, status="EXCUSED")

    summary = await recalculate_daily_team_summary(session_factory, team.id, WED)

    assert summary.excused_count == 1
    assert summary.expected_to_check_in == 1
    assert summary.compliance_rate == pytest.approx(0.0)


@pytest.mark.asyncio
async def test_unknown_team_raises(session_factory):
    with pytest.raises(LookupError):
        await recalculate_daily_team_summary(session_factory, 999, WED)
