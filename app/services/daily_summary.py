"""
Daily team summary — pre-aggregated per team per day figures.

Analytics read these rows instead of scanning check-ins. The finalizer
rebuilds the row for every (team, date) it wrote an absence for.
"""

from __future__ import annotations

import logging
from datetime import date

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from app.core.enums import AttendanceStatus, ReadinessStatus
from app.models.attendance import DailyTeamSummary
from app.repositories.attendance import AttendanceRepository
from app.services.calendar import is_holiday, parse_work_days
from app.services.time_oracle import local_day_bounds_utc, weekday_code

logger = logging.getLogger(__name__)


async def recalculate_daily_team_summary(
    session_factory: async_sessionmaker[AsyncSession],
    team_id: int,
    day: date,
) -> DailyTeamSummary:
    """Recompute and upsert the summary row for *team_id* on *day*."""
    async with session_factory() as session:
        async with session.begin():
            repo = AttendanceRepository(session)
            team = await repo.get_team(team_id)
            if team is None:
                raise LookupError(f"Team not found: {team_id}")
            company = await repo.get_company(team.company_id)
            tz_name = company.timezone if company else None

            member_ids = await repo.member_ids(team_id)
            work_day = weekday_code(day) in parse_work_days(team.work_days, team.id)
            holiday = await is_holiday(repo, team.company_id, day)

            on_leave = await repo.count_on_leave(member_ids, day)
            absent = await repo.count_attendance(member_ids, day, AttendanceStatus.ABSENT.value)
            excused = await repo.count_attendance(member_ids, day, AttendanceStatus.EXCUSED.value)

            # Absent workers stay in the expected count; that is what lowers compliance
            expected = 0 if (not work_day or holiday) else max(
                0, len(member_ids) - on_leave - excused
            )

            start, end = local_day_bounds_utc(day, tz_name)
            checkins = await repo.checkins_between(member_ids, start, end)
            checked_in = len(checkins)
            statuses = [c.readiness_status for c in checkins]

            avg_score = (
                sum(c.readiness_score for c in checkins) / checked_in if checked_in else None
            )
            compliance = (checked_in / expected) * 100 if expected > 0 else None

            values = {
                "company_id": team.company_id,
                "is_work_day": work_day,
                "is_holiday": holiday,
                "total_members": len(member_ids),
                "on_leave_count": on_leave,
                "expected_to_check_in": expected,
                "checked_in_count": checked_in,
                "not_checked_in_count": max(0, expected - checked_in),
                "green_count": statuses.count(ReadinessStatus.GREEN.value),
                "yellow_count": statuses.count(ReadinessStatus.YELLOW.value),
                "red_count": statuses.count(ReadinessStatus.RED.value),
                "absent_count": absent,
                "excused_count": excused,
                "avg_readiness_score": avg_score,
                "compliance_rate": compliance,
            }

            summary = await repo.get_summary(team_id, day)
            if summary is None:
                summary = DailyTeamSummary(team_id=team_id, date=day, **values)
                repo.add(summary)
            else:
                for field, value in values.items():
                    setattr(summary, field, value)

    logger.debug("Summary refreshed for team %s on %s", team_id, day)
    return summary
