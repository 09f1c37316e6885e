"""
Persistence gateway for the finalizer.

Wraps one AsyncSession. The repository never commits; callers own the
transaction boundary (``async with session.begin()``) so the existence
checks and the attendance + absence insert share one transaction.
"""

from __future__ import annotations

from collections.abc import Sequence
from datetime import date, datetime

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.enums import (FINALIZED_ROLES, AbsenceStatus, AttendanceStatus,
                            ExceptionStatus)
from app.models.attendance import Absence, DailyAttendance, DailyTeamSummary
from app.models.company import Company, Holiday, Team
from app.models.worker import Checkin, LeaveException, Worker


class AttendanceRepository:
    def __init__(self, session: AsyncSession):
        self._session = session

    # ── Tenants ─────────────────────────────────────────────────────
    async def list_active_companies(self) -> Sequence[Company]:
        result = await self._session.execute(
            select(Company).where(Company.is_active.is_(True)).order_by(Company.id)
        )
        return result.scalars().all()

    async def teams_for_company(self, company_id: int) -> Sequence[Team]:
        result = await self._session.execute(
            select(Team).where(Team.company_id == company_id).order_by(Team.id)
        )
        return result.scalars().all()

    async def get_team(self, team_id: int) -> Team | None:
        return await self._session.get(Team, team_id)

    async def get_company(self, company_id: int) -> Company | None:
        return await self._session.get(Company, company_id)

    async def holiday_on(self, company_id: int, day: date) -> Holiday | None:
        result = await self._session.execute(
            select(Holiday).where(Holiday.company_id == company_id, Holiday.date == day).limit(1)
        )
        return result.scalar_one_or_none()

    # ── Workers ─────────────────────────────────────────────────────
    async def workers_for_company(self, company_id: int) -> Sequence[Worker]:
        """Active, team-assigned workers whose role requires a daily check-in."""
        result = await self._session.execute(
            select(Worker)
            .where(
                Worker.company_id == company_id,
                Worker.team_id.is_not(None),
                Worker.is_active.is_(True),
                Worker.role.in_(FINALIZED_ROLES),
            )
            .order_by(Worker.id)
        )
        return result.scalars().all()

    async def workers_for_teams(self, team_ids: Sequence[int]) -> Sequence[Worker]:
        if not team_ids:
            return []
        result = await self._session.execute(
            select(Worker)
            .where(
                Worker.team_id.in_(team_ids),
                Worker.is_active.is_(True),
                Worker.role.in_(FINALIZED_ROLES),
            )
            .order_by(Worker.id)
        )
        return result.scalars().all()

    async def member_ids(self, team_id: int) -> list[int]:
        result = await self._session.execute(
            select(Worker.id).where(
                Worker.team_id == team_id,
                Worker.is_active.is_(True),
                Worker.role.in_(FINALIZED_ROLES),
            )
        )
        return list(result.scalars().all())

    # ── Per-worker facts ────────────────────────────────────────────
    async def earliest_checkin_at(self, worker_id: int) -> datetime | None:
        result = await self._session.execute(
            select(func.min(Checkin.created_at)).where(Checkin.worker_id == worker_id)
        )
        return result.scalar_one_or_none()

    async def has_daily_attendance(self, worker_id: int, day: date) -> bool:
        result = await self._session.execute(
            select(DailyAttendance.id)
            .where(DailyAttendance.worker_id == worker_id, DailyAttendance.date == day)
            .limit(1)
        )
        return result.scalar_one_or_none() is not None

    async def has_absence(self, worker_id: int, day: date) -> bool:
        result = await self._session.execute(
            select(Absence.id)
            .where(Absence.worker_id == worker_id, Absence.absence_date == day)
            .limit(1)
        )
        return result.scalar_one_or_none() is not None

    async def has_approved_leave(self, worker_id: int, day: date) -> bool:
        result = await self._session.execute(
            select(LeaveException.id)
            .where(
                LeaveException.worker_id == worker_id,
                LeaveException.status == ExceptionStatus.APPROVED.value,
                LeaveException.start_date <= day,
                LeaveException.end_date >= day,
            )
            .limit(1)
        )
        return result.scalar_one_or_none() is not None

    # ── Writes ──────────────────────────────────────────────────────
    async def create_absence(
        self,
        worker: Worker,
        day: date,
        scheduled_start: str,
    ) -> tuple[DailyAttendance, Absence]:
        """Stage the ABSENT attendance row and its absence record, then flush.

        Flushing inside the caller's transaction surfaces a uniqueness
        violation here instead of at commit time.
        """
        attendance = DailyAttendance(
            worker_id=worker.id,
            company_id=worker.company_id,
            team_id=worker.team_id,
            date=day,
            status=AttendanceStatus.ABSENT.value,
            score=0,
            is_counted=True,
            scheduled_start=scheduled_start,
            check_in_time=None,
        )
        absence = Absence(
            worker_id=worker.id,
            team_id=worker.team_id,
            company_id=worker.company_id,
            absence_date=day,
            status=AbsenceStatus.PENDING_JUSTIFICATION.value,
            reason_category=None,
            explanation=None,
        )
        self._session.add_all([attendance, absence])
        await self._session.flush()
        return attendance, absence

    # ── Rollup queries ──────────────────────────────────────────────
    async def count_on_leave(self, worker_ids: Sequence[int], day: date) -> int:
        if not worker_ids:
            return 0
        result = await self._session.execute(
            select(func.count(func.distinct(LeaveException.worker_id))).where(
                LeaveException.worker_id.in_(worker_ids),
                LeaveException.status == ExceptionStatus.APPROVED.value,
                LeaveException.start_date <= day,
                LeaveException.end_date >= day,
            )
        )
        return int(result.scalar_one())

    async def count_attendance(self, worker_ids: Sequence[int], day: date, status: str) -> int:
        if not worker_ids:
            return 0
        result = await self._session.execute(
            select(func.count(DailyAttendance.id)).where(
                DailyAttendance.worker_id.in_(worker_ids),
                DailyAttendance.date == day,
                DailyAttendance.status == status,
            )
        )
        return int(result.scalar_one())

    async def checkins_between(
        self, worker_ids: Sequence[int], start: datetime, end: datetime
    ) -> Sequence[Checkin]:
        if not worker_ids:
            return []
        result = await self._session.execute(
            select(Checkin).where(
                Checkin.worker_id.in_(worker_ids),
                Checkin.created_at >= start,
                Checkin.created_at < end,
            )
        )
        return result.scalars().all()

    async def get_summary(self, team_id: int, day: date) -> DailyTeamSummary | None:
        result = await self._session.execute(
            select(DailyTeamSummary).where(
                DailyTeamSummary.team_id == team_id, DailyTeamSummary.date == day
            )
        )
        return result.scalar_one_or_none()

    def add(self, obj: object) -> None:
        self._session.add(obj)
