"""Seed helpers: each creates one row, commits, and returns it."""

from datetime import date, datetime, timezone

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.attendance import Absence, DailyAttendance
from app.models.company import Company, Holiday, Team
from app.models.worker import Checkin, LeaveException, Worker

JAN_1 = datetime(2025, 1, 1, tzinfo=timezone.utc)


async def _save(session: AsyncSession, obj):
    session.add(obj)
    await session.commit()
    await session.refresh(obj)
    return obj


async def create_company(session: AsyncSession, *, timezone_name="Asia/Manila", name="Acme", is_active=True) -> Company:
    return await _save(session, Company(name=name, timezone=timezone_name, is_active=is_active))


async def create_team(
    session: AsyncSession,
    company: Company,
    *,
    name="Team A",
    work_days="MON,TUE,WED,THU,FRI",
    shift_start="08:00",
    shift_end="17:00",
    is_active=True,
) -> Team:
    return await _save(
        session,
        Team(
            company_id=company.id,
            name=name,
            work_days=work_days,
            shift_start=shift_start,
            shift_end=shift_end,
            is_active=is_active,
        ),
    )


async def create_worker(
    session: AsyncSession,
    company: Company,
    team: Team | None,
    *,
    first_name="John",
    last_name="Doe",
    role="WORKER",
    team_joined_at: datetime | None = JAN_1,
    created_at: datetime = JAN_1,
    is_active=True,
) -> Worker:
    return await _save(
        session,
        Worker(
            company_id=company.id,
            team_id=team.id if team else None,
            first_name=first_name,
            last_name=last_name,
            role=role,
            team_joined_at=team_joined_at,
            created_at=created_at,
            is_active=is_active,
        ),
    )


async def add_checkin(session: AsyncSession, worker: Worker, at: datetime, *, status="GREEN", score=90) -> Checkin:
    return await _save(
        session,
        Checkin(worker_id=worker.id, created_at=at, readiness_status=status, readiness_score=score),
    )


async def add_leave(
    session: AsyncSession, worker: Worker, start: date, end: date, *, status="APPROVED", type_="SICK_LEAVE"
) -> LeaveException:
    return await _save(
        session,
        LeaveException(worker_id=worker.id, type=type_, status=status, start_date=start, end_date=end),
    )


async def add_holiday(session: AsyncSession, company: Company, day: date, name="Holiday") -> Holiday:
    return await _save(session, Holiday(company_id=company.id, date=day, name=name))


async def add_attendance(session: AsyncSession, worker: Worker, day: date, *, status="GREEN") -> DailyAttendance:
    return await _save(
        session,
        DailyAttendance(
            worker_id=worker.id,
            company_id=worker.company_id,
            team_id=worker.team_id,
            date=day,
            status=status,
            score=90,
            is_counted=True,
            scheduled_start="08:00",
        ),
    )


async def count_absences(session_factory, worker_id: int | None = None, day: date | None = None) -> int:
    async with session_factory() as session:
        query = select(func.count(Absence.id))
        if worker_id is not None:
            query = query.where(Absence.worker_id == worker_id)
        if day is not None:
            query = query.where(Absence.absence_date == day)
        return (await session.execute(query)).scalar_one()


async def attendance_for(session_factory, worker_id: int, day: date) -> DailyAttendance | None:
    async with session_factory() as session:
        result = await session.execute(
            select(DailyAttendance).where(DailyAttendance.worker_id == worker_id, DailyAttendance.date == day)
        )
        return result.scalar_one_or_none()
