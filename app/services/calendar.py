"""
Calendar evaluation: team schedules, work days, holidays and approved leave.

Team schedules are parsed once per company up front so a malformed team
configuration rejects the company before anything is written.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date

from app.core.config import settings
from app.core.exceptions import InvalidScheduleError
from app.models.company import Team
from app.repositories.attendance import AttendanceRepository
from app.services.time_oracle import WEEKDAY_CODES, weekday_code

# Older rows spell out day names
_DAY_ALIASES = {
    "MONDAY": "MON",
    "TUESDAY": "TUE",
    "WEDNESDAY": "WED",
    "THURSDAY": "THU",
    "FRIDAY": "FRI",
    "SATURDAY": "SAT",
    "SUNDAY": "SUN",
}


def parse_work_days(raw: str | None, team_id: int | None = None) -> frozenset[str]:
    """Parse ``"MON,TUE,..."`` into a set of weekday codes."""
    codes: set[str] = set()
    for part in (raw or "").split(","):
        code = part.strip().upper()
        if not code:
            continue
        code = _DAY_ALIASES.get(code, code)
        if code not in WEEKDAY_CODES:
            raise InvalidScheduleError(team_id, f"unknown work day {part.strip()!r}")
        codes.add(code)
    if not codes:
        raise InvalidScheduleError(team_id, "work day set is empty")
    return frozenset(codes)


def parse_clock_time(raw: str | None, team_id: int | None = None) -> tuple[int, int]:
    """Parse ``HH:MM`` into (hour, minute)."""
    parts = (raw or "").strip().split(":")
    try:
        if len(parts) != 2:
            raise ValueError(raw)
        hour, minute = int(parts[0]), int(parts[1])
    except ValueError:
        raise InvalidScheduleError(team_id, f"malformed shift time {raw!r}") from None
    if not (0 <= hour <= 23 and 0 <= minute <= 59):
        raise InvalidScheduleError(team_id, f"shift time out of range {raw!r}")
    return hour, minute


@dataclass(frozen=True, slots=True)
class TeamSchedule:
    team_id: int
    name: str
    work_days: frozenset[str]
    shift_start: str
    shift_end_hour: int
    is_active: bool

    @classmethod
    def from_team(cls, team: Team) -> TeamSchedule:
        start = parse_clock_time(team.shift_start or settings.DEFAULT_SHIFT_START, team.id)
        end = parse_clock_time(team.shift_end or settings.DEFAULT_SHIFT_END, team.id)
        # Overnight shifts are not supported
        if start >= end:
            raise InvalidScheduleError(
                team.id, f"shift start {team.shift_start} is not before end {team.shift_end}"
            )
        return cls(
            team_id=team.id,
            name=team.name,
            work_days=parse_work_days(team.work_days, team.id),
            shift_start=f"{start[0]:02d}:{start[1]:02d}",
            shift_end_hour=end[0],
            is_active=bool(team.is_active),
        )

    @classmethod
    def inactive(cls, team: Team) -> TeamSchedule:
        """Placeholder for a disabled team; its stored schedule is never parsed."""
        return cls(
            team_id=team.id,
            name=team.name,
            work_days=frozenset(),
            shift_start=settings.DEFAULT_SHIFT_START,
            shift_end_hour=-1,
            is_active=False,
        )


def is_work_day(schedule: TeamSchedule, day: date) -> bool:
    return weekday_code(day) in schedule.work_days


async def is_holiday(repo: AttendanceRepository, company_id: int, day: date) -> bool:
    return await repo.holiday_on(company_id, day) is not None


async def is_on_leave(repo: AttendanceRepository, worker_id: int, day: date) -> bool:
    return await repo.has_approved_leave(worker_id, day)
