"""String enums for status columns; values are what the database stores."""

from __future__ import annotations

from enum import Enum


class WorkerRole(str, Enum):
    WORKER = "WORKER"
    MEMBER = "MEMBER"
    TEAM_LEAD = "TEAM_LEAD"
    SUPERVISOR = "SUPERVISOR"
    ADMIN = "ADMIN"


# Only these roles are expected to check in daily
FINALIZED_ROLES = (WorkerRole.WORKER.value, WorkerRole.MEMBER.value)


class AttendanceStatus(str, Enum):
    GREEN = "GREEN"
    YELLOW = "YELLOW"
    RED = "RED"
    ABSENT = "ABSENT"
    EXCUSED = "EXCUSED"


class AbsenceStatus(str, Enum):
    PENDING_JUSTIFICATION = "PENDING_JUSTIFICATION"
    EXCUSED = "EXCUSED"
    UNEXCUSED = "UNEXCUSED"


class ExceptionStatus(str, Enum):
    PENDING = "PENDING"
    APPROVED = "APPROVED"
    REJECTED = "REJECTED"


class ReadinessStatus(str, Enum):
    GREEN = "GREEN"
    YELLOW = "YELLOW"
    RED = "RED"


class FinalizeMode(str, Enum):
    END_OF_DAY = "end_of_day"
    SHIFT_END = "shift_end"


class SkipReason(str, Enum):
    """Why a worker (or whole company) was not marked absent for a date."""

    HOLIDAY = "holiday"
    TEAM_INACTIVE = "team_inactive"
    NON_WORK_DAY = "non_work_day"
    ON_LEAVE = "on_leave"
    ALREADY_RECORDED = "already_recorded"
    PRE_BASELINE = "pre_baseline"
