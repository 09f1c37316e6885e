"""
DailyAttendance, Absence & DailyTeamSummary models.

(worker_id, date) is unique on both daily_attendance and absences; the
constraint is what makes a lost finalization race a no-op.
"""

from __future__ import annotations

from datetime import date, datetime, timezone

from sqlalchemy import (Boolean, Column, Date, DateTime, Float, ForeignKey,
                        Integer, String, UniqueConstraint)

from app.db.base import Base


class DailyAttendance(Base):
    __tablename__ = "daily_attendance"
    __table_args__ = (
        UniqueConstraint("worker_id", "date", name="uq_daily_attendance_worker_date"),
    )

    id: int = Column(Integer, primary_key=True, index=True)  # type: ignore[assignment]
    worker_id: int = Column(Integer, ForeignKey("workers.id"), nullable=False)  # type: ignore[assignment]
    company_id: int = Column(Integer, ForeignKey("companies.id"), nullable=False)  # type: ignore[assignment]
    team_id: int = Column(Integer, ForeignKey("teams.id"), nullable=False)  # type: ignore[assignment]
    date: date = Column(Date, nullable=False, index=True)  # type: ignore[assignment]
    status: str = Column(String(20), nullable=False)  # type: ignore[assignment]
    # GREEN | YELLOW | RED | ABSENT | EXCUSED
    score: int = Column(Integer, nullable=False, default=0)  # type: ignore[assignment]
    is_counted: bool = Column(Boolean, nullable=False, default=True)  # type: ignore[assignment]
    scheduled_start: str = Column(String(5), nullable=False)  # type: ignore[assignment]
    check_in_time: datetime | None = Column(DateTime(timezone=True), nullable=True)  # type: ignore[assignment]
    created_at: datetime = Column(  # type: ignore[assignment]
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
    )


class Absence(Base):
    __tablename__ = "absences"
    __table_args__ = (
        UniqueConstraint("worker_id", "absence_date", name="uq_absence_worker_date"),
    )

    id: int = Column(Integer, primary_key=True, index=True)  # type: ignore[assignment]
    worker_id: int = Column(Integer, ForeignKey("workers.id"), nullable=False)  # type: ignore[assignment]
    team_id: int = Column(Integer, ForeignKey("teams.id"), nullable=False)  # type: ignore[assignment]
    company_id: int = Column(Integer, ForeignKey("companies.id"), nullable=False)  # type: ignore[assignment]
    absence_date: date = Column(Date, nullable=False, index=True)  # type: ignore[assignment]
    status: str = Column(String(30), nullable=False)  # type: ignore[assignment]
    # PENDING_JUSTIFICATION | EXCUSED | UNEXCUSED
    reason_category: str | None = Column(String(50), nullable=True)  # type: ignore[assignment]
    explanation: str | None = Column(String(1000), nullable=True)  # type: ignore[assignment]
    created_at: datetime = Column(  # type: ignore[assignment]
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
    )


class DailyTeamSummary(Base):
    """Pre-aggregated per team per day figures, rebuilt after every finalization write."""

    __tablename__ = "daily_team_summaries"
    __table_args__ = (
        UniqueConstraint("team_id", "date", name="uq_team_summary_team_date"),
    )

    id: int = Column(Integer, primary_key=True, index=True)  # type: ignore[assignment]
    team_id: int = Column(Integer, ForeignKey("teams.id"), nullable=False)  # type: ignore[assignment]
    company_id: int = Column(Integer, ForeignKey("companies.id"), nullable=False)  # type: ignore[assignment]
    date: date = Column(Date, nullable=False)  # type: ignore[assignment]
    is_work_day: bool = Column(Boolean, nullable=False)  # type: ignore[assignment]
    is_holiday: bool = Column(Boolean, nullable=False)  # type: ignore[assignment]
    total_members: int = Column(Integer, nullable=False, default=0)  # type: ignore[assignment]
    on_leave_count: int = Column(Integer, nullable=False, default=0)  # type: ignore[assignment]
    expected_to_check_in: int = Column(Integer, nullable=False, default=0)  # type: ignore[assignment]
    checked_in_count: int = Column(Integer, nullable=False, default=0)  # type: ignore[assignment]
    not_checked_in_count: int = Column(Integer, nullable=False, default=0)  # type: ignore[assignment]
    green_count: int = Column(Integer, nullable=False, default=0)  # type: ignore[assignment]
    yellow_count: int = Column(Integer, nullable=False, default=0)  # type: ignore[assignment]
    red_count: int = Column(Integer, nullable=False, default=0)  # type: ignore[assignment]
    absent_count: int = Column(Integer, nullable=False, default=0)  # type: ignore[assignment]
    excused_count: int = Column(Integer, nullable=False, default=0)  # type: ignore[assignment]
    avg_readiness_score: float | None = Column(Float, nullable=True)  # type: ignore[assignment]
    compliance_rate: float | None = Column(Float, nullable=True)  # type: ignore[assignment]
    updated_at: datetime = Column(  # type: ignore[assignment]
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )
