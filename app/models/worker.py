"""
Worker, Check-in & Leave exception models.
"""

from __future__ import annotations

from datetime import date, datetime, timezone

from sqlalchemy import (Boolean, Column, Date, DateTime, ForeignKey, Index,
                        Integer, String)
from sqlalchemy.orm import relationship

from app.db.base import Base


class Worker(Base):
    __tablename__ = "workers"

    id: int = Column(Integer, primary_key=True, index=True)  # type: ignore[assignment]
    company_id: int = Column(Integer, ForeignKey("companies.id"), nullable=False, index=True)  # type: ignore[assignment]
    team_id: int | None = Column(Integer, ForeignKey("teams.id"), nullable=True, index=True)  # type: ignore[assignment]
    first_name: str = Column(String(100), nullable=False)  # type: ignore[assignment]
    last_name: str = Column(String(100), nullable=False, default="")  # type: ignore[assignment]
    role: str = Column(  # type: ignore[assignment]
        String(20),
        nullable=False,
        default="WORKER",
        server_default="WORKER",
    )  # WORKER | MEMBER | TEAM_LEAD | SUPERVISOR | ADMIN
    is_active: bool = Column(Boolean, default=True, server_default="true")  # type: ignore[assignment]
    team_joined_at: datetime | None = Column(DateTime(timezone=True), nullable=True)  # type: ignore[assignment]
    created_at: datetime = Column(  # type: ignore[assignment]
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
    )

    team = relationship("Team")

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()


class Checkin(Base):
    __tablename__ = "checkins"
    __table_args__ = (Index("ix_checkin_worker_created", "worker_id", "created_at"),)

    id: int = Column(Integer, primary_key=True, index=True)  # type: ignore[assignment]
    worker_id: int = Column(Integer, ForeignKey("workers.id"), nullable=False)  # type: ignore[assignment]
    readiness_status: str = Column(String(10), nullable=False, default="GREEN")  # type: ignore[assignment]
    # GREEN | YELLOW | RED
    readiness_score: int = Column(Integer, nullable=False, default=100)  # type: ignore[assignment]
    created_at: datetime = Column(  # type: ignore[assignment]
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
    )


class LeaveException(Base):
    """Leave window requested by a worker; APPROVED ones exempt every date in range."""

    __tablename__ = "leave_exceptions"
    __table_args__ = (Index("ix_leave_worker_range", "worker_id", "start_date", "end_date"),)

    id: int = Column(Integer, primary_key=True, index=True)  # type: ignore[assignment]
    worker_id: int = Column(Integer, ForeignKey("workers.id"), nullable=False)  # type: ignore[assignment]
    type: str = Column(String(30), nullable=False)  # type: ignore[assignment]
    # SICK_LEAVE | PERSONAL_LEAVE | MEDICAL_APPOINTMENT | FAMILY_EMERGENCY | OTHER
    status: str = Column(String(20), nullable=False, default="PENDING")  # type: ignore[assignment]
    # PENDING | APPROVED | REJECTED
    start_date: date = Column(Date, nullable=False)  # type: ignore[assignment]
    end_date: date = Column(Date, nullable=False)  # type: ignore[assignment]  # inclusive
    created_at: datetime = Column(  # type: ignore[assignment]
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
    )
