"""
Company, Team & Holiday models — tenant configuration read by the finalizer.
"""

from __future__ import annotations

from datetime import date, datetime, timezone

from sqlalchemy import (Boolean, Column, Date, DateTime, ForeignKey, Integer,
                        String, UniqueConstraint)
from sqlalchemy.orm import relationship

from app.db.base import Base


class Company(Base):
    __tablename__ = "companies"

    id: int = Column(Integer, primary_key=True, index=True)  # type: ignore[assignment]
    name: str = Column(String(200), nullable=False)  # type: ignore[assignment]
    timezone: str = Column(String(64), nullable=False)  # type: ignore[assignment]  # IANA, e.g. Asia/Manila
    is_active: bool = Column(Boolean, default=True, server_default="true")  # type: ignore[assignment]
    created_at: datetime = Column(  # type: ignore[assignment]
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
    )

    teams = relationship("Team", back_populates="company")


class Team(Base):
    __tablename__ = "teams"

    id: int = Column(Integer, primary_key=True, index=True)  # type: ignore[assignment]
    company_id: int = Column(Integer, ForeignKey("companies.id"), nullable=False, index=True)  # type: ignore[assignment]
    name: str = Column(String(200), nullable=False)  # type: ignore[assignment]
    work_days: str = Column(  # type: ignore[assignment]
        String(64),
        nullable=False,
        default="MON,TUE,WED,THU,FRI",
    )  # comma separated SUN..SAT codes
    shift_start: str = Column(String(5), nullable=False, default="08:00")  # type: ignore[assignment]
    shift_end: str = Column(String(5), nullable=False, default="17:00")  # type: ignore[assignment]
    is_active: bool = Column(Boolean, default=True, server_default="true")  # type: ignore[assignment]

    company = relationship("Company", back_populates="teams")


class Holiday(Base):
    __tablename__ = "holidays"
    __table_args__ = (
        UniqueConstraint("company_id", "date", name="uq_holiday_company_date"),
    )

    id: int = Column(Integer, primary_key=True, index=True)  # type: ignore[assignment]
    company_id: int = Column(Integer, ForeignKey("companies.id"), nullable=False)  # type: ignore[assignment]
    date: date = Column(Date, nullable=False)  # type: ignore[assignment]
    name: str = Column(String(200), nullable=False)  # type: ignore[assignment]
