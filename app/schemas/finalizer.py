"""Pydantic schemas for finalizer runs."""

from __future__ import annotations

from pydantic import BaseModel, Field


class RunStats(BaseModel):
    """Aggregate result of one finalizer invocation."""

    mode: str
    companies_processed: int = 0
    teams_processed: int = 0
    companies_on_holiday: int = 0
    companies_failed: int = 0
    skipped: int = 0
    marked_absent: int = 0
    failed: int = 0
    skip_reasons: dict[str, int] = Field(default_factory=dict)


class HealthResponse(BaseModel):
    db: bool
