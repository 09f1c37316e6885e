"""
Manual finalizer triggers + health check.

The scheduler normally runs the finalizer from the command line job; these
endpoints exist for reconciliation and backfill. ``force=true`` bypasses
only the local-hour gate, every other veto still applies.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone

from fastapi import APIRouter, Depends, Query
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from app.api.v1.deps import get_db, get_session_factory
from app.schemas.finalizer import HealthResponse, RunStats
from app.services.finalizer import AttendanceFinalizer

router = APIRouter(tags=["finalizer"])
logger = logging.getLogger(__name__)


@router.post("/finalizer/end-of-day", response_model=RunStats)
async def trigger_end_of_day(
    force: bool = Query(False),
    session_factory: async_sessionmaker[AsyncSession] = Depends(get_session_factory),
) -> RunStats:
    """Run the end-of-day sweep (previous local day) now."""
    logger.info("Manual end-of-day finalization requested (force=%s)", force)
    finalizer = AttendanceFinalizer(session_factory)
    return await finalizer.finalize_end_of_day(datetime.now(timezone.utc), force_run=force)


@router.post("/finalizer/shift-end", response_model=RunStats)
async def trigger_shift_end(
    force: bool = Query(False),
    session_factory: async_sessionmaker[AsyncSession] = Depends(get_session_factory),
) -> RunStats:
    """Run the shift-end sweep (current local day) now."""
    logger.info("Manual shift-end finalization requested (force=%s)", force)
    finalizer = AttendanceFinalizer(session_factory)
    return await finalizer.finalize_shift_end(datetime.now(timezone.utc), force_run=force)


@router.get("/health", response_model=HealthResponse)
async def health(db: AsyncSession = Depends(get_db)) -> HealthResponse:
    try:
        await db.execute(text("SELECT 1"))
        db_ok = True
    except SQLAlchemyError:
        logger.warning("Health check: database unreachable", exc_info=True)
        db_ok = False
    return HealthResponse(db=db_ok)
