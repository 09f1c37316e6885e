"""
Worker eligibility: baseline (new-hire grace) rules and the veto chain.

A worker is *established* once any check-in exists in their history and
stays established forever, however long the gap since. A worker with no
check-in at all is *new* and only becomes accountable the local day after
joining their team.

The veto chain is an ordered tuple of named predicates. The first one that
matches decides the skip reason; if none matches the worker is an absence
candidate for the target date.
"""

from __future__ import annotations

from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from datetime import date, datetime, timedelta

from app.core.enums import SkipReason
from app.models.worker import Worker
from app.repositories.attendance import AttendanceRepository
from app.services.calendar import TeamSchedule, is_on_leave, is_work_day
from app.services.time_oracle import local_date_of


@dataclass(frozen=True, slots=True)
class WorkerContext:
    worker: Worker
    schedule: TeamSchedule
    target_date: date
    timezone: str
    repo: AttendanceRepository


def join_date(worker: Worker, tz_name: str) -> date:
    """Local date the worker joined their team (account creation if unknown)."""
    joined_at = worker.team_joined_at or worker.created_at
    return local_date_of(joined_at, tz_name)


def first_required_date(
    worker: Worker, earliest_checkin: datetime | None, tz_name: str
) -> date:
    """First local date on which a missing check-in counts as an absence."""
    joined = join_date(worker, tz_name)
    if earliest_checkin is not None:
        return joined
    # Never checked in: the join day itself is never required
    return joined + timedelta(days=1)


# ── Vetoes ──────────────────────────────────────────────────────────
async def _team_inactive(ctx: WorkerContext) -> bool:
    return not ctx.schedule.is_active


async def _non_work_day(ctx: WorkerContext) -> bool:
    return not is_work_day(ctx.schedule, ctx.target_date)


async def _on_leave(ctx: WorkerContext) -> bool:
    return await is_on_leave(ctx.repo, ctx.worker.id, ctx.target_date)


async def _already_recorded(ctx: WorkerContext) -> bool:
    if await ctx.repo.has_daily_attendance(ctx.worker.id, ctx.target_date):
        return True
    return await ctx.repo.has_absence(ctx.worker.id, ctx.target_date)


async def _pre_baseline(ctx: WorkerContext) -> bool:
    earliest = await ctx.repo.earliest_checkin_at(ctx.worker.id)
    return ctx.target_date < first_required_date(ctx.worker, earliest, ctx.timezone)


Veto = Callable[[WorkerContext], Awaitable[bool]]

VETO_CHAIN: tuple[tuple[SkipReason, Veto], ...] = (
    (SkipReason.TEAM_INACTIVE, _team_inactive),
    (SkipReason.NON_WORK_DAY, _non_work_day),
    (SkipReason.ON_LEAVE, _on_leave),
    (SkipReason.ALREADY_RECORDED, _already_recorded),
    (SkipReason.PRE_BASELINE, _pre_baseline),
)


async def find_veto(
    ctx: WorkerContext,
    chain: tuple[tuple[SkipReason, Veto], ...] = VETO_CHAIN,
) -> SkipReason | None:
    """Return the first matching skip reason, or None for an absence candidate."""
    for reason, veto in chain:
        if await veto(ctx):
            return reason
    return None
