"""
Attendance finalizer — marks workers ABSENT for days they never checked in.

Invoked hourly by an external scheduler, in two modes:

1. End-of-day (``finalize_end_of_day``):
   - fires for each company at its local FINALIZE_HOUR (5 AM by default)
   - closes the previous local day for every worker of the company
   - safety net for anyone the shift-end sweep missed

2. Shift-end (``finalize_shift_end``):
   - fires per team in the local hour its shift ends
   - closes the current local day for that team's workers

Safeguards:
- "now" is passed in and converted per company timezone
- a holiday voids the whole company for the target date
- per-worker vetoes: inactive team, non-work day, approved leave,
  already recorded, new-hire grace window
- attendance + absence are written in one transaction per worker; the
  (worker, date) unique constraints turn a lost race into a no-op
- a company that cannot be loaded (bad configuration, database error) is
  counted in ``companies_failed`` and the run carries on; so does a failed
  worker write, counted in ``failed``
- only an unreachable company list fails the run as a whole
"""

from __future__ import annotations

import asyncio
import logging
from collections import Counter
from collections.abc import Awaitable, Callable, Sequence
from dataclasses import dataclass, field
from datetime import date, datetime

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from app.core.config import settings
from app.core.enums import FinalizeMode, SkipReason
from app.core.exceptions import ConfigurationError
from app.models.company import Company
from app.models.worker import Worker
from app.repositories.attendance import AttendanceRepository
from app.schemas.finalizer import RunStats
from app.services.calendar import TeamSchedule
from app.services.daily_summary import recalculate_daily_team_summary
from app.services.eligibility import WorkerContext, find_veto
from app.services.time_oracle import local_clock
from app.services.trigger_gate import end_of_day_target, shift_end_due

logger = logging.getLogger(__name__)

SummaryRecalculator = Callable[[async_sessionmaker[AsyncSession], int, date], Awaitable[object]]


@dataclass
class CompanyOutcome:
    """Counters for one company; merged into RunStats once every company is done."""

    company_id: int
    processed: bool = False
    on_holiday: bool = False
    excluded: bool = False
    teams_processed: int = 0
    skipped: int = 0
    marked_absent: int = 0
    failed: int = 0
    skip_reasons: Counter[str] = field(default_factory=Counter)

    def skip(self, reason: SkipReason) -> None:
        self.skipped += 1
        self.skip_reasons[reason.value] += 1


class AttendanceFinalizer:
    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        *,
        recalculate_summary: SummaryRecalculator = recalculate_daily_team_summary,
        finalize_hour: int | None = None,
        max_concurrency: int | None = None,
    ):
        self._session_factory = session_factory
        self._recalculate_summary = recalculate_summary
        self._finalize_hour = settings.FINALIZE_HOUR if finalize_hour is None else finalize_hour
        self._max_concurrency = max_concurrency or settings.FINALIZER_MAX_CONCURRENCY

    # ── Entry points ────────────────────────────────────────────────
    async def finalize_end_of_day(self, now: datetime, force_run: bool = False) -> RunStats:
        """Close yesterday (company-local) for companies at their finalize hour."""
        return await self._run(FinalizeMode.END_OF_DAY, now, force_run)

    async def finalize_shift_end(self, now: datetime, force_run: bool = False) -> RunStats:
        """Close today (company-local) for teams whose shift ends this hour."""
        return await self._run(FinalizeMode.SHIFT_END, now, force_run)

    # ── Run ─────────────────────────────────────────────────────────
    async def _run(self, mode: FinalizeMode, now: datetime, force_run: bool) -> RunStats:
        # An unreachable database fails here, before any company is touched
        async with self._session_factory() as session:
            companies = await AttendanceRepository(session).list_active_companies()

        semaphore = asyncio.Semaphore(self._max_concurrency)

        async def _guarded(company: Company) -> CompanyOutcome:
            async with semaphore:
                return await self._process_company(mode, company, now, force_run)

        results = await asyncio.gather(
            *(_guarded(company) for company in companies),
            return_exceptions=True,
        )

        stats = RunStats(mode=mode.value)
        reasons: Counter[str] = Counter()
        for company, result in zip(companies, results):
            if isinstance(result, Exception):
                logger.error(
                    "[%s] Company %s aborted", mode.value, company.id, exc_info=result
                )
                stats.companies_failed += 1
                continue
            if isinstance(result, BaseException):
                raise result
            stats.companies_processed += int(result.processed)
            stats.companies_on_holiday += int(result.on_holiday)
            stats.companies_failed += int(result.excluded)
            stats.teams_processed += result.teams_processed
            stats.skipped += result.skipped
            stats.marked_absent += result.marked_absent
            stats.failed += result.failed
            reasons.update(result.skip_reasons)
        stats.skip_reasons = dict(reasons)

        if stats.companies_processed or stats.companies_failed:
            logger.info("[%s] Run completed: %s", mode.value, stats.model_dump())
        return stats

    # ── Company ─────────────────────────────────────────────────────
    async def _process_company(
        self, mode: FinalizeMode, company: Company, now: datetime, force_run: bool
    ) -> CompanyOutcome:
        outcome = CompanyOutcome(company_id=company.id)
        try:
            clock = local_clock(now, company.timezone)

            if mode is FinalizeMode.END_OF_DAY:
                target = end_of_day_target(clock, force_run, self._finalize_hour)
                if target is None:
                    return outcome
            else:
                target = clock.date

            async with self._session_factory() as session:
                repo = AttendanceRepository(session)
                schedules = {
                    team.id: TeamSchedule.from_team(team) if team.is_active else TeamSchedule.inactive(team)
                    for team in await repo.teams_for_company(company.id)
                }

                if mode is FinalizeMode.END_OF_DAY:
                    selected = [s for s in schedules.values() if s.is_active]
                else:
                    selected = [s for s in schedules.values() if shift_end_due(clock, s, force_run)]
                    if not selected:
                        return outcome

                outcome.processed = True
                logger.info(
                    "[%s] Processing company %s at %02d:%02d %s for %s",
                    mode.value, company.id, clock.hour, clock.minute, clock.timezone, target,
                )

                holiday = await repo.holiday_on(company.id, target)
                if holiday is not None:
                    logger.info(
                        "[%s] Skipping company %s - holiday: %s", mode.value, company.id, holiday.name
                    )
                    outcome.on_holiday = True
                    # Counted per company; no worker is evaluated
                    outcome.skip_reasons[SkipReason.HOLIDAY.value] += 1
                    return outcome

                if mode is FinalizeMode.END_OF_DAY:
                    workers = await repo.workers_for_company(company.id)
                else:
                    workers = await repo.workers_for_teams([s.team_id for s in selected])
                outcome.teams_processed = len(selected)
        except ConfigurationError as exc:
            logger.error("[%s] Company %s excluded from run: %s", mode.value, company.id, exc)
            outcome.excluded = True
            return outcome
        except SQLAlchemyError:
            logger.error(
                "[%s] Company %s excluded from run: database error while loading",
                mode.value, company.id, exc_info=True,
            )
            outcome.processed = False
            outcome.excluded = True
            return outcome

        teams_written = await self._process_workers(
            mode, outcome, workers, schedules, target, clock.timezone
        )
        for team_id in sorted(teams_written):
            try:
                await self._recalculate_summary(self._session_factory, team_id, target)
            except Exception:
                logger.exception(
                    "[%s] Failed to recalculate summary for team %s on %s", mode.value, team_id, target
                )
        return outcome

    # ── Workers ─────────────────────────────────────────────────────
    async def _process_workers(
        self,
        mode: FinalizeMode,
        outcome: CompanyOutcome,
        workers: Sequence[Worker],
        schedules: dict[int, TeamSchedule],
        target: date,
        tz_name: str,
    ) -> set[int]:
        teams_written: set[int] = set()
        for worker in workers:
            schedule = schedules.get(worker.team_id)
            if schedule is None:
                # Team belongs to another company or was removed
                outcome.skip(SkipReason.TEAM_INACTIVE)
                continue
            try:
                reason = await self._finalize_worker(worker, schedule, target, tz_name)
            except SQLAlchemyError:
                logger.error(
                    "[%s] Failed to finalize worker %s for %s", mode.value, worker.id, target,
                    exc_info=True,
                )
                outcome.failed += 1
                continue

            if reason is not None:
                outcome.skip(reason)
                continue
            logger.info(
                "[%s] Marked absent: %s (worker %s) on %s",
                mode.value, worker.full_name, worker.id, target,
            )
            outcome.marked_absent += 1
            teams_written.add(schedule.team_id)
        return teams_written

    async def _finalize_worker(
        self, worker: Worker, schedule: TeamSchedule, target: date, tz_name: str
    ) -> SkipReason | None:
        """Evaluate and, if eligible, write one worker in a single transaction.

        Returns the skip reason, or None when the absence was written.
        """
        try:
            async with self._session_factory() as session:
                async with session.begin():
                    repo = AttendanceRepository(session)
                    ctx = WorkerContext(
                        worker=worker,
                        schedule=schedule,
                        target_date=target,
                        timezone=tz_name,
                        repo=repo,
                    )
                    reason = await find_veto(ctx)
                    if reason is not None:
                        return reason
                    await repo.create_absence(worker, target, schedule.shift_start)
        except IntegrityError:
            # Only a row for (worker, date) written by another run makes this a no-op
            if not await self._already_recorded(worker.id, target):
                raise
            logger.info(
                "Worker %s already finalized for %s by a concurrent run", worker.id, target
            )
            return SkipReason.ALREADY_RECORDED
        return None

    async def _already_recorded(self, worker_id: int, target: date) -> bool:
        async with self._session_factory() as session:
            repo = AttendanceRepository(session)
            if await repo.has_daily_attendance(worker_id, target):
                return True
            return await repo.has_absence(worker_id, target)
