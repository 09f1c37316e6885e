"""
Command-line entry point for the scheduler.

Cron runs this once an hour::

    0 * * * *  python -m app.jobs.finalize hourly

``hourly`` runs the end-of-day sweep, then the shift-end sweep; a failure
in one is logged and does not prevent the other. ``--at`` replaces the
current instant, which together with ``--force`` is how a missed day is
backfilled by hand.
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from datetime import datetime, timezone

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from app.core.config import settings
from app.db.session import async_session_factory, engine
from app.schemas.finalizer import RunStats
from app.services.finalizer import AttendanceFinalizer

logger = logging.getLogger("app.jobs.finalize")

MODES = ("end-of-day", "shift-end", "hourly")


def _parse_instant(value: str) -> datetime:
    try:
        parsed = datetime.fromisoformat(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"not an ISO 8601 timestamp: {value!r}") from None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="python -m app.jobs.finalize",
        description="Mark workers absent for days without a check-in.",
    )
    parser.add_argument("mode", choices=MODES)
    parser.add_argument(
        "--force",
        action="store_true",
        help="ignore the local-hour gate (all other exemptions still apply)",
    )
    parser.add_argument(
        "--at",
        type=_parse_instant,
        default=None,
        help="evaluate as if it were this instant (ISO 8601, naive means UTC)",
    )
    return parser


async def run(
    mode: str,
    now: datetime,
    force_run: bool,
    session_factory: async_sessionmaker[AsyncSession] = async_session_factory,
) -> tuple[list[RunStats], bool]:
    """Run the requested sweep(s). Returns the stats and whether every sweep succeeded."""
    finalizer = AttendanceFinalizer(session_factory)
    sweeps = []
    if mode in ("end-of-day", "hourly"):
        sweeps.append(finalizer.finalize_end_of_day)
    if mode in ("shift-end", "hourly"):
        sweeps.append(finalizer.finalize_shift_end)

    results: list[RunStats] = []
    ok = True
    for sweep in sweeps:
        try:
            results.append(await sweep(now, force_run=force_run))
        except Exception:
            logger.exception("Finalizer sweep %s failed", sweep.__name__)
            ok = False
    return results, ok


async def _main(args: argparse.Namespace) -> int:
    now = args.at or datetime.now(timezone.utc)
    try:
        results, ok = await run(args.mode, now, args.force)
    finally:
        await engine.dispose()
    for stats in results:
        logger.info("%s", stats.model_dump_json())
    return 0 if ok else 1


def main(argv: list[str] | None = None) -> int:
    logging.basicConfig(
        level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
        format=settings.LOG_FORMAT,
    )
    args = build_parser().parse_args(argv)
    return asyncio.run(_main(args))


if __name__ == "__main__":
    sys.exit(main())
