"""Decide whether a finalization mode is due for a company or team right now."""

from __future__ import annotations

from datetime import date, timedelta

from app.services.calendar import TeamSchedule
from app.services.time_oracle import LocalClock


def end_of_day_target(clock: LocalClock, force_run: bool, finalize_hour: int) -> date | None:
    """Target date for the end-of-day sweep, or None when it is not time yet.

    Fires at *finalize_hour* local time and closes the previous local day,
    leaving the early morning as a margin for late check-ins.
    """
    if not force_run and clock.hour != finalize_hour:
        return None
    return clock.date - timedelta(days=1)


def shift_end_due(clock: LocalClock, schedule: TeamSchedule, force_run: bool) -> bool:
    """True when the team's shift ends in the current local hour."""
    if not schedule.is_active:
        return False
    return force_run or clock.hour == schedule.shift_end_hour
