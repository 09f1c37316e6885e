"""Tests for the end-of-day and shift-end trigger gate."""

from datetime import date

from app.services.calendar import TeamSchedule
from app.services.time_oracle import LocalClock
from app.services.trigger_gate import end_of_day_target, shift_end_due


def _clock(hour: int, day: date = date(2025, 1, 16)) -> LocalClock:
    return LocalClock(date=day, hour=hour, minute=0, weekday="THU", timezone="Asia/Manila")


def _schedule(shift_end_hour: int = 17, is_active: bool = True) -> TeamSchedule:
    return TeamSchedule(
        team_id=1,
        name="Team A",
        work_days=frozenset({"MON", "TUE", "WED", "THU", "FRI"}),
        shift_start="08:00",
        shift_end_hour=shift_end_hour,
        is_active=is_active,
    )


def test_end_of_day_fires_at_finalize_hour_for_previous_day():
    assert end_of_day_target(_clock(5), force_run=False, finalize_hour=5) == date(2025, 1, 15)


def test_end_of_day_waits_outside_finalize_hour():
    for hour in (0, 4, 6, 10, 23):
        assert end_of_day_target(_clock(hour), force_run=False, finalize_hour=5) is None


def test_end_of_day_force_run_ignores_hour():
    assert end_of_day_target(_clock(14), force_run=True, finalize_hour=5) == date(2025, 1, 15)


def test_end_of_day_crosses_month_boundary():
    assert end_of_day_target(_clock(5, date(2025, 3, 1)), False, 5) == date(2025, 2, 28)


def test_shift_end_due_only_in_shift_end_hour():
    schedule = _schedule(shift_end_hour=17)
    assert shift_end_due(_clock(17), schedule, force_run=False) is True
    assert shift_end_due(_clock(16), schedule, force_run=False) is False
    assert shift_end_due(_clock(18), schedule, force_run=False) is False


def test_shift_end_force_run():
    assert shift_end_due(_clock(9), _schedule(), force_run=True) is True


def test_inactive_team_is_never_due():
    assert shift_end_due(_clock(17), _schedule(is_active=False), force_run=True) is False
