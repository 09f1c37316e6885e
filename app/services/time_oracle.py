"""
UTC instant → company-local wall clock.

Every function takes the instant explicitly; nothing here reads the system
clock, so callers decide what "now" is.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, time, timedelta, timezone
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from app.core.exceptions import InvalidTimezoneError

WEEKDAY_CODES = ("MON", "TUE", "WED", "THU", "FRI", "SAT", "SUN")


@dataclass(frozen=True, slots=True)
class LocalClock:
    date: date
    hour: int
    minute: int
    weekday: str
    timezone: str


def _ensure_utc(dt: datetime) -> datetime:
    """Normalise a potentially-naive timestamp to UTC-aware."""
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt


def resolve_zone(tz_name: str | None) -> ZoneInfo:
    """Load an IANA zone, refusing empty or unknown names."""
    if not tz_name or not tz_name.strip():
        raise InvalidTimezoneError(tz_name)
    try:
        return ZoneInfo(tz_name.strip())
    except (ZoneInfoNotFoundError, ValueError, OSError) as exc:
        raise InvalidTimezoneError(tz_name) from exc


def weekday_code(day: date) -> str:
    return WEEKDAY_CODES[day.weekday()]


def local_clock(now_utc: datetime, tz_name: str | None) -> LocalClock:
    """Convert *now_utc* to the wall clock of *tz_name*."""
    zone = resolve_zone(tz_name)
    local = _ensure_utc(now_utc).astimezone(zone)
    return LocalClock(
        date=local.date(),
        hour=local.hour,
        minute=local.minute,
        weekday=weekday_code(local.date()),
        timezone=zone.key,
    )


def local_date_of(instant: datetime, tz_name: str | None) -> date:
    """Calendar date a stored timestamp falls on in *tz_name*."""
    return _ensure_utc(instant).astimezone(resolve_zone(tz_name)).date()


def local_day_bounds_utc(day: date, tz_name: str | None) -> tuple[datetime, datetime]:
    """Half-open UTC range [start, end) covering local *day*.

    Built from local midnights so 23h and 25h DST days come out right.
    """
    zone = resolve_zone(tz_name)
    start_local = datetime.combine(day, time.min, tzinfo=zone)
    end_local = datetime.combine(day + timedelta(days=1), time.min, tzinfo=zone)
    return start_local.astimezone(timezone.utc), end_local.astimezone(timezone.utc)
