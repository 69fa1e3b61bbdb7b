from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime, time, timezone
from typing import Protocol

from zoneinfo import ZoneInfo

# Default application timezone aligned with frontend
DEFAULT_TIMEZONE_NAME = "America/Guayaquil"
DEFAULT_TZ = ZoneInfo(DEFAULT_TIMEZONE_NAME)

# Milking windows: AM collected before noon, PM after
SHIFT_CUTOFF_HOUR = 12
AM_BASE_TIME = time(hour=6, minute=0)
PM_BASE_TIME = time(hour=18, minute=0)


class Clock(Protocol):
    def now(self) -> datetime: ...

    def today(self) -> date: ...


@dataclass(frozen=True, slots=True)
class SystemClock:
    tz: ZoneInfo = field(default=DEFAULT_TZ)

    def now(self) -> datetime:
        return datetime.now(self.tz)

    def today(self) -> date:
        return self.now().date()


def assume_local_tz(dt: datetime, tz: ZoneInfo = DEFAULT_TZ) -> datetime:
    """Assume the given naive datetime is in `tz`.

    If `dt` is naive, attach `tz` without shifting time.
    If `dt` is aware, return as-is.
    """
    if dt.tzinfo is None:
        return dt.replace(tzinfo=tz)
    return dt


def to_utc(dt: datetime, tz: ZoneInfo = DEFAULT_TZ) -> datetime:
    """Convert a datetime to UTC, assuming `tz` for naive values."""
    return assume_local_tz(dt, tz).astimezone(timezone.utc)


def to_local(dt: datetime, tz: ZoneInfo = DEFAULT_TZ) -> datetime:
    """Wall-clock view of `dt` in `tz`; naive values are already wall-clock."""
    return assume_local_tz(dt, tz).astimezone(tz)


def local_date(dt: datetime, tz: ZoneInfo = DEFAULT_TZ) -> date:
    """Calendar day of `dt` as seen on the farm.

    This is the single derivation used by record creation, conflict
    detection and every aggregation. Never use `dt.date()` on a UTC value:
    evening milkings would land on the next day.
    """
    return to_local(dt, tz).date()


def shift_for(dt: datetime, tz: ZoneInfo = DEFAULT_TZ) -> str:
    return "AM" if to_local(dt, tz).hour < SHIFT_CUTOFF_HOUR else "PM"


def shift_start(d: date, shift: str, tz: ZoneInfo = DEFAULT_TZ) -> datetime:
    """Conventional timestamp for a date/shift pair: AM -> 06:00, PM -> 18:00 local."""
    base_time = AM_BASE_TIME if shift.upper() == "AM" else PM_BASE_TIME
    return datetime.combine(d, base_time).replace(tzinfo=tz)


_DOW_ES = ["lun", "mar", "mié", "jue", "vie", "sáb", "dom"]
_MON_ES = ["ene", "feb", "mar", "abr", "may", "jun", "jul", "ago", "sep", "oct", "nov", "dic"]


def format_day_date(
    d: date | datetime | str | None,
    *,
    include_time: bool = False,
    t: time | None = None,
    tz: ZoneInfo | None = DEFAULT_TZ,
) -> str:
    """Return 'vie 05/oct' or with time 'vie 05/oct hh:mm' (es-ES style).

    Accepts ISO date/datetime strings (with optional trailing 'Z').
    Naive values are taken as wall-clock in `tz`; aware values are converted.
    """
    if d is None:
        return ""
    if isinstance(d, str):
        s = d.strip()
        if s.endswith("Z"):
            s = s[:-1] + "+00:00"
        try:
            dt = datetime.fromisoformat(s)
        except ValueError:
            try:
                only_date = date.fromisoformat(s)
                dt = datetime.combine(only_date, time(0, 0))
            except ValueError:
                return str(d)
    elif isinstance(d, datetime):
        dt = d
    else:
        dt = datetime.combine(d, time(0, 0))

    if tz is not None:
        dt = to_local(dt, tz)

    dow = _DOW_ES[dt.weekday()]
    mon = _MON_ES[dt.month - 1]
    day_str = f"{dt.day:02d}/{mon}"
    if include_time:
        hhmm = t.strftime("%H:%M") if t else dt.strftime("%H:%M")
        return f"{dow} {day_str} {hhmm}"
    return f"{dow} {day_str}"
