"""
Business-day and shift boundaries in Philippine time.

The offset is pinned to UTC+8 instead of being looked up in a tz database,
so a tzdata update can never move the day boundary.

Two conventions coexist:

* attendance day: rolls over at 06:00 local; earlier instants belong to the
  previous calendar date.
* sales shift: three fixed 8-hour blocks starting 00:00, 08:00 and 16:00
  local; the current shift starts at the latest boundary at or before now.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, timedelta, timezone

PH_TZ = timezone(timedelta(hours=8), "Asia/Manila")

ATTENDANCE_ROLLOVER_HOUR = 6
SALES_SHIFT_HOURS = 8

ATTENDANCE_SHIFTS = ("prime", "midshift", "closing")

# Clock-in cutoff (local HH, MM) per attendance shift.
SHIFT_CUTOFFS: dict[str, tuple[int, int]] = {
    "prime": (8, 0),
    "midshift": (16, 0),
    "closing": (0, 0),
}


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def ensure_utc(dt: datetime | None) -> datetime:
    """Normalise a potentially-naive timestamp to UTC-aware."""
    if dt is None:
        return utc_now()
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt


def to_local(dt: datetime | None = None) -> datetime:
    return ensure_utc(dt).astimezone(PH_TZ)


def local_date(dt: datetime | None = None) -> date:
    return to_local(dt).date()


def local_day_start(now: datetime | None = None) -> datetime:
    """UTC instant of local midnight for the calendar day containing *now*."""
    local = to_local(now)
    start = local.replace(hour=0, minute=0, second=0, microsecond=0)
    return start.astimezone(timezone.utc)


# ── Attendance day ──────────────────────────────────────────────────
def attendance_date(
    now: datetime | None = None, rollover_hour: int = ATTENDANCE_ROLLOVER_HOUR
) -> date:
    local = to_local(now)
    if local.hour < rollover_hour:
        return local.date() - timedelta(days=1)
    return local.date()


def attendance_day(
    now: datetime | None = None, rollover_hour: int = ATTENDANCE_ROLLOVER_HOUR
) -> str:
    """Attendance business day as ``YYYY-MM-DD``.

    06:00:00.000 local already belongs to the new day.
    """
    return attendance_date(now, rollover_hour).isoformat()


def attendance_day_start(
    now: datetime | None = None, rollover_hour: int = ATTENDANCE_ROLLOVER_HOUR
) -> datetime:
    """UTC instant at which the current attendance day began."""
    d = attendance_date(now, rollover_hour)
    start = datetime(d.year, d.month, d.day, rollover_hour, tzinfo=PH_TZ)
    return start.astimezone(timezone.utc)


# ── Sales shift ─────────────────────────────────────────────────────
@dataclass(frozen=True)
class SalesShift:
    date: str  # local YYYY-MM-DD
    start_hour: int  # 0 | 8 | 16

    @property
    def start(self) -> datetime:
        """UTC instant of the shift start."""
        d = date.fromisoformat(self.date)
        local = datetime(d.year, d.month, d.day, self.start_hour, tzinfo=PH_TZ)
        return local.astimezone(timezone.utc)


def sales_shift(now: datetime | None = None) -> SalesShift:
    local = to_local(now)
    start_hour = (local.hour // SALES_SHIFT_HOURS) * SALES_SHIFT_HOURS
    return SalesShift(date=local.date().isoformat(), start_hour=start_hour)


# ── Late clock-ins ──────────────────────────────────────────────────
def is_late(shift: str, clocked_at: datetime) -> bool:
    """True when *clocked_at* is after the shift cutoff of its attendance day.

    Cutoffs before the rollover hour (closing at 00:00) fall on the next
    calendar date, so a closing clock-in at 23:50 is early.
    """
    cutoff = SHIFT_CUTOFFS.get(shift)
    if cutoff is None:
        return False
    d = attendance_date(clocked_at)
    if cutoff[0] < ATTENDANCE_ROLLOVER_HOUR:
        d += timedelta(days=1)
    cutoff_at = datetime(d.year, d.month, d.day, cutoff[0], cutoff[1], tzinfo=PH_TZ)
    return ensure_utc(clocked_at) > cutoff_at
