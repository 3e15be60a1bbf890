"""
Slot generation for a doctor's recurring weekly availability.

A rule such as "Monday 09:00-12:00" is tiled into fixed-length windows for a
concrete date. Windows that already started (same-day booking) or that collide
with an existing reservation are dropped. Nothing here touches the database;
callers fetch the rule and the reservations for the date and pass them in.
"""

from dataclasses import dataclass
from datetime import date, datetime, time, timedelta
from typing import Iterable, List, Optional, Union

from app.core.utils import sunday_first_weekday
from app.schemas.availability import CandidateWindow

TimeValue = Union[time, str]


@dataclass(frozen=True)
class Reservation:
    start: datetime
    duration_minutes: Optional[int] = None


def time_to_minutes(value: TimeValue) -> int:
    """Minute of day for a time or an "HH:MM[:SS]" string."""
    if isinstance(value, time):
        return value.hour * 60 + value.minute
    hours, minutes = value.strip()[:5].split(":")
    result = int(hours) * 60 + int(minutes)
    if not 0 <= result < 24 * 60:
        raise ValueError(f"time out of range: {value!r}")
    return result


def _overlaps(start: datetime, end: datetime, reservation: Reservation, default_minutes: int) -> bool:
    duration = reservation.duration_minutes or default_minutes
    reserved_end = reservation.start + timedelta(minutes=duration)
    return start < reserved_end and reservation.start < end


def resolve(
    rule,
    target_date: date,
    existing_reservations: Iterable[Reservation],
    now: datetime,
    slot_duration_minutes: int = 60,
) -> List[CandidateWindow]:
    """
    Bookable windows for ``rule`` on ``target_date``.

    ``rule`` needs ``day_of_week`` (0=Sunday), ``start_time``, ``end_time``
    and ``is_active``. ``existing_reservations`` must already be narrowed to
    this doctor and date. Returns an empty list when the rule does not apply;
    the result is ordered by start time.
    """
    if slot_duration_minutes <= 0:
        return []
    if not rule.is_active or rule.day_of_week != sunday_first_weekday(target_date):
        return []

    start_minutes = time_to_minutes(rule.start_time)
    end_minutes = time_to_minutes(rule.end_time)
    if end_minutes <= start_minutes:
        return []

    reservations = list(existing_reservations)
    is_today = target_date == now.date()
    day_start = datetime.combine(target_date, time.min)

    windows: List[CandidateWindow] = []
    cursor = start_minutes
    while cursor + slot_duration_minutes <= end_minutes:
        window_start = day_start + timedelta(minutes=cursor)
        window_end = window_start + timedelta(minutes=slot_duration_minutes)
        cursor += slot_duration_minutes

        if is_today and window_start <= now:
            continue
        if any(_overlaps(window_start, window_end, r, slot_duration_minutes) for r in reservations):
            continue

        windows.append(CandidateWindow(
            id=f"s-{len(windows)}",
            start_time=window_start.time(),
            end_time=window_end.time(),
        ))

    return windows


def merge_windows(groups: Iterable[List[CandidateWindow]]) -> List[CandidateWindow]:
    """Combine per-rule results into one ordered list with fresh ids."""
    by_start = {}
    for group in groups:
        for window in group:
            by_start.setdefault(window.start_time, window)
    return [
        CandidateWindow(id=f"s-{i}", start_time=w.start_time, end_time=w.end_time)
        for i, w in enumerate(sorted(by_start.values(), key=lambda w: w.start_time))
    ]
