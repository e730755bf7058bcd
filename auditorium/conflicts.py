"""Overlap detection for bookings on the same calendar date.

Intervals are half-open, ``[start, end)``, so a booking that starts exactly
when another ends does not conflict with it. Nothing here touches the store
or the clock: callers pass in the snapshot of bookings to check against.
"""
from __future__ import annotations

from datetime import date, time
from typing import Iterable, List, Optional, Protocol, Union

DateLike = Union[date, str]
TimeLike = Union[time, str]


class Slot(Protocol):
    """Anything carrying a date and a start/end time of day."""

    date: DateLike
    start_time: TimeLike
    end_time: TimeLike


class Identified(Slot, Protocol):
    id: str


def to_date(value: DateLike) -> date:
    if isinstance(value, date):
        return value
    return date.fromisoformat(value)


def time_to_minutes(value: TimeLike) -> int:
    """Minutes since midnight; seconds are dropped."""
    if isinstance(value, str):
        value = time.fromisoformat(value)
    return value.hour * 60 + value.minute


def intervals_overlap(start_a: int, end_a: int, start_b: int, end_b: int) -> bool:
    return start_a < end_b and start_b < end_a


def has_conflict(
    candidate_date: DateLike,
    candidate_start: TimeLike,
    candidate_end: TimeLike,
    existing_bookings: Iterable[Slot],
) -> bool:
    """Return True if the candidate slot overlaps any booking on the same date.

    Bookings on other dates are ignored whatever their times. When checking an
    edit, drop the booking's own prior version first (see
    :func:`exclude_booking`), otherwise it will conflict with itself.
    """
    day = to_date(candidate_date)
    start = time_to_minutes(candidate_start)
    end = time_to_minutes(candidate_end)

    for booking in existing_bookings:
        if to_date(booking.date) != day:
            continue
        if intervals_overlap(start, end, time_to_minutes(booking.start_time), time_to_minutes(booking.end_time)):
            return True
    return False


def exclude_booking(bookings: Iterable[Identified], booking_id: Optional[str]) -> List[Identified]:
    if booking_id is None:
        return list(bookings)
    return [booking for booking in bookings if booking.id != booking_id]
