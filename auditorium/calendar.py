"""Weekly calendar layout and the choices offered by the booking form."""
from __future__ import annotations

from datetime import date, time, timedelta
from typing import Iterable, List, Sequence, Tuple, Union

from .schemas import Booking, CalendarDay, DateOption, TimeSlotOption

FIRST_SLOT = time(8, 0)
SLOT_MINUTES = 30
SLOT_COUNT = 21  # 08:00 through 18:00
WORKING_DAYS = 5
BOOKING_WINDOW_DAYS = 28


def week_days(anchor: date) -> List[date]:
    """Monday to Friday of the week containing ``anchor``."""
    monday = anchor - timedelta(days=anchor.weekday())
    return [monday + timedelta(days=offset) for offset in range(WORKING_DAYS)]


def format_time_12h(value: Union[time, str]) -> str:
    if isinstance(value, str):
        value = time.fromisoformat(value)
    suffix = "PM" if value.hour >= 12 else "AM"
    hour = value.hour % 12 or 12
    return f"{hour}:{value.minute:02d} {suffix}"


def time_slot_options() -> List[TimeSlotOption]:
    options = []
    start = FIRST_SLOT.hour * 60 + FIRST_SLOT.minute
    for index in range(SLOT_COUNT):
        minutes = start + index * SLOT_MINUTES
        slot = time(minutes // 60, minutes % 60)
        options.append(TimeSlotOption(value=slot.strftime("%H:%M"), label=format_time_12h(slot)))
    return options


def weekday_options(today: date, days: int = BOOKING_WINDOW_DAYS) -> List[DateOption]:
    options = []
    for offset in range(days):
        day = today + timedelta(days=offset)
        if day.weekday() >= WORKING_DAYS:
            continue
        options.append(DateOption(value=day.isoformat(), label=f"{day:%A, %B} {day.day}"))
    return options


def build_week(anchor: date, bookings: Iterable[Booking]) -> List[CalendarDay]:
    days = week_days(anchor)
    by_day = {day: [] for day in days}
    for booking in bookings:
        if booking.date in by_day:
            by_day[booking.date].append(booking)
    return [
        CalendarDay(
            date=day,
            weekday=f"{day:%A}",
            bookings=sorted(by_day[day], key=lambda booking: booking.start_time),
        )
        for day in days
    ]


def split_upcoming_past(bookings: Sequence[Booking], today: date) -> Tuple[List[Booking], List[Booking]]:
    """Upcoming (today onwards, soonest first) and past (most recent first)."""
    upcoming = sorted(
        (booking for booking in bookings if booking.date >= today),
        key=lambda booking: (booking.date, booking.start_time),
    )
    past = sorted(
        (booking for booking in bookings if booking.date < today),
        key=lambda booking: (booking.date, booking.start_time),
        reverse=True,
    )
    return upcoming, past
