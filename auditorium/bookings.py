"""Booking workflow on top of the repository.

Validates form input, runs the advisory overlap check against a fresh list of
bookings and only then calls the repository. The check and the write are two
separate steps with no transaction around them, so two users submitting the
same slot at the same moment can both succeed.
"""
from __future__ import annotations

import logging
from datetime import date, time
from typing import Any, List, Mapping, Optional, Union

from pydantic import ValidationError as PydanticValidationError

from .cache import SimpleTTLCache
from .calendar import build_week, split_upcoming_past
from .conflicts import exclude_booking, has_conflict
from .errors import ConflictDetected, RepositoryError, ValidationError
from .events import ChangeAction, ChangeEvent, ChangeFeed, change_feed
from .repository import BookingRepository
from .schemas import Booking, BookingForm, CalendarDay, MyBookings

logger = logging.getLogger(__name__)

BOOKINGS_TABLE = "bookings"
SNAPSHOT_KEY = "bookings:all"
CONFLICT_MESSAGE = "This time slot conflicts with an existing booking. Please choose a different time."

FormInput = Union[BookingForm, Mapping[str, Any]]


def validate_booking_form(payload: FormInput) -> BookingForm:
    if isinstance(payload, BookingForm):
        return payload
    try:
        return BookingForm.model_validate(payload)
    except PydanticValidationError as exc:
        errors = [
            {"field": ".".join(str(part) for part in error["loc"]), "message": error["msg"]}
            for error in exc.errors()
        ]
        message = "; ".join(f"{error['field'] or 'form'}: {error['message']}" for error in errors)
        raise ValidationError(message, errors=errors) from exc


class BookingService:
    def __init__(
        self,
        repository: BookingRepository,
        snapshot_cache: SimpleTTLCache[List[Booking]],
        feed: Optional[ChangeFeed] = None,
    ) -> None:
        self.repository = repository
        self.snapshot_cache = snapshot_cache
        self.feed = feed if feed is not None else change_feed

    def list_bookings(self) -> List[Booking]:
        try:
            bookings = self.repository.list()
        except RepositoryError:
            cached = self.snapshot_cache.get(SNAPSHOT_KEY)
            if cached is None:
                raise
            logger.warning("Booking store unavailable, serving %d cached bookings", len(cached))
            return list(cached)
        self.snapshot_cache.set(SNAPSHOT_KEY, bookings)
        return bookings

    def check_conflict(
        self, candidate_date: date, start: time, end: time, exclude_id: Optional[str] = None
    ) -> bool:
        existing = exclude_booking(self.list_bookings(), exclude_id)
        return has_conflict(candidate_date, start, end, existing)

    def create(self, payload: FormInput, owner_id: str) -> Booking:
        form = validate_booking_form(payload)
        if self.check_conflict(form.date, form.start_time, form.end_time):
            logger.info("Rejected booking for %s %s-%s: slot taken", form.date, form.start_time, form.end_time)
            raise ConflictDetected(CONFLICT_MESSAGE)
        booking = self.repository.create(form, owner_id)
        self._changed(ChangeAction.INSERT, booking.id)
        return booking

    def update(self, booking_id: str, payload: FormInput, owner_id: str) -> Booking:
        form = validate_booking_form(payload)
        self.repository.get_owned(booking_id, owner_id)
        if self.check_conflict(form.date, form.start_time, form.end_time, exclude_id=booking_id):
            logger.info("Rejected edit of booking %s: slot taken", booking_id)
            raise ConflictDetected(CONFLICT_MESSAGE)
        booking = self.repository.update(booking_id, form, owner_id)
        self._changed(ChangeAction.UPDATE, booking.id)
        return booking

    def delete(self, booking_id: str, owner_id: str) -> None:
        self.repository.delete(booking_id, owner_id)
        self._changed(ChangeAction.DELETE, booking_id)

    def my_bookings(self, owner_id: str, today: date) -> MyBookings:
        own = [booking for booking in self.list_bookings() if booking.owner_id == owner_id]
        upcoming, past = split_upcoming_past(own, today)
        return MyBookings(upcoming=upcoming, past=past)

    def week(self, anchor: date) -> List[CalendarDay]:
        return build_week(anchor, self.list_bookings())

    def _changed(self, action: ChangeAction, booking_id: str) -> None:
        self.snapshot_cache.pop(SNAPSHOT_KEY)
        self.feed.publish(ChangeEvent(table=BOOKINGS_TABLE, action=action, record_id=booking_id))
