"""Booking persistence over a SQLAlchemy session.

The repository only maps between table rows and :class:`Booking` records and
applies the ownership filter to writes. It does not check for overlapping
slots; that is the caller's job (see ``auditorium.bookings``).
"""
from __future__ import annotations

import logging
from typing import List

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from .errors import NotFoundOrForbidden, RepositoryError
from .models import BookingRow
from .schemas import Booking, BookingForm

logger = logging.getLogger(__name__)


class BookingRepository:
    def __init__(self, db: Session) -> None:
        self.db = db

    def list(self) -> List[Booking]:
        """All bookings ordered by date, then start time."""
        query = select(BookingRow).order_by(BookingRow.date.asc(), BookingRow.start_time.asc(), BookingRow.id.asc())
        try:
            rows = self.db.scalars(query).all()
        except SQLAlchemyError as exc:
            logger.error("Error fetching bookings: %s", exc)
            raise RepositoryError("Could not load bookings") from exc
        return [Booking.from_row(row) for row in rows]

    def get(self, booking_id: str) -> Booking:
        try:
            row = self.db.get(BookingRow, booking_id)
        except SQLAlchemyError as exc:
            logger.error("Error fetching booking %s: %s", booking_id, exc)
            raise RepositoryError("Could not load booking") from exc
        if row is None:
            raise NotFoundOrForbidden("Booking not found")
        return Booking.from_row(row)

    def get_owned(self, booking_id: str, owner_id: str) -> Booking:
        return Booking.from_row(self._owned_row(booking_id, owner_id))

    def create(self, form: BookingForm, owner_id: str) -> Booking:
        row = BookingRow(user_id=owner_id, **form.to_row_values())
        try:
            self.db.add(row)
            self.db.commit()
            self.db.refresh(row)
        except SQLAlchemyError as exc:
            self.db.rollback()
            logger.error("Error adding booking: %s", exc)
            raise RepositoryError("Could not create booking") from exc
        logger.info("Booking %s created by %s for %s %s-%s", row.id, owner_id, row.date, row.start_time, row.end_time)
        return Booking.from_row(row)

    def update(self, booking_id: str, form: BookingForm, owner_id: str) -> Booking:
        row = self._owned_row(booking_id, owner_id)
        for key, value in form.to_row_values().items():
            setattr(row, key, value)
        try:
            self.db.commit()
            self.db.refresh(row)
        except SQLAlchemyError as exc:
            self.db.rollback()
            logger.error("Error updating booking %s: %s", booking_id, exc)
            raise RepositoryError("Could not update booking") from exc
        logger.info("Booking %s updated by %s", booking_id, owner_id)
        return Booking.from_row(row)

    def delete(self, booking_id: str, owner_id: str) -> None:
        row = self._owned_row(booking_id, owner_id)
        try:
            self.db.delete(row)
            self.db.commit()
        except SQLAlchemyError as exc:
            self.db.rollback()
            logger.error("Error deleting booking %s: %s", booking_id, exc)
            raise RepositoryError("Could not delete booking") from exc
        logger.info("Booking %s deleted by %s", booking_id, owner_id)

    def _owned_row(self, booking_id: str, owner_id: str) -> BookingRow:
        query = select(BookingRow).where(BookingRow.id == booking_id, BookingRow.user_id == owner_id)
        try:
            row = self.db.scalars(query).first()
        except SQLAlchemyError as exc:
            logger.error("Error fetching booking %s: %s", booking_id, exc)
            raise RepositoryError("Could not load booking") from exc
        if row is None:
            raise NotFoundOrForbidden("Booking not found or not owned by you")
        return row
