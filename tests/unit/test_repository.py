"""Unit tests for the booking repository."""
from datetime import date, time
from unittest.mock import MagicMock

import pytest
from sqlalchemy.exc import OperationalError

from auditorium.errors import NotFoundOrForbidden, RepositoryError
from auditorium.models import BookingRow
from auditorium.repository import BookingRepository
from auditorium.schemas import BookingForm


def make_form(**overrides) -> BookingForm:
    data = {
        "date": "2025-03-10",
        "start_time": "09:00",
        "end_time": "10:00",
        "title": "Staff Meeting",
        "booked_by": "A. Officer",
    }
    data.update(overrides)
    return BookingForm(**data)


class TestBookingRepository:
    """Test CRUD and row mapping against the SQLite test database."""

    def test_create_assigns_id_and_created_at(self, db_session):
        booking = BookingRepository(db_session).create(make_form(), "user-a")

        assert booking.id
        assert booking.created_at is not None
        assert booking.owner_id == "user-a"
        assert booking.date == date(2025, 3, 10)
        assert booking.start_time == time(9, 0)

    def test_row_uses_snake_case_columns(self, db_session):
        booking = BookingRepository(db_session).create(make_form(department="Legal"), "user-a")

        row = db_session.get(BookingRow, booking.id)
        assert row.user_id == "user-a"
        assert row.booked_by == "A. Officer"
        assert row.department == "Legal"
        assert row.email is None

    def test_list_orders_by_date_then_start(self, db_session):
        repository = BookingRepository(db_session)
        repository.create(make_form(date="2025-03-12"), "user-a")
        repository.create(make_form(start_time="13:00", end_time="14:00"), "user-a")
        repository.create(make_form(start_time="08:00", end_time="08:30"), "user-b")

        listed = repository.list()

        assert [(b.date.isoformat(), b.start_time.isoformat("minutes")) for b in listed] == [
            ("2025-03-10", "08:00"),
            ("2025-03-10", "13:00"),
            ("2025-03-12", "09:00"),
        ]

    def test_list_does_not_check_conflicts(self, db_session):
        repository = BookingRepository(db_session)
        repository.create(make_form(), "user-a")
        repository.create(make_form(title="Double booked"), "user-b")

        assert len(repository.list()) == 2

    def test_update_by_owner(self, db_session):
        repository = BookingRepository(db_session)
        created = repository.create(make_form(), "user-a")

        updated = repository.update(created.id, make_form(title="Quarterly Review", end_time="11:00"), "user-a")

        assert updated.id == created.id
        assert updated.title == "Quarterly Review"
        assert updated.end_time == time(11, 0)
        assert updated.owner_id == "user-a"
        assert updated.created_at == created.created_at

    def test_update_by_someone_else_is_rejected(self, db_session):
        repository = BookingRepository(db_session)
        created = repository.create(make_form(), "user-a")

        with pytest.raises(NotFoundOrForbidden):
            repository.update(created.id, make_form(title="Hijacked"), "user-b")
        assert repository.get(created.id).title == "Staff Meeting"

    def test_update_unknown_id(self, db_session):
        with pytest.raises(NotFoundOrForbidden):
            BookingRepository(db_session).update("missing", make_form(), "user-a")

    def test_delete_by_owner_then_again(self, db_session):
        repository = BookingRepository(db_session)
        created = repository.create(make_form(), "user-a")

        repository.delete(created.id, "user-a")

        assert repository.list() == []
        with pytest.raises(NotFoundOrForbidden):
            repository.delete(created.id, "user-a")

    def test_delete_by_someone_else_is_rejected(self, db_session):
        repository = BookingRepository(db_session)
        created = repository.create(make_form(), "user-a")

        with pytest.raises(NotFoundOrForbidden):
            repository.delete(created.id, "user-b")
        assert len(repository.list()) == 1

    def test_store_failure_on_list_is_a_repository_error(self):
        session = MagicMock()
        session.scalars.side_effect = OperationalError("SELECT", {}, Exception("connection refused"))

        with pytest.raises(RepositoryError):
            BookingRepository(session).list()

    def test_store_failure_on_create_rolls_back(self):
        session = MagicMock()
        session.commit.side_effect = OperationalError("INSERT", {}, Exception("read-only"))

        with pytest.raises(RepositoryError):
            BookingRepository(session).create(make_form(), "user-a")
        session.rollback.assert_called_once()
