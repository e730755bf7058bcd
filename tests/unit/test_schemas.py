"""Unit tests for schema validation."""
from datetime import datetime, time
from types import SimpleNamespace

import pytest
from pydantic import ValidationError

from auditorium.schemas import Booking, BookingForm, PostForm, ProfileUpdate


class TestBookingForm:
    """Test booking form validation."""

    def test_valid_form(self):
        form = BookingForm(
            title="  Staff Meeting ",
            booked_by="A. Officer",
            email="officer@example.com",
            department="Technical",
            date="2025-03-10",
            start_time="09:00",
            end_time="10:00",
        )

        assert form.title == "Staff Meeting"
        assert form.start_time == time(9, 0)

    def test_camel_case_names(self):
        form = BookingForm.model_validate(
            {"title": "Town Hall", "bookedBy": "HR", "date": "2025-03-10", "startTime": "13:00", "endTime": "14:00"}
        )

        assert form.booked_by == "HR"
        assert form.end_time == time(14, 0)

    def test_blank_optional_fields_become_none(self):
        form = BookingForm(
            title="Town Hall", booked_by="HR", email="", department=" ", date="2025-03-10", start_time="13:00", end_time="14:00"
        )

        assert form.email is None
        assert form.department is None

    def test_end_must_follow_start(self):
        with pytest.raises(ValidationError):
            BookingForm(title="Town Hall", booked_by="HR", date="2025-03-10", start_time="14:00", end_time="13:00")

    def test_short_name_rejected(self):
        with pytest.raises(ValidationError):
            BookingForm(title="Town Hall", booked_by="H", date="2025-03-10", start_time="13:00", end_time="14:00")

    def test_row_values_truncate_to_minutes(self):
        form = BookingForm(
            title="Town Hall", booked_by="HR", date="2025-03-10", start_time="13:00:45", end_time="14:00:10"
        )

        values = form.to_row_values()

        assert values["start_time"] == time(13, 0)
        assert values["end_time"] == time(14, 0)
        assert set(values) == {"date", "start_time", "end_time", "title", "booked_by", "email", "department"}

    def test_range_inside_one_minute_rejected(self):
        with pytest.raises(ValidationError) as excinfo:
            BookingForm(title="Town Hall", booked_by="HR", date="2025-03-10", start_time="09:00:10", end_time="09:00:50")

        assert "End time must be after start time" in str(excinfo.value)


class TestBookingRecord:
    """Test mapping of stored rows to booking records."""

    def test_from_row_maps_owner_and_blank_optionals(self):
        row = SimpleNamespace(
            id="b-1",
            date="2025-03-10",
            start_time="09:00:00",
            end_time="10:00:00",
            title="Staff Meeting",
            booked_by="A. Officer",
            email="",
            department=None,
            created_at=datetime(2025, 3, 1, 8, 0),
            user_id="user-a",
        )

        booking = Booking.from_row(row)

        assert booking.owner_id == "user-a"
        assert booking.email is None
        assert booking.start_time == time(9, 0)


class TestPostSchemas:
    """Test announcement and profile schemas."""

    def test_post_form_valid(self):
        post = PostForm(title="Notice", content="The lift is out of order today.", image_url="")

        assert post.image_url is None

    def test_post_content_too_short(self):
        with pytest.raises(ValidationError):
            PostForm(title="Notice", content="Short")

    def test_profile_update_tracks_unset_fields(self):
        update = ProfileUpdate(department="Planning")

        assert update.model_dump(exclude_unset=True) == {"department": "Planning"}
