"""Pydantic schemas for bookings, posts and profiles."""
from __future__ import annotations

import datetime as dt
from typing import Any, Dict, List, Optional

from pydantic import AliasChoices, BaseModel, EmailStr, Field, field_validator, model_validator


def _blank_to_none(value: Any) -> Any:
    if isinstance(value, str) and not value.strip():
        return None
    return value


class BookingForm(BaseModel):
    """What a user submits to create or edit a booking.

    Accepts both the snake_case column names and the camelCase names used by
    the web client (``bookedBy``, ``startTime``, ``endTime``).
    """

    model_config = {"populate_by_name": True}

    title: str = Field(..., min_length=3)
    booked_by: str = Field(..., min_length=2, validation_alias=AliasChoices("booked_by", "bookedBy"))
    email: Optional[EmailStr] = None
    department: Optional[str] = None
    date: dt.date
    start_time: dt.time = Field(..., validation_alias=AliasChoices("start_time", "startTime"))
    end_time: dt.time = Field(..., validation_alias=AliasChoices("end_time", "endTime"))

    @field_validator("title", "booked_by", mode="before")
    @classmethod
    def _strip(cls, value: Any) -> Any:
        return value.strip() if isinstance(value, str) else value

    @field_validator("email", "department", mode="before")
    @classmethod
    def _optional_blank(cls, value: Any) -> Any:
        return _blank_to_none(value)

    @field_validator("start_time", "end_time")
    @classmethod
    def _to_minute(cls, value: dt.time) -> dt.time:
        return value.replace(second=0, microsecond=0)

    @model_validator(mode="after")
    def _check_time_range(self) -> "BookingForm":
        if self.start_time >= self.end_time:
            raise ValueError("End time must be after start time")
        return self

    def to_row_values(self) -> Dict[str, Any]:
        return {
            "date": self.date,
            "start_time": self.start_time,
            "end_time": self.end_time,
            "title": self.title,
            "booked_by": self.booked_by,
            "email": self.email,
            "department": self.department,
        }


class Booking(BaseModel):
    """A persisted booking as the rest of the application sees it."""

    id: str
    date: dt.date
    start_time: dt.time
    end_time: dt.time
    title: str
    booked_by: str
    email: Optional[str] = None
    department: Optional[str] = None
    created_at: dt.datetime
    owner_id: Optional[str] = None

    @classmethod
    def from_row(cls, row: Any) -> "Booking":
        return cls(
            id=row.id,
            date=row.date,
            start_time=row.start_time,
            end_time=row.end_time,
            title=row.title,
            booked_by=row.booked_by,
            email=row.email or None,
            department=row.department or None,
            created_at=row.created_at,
            owner_id=row.user_id,
        )


class MyBookings(BaseModel):
    upcoming: List[Booking]
    past: List[Booking]


class CalendarDay(BaseModel):
    date: dt.date
    weekday: str
    bookings: List[Booking]


class TimeSlotOption(BaseModel):
    value: str
    label: str


class DateOption(BaseModel):
    value: str
    label: str


class SlotOptions(BaseModel):
    time_slots: List[TimeSlotOption]
    weekdays: List[DateOption]


class ConflictCheck(BaseModel):
    conflict: bool


class PostForm(BaseModel):
    title: str = Field(..., min_length=3)
    content: str = Field(..., min_length=10)
    image_url: Optional[str] = None

    @field_validator("image_url", mode="before")
    @classmethod
    def _optional_blank(cls, value: Any) -> Any:
        return _blank_to_none(value)


class PublicProfile(BaseModel):
    user_id: str
    display_name: Optional[str] = None
    department: Optional[str] = None

    model_config = {"from_attributes": True}


class Post(BaseModel):
    id: str
    user_id: str
    title: str
    content: Optional[str] = None
    image_url: Optional[str] = None
    created_at: dt.datetime
    updated_at: dt.datetime
    author: Optional[PublicProfile] = None

    model_config = {"from_attributes": True}


class ProfileUpdate(BaseModel):
    display_name: Optional[str] = Field(None, max_length=100)
    department: Optional[str] = Field(None, max_length=100)
    avatar_url: Optional[str] = None


class Profile(BaseModel):
    user_id: str
    display_name: Optional[str] = None
    email: Optional[str] = None
    department: Optional[str] = None
    avatar_url: Optional[str] = None
    created_at: dt.datetime
    updated_at: dt.datetime

    model_config = {"from_attributes": True}
