from contextlib import asynccontextmanager
from datetime import date, time
from typing import List, Optional

from fastapi import Depends, FastAPI, Query, Request, status
from fastapi.middleware.cors import CORSMiddleware
from prometheus_fastapi_instrumentator import Instrumentator

from auditorium.bookings import BookingService
from auditorium.calendar import time_slot_options, weekday_options
from auditorium.config import get_settings
from auditorium.conflicts import time_to_minutes
from auditorium.database import Base, engine
from auditorium.dependencies import Principal, get_booking_service, get_current_principal
from auditorium.errors import ValidationError, add_error_handlers
from auditorium.logging_middleware import add_audit_middleware
from auditorium.rate_limit import apply_rate_limiter, limiter
from auditorium.schemas import Booking, BookingForm, CalendarDay, ConflictCheck, MyBookings, SlotOptions

settings = get_settings()


@asynccontextmanager
async def lifespan(_: FastAPI):
    if settings.run_db_migrations:
        Base.metadata.create_all(bind=engine)
    yield


def create_app() -> FastAPI:
    fastapi_app = FastAPI(title="Auditorium Bookings", version="1.0.0", lifespan=lifespan)
    fastapi_app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    apply_rate_limiter(fastapi_app)
    add_audit_middleware(fastapi_app, "bookings")
    add_error_handlers(fastapi_app)
    Instrumentator().instrument(fastapi_app).expose(fastapi_app, include_in_schema=False)
    return fastapi_app


app = create_app()


@app.get("/health", tags=["health"])
def health() -> dict[str, str]:
    return {"status": "ok", "service": "bookings"}


@app.get("/bookings", response_model=List[Booking])
@limiter.limit("60/minute")
def list_bookings(
    request: Request,
    _: Principal = Depends(get_current_principal),
    service: BookingService = Depends(get_booking_service),
) -> List[Booking]:
    return service.list_bookings()


@app.get("/bookings/me", response_model=MyBookings)
@limiter.limit("60/minute")
def my_bookings(
    request: Request,
    principal: Principal = Depends(get_current_principal),
    service: BookingService = Depends(get_booking_service),
) -> MyBookings:
    return service.my_bookings(principal.id, date.today())


@app.get("/bookings/week", response_model=List[CalendarDay])
@limiter.limit("60/minute")
def booking_week(
    request: Request,
    start: Optional[date] = Query(None, description="Any day of the week to show; defaults to today"),
    _: Principal = Depends(get_current_principal),
    service: BookingService = Depends(get_booking_service),
) -> List[CalendarDay]:
    return service.week(start or date.today())


@app.get("/bookings/slots", response_model=SlotOptions)
def booking_slots(_: Principal = Depends(get_current_principal)) -> SlotOptions:
    return SlotOptions(time_slots=time_slot_options(), weekdays=weekday_options(date.today()))


@app.get("/bookings/conflicts", response_model=ConflictCheck)
@limiter.limit("60/minute")
def check_conflict(
    request: Request,
    booking_date: date = Query(..., alias="date"),
    start_time: time = Query(...),
    end_time: time = Query(...),
    exclude_id: Optional[str] = None,
    _: Principal = Depends(get_current_principal),
    service: BookingService = Depends(get_booking_service),
) -> ConflictCheck:
    if time_to_minutes(start_time) >= time_to_minutes(end_time):
        raise ValidationError(
            "End time must be after start time",
            errors=[{"field": "end_time", "message": "End time must be after start time"}],
        )
    conflict = service.check_conflict(booking_date, start_time, end_time, exclude_id=exclude_id)
    return ConflictCheck(conflict=conflict)


@app.get("/bookings/{booking_id}", response_model=Booking)
@limiter.limit("60/minute")
def get_booking(
    request: Request,
    booking_id: str,
    _: Principal = Depends(get_current_principal),
    service: BookingService = Depends(get_booking_service),
) -> Booking:
    return service.repository.get(booking_id)


@app.post("/bookings", response_model=Booking, status_code=status.HTTP_201_CREATED)
@limiter.limit("20/minute")
def create_booking(
    request: Request,
    booking_in: BookingForm,
    principal: Principal = Depends(get_current_principal),
    service: BookingService = Depends(get_booking_service),
) -> Booking:
    return service.create(booking_in, principal.id)


@app.put("/bookings/{booking_id}", response_model=Booking)
@limiter.limit("20/minute")
def update_booking(
    request: Request,
    booking_id: str,
    booking_in: BookingForm,
    principal: Principal = Depends(get_current_principal),
    service: BookingService = Depends(get_booking_service),
) -> Booking:
    return service.update(booking_id, booking_in, principal.id)


@app.delete("/bookings/{booking_id}", status_code=status.HTTP_204_NO_CONTENT)
@limiter.limit("20/minute")
def delete_booking(
    request: Request,
    booking_id: str,
    principal: Principal = Depends(get_current_principal),
    service: BookingService = Depends(get_booking_service),
) -> None:
    service.delete(booking_id, principal.id)
