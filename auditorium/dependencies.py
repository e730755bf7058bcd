"""Reusable FastAPI dependencies for the acting principal and repositories."""
from dataclasses import dataclass
from typing import Optional

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import OAuth2PasswordBearer
from sqlalchemy.orm import Session

from .auth import decode_token
from .bookings import BookingService
from .cache import SimpleTTLCache
from .config import get_settings
from .database import get_db
from .posts import PostRepository
from .repository import BookingRepository

settings = get_settings()
oauth_scheme = OAuth2PasswordBearer(tokenUrl="/auth/token")
booking_snapshot_cache: SimpleTTLCache = SimpleTTLCache(ttl=settings.booking_cache_ttl)


@dataclass(frozen=True)
class Principal:
    id: str
    email: Optional[str] = None


def get_current_principal(request: Request, token: str = Depends(oauth_scheme)) -> Principal:
    payload = decode_token(token)
    subject: str | None = payload.get("sub")
    if not subject:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Missing subject in token")
    request.state.principal_id = str(subject)
    return Principal(id=str(subject), email=payload.get("email"))


def get_booking_service(db: Session = Depends(get_db)) -> BookingService:
    return BookingService(BookingRepository(db), booking_snapshot_cache)


def get_post_repository(db: Session = Depends(get_db)) -> PostRepository:
    return PostRepository(db)
