import os
from typing import Callable, Generator, Optional

import pytest
from fastapi.testclient import TestClient

os.environ.setdefault("DATABASE_URL", "sqlite:///./test.db")
os.environ.setdefault("RATE_LIMITING_ENABLED", "false")
os.environ.setdefault("LOG_DIR", "./logs")

from auditorium.config import reset_settings_cache  # noqa: E402

reset_settings_cache()

from auditorium.auth import create_access_token  # noqa: E402
from auditorium.database import Base, SessionLocal, engine  # noqa: E402
from auditorium.dependencies import booking_snapshot_cache  # noqa: E402
from auditorium.events import change_feed  # noqa: E402
from services.bookings.app import app as bookings_app  # noqa: E402
from services.posts.app import app as posts_app  # noqa: E402


@pytest.fixture(autouse=True, scope="function")
def _create_test_database() -> Generator[None, None, None]:
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    booking_snapshot_cache.clear()
    yield
    change_feed.clear()
    Base.metadata.drop_all(bind=engine)


@pytest.fixture()
def db_session() -> Generator:
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture()
def bookings_client() -> Generator[TestClient, None, None]:
    with TestClient(bookings_app) as client:
        yield client


@pytest.fixture()
def posts_client() -> Generator[TestClient, None, None]:
    with TestClient(posts_app) as client:
        yield client


@pytest.fixture()
def auth_header() -> Callable[..., dict[str, str]]:
    def _header(user_id: str, email: Optional[str] = None) -> dict[str, str]:
        claims = {"sub": user_id}
        if email:
            claims["email"] = email
        return {"Authorization": f"Bearer {create_access_token(claims)}"}

    return _header
