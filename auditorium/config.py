"""Settings for the bookings and posts apps, read from the environment or ``.env``.

Every field maps to an upper-case variable of the same name, e.g.
``DATABASE_URL`` or ``BOOKING_CACHE_TTL``.
"""
from functools import lru_cache
from typing import List

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8")

    # storage
    database_url: str = "sqlite:///./auditorium.db"
    run_db_migrations: bool = Field(default=True, description="Create missing tables when an app starts")

    # tokens issued by the identity provider
    jwt_secret: str = "super-secret"
    jwt_algorithm: str = "HS256"
    access_token_expire_minutes: int = Field(default=60, gt=0)

    # http surface
    cors_origins: List[str] = Field(default_factory=lambda: ["*"])
    default_rate_limit: str = "60/minute"
    rate_limiting_enabled: bool = True
    bookings_service_port: int = 8001
    posts_service_port: int = 8002

    booking_cache_ttl: int = Field(default=300, ge=0, description="Seconds a last-known booking list stays usable")
    log_dir: str = "logs"


@lru_cache
def get_settings() -> Settings:
    return Settings()


def reset_settings_cache() -> None:
    """Forget the cached settings so the next call re-reads the environment."""
    get_settings.cache_clear()
