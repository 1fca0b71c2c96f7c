# backend/bookly/config.py

from functools import lru_cache
from pathlib import Path
from typing import Optional

from pydantic_settings import BaseSettings, SettingsConfigDict

BASE_DIR = Path(__file__).resolve().parents[2]


class Settings(BaseSettings):
    database_url: str = "sqlite:///./data/bookly.db"
    redis_url: Optional[str] = None

    # Fallback work-day schedule when app_config is empty
    default_slot_duration_minutes: int = 60
    default_start_of_day: str = "09:00"
    default_end_of_day: str = "17:00"

    usage_window_days: int = 5
    reservation_lock_timeout_seconds: float = 5.0
    # Redis lock auto-expiry; must outlast one reservation transaction
    reservation_lock_lease_seconds: float = 30.0

    log_level: str = "INFO"

    model_config = SettingsConfigDict(
        env_file=BASE_DIR / ".env",
        env_prefix="BOOKLY_",
        extra="ignore",
    )

    @property
    def resolved_database_url(self) -> str:
        url = self.database_url
        if url.startswith("sqlite:///./"):
            # Relative sqlite paths are anchored at the repository root
            relative_path = url.replace("sqlite:///./", "")
            absolute_path = BASE_DIR / relative_path
            absolute_path.parent.mkdir(parents=True, exist_ok=True)
            return f"sqlite:///{absolute_path}"
        return url


@lru_cache
def get_settings() -> Settings:
    return Settings()
