"""Environment-driven runtime settings."""

from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path

from backend.domain.timetable import DEFAULT_DAYS, DEFAULT_TIME_SLOTS, TimeSlot


PROJECT_ROOT = Path(__file__).resolve().parents[2]


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "yes", "on"}


def _env_tuple(name: str, default: tuple[str, ...]) -> tuple[str, ...]:
    raw = os.getenv(name)
    if not raw:
        return default
    return tuple(item.strip() for item in raw.split(",") if item.strip())


@dataclass(frozen=True)
class Settings:
    app_name: str
    app_version: str
    log_level: str
    database_path: Path
    admin_token: str | None
    default_coordinator_id: str
    schedule_days: tuple[str, ...]
    time_slots: tuple[TimeSlot, ...]
    notification_history_limit: int
    seed_demo_roster: bool
    api_base_url: str


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Load settings once per process; call ``cache_clear`` to reload."""
    return Settings(
        app_name=os.getenv("APP_NAME", "Coordinator Timetable"),
        app_version=os.getenv("APP_VERSION", "1.0.0"),
        log_level=os.getenv("LOG_LEVEL", "INFO"),
        database_path=Path(
            os.getenv("DATABASE_PATH", str(PROJECT_ROOT / "data" / "timetable.db"))
        ),
        admin_token=os.getenv("ADMIN_TOKEN") or None,
        default_coordinator_id=os.getenv("DEFAULT_COORDINATOR_ID", "local-coordinator"),
        schedule_days=_env_tuple("SCHEDULE_DAYS", DEFAULT_DAYS),
        time_slots=DEFAULT_TIME_SLOTS,
        notification_history_limit=int(os.getenv("NOTIFICATION_HISTORY_LIMIT", "50")),
        seed_demo_roster=_env_bool("SEED_DEMO_ROSTER", True),
        api_base_url=os.getenv("API_BASE_URL", "http://127.0.0.1:8000"),
    )
