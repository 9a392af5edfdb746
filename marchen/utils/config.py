"""Runtime configuration loaded from environment variables."""

from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path
from typing import Optional


ENV_PREFIX = "MARCHEN_"


def _env(name: str, default: Optional[str] = None) -> Optional[str]:
    value = os.getenv(f"{ENV_PREFIX}{name}")
    if value is None or not value.strip():
        return default
    return value.strip()


def _env_int(name: str, default: int) -> int:
    raw = _env(name)
    if raw is None:
        return default
    try:
        return int(raw)
    except ValueError as exc:
        raise ValueError(f"{ENV_PREFIX}{name} must be an integer, got {raw!r}") from exc


def _env_float(name: str, default: float) -> float:
    raw = _env(name)
    if raw is None:
        return default
    try:
        return float(raw)
    except ValueError as exc:
        raise ValueError(f"{ENV_PREFIX}{name} must be a number, got {raw!r}") from exc


def _env_bool(name: str, default: bool) -> bool:
    raw = _env(name)
    if raw is None:
        return default
    return raw.lower() in {"1", "true", "yes", "on"}


@dataclass(frozen=True)
class Settings:
    app_name: str
    app_version: str
    log_level: str
    database_path: Path
    organizer_token: Optional[str]
    event_utc_offset_hours: float
    schedule_max_candidate_days: int
    staffing_default_max_vendors: int
    seed_demo_data: bool
    demo_random_seed: int


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Build settings once per process; use ``get_settings.cache_clear()`` in tests."""
    return Settings(
        app_name=_env("APP_NAME", "Marchen Planning API"),
        app_version=_env("APP_VERSION", "0.1.0"),
        log_level=_env("LOG_LEVEL", "INFO"),
        database_path=Path(_env("DATABASE_PATH", "data/marchen.db")),
        organizer_token=_env("ORGANIZER_TOKEN"),
        event_utc_offset_hours=_env_float("EVENT_UTC_OFFSET_HOURS", 9.0),
        schedule_max_candidate_days=_env_int("SCHEDULE_MAX_CANDIDATE_DAYS", 366),
        staffing_default_max_vendors=_env_int("STAFFING_DEFAULT_MAX_VENDORS", 10),
        seed_demo_data=_env_bool("SEED_DEMO_DATA", True),
        demo_random_seed=_env_int("DEMO_RANDOM_SEED", 42),
    )
