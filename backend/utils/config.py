"""Centralized runtime configuration loaded from environment variables."""

from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path


PROJECT_ROOT = Path(__file__).resolve().parents[2]


def _env_str(name: str, default: str) -> str:
    return os.getenv(name, default).strip()


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    return int(raw)


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    return float(raw)


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    return raw.strip().lower() in {"1", "true", "yes", "on"}


@dataclass(frozen=True)
class Settings:
    app_name: str
    app_version: str
    log_level: str
    api_prefix: str

    booking_store_path: Path
    seed_sample_bookings: bool

    slots_per_day: int
    forecast_horizon_days: int
    forecast_default_peak_time: str
    suggestion_profile: str

    ai_base_url: str
    ai_api_key: str
    ai_timeout_seconds: float
    ai_retry_attempts: int
    ai_retry_delay_seconds: float

    auth_token_ttl_hours: int

    @property
    def ai_enabled(self) -> bool:
        return bool(self.ai_base_url)


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Build settings once per process; tests derive variants via dataclasses.replace."""
    return Settings(
        app_name=_env_str("APP_NAME", "BCHS Room Booking"),
        app_version=_env_str("APP_VERSION", "1.0.0"),
        log_level=_env_str("LOG_LEVEL", "INFO"),
        api_prefix=_env_str("API_PREFIX", "/api"),
        booking_store_path=Path(
            _env_str("BOOKING_STORE_PATH", str(PROJECT_ROOT / "data" / "room-bookings.json"))
        ),
        seed_sample_bookings=_env_bool("SEED_SAMPLE_BOOKINGS", True),
        slots_per_day=_env_int("SLOTS_PER_DAY", 7),
        forecast_horizon_days=_env_int("FORECAST_HORIZON_DAYS", 7),
        forecast_default_peak_time=_env_str("FORECAST_DEFAULT_PEAK_TIME", "14:00 - 15:00"),
        suggestion_profile=_env_str("SUGGESTION_PROFILE", "additive"),
        ai_base_url=_env_str("AI_BACKEND_URL", ""),
        ai_api_key=_env_str("AI_BACKEND_API_KEY", ""),
        ai_timeout_seconds=_env_float("AI_TIMEOUT_SECONDS", 30.0),
        ai_retry_attempts=_env_int("AI_RETRY_ATTEMPTS", 3),
        ai_retry_delay_seconds=_env_float("AI_RETRY_DELAY_SECONDS", 1.0),
        auth_token_ttl_hours=_env_int("AUTH_TOKEN_TTL_HOURS", 24),
    )
