import os
from dataclasses import dataclass
from functools import lru_cache


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name, "").strip()
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        return default


@dataclass
class Settings:
    """Application settings loaded from environment variables with safe defaults."""

    app_name: str = "Authority Gate"
    env: str = "dev"
    database_url: str = "sqlite+aiosqlite:///./app.db"
    log_level: str = "INFO"
    # Readiness thresholds (independent; never derived from each other)
    readiness_min_event_count: int = 10
    readiness_min_time_span_days: int = 7
    readiness_min_data_types: int = 1
    readiness_max_concurrency: int = 1
    # Empty token disables the admin promotion endpoint entirely
    admin_token: str = ""

    @classmethod
    def from_env(cls) -> "Settings":
        """Create Settings from environment variables."""
        return cls(
            app_name=os.getenv("APP_NAME", cls.app_name),
            env=os.getenv("ENV", cls.env),
            database_url=os.getenv("DATABASE_URL") or cls.database_url,
            log_level=os.getenv("LOG_LEVEL", cls.log_level),
            readiness_min_event_count=_env_int("READINESS_MIN_EVENT_COUNT", cls.readiness_min_event_count),
            readiness_min_time_span_days=_env_int("READINESS_MIN_TIME_SPAN_DAYS", cls.readiness_min_time_span_days),
            readiness_min_data_types=_env_int("READINESS_MIN_DATA_TYPES", cls.readiness_min_data_types),
            readiness_max_concurrency=max(1, _env_int("READINESS_MAX_CONCURRENCY", cls.readiness_max_concurrency)),
            admin_token=os.getenv("ADMIN_TOKEN", cls.admin_token).strip(),
        )


@lru_cache
def get_settings() -> Settings:
    """Return a cached Settings instance."""
    return Settings.from_env()
