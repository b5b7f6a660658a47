"""Environment-driven configuration.

Entry points call load_dotenv() before load_settings(), so values may come from
a .env file or the process environment.
"""

import os
from dataclasses import dataclass


@dataclass(frozen=True)
class Settings:
    api_base_url: str = "https://api.aladhan.com/v1"
    api_timeout: float = 10.0  # Seconds, single attempt
    batch_max_workers: int = 8
    notification_window_minutes: int = 5  # Matches the cron interval
    nominatim_user_agent: str = "salahtimes/0.1"
    log_level: str = "INFO"


def _positive(name: str, raw: str, cast: type) -> float | int:
    try:
        value = cast(raw)
    except ValueError:
        raise ValueError(f"{name} must be a number, got {raw!r}") from None
    if value <= 0:
        raise ValueError(f"{name} must be positive, got {raw!r}")
    return value


def load_settings(environ: dict[str, str] | None = None) -> Settings:
    """Build Settings from environment variables, falling back to defaults."""
    env = os.environ if environ is None else environ
    defaults = Settings()
    return Settings(
        api_base_url=env.get("PRAYER_API_BASE_URL", defaults.api_base_url).rstrip("/"),
        api_timeout=_positive(
            "PRAYER_API_TIMEOUT", env.get("PRAYER_API_TIMEOUT", str(defaults.api_timeout)), float
        ),
        batch_max_workers=_positive(
            "BATCH_MAX_WORKERS", env.get("BATCH_MAX_WORKERS", str(defaults.batch_max_workers)), int
        ),
        notification_window_minutes=_positive(
            "NOTIFICATION_WINDOW_MINUTES",
            env.get("NOTIFICATION_WINDOW_MINUTES", str(defaults.notification_window_minutes)),
            int,
        ),
        nominatim_user_agent=env.get("NOMINATIM_USER_AGENT", defaults.nominatim_user_agent),
        log_level=env.get("LOG_LEVEL", defaults.log_level).upper(),
    )
