"""Application configuration pulled from environment variables via pydantic."""
from typing import List

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from utils.logging_utils import get_tagged_logger
logger = get_tagged_logger(__name__, tag="config")

DEFAULT_LOCATION_NAME = "São Miguel dos Milagres - Alagoas, MiCasa"


class Settings(BaseSettings):
    """Environment-driven configuration for the wind widget backend."""
    model_config = SettingsConfigDict(env_prefix="WINDWIDGET_", extra="ignore")

    ecowitt_base_url: str = "https://api.ecowitt.net/api/v3/device"
    default_location_name: str = DEFAULT_LOCATION_NAME

    # Cache and history window
    cache_max_age_seconds: int = 300
    history_window_hours: int = 3
    history_max_points: int = 36

    # Transport
    http_timeout_seconds: float = 30.0
    max_retries: int = 3
    backoff_delays_ms: List[int] = Field(default_factory=lambda: [1000, 2000, 4000])
    fetch_workers: int = 4

    # Storage
    redis_url: str | None = None
    redis_prefix: str = "windwidget:"
    encryption_key: str | None = None  # urlsafe base64 Fernet key

    # HTTP surface
    api_key: str | None = None
    log_level: str = "INFO"

    @field_validator("ecowitt_base_url", mode="after")
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        """Normalize base URLs to avoid double slashes."""
        return str(v).rstrip("/")

    @field_validator("max_retries", "fetch_workers", "history_max_points", mode="after")
    @classmethod
    def non_negative(cls, v: int) -> int:
        if v < 0:
            raise ValueError("must be >= 0")
        return v

    @property
    def cache_max_age_millis(self) -> int:
        return self.cache_max_age_seconds * 1000


settings = Settings()


if __name__ == "__main__":
    logger.setLevel("DEBUG")
    logger.debug(f"Loaded settings: {settings.model_dump_json(indent=4, exclude={'encryption_key', 'api_key'})}")
