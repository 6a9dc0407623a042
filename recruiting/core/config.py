from functools import lru_cache
from typing import Literal

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError


class Settings(BaseSettings):
    DATABASE_URL: str = "sqlite:///./recruiting.db"
    ENVIRONMENT: Literal["local", "development", "production"] = "local"
    LOG_LEVEL: str = "INFO"

    # Calendar days (holidays, attendance) are resolved in this timezone
    ATTENDANCE_TIMEZONE: str = "UTC"

    # Groups created before default holidays existed have no stored defaults;
    # when enabled, removal infers them from the members' holiday sets.
    LEGACY_HOLIDAY_INFERENCE: bool = True

    DEFAULT_PAGE_SIZE: int = 10

    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", case_sensitive=True, extra="ignore"
    )

    @field_validator("ATTENDANCE_TIMEZONE")
    @classmethod
    def validate_timezone(cls, v: str) -> str:
        try:
            ZoneInfo(v)
        except (ZoneInfoNotFoundError, ValueError):
            raise ValueError(f"Unknown timezone: {v}")
        return v


@lru_cache
def get_settings() -> Settings:
    return Settings()


settings = get_settings()
