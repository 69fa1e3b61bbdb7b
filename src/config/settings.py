from __future__ import annotations

from functools import lru_cache
from uuid import UUID
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from pydantic import SecretStr, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from src.utils.datetime_tz import DEFAULT_TIMEZONE_NAME


class Settings(BaseSettings):
    api_url: str = "http://localhost:8000"
    api_token: SecretStr | None = None
    tenant_id: UUID | None = None
    tenant_header: str = "X-Tenant-ID"
    # Reference zone for local calendar days (shift/day bucketing)
    timezone: str = DEFAULT_TIMEZONE_NAME
    http_timeout: float = 30.0
    page_size: int = 500
    log_level: str = "INFO"
    environment: str = "dev"

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    @field_validator("api_url")
    @classmethod
    def strip_trailing_slash(cls, value: str) -> str:
        return value.rstrip("/")

    @field_validator("timezone")
    @classmethod
    def ensure_known_timezone(cls, value: str) -> str:
        try:
            ZoneInfo(value)
        except (ZoneInfoNotFoundError, ValueError) as exc:
            raise ValueError(f"unknown timezone: {value}") from exc
        return value

    @field_validator("tenant_header")
    @classmethod
    def ensure_header_name(cls, value: str) -> str:
        cleaned = value.strip()
        if not cleaned or not all(c.isalnum() or c in "-_" for c in cleaned):
            return "X-Tenant-ID"
        return cleaned

    @property
    def tz(self) -> ZoneInfo:
        return ZoneInfo(self.timezone)


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()
