"""Application configuration models."""

from __future__ import annotations

from functools import lru_cache
from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


DEFAULT_MANIFEST_URL = "catalog.json"


class Settings(BaseSettings):
    """Settings loaded from environment variables or a .env file."""

    app_name: str = Field(default="Streamly", alias="APP_NAME")
    server_host: str = Field(default="0.0.0.0", alias="HOST")
    server_port: int = Field(default=3000, alias="PORT")

    database_url: str = Field(
        default="sqlite+aiosqlite:///./streamly.db", alias="DATABASE_URL"
    )

    manifest_url: str = Field(default=DEFAULT_MANIFEST_URL, alias="MANIFEST_URL")
    manifest_timeout_seconds: float = Field(
        default=15.0, alias="MANIFEST_TIMEOUT", ge=1.0, le=300.0
    )

    environment: Literal["development", "production"] = Field(
        default="development", alias="ENVIRONMENT"
    )

    @field_validator("manifest_url", mode="before")
    @classmethod
    def _default_blank_manifest(cls, value: object) -> object:
        """Treat blank manifest locations as the bundled catalog file."""

        if value is None:
            return DEFAULT_MANIFEST_URL
        if isinstance(value, str):
            stripped = value.strip()
            return stripped or DEFAULT_MANIFEST_URL
        return value

    @property
    def manifest_is_remote(self) -> bool:
        return self.manifest_url.lower().startswith(("http://", "https://"))

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8")


@lru_cache
def get_settings() -> Settings:
    """Return a cached settings instance."""

    return Settings()  # type: ignore[call-arg]


settings = get_settings()
