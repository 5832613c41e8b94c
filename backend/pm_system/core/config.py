"""Application settings loaded from the environment (prefix ``PM_``) or ``.env``."""

from __future__ import annotations

from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_prefix="PM_", env_file=".env", extra="ignore")

    # Database
    database_url: str = Field(default="sqlite:///./pm_system.db")
    db_echo: bool = False
    db_auto_migrate: bool = True
    db_connect_max_retries: int = Field(default=10, ge=1)
    db_connect_retry_delay_seconds: float = Field(default=2.0, ge=0)

    # JWT
    jwt_secret: str = "dev-secret-key-change-in-production-please"
    jwt_algorithm: str = "HS256"
    jwt_issuer: str = "pm-system"
    jwt_audience: str = "pm-system-clients"
    jwt_expire_days: int = Field(default=7, ge=1)

    # Security
    bcrypt_rounds: int = Field(default=12, ge=4, le=31)

    # HTTP
    host: str = "0.0.0.0"
    port: int = 5050
    cors_origins: list[str] = Field(default_factory=lambda: ["*"])

    # Logging
    log_level: str = "INFO"


@lru_cache
def get_settings() -> Settings:
    return Settings()
