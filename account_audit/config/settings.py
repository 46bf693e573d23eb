# account_audit/config/settings.py

from functools import lru_cache
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class StorageSettings(BaseSettings):
    """Database and audit-log settings. Enough for offline tools such as the log reader."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # --- Database ---
    database_url: str = "sqlite+aiosqlite:///./account_audit.db"

    # --- Audit log ---
    audit_enabled: bool = True
    # Records with a level numerically above this threshold are not stored (1=CRITICAL .. 4=INFO).
    audit_min_level: int = Field(4, ge=1, le=4)
    default_page_size: int = Field(50, gt=0)

    # --- Observability ---
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"


class AppSettings(StorageSettings):
    # --- Application ---
    app_name: str = "account-audit"
    environment: Literal["dev", "test", "prod"] = "dev"
    debug: bool = False
    version: str = "0.1.0"

    # --- Security ---
    jwt_secret: str = Field(..., min_length=32)
    jwt_algorithm: str = "HS256"
    session_ttl_minutes: int = Field(60, gt=0)
    credential_iterations: int = Field(390000, ge=1000)

    # --- Redis ---
    redis_url: str = "redis://localhost:6379/0"


@lru_cache
def get_settings() -> AppSettings:
    return AppSettings()


@lru_cache
def get_storage_settings() -> StorageSettings:
    return StorageSettings()
