"""
Configuration for the attachments service.

Settings are read from the environment (and an optional ``.env`` file) with
pydantic-settings. Field names match the environment variable names, compared
case-insensitively.
"""
from functools import lru_cache
from typing import List, Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from .constants import (
    DEFAULT_MAX_BYTES,
    DEFAULT_PURGE_LIMIT,
    DEFAULT_STALE_PENDING_SECONDS,
    PRESIGN_GET_TTL_SECONDS,
    PRESIGN_PUT_TTL_SECONDS,
    STORAGE_WARNING_THRESHOLD,
)


class AttachmentSettings(BaseSettings):
    """Runtime settings for attachment storage and quota accounting."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"
    )

    # Application
    app_name: str = Field(default="neo-attachments")
    environment: str = Field(default="development")
    host: str = Field(default="0.0.0.0")
    port: int = Field(default=8010)

    # Database
    database_url: str = Field(default="postgresql://localhost:5432/neo")
    attachments_db_schema: str = Field(default="public", description="Schema holding attachment tables")
    db_pool_min_size: int = Field(default=2)
    db_pool_max_size: int = Field(default=10)
    attachments_auto_create_tables: bool = Field(default=True, description="Create tables on startup")

    # Object storage
    s3_bucket: str = Field(default="neo-attachments")
    aws_region: str = Field(default="eu-west-1")
    s3_endpoint_url: Optional[str] = Field(default=None, description="Custom endpoint for S3-compatible stores")
    presign_put_ttl_seconds: int = Field(default=PRESIGN_PUT_TTL_SECONDS, gt=0)
    presign_get_ttl_seconds: int = Field(default=PRESIGN_GET_TTL_SECONDS, gt=0)

    # Upload policy and quota
    attachments_max_bytes: int = Field(default=DEFAULT_MAX_BYTES, gt=0)
    storage_warning_threshold: float = Field(default=STORAGE_WARNING_THRESHOLD, gt=0, le=1)
    attachments_elevated_roles: List[str] = Field(
        default_factory=lambda: ["owner", "admin"],
        description="Workspace roles allowed to change retention"
    )

    # Defaults for the standalone service's static entitlements (null = unlimited)
    attachments_default_storage_limit_bytes: Optional[int] = Field(default=None, ge=0)
    attachments_default_retention_days: Optional[int] = Field(default=None, ge=1, le=3650)
    attachments_dev_workspace_role: Optional[str] = Field(default="owner")

    # Background jobs
    attachments_purge_limit: int = Field(default=DEFAULT_PURGE_LIMIT, gt=0)
    attachments_purge_interval_seconds: int = Field(default=3600, gt=0)
    attachments_stale_pending_seconds: int = Field(default=DEFAULT_STALE_PENDING_SECONDS, gt=0)
    attachments_stale_pending_sweep_enabled: bool = Field(default=False)

    @field_validator("database_url")
    @classmethod
    def strip_driver_suffix(cls, value: str) -> str:
        # asyncpg expects a plain postgresql:// DSN
        return value.replace("+asyncpg", "")

    @field_validator("attachments_elevated_roles")
    @classmethod
    def normalize_roles(cls, value: List[str]) -> List[str]:
        return [role.strip().lower() for role in value if role and role.strip()]

    @property
    def is_production(self) -> bool:
        return self.environment.lower() == "production"


@lru_cache()
def get_settings() -> AttachmentSettings:
    """Get cached settings instance."""
    return AttachmentSettings()
