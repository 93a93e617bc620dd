"""Configuration settings for bindstore."""

from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from bindstore.domain.models import VersionDispatch


class Settings(BaseSettings):
    """Settings loaded from environment variables (prefix ``BINDSTORE_``)."""

    model_config = SettingsConfigDict(
        env_prefix="BINDSTORE_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Environment
    environment: str = Field(
        default="production",
        description="Deployment environment name; anything else is non-production",
    )
    save_in_non_production: bool = Field(
        default=True,
        description="Allow writes to the remote store outside production",
    )

    # Autosave
    autosave_enabled: bool = Field(default=True, description="Run the periodic autosave loop")
    autosave_interval_seconds: float = Field(
        default=360.0,
        gt=0,
        description="Seconds between autosave sweeps over all live bindings",
    )

    # Versioning
    version_dispatch: VersionDispatch = Field(
        default=VersionDispatch.STORED,
        description="Decode with the stored version's procedure or always with latest",
    )

    # Remote store
    store_backend: Literal["memory", "redis"] = Field(
        default="memory",
        description="Remote store implementation",
    )
    redis_url: str = Field(
        default="redis://localhost:6379/0",
        description="Redis connection URL when store_backend is redis",
    )
    redis_key_prefix: str = Field(default="bindstore:", description="Prefix for every Redis key")
    redis_socket_timeout: float = Field(
        default=5.0,
        gt=0,
        description="Redis socket timeout in seconds",
    )

    # Logging
    log_level: str = Field(default="INFO", description="Logging level")
    log_format: Literal["json", "console"] = Field(
        default="json", description="Log format (json or console)"
    )

    @field_validator("log_level")
    @classmethod
    def _normalize_log_level(cls, value: str) -> str:
        return value.upper()

    @property
    def is_production(self) -> bool:
        return self.environment.lower() == "production"

    @property
    def saves_enabled(self) -> bool:
        """Whether writes may reach the remote store in this environment."""
        return self.is_production or self.save_in_non_production
