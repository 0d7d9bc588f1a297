"""Application settings with Pydantic validation.

Settings are stored as JSON and validated using Pydantic models.
"""

from pathlib import Path
from typing import Optional

from pydantic import BaseModel, Field

from budgetly.domain.dashboard import DEFAULT_DASHBOARD_VISIBLE_ORDER


class ApiSettings(BaseModel):
    """Remote API client configuration."""

    timeout_seconds: float = Field(default=30.0, gt=0, le=300)

    model_config = {"validate_assignment": True}


class CacheSettings(BaseModel):
    """Offline cache configuration.

    ``version`` is written into every cache entry's metadata so that a
    future client can recognise snapshots written in an older format.
    """

    max_age_hours: float = Field(default=24.0, gt=0)
    version: str = "1.0.0"

    model_config = {"validate_assignment": True}


class StorageSettings(BaseModel):
    """Where the device storage and secure store live on disk."""

    data_dir: Optional[Path] = None  # None = ~/.budgetly
    device_storage_name: str = "storage.db"
    secure_store_name: str = "credentials.enc"
    secure_key_name: str = "credentials.key"

    model_config = {"validate_assignment": True}

    def resolve_data_dir(self) -> Path:
        """Get the data directory, falling back to the home directory."""
        return self.data_dir or Path.home() / ".budgetly"


class LoggingSettings(BaseModel):
    """Logging configuration."""

    level: str = Field(default="INFO", pattern="^(DEBUG|INFO|WARNING|ERROR|CRITICAL)$")


class RetrySettings(BaseModel):
    """Retry behaviour for callers that opt into ``with_retry``."""

    max_retries: int = Field(default=2, ge=0, le=10)
    initial_delay_seconds: float = Field(default=1.0, ge=0.0, le=10.0)
    max_delay_seconds: float = Field(default=30.0, ge=1.0, le=120.0)

    model_config = {"validate_assignment": True}


class DashboardSettings(BaseModel):
    """Dashboard sections shown on first launch, in order."""

    default_order: list[str] = Field(
        default_factory=lambda: list(DEFAULT_DASHBOARD_VISIBLE_ORDER)
    )

    model_config = {"validate_assignment": True}


class AppSettings(BaseModel):
    """Application settings with validation.

    Example:
        >>> settings = AppSettings()
        >>> settings.cache.max_age_hours = 12
        >>> settings.api.timeout_seconds = 10
    """

    api: ApiSettings = Field(default_factory=ApiSettings)
    cache: CacheSettings = Field(default_factory=CacheSettings)
    storage: StorageSettings = Field(default_factory=StorageSettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)
    retry: RetrySettings = Field(default_factory=RetrySettings)
    dashboard: DashboardSettings = Field(default_factory=DashboardSettings)

    model_config = {
        "validate_assignment": True,
        "extra": "forbid",
    }
