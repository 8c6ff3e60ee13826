"""Configuration management using Pydantic settings."""

import functools
from pathlib import Path
from typing import TYPE_CHECKING, Any

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


__all__ = ["Settings", "get_settings"]


class Settings(BaseSettings):
    """Application settings with environment variable support."""

    if TYPE_CHECKING:
        # Pydantic dynamically generates a rich `__init__` for settings models.
        # Some type checkers miss those parameters; declare the ones we rely on in tests.
        def __init__(self, *, _env_file: Any | None = None, **values: Any) -> None: ...

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="JOBFINDER_",
        extra="ignore",
    )

    # Remote service
    api_base_url: str = Field(
        default="http://localhost:3001/api", description="Base URL of the jobs REST service"
    )
    api_token: str | None = Field(default=None, description="Bearer token sent by the transport")
    request_timeout_s: float = Field(
        default=30.0,
        gt=0,
        description="Upper bound for every network call; expiry is reported as an error",
    )

    # Search behaviour
    search_debounce_ms: int = Field(
        default=500, ge=0, description="Quiet period before free text triggers a search"
    )
    clear_results_on_error: bool = Field(
        default=False, description="Drop the previous result list when a search fails"
    )
    count_query_as_filter: bool = Field(
        default=True, description="Count the free-text query as an active filter chip"
    )

    # Storage paths
    log_dir: Path = Field(default=Path("logs"), description="Log directory")

    @property
    def search_debounce_s(self) -> float:
        """Debounce quiet period in seconds."""
        return self.search_debounce_ms / 1000.0

    def ensure_directories(self) -> None:
        """Create all required directories."""
        self.log_dir.mkdir(parents=True, exist_ok=True)


@functools.lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Get cached settings instance."""
    settings = Settings()
    settings.ensure_directories()
    return settings
