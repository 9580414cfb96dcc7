"""
Application configuration using Pydantic settings.

Usage:
    from bugbot.config import get_settings
    settings = get_settings()

For constants, import from bugbot.constants:
    from bugbot.constants import DEFAULT_SYNC_QUERY, SEARCH_MAX_PER_PAGE
"""

from functools import lru_cache
from typing import List, Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from .constants import DEFAULT_SYNC_QUERY, GITHUB_API_BASE, SEARCH_MAX_PER_PAGE


class Settings(BaseSettings):
    """
    Unified application settings loaded from environment variables and .env file.

    Required for syncing:
        - GITHUB_TOKENS (comma separated) or GITHUB_PERSONAL_TOKEN
    """
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # App settings
    debug: bool = Field(default=False)
    log_level: str = Field(default="INFO", validation_alias="LOG_LEVEL")

    # Database
    database_url: str = Field(default="sqlite:///bugbot.db", validation_alias="DATABASE_URL")
    db_pool_size: int = Field(default=10, validation_alias="DB_POOL_SIZE")
    db_max_overflow: int = Field(default=20, validation_alias="DB_MAX_OVERFLOW")
    db_pool_pre_ping: bool = Field(default=True, validation_alias="DB_POOL_PRE_PING")

    # GitHub credentials
    github_tokens: str = Field(default="", validation_alias="GITHUB_TOKENS")
    github_personal_token: Optional[str] = Field(default=None, validation_alias="GITHUB_PERSONAL_TOKEN")
    github_api_base: str = Field(default=GITHUB_API_BASE, validation_alias="GITHUB_API_BASE")

    # Sync cycle
    sync_query: str = Field(default=DEFAULT_SYNC_QUERY, validation_alias="SYNC_QUERY")
    sync_per_page: int = Field(default=SEARCH_MAX_PER_PAGE, validation_alias="SYNC_PER_PAGE")
    sync_max_pages: int = Field(default=5, ge=1, validation_alias="SYNC_MAX_PAGES")
    sync_page_throttle_seconds: float = Field(default=1.0, ge=0, validation_alias="SYNC_PAGE_THROTTLE_SECONDS")
    sync_rate_limit_backoff_seconds: float = Field(
        default=0.0, ge=0, validation_alias="SYNC_RATE_LIMIT_BACKOFF_SECONDS"
    )
    # 0 disables the per-cycle deadline
    sync_cycle_deadline_seconds: float = Field(default=120.0, ge=0, validation_alias="SYNC_CYCLE_DEADLINE_SECONDS")
    sync_request_timeout_seconds: float = Field(default=30.0, gt=0, validation_alias="SYNC_REQUEST_TIMEOUT_SECONDS")
    retention_days: int = Field(default=7, ge=1, validation_alias="RETENTION_DAYS")

    # Scheduler
    scheduler_heartbeat_seconds: int = Field(default=50, ge=1, validation_alias="SCHEDULER_HEARTBEAT_SECONDS")
    scheduler_refresh_hours: int = Field(default=6, ge=1, validation_alias="SCHEDULER_REFRESH_HOURS")

    # AI triage
    openrouter_api_key: Optional[str] = Field(default=None, validation_alias="OPENROUTER_API_KEY")
    openrouter_url: str = Field(
        default="https://openrouter.ai/api/v1/chat/completions", validation_alias="OPENROUTER_URL"
    )
    triage_model: str = Field(default="gpt-4o-mini", validation_alias="TRIAGE_MODEL")
    triage_batch_size: int = Field(default=5, ge=1, validation_alias="TRIAGE_BATCH_SIZE")

    @field_validator("sync_per_page")
    @classmethod
    def validate_per_page(cls, v: int) -> int:
        """The search endpoint serves at most 100 items per page."""
        if v < 1 or v > SEARCH_MAX_PER_PAGE:
            raise ValueError(f"SYNC_PER_PAGE must be between 1 and {SEARCH_MAX_PER_PAGE} (got {v})")
        return v

    @property
    def github_token_list(self) -> List[str]:
        """Parse tokens from comma-separated string, falling back to the single personal token."""
        tokens = [token.strip() for token in self.github_tokens.split(",") if token.strip()]
        if not tokens and self.github_personal_token and self.github_personal_token.strip():
            tokens = [self.github_personal_token.strip()]
        return tokens

    @property
    def cycle_deadline(self) -> Optional[float]:
        """Per-cycle wall-clock deadline in seconds, or None when disabled."""
        return self.sync_cycle_deadline_seconds or None

    def validate_sync_config(self) -> tuple[List[str], List[str]]:
        """
        Validate configuration before starting the sync engine.

        Returns:
            Tuple of (errors, warnings) - errors are fatal, warnings are advisory
        """
        errors = []
        warnings = []

        if not self.github_token_list:
            errors.append("GITHUB_TOKENS (or GITHUB_PERSONAL_TOKEN) is required for syncing")
        elif len(self.github_token_list) == 1:
            warnings.append("Only one GitHub token configured - rate limits cannot be rotated around")

        if self.sync_page_throttle_seconds == 0:
            warnings.append("SYNC_PAGE_THROTTLE_SECONDS is 0 - pages will be requested back to back")

        if not self.openrouter_api_key:
            warnings.append("OPENROUTER_API_KEY not set - triage will use round-robin assignment")

        return errors, warnings


@lru_cache
def get_settings() -> Settings:
    """Get cached application settings."""
    return Settings()


__all__ = ["Settings", "get_settings"]
