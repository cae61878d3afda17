"""Account lifecycle configuration using Pydantic settings.

Settings are loaded from environment variables with ``ACCOUNTS_`` prefix.
"""

from __future__ import annotations

from datetime import timedelta
from functools import lru_cache
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class AccountSettings(BaseSettings):
    """Configuration for the account service and deletion pipeline.

    Environment Variables:
        ACCOUNTS_MEDIA_LOCATION: Root folder for per-account media (default: ./upload)
        ACCOUNTS_DELETION_GRACE_DAYS: Days a soft-deleted account stays
            recoverable (default: 7)
        ACCOUNTS_DELETION_CHECK_CRON: Cron expression for the deletion sweep
            (default: daily at midnight)
        ACCOUNTS_PERSISTENCE: ``postgres`` or ``memory`` (default: postgres)

    Example:
        >>> AccountSettings().deletion_grace_period
        datetime.timedelta(days=7)
    """

    model_config = SettingsConfigDict(
        env_prefix="ACCOUNTS_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    media_location: str = Field(
        default="./upload",
        description="Root folder under which per-account media folders live",
    )
    deletion_grace_days: int = Field(
        default=7,
        ge=1,
        le=365,
        description="Days between soft-delete and eligibility for purge",
    )
    deletion_check_cron: str = Field(
        default="0 0 * * *",
        description="Cron schedule for the deletion sweep",
    )
    persistence: Literal["postgres", "memory"] = Field(
        default="postgres",
        description="Repository backend",
    )

    @property
    def deletion_grace_period(self) -> timedelta:
        return timedelta(days=self.deletion_grace_days)


@lru_cache(maxsize=1)
def get_account_settings() -> AccountSettings:
    """Get cached AccountSettings singleton."""
    return AccountSettings()
