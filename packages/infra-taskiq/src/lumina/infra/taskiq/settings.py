"""``TASKIQ_*`` environment settings for the job broker."""

from __future__ import annotations

from functools import lru_cache

from pydantic import Field, RedisDsn
from pydantic_settings import BaseSettings, SettingsConfigDict


class TaskIQSettings(BaseSettings):
    """Broker connection and retry policy.

    Jobs live on the Redis stream ``<stream_prefix>:tasks``. ``max_retries``
    bounds how often a failed ``account-deletion`` job is re-queued before
    the broker gives up on it; the next sweep enqueues it again anyway.
    """

    model_config = SettingsConfigDict(
        env_prefix="TASKIQ_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        populate_by_name=True,
    )

    redis_dsn: RedisDsn = Field(
        default=RedisDsn("redis://localhost:6379/1"), alias="TASKIQ_REDIS_URL"
    )
    result_ttl: int = Field(default=3600, ge=60, le=86400, description="Seconds results are kept")
    stream_prefix: str = Field(default="lumina", min_length=1)
    max_retries: int = Field(default=3, ge=0, le=50)

    @property
    def redis_url(self) -> str:
        return str(self.redis_dsn)

    @property
    def queue_name(self) -> str:
        return f"{self.stream_prefix}:tasks"


@lru_cache(maxsize=1)
def get_taskiq_settings() -> TaskIQSettings:
    return TaskIQSettings()
