"""Redis Streams broker and cron scheduler for Lumina background jobs.

Stream consumers acknowledge a message only after the task returns, so a
job can be delivered again after a worker crash. Handlers registered here
must tolerate duplicates.

The taskiq CLI resolves ``module:attribute`` paths, which this module
serves lazily through ``__getattr__``:

    taskiq worker lumina.infra.taskiq.broker:broker <task modules>
    taskiq scheduler lumina.infra.taskiq.broker:scheduler <task modules>

Run exactly one scheduler per deployment.
"""

from __future__ import annotations

from functools import lru_cache

from taskiq import TaskiqScheduler
from taskiq.middlewares import SimpleRetryMiddleware
from taskiq.schedule_sources import LabelScheduleSource
from taskiq_redis import ListRedisScheduleSource, RedisAsyncResultBackend, RedisStreamBroker

from lumina.infra.taskiq.settings import get_taskiq_settings


@lru_cache(maxsize=1)
def get_result_backend() -> RedisAsyncResultBackend[object]:
    settings = get_taskiq_settings()
    return RedisAsyncResultBackend(redis_url=settings.redis_url, result_ex_time=settings.result_ttl)


@lru_cache(maxsize=1)
def get_broker() -> RedisStreamBroker:
    """Process-wide broker. Tasks labelled ``retry_on_error`` are re-queued on failure."""
    settings = get_taskiq_settings()
    broker = RedisStreamBroker(url=settings.redis_url, queue_name=settings.queue_name)
    return broker.with_result_backend(get_result_backend()).with_middlewares(
        SimpleRetryMiddleware(default_retry_count=settings.max_retries)
    )


@lru_cache(maxsize=1)
def get_scheduler() -> TaskiqScheduler:
    """Scheduler reading cron labels from registered tasks plus schedules stored in Redis."""
    broker = get_broker()
    return TaskiqScheduler(
        broker=broker,
        sources=[
            LabelScheduleSource(broker),
            ListRedisScheduleSource(get_taskiq_settings().redis_url),
        ],
    )


_CLI_ATTRIBUTES = {"broker": get_broker, "scheduler": get_scheduler}


def __getattr__(name: str) -> object:
    try:
        factory = _CLI_ATTRIBUTES[name]
    except KeyError:
        raise AttributeError(f"module {__name__!r} has no attribute {name!r}") from None
    return factory()
