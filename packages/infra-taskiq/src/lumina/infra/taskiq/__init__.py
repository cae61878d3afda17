"""Lumina Infra TaskIQ: Redis Streams broker, scheduler and job queue adapter."""

from lumina.infra.taskiq.broker import get_broker, get_result_backend, get_scheduler
from lumina.infra.taskiq.errors import TaskIQDispatchError, TaskIQError
from lumina.infra.taskiq.job_queue import TaskIQJobQueue
from lumina.infra.taskiq.lifespan import lifespan_contribution
from lumina.infra.taskiq.settings import TaskIQSettings, get_taskiq_settings

__all__ = [
    "TaskIQDispatchError",
    "TaskIQError",
    "TaskIQJobQueue",
    "TaskIQSettings",
    "get_broker",
    "get_result_backend",
    "get_scheduler",
    "get_taskiq_settings",
    "lifespan_contribution",
]
