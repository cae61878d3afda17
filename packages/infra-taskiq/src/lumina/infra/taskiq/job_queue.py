"""Job queue adapter that enqueues work onto the TaskIQ broker by task name.

Domain code depends on a ``JobQueuePort`` with a single
``enqueue(name, payload)`` method. This adapter resolves the name to a
registered task, so the task's labels (retry policy, schedule) travel
with every message.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from lumina.infra.taskiq.errors import TaskIQDispatchError

if TYPE_CHECKING:
    from taskiq import AsyncBroker

logger = logging.getLogger(__name__)


class TaskIQJobQueue:
    """Enqueue jobs on a TaskIQ broker.

    Args:
        broker: Broker whose registered tasks are looked up by name.
    """

    def __init__(self, broker: AsyncBroker) -> None:
        self._broker = broker

    async def enqueue(self, name: str, payload: dict[str, Any]) -> None:
        """Kick the task registered under ``name`` with ``payload`` as kwargs.

        Raises:
            TaskIQDispatchError: If no task is registered under ``name``.
        """
        task_name = str(name)
        task = self._broker.find_task(task_name)
        if task is None:
            raise TaskIQDispatchError(task_name)
        await task.kiq(**payload)
        logger.debug("job_enqueued", extra={"task_name": task_name, **payload})
