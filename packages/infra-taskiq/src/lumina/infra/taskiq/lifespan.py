"""Broker startup for processes that only enqueue jobs.

Workers run ``broker.startup()`` themselves through the taskiq CLI; this
hook is for producer processes such as an API host, which must open the
broker connection before ``TaskIQJobQueue.enqueue`` is first called.
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import TYPE_CHECKING, Any

from lumina.foundation.application import LIFESPAN_PRIORITY_TASKIQ, LifespanContribution
from lumina.infra.taskiq.broker import get_broker

if TYPE_CHECKING:
    from collections.abc import AsyncIterator

logger = logging.getLogger(__name__)


@asynccontextmanager
async def _taskiq_lifespan(app: Any) -> AsyncIterator[None]:
    broker = get_broker()
    if broker.is_worker_process:
        yield
        return

    await broker.startup()
    logger.info("job_broker_started")
    try:
        yield
    finally:
        await broker.shutdown()
        logger.info("job_broker_stopped")


lifespan_contribution = LifespanContribution(
    hook=_taskiq_lifespan,
    priority=LIFESPAN_PRIORITY_TASKIQ,
)
