"""TaskIQ tasks for the deferred account-deletion pipeline.

``account-deletion-check`` runs on a cron schedule and enqueues one
``account-deletion`` job per eligible account. Delivery is
at-least-once; both handlers tolerate stale and duplicate jobs.

Run with:
    taskiq worker lumina.domain.accounts.infrastructure.tasks:broker
    taskiq scheduler lumina.infra.taskiq.broker:scheduler lumina.domain.accounts.infrastructure.tasks
"""

from __future__ import annotations

import asyncio
import logging
from contextlib import AsyncExitStack
from datetime import datetime
from typing import TYPE_CHECKING
from uuid import UUID

import structlog
from taskiq import Context, TaskiqDepends, TaskiqEvents, TaskiqState

from lumina.domain.accounts.account import utc_now
from lumina.domain.accounts.deletion import DeletionOutcome
from lumina.domain.accounts.eligibility import as_utc
from lumina.domain.accounts.infrastructure.composition import build_account_service
from lumina.domain.accounts.infrastructure.sql_repositories import ensure_tables_exist
from lumina.domain.accounts.ports import JobName
from lumina.domain.accounts.settings import get_account_settings
from lumina.foundation.application import compose_lifespan
from lumina.infra.observability import lifespan_contribution as observability_lifespan
from lumina.infra.persistence import get_sync_session_factory
from lumina.infra.persistence import lifespan_contribution as persistence_lifespan
from lumina.infra.taskiq import TaskIQError, TaskIQJobQueue, get_broker

if TYPE_CHECKING:
    from lumina.domain.accounts.deletion import DeletionResult
    from lumina.domain.accounts.service import AccountService

logger = logging.getLogger(__name__)

broker = get_broker()


class AccountDeletionFailedError(TaskIQError):
    """Raised when a deletion job fails so the broker retries it.

    Transient: purge steps are idempotent and a retry resumes the purge.
    """

    transient: bool = True

    def __init__(self, result: DeletionResult) -> None:
        self.result = result
        super().__init__(f"Deletion of account {result.account_id} failed: {result.reason}")


def _log_job_latency(account_id: str, enqueued_at: object) -> None:
    # Informational only; a bad value must not fail a finished job
    try:
        queued = as_utc(datetime.fromisoformat(str(enqueued_at)))
    except ValueError:
        logger.warning(
            "account_deletion_enqueued_at_invalid",
            extra={"account_id": account_id, "enqueued_at": repr(enqueued_at)},
        )
        return
    latency = utc_now() - queued
    logger.info(
        "account_deletion_job_latency",
        extra={"account_id": account_id, "seconds": latency.total_seconds()},
    )


async def run_deletion_check(service: AccountService) -> bool:
    """Run one deletion sweep."""
    return await service.handle_deletion_check()


async def run_account_deletion(
    service: AccountService,
    account_id: str,
    enqueued_at: str | None = None,
) -> str:
    """Execute one deletion job and translate the result for the broker.

    Returns:
        The outcome value (``completed``, ``skipped`` or ``no-op``).

    Raises:
        AccountDeletionFailedError: If a purge step failed.
    """
    with structlog.contextvars.bound_contextvars(account_id=account_id):
        result = await service.handle_deletion(UUID(account_id))
        if enqueued_at is not None:
            _log_job_latency(account_id, enqueued_at)
    if result.outcome is DeletionOutcome.FAILED:
        raise AccountDeletionFailedError(result) from result.error
    return result.outcome.value


@broker.on_event(TaskiqEvents.WORKER_STARTUP)
async def on_worker_startup(state: TaskiqState) -> None:
    settings = get_account_settings()
    contributions = [observability_lifespan]
    session_factory = None
    if settings.persistence == "postgres":
        contributions.append(persistence_lifespan)
        session_factory = get_sync_session_factory()

    stack = AsyncExitStack()
    await stack.enter_async_context(compose_lifespan(contributions)(state))
    state.lifespan_stack = stack

    if session_factory is not None:
        await asyncio.to_thread(ensure_tables_exist, session_factory)
    state.account_service = build_account_service(
        settings,
        queue=TaskIQJobQueue(broker),
        session_factory=session_factory,
    )


@broker.on_event(TaskiqEvents.WORKER_SHUTDOWN)
async def on_worker_shutdown(state: TaskiqState) -> None:
    stack: AsyncExitStack | None = getattr(state, "lifespan_stack", None)
    if stack is not None:
        await stack.aclose()


@broker.task(
    task_name=JobName.ACCOUNT_DELETION_CHECK.value,
    schedule=[{"cron": get_account_settings().deletion_check_cron}],
)
async def account_deletion_check(context: Context = TaskiqDepends()) -> bool:
    return await run_deletion_check(context.state.account_service)


@broker.task(task_name=JobName.ACCOUNT_DELETION.value, retry_on_error=True)
async def account_deletion(
    account_id: str,
    enqueued_at: str | None = None,
    context: Context = TaskiqDepends(),
) -> str:
    return await run_account_deletion(context.state.account_service, account_id, enqueued_at)
