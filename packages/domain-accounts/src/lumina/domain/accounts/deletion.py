"""Deferred account deletion: the sweep that finds accounts and the purge itself.

Two phases, both safe to repeat:

1. ``AccountDeletionScheduler.sweep`` finds soft-deleted accounts whose
   grace period has elapsed and enqueues one deletion job per account.
2. ``AccountDeletionExecutor.execute`` consumes a job and purges the
   account: storage folders first, then albums, then assets, then the
   account record itself.

Jobs are delivered at-least-once and may be stale, duplicated or run
concurrently. The executor therefore re-reads the account and re-checks
eligibility on every run, and every purge step is idempotent. A failed
run is retried as a whole and converges; nothing is rolled back.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import timedelta
from enum import StrEnum
from typing import TYPE_CHECKING, Any

from lumina.domain.accounts.account import utc_now
from lumina.domain.accounts.eligibility import DELETION_GRACE_PERIOD, is_eligible_for_deletion
from lumina.domain.accounts.ports import JobName

if TYPE_CHECKING:
    from collections.abc import Callable
    from datetime import datetime
    from uuid import UUID

    from lumina.domain.accounts.ports import (
        AccountRepositoryPort,
        AccountScopedRepositoryPort,
        JobQueuePort,
    )
    from lumina.domain.accounts.storage import StorageLocator
    from lumina.foundation.domain.ports import StoragePort

logger = logging.getLogger(__name__)

SKIP_REASON_NOT_ELIGIBLE = "not_eligible"
SKIP_REASON_ADMINISTRATOR = "administrator"


class DeletionOutcome(StrEnum):
    """Terminal state of one execution of a deletion job."""

    COMPLETED = "completed"
    SKIPPED = "skipped"
    NO_OP = "no-op"
    FAILED = "failed"


@dataclass(frozen=True, slots=True)
class DeletionTask:
    """A request to purge one account.

    Only ``account_id`` is trusted by the executor; ``enqueued_at`` is
    carried for latency reporting.
    """

    account_id: UUID
    enqueued_at: datetime

    def payload(self) -> dict[str, Any]:
        return {
            "account_id": str(self.account_id),
            "enqueued_at": self.enqueued_at.isoformat(),
        }


@dataclass(frozen=True, slots=True)
class DeletionResult:
    """Result of ``AccountDeletionExecutor.execute``.

    Attributes:
        outcome: What happened.
        account_id: The account the job targeted.
        reason: Why the job was skipped or failed; None otherwise.
        removed_folders: Folders removed before completion or failure.
        error: The exception that stopped a failed run.
    """

    outcome: DeletionOutcome
    account_id: UUID
    reason: str | None = None
    removed_folders: tuple[str, ...] = ()
    error: BaseException | None = None

    @property
    def succeeded(self) -> bool:
        """False only for FAILED; skipped and no-op runs need no retry."""
        return self.outcome is not DeletionOutcome.FAILED


class AccountDeletionScheduler:
    """Periodic sweep that enqueues a deletion job for every eligible account.

    Args:
        accounts: Account repository, queried for soft-deleted accounts.
        queue: Job queue receiving ``JobName.ACCOUNT_DELETION`` jobs.
        clock: Source of the current time.
        grace_period: Time an account stays recoverable after soft-delete.
    """

    def __init__(
        self,
        accounts: AccountRepositoryPort,
        queue: JobQueuePort,
        *,
        clock: Callable[[], datetime] = utc_now,
        grace_period: timedelta = DELETION_GRACE_PERIOD,
    ) -> None:
        self._accounts = accounts
        self._queue = queue
        self._clock = clock
        self._grace_period = grace_period

    async def sweep(self) -> bool:
        """Enqueue one deletion job per eligible soft-deleted account.

        Re-enqueuing an account that already has a pending job is harmless:
        the executor is idempotent.

        Returns:
            True once every eligible account has been enqueued.

        Raises:
            Exception: Repository or queue errors propagate; the next
                scheduled sweep retries.
        """
        candidates = await self._accounts.list_soft_deleted()
        now = self._clock()
        enqueued = 0
        for account in candidates:
            if not is_eligible_for_deletion(account.deleted_at, now, self._grace_period):
                continue
            task = DeletionTask(account_id=account.id, enqueued_at=now)
            await self._queue.enqueue(JobName.ACCOUNT_DELETION, task.payload())
            enqueued += 1

        logger.info(
            "account_deletion_check_completed",
            extra={"scanned": len(candidates), "enqueued": enqueued},
        )
        return True


class AccountDeletionExecutor:
    """Irreversibly purge one soft-deleted account.

    Step order is fixed: storage folders, albums, assets, account record.
    The record goes last so that a run interrupted anywhere leaves the
    account findable, and the retried job picks up where it stopped.

    Args:
        accounts: Account repository.
        albums: Album repository (cascade hard-delete by owner).
        assets: Asset repository (cascade hard-delete by owner).
        storage: Storage backend removing folders.
        locator: Computes the account's storage folders.
        clock: Source of the current time.
        grace_period: Time an account stays recoverable after soft-delete.
    """

    def __init__(
        self,
        accounts: AccountRepositoryPort,
        albums: AccountScopedRepositoryPort,
        assets: AccountScopedRepositoryPort,
        storage: StoragePort,
        locator: StorageLocator,
        *,
        clock: Callable[[], datetime] = utc_now,
        grace_period: timedelta = DELETION_GRACE_PERIOD,
    ) -> None:
        self._accounts = accounts
        self._albums = albums
        self._assets = assets
        self._storage = storage
        self._locator = locator
        self._clock = clock
        self._grace_period = grace_period

    async def execute(self, account_id: UUID) -> DeletionResult:
        """Purge ``account_id`` if it is still eligible.

        Returns:
            NO_OP if the account no longer exists, SKIPPED if it is not
            eligible (restored, not yet due, or still an administrator),
            COMPLETED after a full purge, FAILED if a purge step raised.
        """
        account = await self._accounts.get(account_id, include_deleted=True)
        if account is None:
            logger.info("account_deletion_noop", extra={"account_id": str(account_id)})
            return DeletionResult(DeletionOutcome.NO_OP, account_id)

        if not is_eligible_for_deletion(account.deleted_at, self._clock(), self._grace_period):
            logger.warning(
                "account_deletion_skipped",
                extra={"account_id": str(account_id), "reason": SKIP_REASON_NOT_ELIGIBLE},
            )
            return DeletionResult(
                DeletionOutcome.SKIPPED, account_id, reason=SKIP_REASON_NOT_ELIGIBLE
            )

        if account.is_admin:
            logger.warning(
                "account_deletion_skipped",
                extra={"account_id": str(account_id), "reason": SKIP_REASON_ADMINISTRATOR},
            )
            return DeletionResult(
                DeletionOutcome.SKIPPED, account_id, reason=SKIP_REASON_ADMINISTRATOR
            )

        logger.info("account_deletion_started", extra={"account_id": str(account_id)})

        removed: list[str] = []
        try:
            for folder in self._locator.get_account_folders(account):
                logger.warning(
                    "account_folder_removing",
                    extra={"account_id": str(account_id), "folder": folder},
                )
                await self._storage.remove_dir(folder)
                removed.append(folder)

            logger.warning("account_records_removing", extra={"account_id": str(account_id)})
            albums_deleted = await self._albums.delete_all(account.id)
            assets_deleted = await self._assets.delete_all(account.id)
            await self._accounts.hard_delete(account)
        except Exception as exc:
            logger.exception(
                "account_deletion_failed",
                extra={"account_id": str(account_id), "folders_removed": len(removed)},
            )
            return DeletionResult(
                DeletionOutcome.FAILED,
                account_id,
                reason=str(exc) or type(exc).__name__,
                removed_folders=tuple(removed),
                error=exc,
            )

        logger.info(
            "account_deletion_completed",
            extra={
                "account_id": str(account_id),
                "albums_deleted": albums_deleted,
                "assets_deleted": assets_deleted,
            },
        )
        return DeletionResult(
            DeletionOutcome.COMPLETED, account_id, removed_folders=tuple(removed)
        )
