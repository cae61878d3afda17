"""Unit tests for the deletion scheduler and executor."""

from __future__ import annotations

import asyncio
import os
from datetime import timedelta
from typing import Any
from unittest.mock import AsyncMock, MagicMock
from uuid import uuid4

import pytest

from lumina.domain.accounts.account import Account
from lumina.domain.accounts.deletion import (
    AccountDeletionExecutor,
    AccountDeletionScheduler,
    DeletionOutcome,
    DeletionResult,
    DeletionTask,
)
from lumina.domain.accounts.ports import JobName
from lumina.domain.accounts.storage import StorageLocator


def _make_folders(locator: StorageLocator, account: Account) -> list[str]:
    folders = locator.get_account_folders(account)
    for folder in folders:
        os.makedirs(folder)
        with open(os.path.join(folder, "file.jpg"), "wb") as f:
            f.write(b"data")
    return folders


async def _soft_deleted(accounts: Any, **fields: Any) -> Account:
    account = await accounts.create(
        Account(email=f"{uuid4().hex}@example.com", name="Doomed", **fields)
    )
    return await accounts.soft_delete(account)


@pytest.mark.unit
class TestDeletionTypes:
    def test_task_payload(self, clock: Any) -> None:
        account_id = uuid4()
        task = DeletionTask(account_id=account_id, enqueued_at=clock())
        assert task.payload() == {
            "account_id": str(account_id),
            "enqueued_at": clock().isoformat(),
        }

    @pytest.mark.parametrize(
        ("outcome", "succeeded"),
        [
            (DeletionOutcome.COMPLETED, True),
            (DeletionOutcome.SKIPPED, True),
            (DeletionOutcome.NO_OP, True),
            (DeletionOutcome.FAILED, False),
        ],
    )
    def test_result_succeeded(self, outcome: DeletionOutcome, succeeded: bool) -> None:
        assert DeletionResult(outcome, uuid4()).succeeded is succeeded

    def test_outcome_values(self) -> None:
        assert DeletionOutcome.NO_OP == "no-op"


@pytest.mark.unit
class TestAccountDeletionScheduler:
    @pytest.mark.asyncio
    async def test_enqueues_only_eligible_accounts(
        self, scheduler: AccountDeletionScheduler, accounts: Any, queue: Any, clock: Any
    ) -> None:
        old = await _soft_deleted(accounts)
        clock.advance(timedelta(days=3))
        recent = await _soft_deleted(accounts)
        await accounts.create(Account(email="active@example.com", name="Active"))
        clock.advance(timedelta(days=5))

        assert await scheduler.sweep() is True

        assert queue.account_ids() == [old.id]
        assert recent.id not in queue.account_ids()
        name, payload = queue.jobs[0]
        assert name == JobName.ACCOUNT_DELETION
        assert payload["enqueued_at"] == clock().isoformat()

    @pytest.mark.asyncio
    async def test_no_candidates(self, scheduler: AccountDeletionScheduler, queue: Any) -> None:
        assert await scheduler.sweep() is True
        assert queue.jobs == []

    @pytest.mark.asyncio
    async def test_repeated_sweeps_re_enqueue(
        self, scheduler: AccountDeletionScheduler, accounts: Any, queue: Any, clock: Any
    ) -> None:
        account = await _soft_deleted(accounts)
        clock.advance(timedelta(days=8))

        await scheduler.sweep()
        await scheduler.sweep()

        assert queue.account_ids() == [account.id, account.id]

    @pytest.mark.asyncio
    async def test_restored_account_is_not_enqueued(
        self, scheduler: AccountDeletionScheduler, accounts: Any, queue: Any, clock: Any
    ) -> None:
        account = await _soft_deleted(accounts)
        clock.advance(timedelta(days=3))
        await accounts.restore(account)
        clock.advance(timedelta(days=10))

        await scheduler.sweep()

        assert queue.jobs == []

    @pytest.mark.asyncio
    async def test_queue_errors_propagate(self, accounts: Any, clock: Any) -> None:
        await _soft_deleted(accounts)
        clock.advance(timedelta(days=8))
        queue = MagicMock()
        queue.enqueue = AsyncMock(side_effect=ConnectionError("redis down"))

        with pytest.raises(ConnectionError):
            await AccountDeletionScheduler(accounts, queue, clock=clock).sweep()

    @pytest.mark.asyncio
    async def test_repository_errors_propagate(self, queue: Any, clock: Any) -> None:
        accounts = MagicMock()
        accounts.list_soft_deleted = AsyncMock(side_effect=RuntimeError("db down"))

        with pytest.raises(RuntimeError):
            await AccountDeletionScheduler(accounts, queue, clock=clock).sweep()
        assert queue.jobs == []


@pytest.mark.unit
class TestAccountDeletionExecutor:
    @pytest.mark.asyncio
    async def test_missing_account_is_no_op(self, executor: AccountDeletionExecutor) -> None:
        account_id = uuid4()
        result = await executor.execute(account_id)
        assert result.outcome is DeletionOutcome.NO_OP
        assert result.account_id == account_id
        assert result.succeeded

    @pytest.mark.asyncio
    async def test_active_account_is_skipped(
        self, executor: AccountDeletionExecutor, accounts: Any, user: Account
    ) -> None:
        result = await executor.execute(user.id)
        assert result.outcome is DeletionOutcome.SKIPPED
        assert result.reason == "not_eligible"
        assert await accounts.get(user.id) is not None

    @pytest.mark.asyncio
    async def test_within_grace_period_is_skipped(
        self,
        executor: AccountDeletionExecutor,
        accounts: Any,
        locator: StorageLocator,
        clock: Any,
    ) -> None:
        account = await _soft_deleted(accounts)
        folders = _make_folders(locator, account)
        clock.advance(timedelta(days=6))

        result = await executor.execute(account.id)

        assert result.outcome is DeletionOutcome.SKIPPED
        assert all(os.path.isdir(f) for f in folders)
        assert await accounts.get(account.id, include_deleted=True) is not None

    @pytest.mark.asyncio
    async def test_restored_after_enqueue_is_skipped(
        self, executor: AccountDeletionExecutor, accounts: Any, clock: Any
    ) -> None:
        account = await _soft_deleted(accounts)
        clock.advance(timedelta(days=8))
        await accounts.restore(account)

        result = await executor.execute(account.id)

        assert result.outcome is DeletionOutcome.SKIPPED
        assert await accounts.get(account.id) is not None

    @pytest.mark.asyncio
    async def test_administrator_is_never_purged(
        self, executor: AccountDeletionExecutor, accounts: Any, clock: Any
    ) -> None:
        account = await _soft_deleted(accounts, is_admin=True)
        clock.advance(timedelta(days=8))

        result = await executor.execute(account.id)

        assert result.outcome is DeletionOutcome.SKIPPED
        assert result.reason == "administrator"
        assert await accounts.get(account.id, include_deleted=True) is not None

    @pytest.mark.asyncio
    async def test_purges_folders_then_records(
        self,
        executor: AccountDeletionExecutor,
        accounts: Any,
        albums: Any,
        assets: Any,
        locator: StorageLocator,
        clock: Any,
    ) -> None:
        account = await _soft_deleted(accounts, storage_label="doomed")
        folders = _make_folders(locator, account)
        albums.add(account.id)
        assets.add(account.id)
        assets.add(account.id)
        other = uuid4()
        albums.add(other)
        clock.advance(timedelta(days=7))

        result = await executor.execute(account.id)

        assert result.outcome is DeletionOutcome.COMPLETED
        assert result.removed_folders == tuple(folders)
        assert not any(os.path.exists(f) for f in folders)
        assert albums.owned_by(account.id) == []
        assert assets.owned_by(account.id) == []
        assert len(albums.owned_by(other)) == 1
        assert await accounts.get(account.id, include_deleted=True) is None

    @pytest.mark.asyncio
    async def test_missing_folders_are_not_an_error(
        self,
        executor: AccountDeletionExecutor,
        accounts: Any,
        locator: StorageLocator,
        clock: Any,
    ) -> None:
        account = await _soft_deleted(accounts)
        folders = locator.get_account_folders(account)
        os.makedirs(folders[2])
        clock.advance(timedelta(days=8))

        result = await executor.execute(account.id)

        assert result.outcome is DeletionOutcome.COMPLETED
        assert len(result.removed_folders) == 5
        assert not os.path.exists(folders[2])

    @pytest.mark.asyncio
    async def test_storage_failure_halts_cascades(
        self,
        accounts: Any,
        albums: Any,
        assets: Any,
        locator: StorageLocator,
        clock: Any,
    ) -> None:
        account = await _soft_deleted(accounts)
        albums.add(account.id)
        assets.add(account.id)
        clock.advance(timedelta(days=8))
        error = PermissionError("permission denied")
        storage = MagicMock()
        storage.remove_dir = AsyncMock(side_effect=[None, error])
        executor = AccountDeletionExecutor(
            accounts, albums, assets, storage, locator, clock=clock
        )

        result = await executor.execute(account.id)

        assert result.outcome is DeletionOutcome.FAILED
        assert result.error is error
        assert result.reason == "permission denied"
        assert result.removed_folders == (locator.get_library_folder(account),)
        assert storage.remove_dir.await_count == 2
        assert len(albums.owned_by(account.id)) == 1
        assert len(assets.owned_by(account.id)) == 1
        assert await accounts.get(account.id, include_deleted=True) is not None

    @pytest.mark.asyncio
    async def test_cascade_failure_keeps_account_record(
        self, accounts: Any, assets: Any, storage: Any, locator: StorageLocator, clock: Any
    ) -> None:
        account = await _soft_deleted(accounts)
        clock.advance(timedelta(days=8))
        albums = MagicMock()
        albums.delete_all = AsyncMock(side_effect=RuntimeError("db gone"))
        executor = AccountDeletionExecutor(
            accounts, albums, assets, storage, locator, clock=clock
        )

        result = await executor.execute(account.id)

        assert result.outcome is DeletionOutcome.FAILED
        assert not result.succeeded
        assert await accounts.get(account.id, include_deleted=True) is not None

    @pytest.mark.asyncio
    async def test_retry_after_failure_completes(
        self,
        accounts: Any,
        albums: Any,
        assets: Any,
        storage: Any,
        locator: StorageLocator,
        clock: Any,
    ) -> None:
        account = await _soft_deleted(accounts)
        folders = _make_folders(locator, account)
        albums.add(account.id)
        clock.advance(timedelta(days=8))
        flaky_assets = MagicMock()
        flaky_assets.delete_all = AsyncMock(side_effect=[RuntimeError("timeout"), 0])
        executor = AccountDeletionExecutor(
            accounts, albums, flaky_assets, storage, locator, clock=clock
        )

        first = await executor.execute(account.id)
        second = await executor.execute(account.id)

        assert first.outcome is DeletionOutcome.FAILED
        assert second.outcome is DeletionOutcome.COMPLETED
        assert not any(os.path.exists(f) for f in folders)
        assert await accounts.get(account.id, include_deleted=True) is None

    @pytest.mark.asyncio
    async def test_duplicate_execution_is_idempotent(
        self,
        executor: AccountDeletionExecutor,
        accounts: Any,
        albums: Any,
        locator: StorageLocator,
        clock: Any,
    ) -> None:
        account = await _soft_deleted(accounts)
        _make_folders(locator, account)
        albums.add(account.id)
        clock.advance(timedelta(days=8))

        first = await executor.execute(account.id)
        state_after_first = await accounts.list(include_deleted=True)
        second = await executor.execute(account.id)

        assert first.outcome is DeletionOutcome.COMPLETED
        assert second.outcome is DeletionOutcome.NO_OP
        assert await accounts.list(include_deleted=True) == state_after_first
        assert albums.owned_by(account.id) == []

    @pytest.mark.asyncio
    async def test_concurrent_duplicate_jobs_leave_clean_state(
        self,
        executor: AccountDeletionExecutor,
        accounts: Any,
        albums: Any,
        assets: Any,
        locator: StorageLocator,
        clock: Any,
    ) -> None:
        account = await _soft_deleted(accounts)
        folders = _make_folders(locator, account)
        albums.add(account.id)
        assets.add(account.id)
        assets.add(account.id)
        clock.advance(timedelta(days=8))

        results = await asyncio.gather(*(executor.execute(account.id) for _ in range(4)))

        assert all(r.succeeded for r in results)
        assert DeletionOutcome.COMPLETED in {r.outcome for r in results}
        assert await accounts.get(account.id, include_deleted=True) is None
        assert not any(os.path.exists(f) for f in folders)
        assert albums.owned_by(account.id) == []
        assert assets.owned_by(account.id) == []

    @pytest.mark.asyncio
    async def test_stale_job_for_active_account_is_skipped(
        self, executor: AccountDeletionExecutor, accounts: Any, user: Account
    ) -> None:
        result = await executor.execute(user.id)
        assert result.outcome is DeletionOutcome.SKIPPED
        assert await accounts.get(user.id) is not None


@pytest.mark.unit
class TestDeletionPipelineScenario:
    @pytest.mark.asyncio
    async def test_sweep_then_execute(
        self,
        scheduler: AccountDeletionScheduler,
        executor: AccountDeletionExecutor,
        accounts: Any,
        albums: Any,
        assets: Any,
        queue: Any,
        locator: StorageLocator,
        clock: Any,
    ) -> None:
        account = await _soft_deleted(accounts)
        folders = _make_folders(locator, account)
        albums.add(account.id)
        assets.add(account.id)

        clock.advance(timedelta(days=6))
        await scheduler.sweep()
        assert queue.jobs == []

        clock.advance(timedelta(days=2))
        await scheduler.sweep()
        assert queue.account_ids() == [account.id]

        (account_id,) = queue.account_ids()
        result = await executor.execute(account_id)
        assert result.outcome is DeletionOutcome.COMPLETED
        assert not any(os.path.exists(f) for f in folders)
        assert albums.owned_by(account.id) == []
        assert assets.owned_by(account.id) == []
        assert await accounts.get(account.id, include_deleted=True) is None

        again = await executor.execute(account_id)
        assert again.outcome is DeletionOutcome.NO_OP
