"""Shared fixtures for domain-accounts tests."""

from __future__ import annotations

from datetime import UTC, datetime, timedelta
from typing import Any
from uuid import UUID

import pytest
import pytest_asyncio

from lumina.domain.accounts.account import Account
from lumina.domain.accounts.deletion import AccountDeletionExecutor, AccountDeletionScheduler
from lumina.domain.accounts.infrastructure.local_storage import LocalStorageAdapter
from lumina.domain.accounts.infrastructure.memory_repositories import (
    InMemoryAccountRepository,
    InMemoryAlbumRepository,
    InMemoryAssetRepository,
)
from lumina.domain.accounts.management import AccountManager
from lumina.domain.accounts.service import AccountService
from lumina.domain.accounts.storage import StorageLocator
from lumina.foundation.domain.principal import ADMIN_ROLE, Principal

T0 = datetime(2024, 3, 1, 12, 0, tzinfo=UTC)


class FakeClock:
    """Settable clock; call it to read the time."""

    def __init__(self, now: datetime = T0) -> None:
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, delta: timedelta) -> None:
        self.now += delta


class FakeHasher:
    def hash_password(self, plain: str) -> str:
        return f"hashed:{plain}"

    def verify_password(self, plain: str, hashed: str) -> bool:
        return hashed == f"hashed:{plain}"


class RecordingQueue:
    """JobQueuePort that records instead of dispatching."""

    def __init__(self) -> None:
        self.jobs: list[tuple[str, dict[str, Any]]] = []

    async def enqueue(self, name: str, payload: dict[str, Any]) -> None:
        self.jobs.append((str(name), payload))

    def account_ids(self) -> list[UUID]:
        return [UUID(payload["account_id"]) for _, payload in self.jobs]


@pytest.fixture()
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture()
def accounts(clock: FakeClock) -> InMemoryAccountRepository:
    return InMemoryAccountRepository(clock)


@pytest.fixture()
def albums(clock: FakeClock) -> InMemoryAlbumRepository:
    return InMemoryAlbumRepository(clock)


@pytest.fixture()
def assets(clock: FakeClock) -> InMemoryAssetRepository:
    return InMemoryAssetRepository(clock)


@pytest.fixture()
def queue() -> RecordingQueue:
    return RecordingQueue()


@pytest.fixture()
def hasher() -> FakeHasher:
    return FakeHasher()


@pytest.fixture()
def locator(tmp_path: Any) -> StorageLocator:
    return StorageLocator(str(tmp_path / "media"))


@pytest.fixture()
def storage() -> LocalStorageAdapter:
    return LocalStorageAdapter()


@pytest.fixture()
def scheduler(
    accounts: InMemoryAccountRepository, queue: RecordingQueue, clock: FakeClock
) -> AccountDeletionScheduler:
    return AccountDeletionScheduler(accounts, queue, clock=clock)


@pytest.fixture()
def executor(
    accounts: InMemoryAccountRepository,
    albums: InMemoryAlbumRepository,
    assets: InMemoryAssetRepository,
    storage: LocalStorageAdapter,
    locator: StorageLocator,
    clock: FakeClock,
) -> AccountDeletionExecutor:
    return AccountDeletionExecutor(accounts, albums, assets, storage, locator, clock=clock)


@pytest.fixture()
def manager(accounts: InMemoryAccountRepository, hasher: FakeHasher) -> AccountManager:
    return AccountManager(accounts, hasher)


@pytest.fixture()
def service(
    accounts: InMemoryAccountRepository,
    albums: InMemoryAlbumRepository,
    storage: LocalStorageAdapter,
    manager: AccountManager,
    scheduler: AccountDeletionScheduler,
    executor: AccountDeletionExecutor,
) -> AccountService:
    return AccountService(accounts, albums, storage, manager, scheduler, executor)


@pytest_asyncio.fixture()
async def admin(accounts: InMemoryAccountRepository) -> Account:
    return await accounts.create(
        Account(email="admin@example.com", name="Admin", is_admin=True, password_hash="x")
    )


@pytest_asyncio.fixture()
async def user(accounts: InMemoryAccountRepository) -> Account:
    return await accounts.create(
        Account(email="user@example.com", name="User", password_hash="x")
    )


@pytest.fixture()
def admin_principal(admin: Account) -> Principal:
    return Principal(account_id=admin.id, roles=(ADMIN_ROLE,), email=admin.email)


@pytest.fixture()
def user_principal(user: Account) -> Principal:
    return Principal(account_id=user.id, email=user.email)
