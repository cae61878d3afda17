"""Shared fixtures for integration tests."""

from __future__ import annotations

from datetime import UTC, datetime, timedelta
from typing import TYPE_CHECKING

import pytest
import pytest_asyncio
from taskiq import InMemoryBroker

from lumina.domain.accounts.infrastructure.composition import build_account_service
from lumina.domain.accounts.infrastructure.tasks import run_account_deletion
from lumina.domain.accounts.ports import JobName
from lumina.domain.accounts.settings import AccountSettings
from lumina.infra.taskiq import TaskIQJobQueue

if TYPE_CHECKING:
    from collections.abc import AsyncIterator
    from pathlib import Path

    from lumina.domain.accounts.service import AccountService


class Clock:
    def __init__(self) -> None:
        self.now = datetime(2024, 3, 1, tzinfo=UTC)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, delta: timedelta) -> None:
        self.now += delta


class PlainHasher:
    def hash_password(self, plain: str) -> str:
        return plain[::-1]

    def verify_password(self, plain: str, hashed: str) -> bool:
        return plain[::-1] == hashed


@pytest.fixture()
def clock() -> Clock:
    return Clock()


@pytest.fixture()
def media_root(tmp_path: Path) -> Path:
    return tmp_path / "media"


@pytest.fixture()
def settings(media_root: Path) -> AccountSettings:
    return AccountSettings(_env_file=None, persistence="memory", media_location=str(media_root))


@pytest_asyncio.fixture()
async def broker() -> AsyncIterator[InMemoryBroker]:
    """In-memory broker that runs kicked tasks inline."""
    in_memory = InMemoryBroker(await_inplace=True)
    await in_memory.startup()
    yield in_memory
    await in_memory.shutdown()


@pytest.fixture()
def completed() -> list[str]:
    """Outcomes of every account-deletion task the broker ran."""
    return []


@pytest.fixture()
def account_service(
    settings: AccountSettings, broker: InMemoryBroker, clock: Clock, completed: list[str]
) -> AccountService:
    """Memory-backed service whose sweep dispatches through a real TaskIQ broker."""
    service = build_account_service(
        settings,
        queue=TaskIQJobQueue(broker),
        hasher=PlainHasher(),
        clock=clock,
    )

    @broker.task(task_name=JobName.ACCOUNT_DELETION.value)
    async def account_deletion(account_id: str, enqueued_at: str | None = None) -> str:
        outcome = await run_account_deletion(service, account_id, enqueued_at)
        completed.append(outcome)
        return outcome

    return service
