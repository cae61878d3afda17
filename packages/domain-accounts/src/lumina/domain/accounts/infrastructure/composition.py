"""Composition root for the account service.

Builds every collaborator once, explicitly, from settings. Worker and
scheduler processes call ``build_account_service`` at startup and keep
the result for the life of the process.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from lumina.domain.accounts.account import utc_now
from lumina.domain.accounts.deletion import AccountDeletionExecutor, AccountDeletionScheduler
from lumina.domain.accounts.infrastructure.local_storage import LocalStorageAdapter
from lumina.domain.accounts.infrastructure.memory_repositories import (
    InMemoryAccountRepository,
    InMemoryAlbumRepository,
    InMemoryAssetRepository,
)
from lumina.domain.accounts.infrastructure.sql_repositories import (
    SqlAccountRepository,
    SqlAlbumRepository,
    SqlAssetRepository,
)
from lumina.domain.accounts.management import AccountManager
from lumina.domain.accounts.service import AccountService
from lumina.domain.accounts.storage import StorageLocator
from lumina.infra.auth import BcryptPasswordHasher

if TYPE_CHECKING:
    from collections.abc import Callable
    from datetime import datetime

    from sqlalchemy.orm import Session

    from lumina.domain.accounts.ports import (
        AccountRepositoryPort,
        AccountScopedRepositoryPort,
        JobQueuePort,
    )
    from lumina.domain.accounts.settings import AccountSettings
    from lumina.foundation.domain.ports import PasswordHasherPort, StoragePort

logger = logging.getLogger(__name__)


def build_repositories(
    settings: AccountSettings,
    *,
    session_factory: Callable[[], Session] | None = None,
    clock: Callable[[], datetime] = utc_now,
) -> tuple[AccountRepositoryPort, AccountScopedRepositoryPort, AccountScopedRepositoryPort]:
    """Account, album and asset repositories for the configured backend.

    Raises:
        ValueError: If postgres persistence is selected without a session factory.
    """
    if settings.persistence == "memory":
        return (
            InMemoryAccountRepository(clock),
            InMemoryAlbumRepository(clock),
            InMemoryAssetRepository(clock),
        )
    if session_factory is None:
        msg = "session_factory is required for postgres persistence"
        raise ValueError(msg)
    return (
        SqlAccountRepository(session_factory),
        SqlAlbumRepository(session_factory),
        SqlAssetRepository(session_factory),
    )


def build_account_service(
    settings: AccountSettings,
    *,
    queue: JobQueuePort,
    session_factory: Callable[[], Session] | None = None,
    storage: StoragePort | None = None,
    hasher: PasswordHasherPort | None = None,
    clock: Callable[[], datetime] = utc_now,
) -> AccountService:
    """Wire an ``AccountService`` with its scheduler and executor.

    Args:
        settings: Account settings (persistence backend, media root, grace period).
        queue: Job queue used by the deletion sweep.
        session_factory: Sync SQLAlchemy session factory; postgres only.
        storage: Storage backend. Defaults to the local filesystem.
        hasher: Password hasher. Defaults to bcrypt.
        clock: Source of the current time.
    """
    accounts, albums, assets = build_repositories(
        settings, session_factory=session_factory, clock=clock
    )
    storage = storage or LocalStorageAdapter()
    grace_period = settings.deletion_grace_period

    scheduler = AccountDeletionScheduler(
        accounts, queue, clock=clock, grace_period=grace_period
    )
    executor = AccountDeletionExecutor(
        accounts,
        albums,
        assets,
        storage,
        StorageLocator(settings.media_location),
        clock=clock,
        grace_period=grace_period,
    )
    manager = AccountManager(accounts, hasher or BcryptPasswordHasher())

    logger.info(
        "account_service_built",
        extra={
            "persistence": settings.persistence,
            "media_location": settings.media_location,
            "grace_days": settings.deletion_grace_days,
        },
    )
    return AccountService(accounts, albums, storage, manager, scheduler, executor)
