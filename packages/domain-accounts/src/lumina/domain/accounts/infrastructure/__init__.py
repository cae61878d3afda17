"""Lumina Accounts Infrastructure: repositories, storage and composition."""

from lumina.domain.accounts.infrastructure.composition import (
    build_account_service,
    build_repositories,
)
from lumina.domain.accounts.infrastructure.local_storage import LocalStorageAdapter
from lumina.domain.accounts.infrastructure.memory_repositories import (
    InMemoryAccountRepository,
    InMemoryAccountScopedRepository,
    InMemoryAlbumRepository,
    InMemoryAssetRepository,
    OwnedRecord,
)
from lumina.domain.accounts.infrastructure.sql_repositories import (
    SqlAccountRepository,
    SqlAlbumRepository,
    SqlAssetRepository,
    ensure_tables_exist,
)

__all__ = [
    "InMemoryAccountRepository",
    "InMemoryAccountScopedRepository",
    "InMemoryAlbumRepository",
    "InMemoryAssetRepository",
    "LocalStorageAdapter",
    "OwnedRecord",
    "SqlAccountRepository",
    "SqlAlbumRepository",
    "SqlAssetRepository",
    "build_account_service",
    "build_repositories",
    "ensure_tables_exist",
]
