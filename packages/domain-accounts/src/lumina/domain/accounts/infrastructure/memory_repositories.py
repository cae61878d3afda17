"""Dict-backed repositories for tests and ``ACCOUNTS_PERSISTENCE=memory``.

Records are copied on the way in and on the way out, so callers never
share mutable state with the store.
"""

from __future__ import annotations

import dataclasses
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any
from uuid import UUID, uuid4

from lumina.domain.accounts.account import utc_now
from lumina.foundation.domain.exceptions import ConflictError, NotFoundError

if TYPE_CHECKING:
    from collections.abc import Callable
    from datetime import datetime

    from lumina.domain.accounts.account import Account


class InMemoryAccountRepository:
    """``AccountRepositoryPort`` over a dict keyed by account id.

    Args:
        clock: Source of ``updated_at`` and ``deleted_at`` timestamps.
    """

    def __init__(self, clock: Callable[[], datetime] = utc_now) -> None:
        self._clock = clock
        self._accounts: dict[UUID, Account] = {}

    async def get(self, account_id: UUID, *, include_deleted: bool = False) -> Account | None:
        account = self._accounts.get(account_id)
        if account is None or (account.is_deleted and not include_deleted):
            return None
        return dataclasses.replace(account)

    async def get_by_email(self, email: str, *, include_deleted: bool = False) -> Account | None:
        return self._find(lambda a: a.email == email, include_deleted)

    async def get_by_storage_label(self, storage_label: str) -> Account | None:
        return self._find(lambda a: a.storage_label == storage_label, True)

    async def get_admin(self) -> Account | None:
        return self._find(lambda a: a.is_admin, False)

    async def list(self, *, include_deleted: bool = False) -> list[Account]:
        return [
            dataclasses.replace(a)
            for a in self._accounts.values()
            if include_deleted or not a.is_deleted
        ]

    async def list_soft_deleted(self) -> list[Account]:
        return [dataclasses.replace(a) for a in self._accounts.values() if a.is_deleted]

    async def create(self, account: Account) -> Account:
        if account.id in self._accounts:
            raise ConflictError("Account already exists", account_id=str(account.id))
        self._accounts[account.id] = dataclasses.replace(account)
        return dataclasses.replace(account)

    async def update(self, account_id: UUID, changes: dict[str, Any]) -> Account:
        return self._replace(account_id, **changes)

    async def soft_delete(self, account: Account) -> Account:
        return self._replace(account.id, deleted_at=self._clock())

    async def restore(self, account: Account) -> Account:
        return self._replace(account.id, deleted_at=None)

    async def hard_delete(self, account: Account) -> None:
        self._accounts.pop(account.id, None)

    def _find(self, predicate: Callable[[Account], bool], include_deleted: bool) -> Account | None:
        for account in self._accounts.values():
            if (include_deleted or not account.is_deleted) and predicate(account):
                return dataclasses.replace(account)
        return None

    def _replace(self, account_id: UUID, **changes: Any) -> Account:
        current = self._accounts.get(account_id)
        if current is None:
            raise NotFoundError("Account", account_id)
        updated = dataclasses.replace(current, updated_at=self._clock(), **changes)
        self._accounts[account_id] = updated
        return dataclasses.replace(updated)


@dataclass
class OwnedRecord:
    """An album or asset row: only ownership and deletion state matter here."""

    owner_id: UUID
    id: UUID = dataclasses.field(default_factory=uuid4)
    deleted_at: datetime | None = None


class InMemoryAccountScopedRepository:
    """``AccountScopedRepositoryPort`` over a dict of ``OwnedRecord``.

    Args:
        clock: Source of ``deleted_at`` timestamps.
    """

    def __init__(self, clock: Callable[[], datetime] = utc_now) -> None:
        self._clock = clock
        self._records: dict[UUID, OwnedRecord] = {}

    def add(self, owner_id: UUID) -> OwnedRecord:
        """Store a new record owned by ``owner_id``."""
        record = OwnedRecord(owner_id=owner_id)
        self._records[record.id] = record
        return record

    def owned_by(self, owner_id: UUID, *, include_deleted: bool = True) -> list[OwnedRecord]:
        return [
            r
            for r in self._records.values()
            if r.owner_id == owner_id and (include_deleted or r.deleted_at is None)
        ]

    async def soft_delete_all(self, account_id: UUID) -> int:
        now = self._clock()
        records = self.owned_by(account_id, include_deleted=False)
        for record in records:
            record.deleted_at = now
        return len(records)

    async def restore_all(self, account_id: UUID) -> int:
        records = [r for r in self.owned_by(account_id) if r.deleted_at is not None]
        for record in records:
            record.deleted_at = None
        return len(records)

    async def delete_all(self, account_id: UUID) -> int:
        records = self.owned_by(account_id)
        for record in records:
            del self._records[record.id]
        return len(records)


class InMemoryAlbumRepository(InMemoryAccountScopedRepository):
    """Albums owned by accounts."""


class InMemoryAssetRepository(InMemoryAccountScopedRepository):
    """Assets owned by accounts."""
