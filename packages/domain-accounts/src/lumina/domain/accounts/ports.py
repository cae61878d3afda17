"""Port interfaces for the account repositories and the job queue.

Implementations live in ``lumina.domain.accounts.infrastructure``.
All ports are async; adapters that wrap blocking drivers run them in a
worker thread.
"""

from __future__ import annotations

from enum import StrEnum
from typing import TYPE_CHECKING, Any, Protocol, runtime_checkable

if TYPE_CHECKING:
    from uuid import UUID

    from lumina.domain.accounts.account import Account


class JobName(StrEnum):
    """Task names understood by the worker."""

    ACCOUNT_DELETION_CHECK = "account-deletion-check"
    ACCOUNT_DELETION = "account-deletion"


@runtime_checkable
class AccountRepositoryPort(Protocol):
    """Persistence of account records.

    Each method is atomic for the single account it touches. Lookups
    exclude soft-deleted accounts unless ``include_deleted`` is set.
    """

    async def get(self, account_id: UUID, *, include_deleted: bool = False) -> Account | None: ...

    async def get_by_email(self, email: str, *, include_deleted: bool = False) -> Account | None: ...

    async def get_by_storage_label(self, storage_label: str) -> Account | None: ...

    async def get_admin(self) -> Account | None: ...

    async def list(self, *, include_deleted: bool = False) -> list[Account]: ...

    async def list_soft_deleted(self) -> list[Account]: ...

    async def create(self, account: Account) -> Account: ...

    async def update(self, account_id: UUID, changes: dict[str, Any]) -> Account:
        """Apply ``changes`` and return the updated record.

        Raises:
            NotFoundError: If the account does not exist.
        """
        ...

    async def soft_delete(self, account: Account) -> Account: ...

    async def restore(self, account: Account) -> Account: ...

    async def hard_delete(self, account: Account) -> None:
        """Remove the record permanently. Deleting an absent record is a no-op."""
        ...


@runtime_checkable
class AccountScopedRepositoryPort(Protocol):
    """Cascade operations over resources owned by one account (albums, assets).

    Every method returns the number of rows affected and is idempotent:
    acting on an empty set succeeds with 0.
    """

    async def soft_delete_all(self, account_id: UUID) -> int: ...

    async def restore_all(self, account_id: UUID) -> int: ...

    async def delete_all(self, account_id: UUID) -> int: ...


@runtime_checkable
class JobQueuePort(Protocol):
    """Enqueue background jobs. Delivery is at-least-once."""

    async def enqueue(self, name: str, payload: dict[str, Any]) -> None: ...
