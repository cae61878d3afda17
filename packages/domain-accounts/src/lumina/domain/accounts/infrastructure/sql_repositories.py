"""PostgreSQL repositories for accounts, albums and assets.

Statements are plain SQLAlchemy ``text()`` against a sync session
factory. Async port methods run the sync implementation in a worker
thread via ``asyncio.to_thread``. Every method opens its own session
and commits before returning, so each call is atomic for the rows it
touches.
"""

from __future__ import annotations

import asyncio
import logging
from functools import partial
from typing import TYPE_CHECKING, Any
from uuid import UUID

from sqlalchemy import text

from lumina.domain.accounts.account import Account
from lumina.foundation.domain.exceptions import NotFoundError

if TYPE_CHECKING:
    from collections.abc import Callable, Mapping

    from sqlalchemy.orm import Session

logger = logging.getLogger(__name__)

_ACCOUNT_COLUMNS = (
    "id, email, name, password_hash, is_admin, storage_label, profile_image_path, "
    "oauth_id, should_change_password, created_at, updated_at, deleted_at"
)

# Columns ``update`` may set; anything else is rejected.
_UPDATABLE_COLUMNS = frozenset(
    {
        "email",
        "name",
        "password_hash",
        "is_admin",
        "storage_label",
        "profile_image_path",
        "oauth_id",
        "should_change_password",
    }
)

_CREATE_ACCOUNTS_SQL = """
CREATE TABLE IF NOT EXISTS accounts (
    id UUID PRIMARY KEY,
    email VARCHAR(255) NOT NULL UNIQUE,
    name VARCHAR(255) NOT NULL,
    password_hash VARCHAR(255) NOT NULL DEFAULT '',
    is_admin BOOLEAN NOT NULL DEFAULT FALSE,
    storage_label VARCHAR(63) UNIQUE,
    profile_image_path TEXT,
    oauth_id VARCHAR(255) NOT NULL DEFAULT '',
    should_change_password BOOLEAN NOT NULL DEFAULT TRUE,
    created_at TIMESTAMP WITH TIME ZONE NOT NULL DEFAULT NOW(),
    updated_at TIMESTAMP WITH TIME ZONE NOT NULL DEFAULT NOW(),
    deleted_at TIMESTAMP WITH TIME ZONE
);

CREATE INDEX IF NOT EXISTS idx_accounts_deleted_at
    ON accounts (deleted_at)
    WHERE deleted_at IS NOT NULL;
"""

_CREATE_OWNED_TABLE_SQL = """
CREATE TABLE IF NOT EXISTS {table} (
    id UUID PRIMARY KEY,
    owner_id UUID NOT NULL REFERENCES accounts (id),
    created_at TIMESTAMP WITH TIME ZONE NOT NULL DEFAULT NOW(),
    deleted_at TIMESTAMP WITH TIME ZONE
);

CREATE INDEX IF NOT EXISTS idx_{table}_owner ON {table} (owner_id);
"""


def _row_to_account(row: Mapping[str, Any]) -> Account:
    return Account(
        id=row["id"] if isinstance(row["id"], UUID) else UUID(str(row["id"])),
        email=str(row["email"]),
        name=str(row["name"]),
        password_hash=str(row["password_hash"]),
        is_admin=bool(row["is_admin"]),
        storage_label=row["storage_label"],
        profile_image_path=row["profile_image_path"],
        oauth_id=str(row["oauth_id"] or ""),
        should_change_password=bool(row["should_change_password"]),
        created_at=row["created_at"],
        updated_at=row["updated_at"],
        deleted_at=row["deleted_at"],
    )


class SqlAccountRepository:
    """``AccountRepositoryPort`` backed by the ``accounts`` table.

    Args:
        session_factory: Callable returning a SQLAlchemy Session context manager.
    """

    def __init__(self, session_factory: Callable[[], Session]) -> None:
        self._session_factory = session_factory

    # -- Async port methods --

    async def get(self, account_id: UUID, *, include_deleted: bool = False) -> Account | None:
        return await asyncio.to_thread(partial(self._get_sync, account_id, include_deleted))

    async def get_by_email(self, email: str, *, include_deleted: bool = False) -> Account | None:
        return await asyncio.to_thread(
            partial(self._fetch_one_sync, "email = :email", {"email": email}, include_deleted)
        )

    async def get_by_storage_label(self, storage_label: str) -> Account | None:
        return await asyncio.to_thread(
            partial(
                self._fetch_one_sync,
                "storage_label = :storage_label",
                {"storage_label": storage_label},
                True,
            )
        )

    async def get_admin(self) -> Account | None:
        return await asyncio.to_thread(
            partial(self._fetch_one_sync, "is_admin = TRUE", {}, False)
        )

    async def list(self, *, include_deleted: bool = False) -> list[Account]:
        where = "TRUE" if include_deleted else "deleted_at IS NULL"
        return await asyncio.to_thread(partial(self._fetch_all_sync, where))

    async def list_soft_deleted(self) -> list[Account]:
        return await asyncio.to_thread(partial(self._fetch_all_sync, "deleted_at IS NOT NULL"))

    async def create(self, account: Account) -> Account:
        return await asyncio.to_thread(partial(self._create_sync, account))

    async def update(self, account_id: UUID, changes: dict[str, Any]) -> Account:
        return await asyncio.to_thread(partial(self._update_sync, account_id, changes))

    async def soft_delete(self, account: Account) -> Account:
        return await asyncio.to_thread(
            partial(self._set_deleted_at_sync, account.id, "NOW()")
        )

    async def restore(self, account: Account) -> Account:
        return await asyncio.to_thread(partial(self._set_deleted_at_sync, account.id, "NULL"))

    async def hard_delete(self, account: Account) -> None:
        await asyncio.to_thread(partial(self._hard_delete_sync, account.id))

    # -- Sync implementations --

    def _get_sync(self, account_id: UUID, include_deleted: bool) -> Account | None:
        return self._fetch_one_sync("id = :id", {"id": str(account_id)}, include_deleted)

    def _fetch_one_sync(
        self, where: str, params: dict[str, Any], include_deleted: bool
    ) -> Account | None:
        if not include_deleted:
            where = f"{where} AND deleted_at IS NULL"
        with self._session_factory() as session:
            result = session.execute(
                text(f"SELECT {_ACCOUNT_COLUMNS} FROM accounts WHERE {where} LIMIT 1"),  # noqa: S608
                params,
            )
            row = result.mappings().fetchone()
            return _row_to_account(row) if row is not None else None

    def _fetch_all_sync(self, where: str) -> list[Account]:
        with self._session_factory() as session:
            result = session.execute(
                text(
                    f"SELECT {_ACCOUNT_COLUMNS} FROM accounts "  # noqa: S608
                    f"WHERE {where} ORDER BY created_at"
                )
            )
            return [_row_to_account(row) for row in result.mappings().fetchall()]

    def _create_sync(self, account: Account) -> Account:
        with self._session_factory() as session:
            result = session.execute(
                text(f"""
                    INSERT INTO accounts
                        (id, email, name, password_hash, is_admin, storage_label,
                         profile_image_path, oauth_id, should_change_password,
                         created_at, updated_at)
                    VALUES
                        (:id, :email, :name, :password_hash, :is_admin, :storage_label,
                         :profile_image_path, :oauth_id, :should_change_password,
                         :created_at, :updated_at)
                    RETURNING {_ACCOUNT_COLUMNS}
                """),  # noqa: S608
                {
                    "id": str(account.id),
                    "email": account.email,
                    "name": account.name,
                    "password_hash": account.password_hash,
                    "is_admin": account.is_admin,
                    "storage_label": account.storage_label,
                    "profile_image_path": account.profile_image_path,
                    "oauth_id": account.oauth_id,
                    "should_change_password": account.should_change_password,
                    "created_at": account.created_at,
                    "updated_at": account.updated_at,
                },
            )
            row = result.mappings().fetchone()
            session.commit()
            return _row_to_account(row)

    def _update_sync(self, account_id: UUID, changes: dict[str, Any]) -> Account:
        unknown = set(changes) - _UPDATABLE_COLUMNS
        if unknown:
            msg = f"Cannot update account columns: {sorted(unknown)}"
            raise ValueError(msg)

        assignments = [f"{column} = :{column}" for column in sorted(changes)]
        assignments.append("updated_at = NOW()")
        with self._session_factory() as session:
            result = session.execute(
                text(
                    f"UPDATE accounts SET {', '.join(assignments)} "  # noqa: S608
                    f"WHERE id = :id RETURNING {_ACCOUNT_COLUMNS}"
                ),
                {**changes, "id": str(account_id)},
            )
            row = result.mappings().fetchone()
            if row is None:
                raise NotFoundError("Account", account_id)
            session.commit()
            return _row_to_account(row)

    def _set_deleted_at_sync(self, account_id: UUID, value: str) -> Account:
        with self._session_factory() as session:
            result = session.execute(
                text(
                    f"UPDATE accounts SET deleted_at = {value}, updated_at = NOW() "  # noqa: S608
                    f"WHERE id = :id RETURNING {_ACCOUNT_COLUMNS}"
                ),
                {"id": str(account_id)},
            )
            row = result.mappings().fetchone()
            if row is None:
                raise NotFoundError("Account", account_id)
            session.commit()
            return _row_to_account(row)

    def _hard_delete_sync(self, account_id: UUID) -> None:
        with self._session_factory() as session:
            result = session.execute(
                text("DELETE FROM accounts WHERE id = :id"),
                {"id": str(account_id)},
            )
            session.commit()
            logger.debug(
                "account_row_deleted",
                extra={"account_id": str(account_id), "rows": result.rowcount},
            )

    @classmethod
    def ensure_table_exists(cls, session_factory: Callable[[], Session]) -> None:
        """Create the accounts table if it does not exist."""
        with session_factory() as session:
            session.execute(text(_CREATE_ACCOUNTS_SQL))
            session.commit()


class _AccountScopedRepository:
    """Cascade soft-delete, restore and hard-delete over one owned table.

    Each statement filters on ``owner_id`` only, so acting on an empty
    set affects 0 rows and succeeds.
    """

    table: str

    def __init__(self, session_factory: Callable[[], Session]) -> None:
        self._session_factory = session_factory

    async def soft_delete_all(self, account_id: UUID) -> int:
        return await asyncio.to_thread(
            partial(
                self._execute_sync,
                f"UPDATE {self.table} SET deleted_at = NOW() "  # noqa: S608
                "WHERE owner_id = :account_id AND deleted_at IS NULL",
                account_id,
            )
        )

    async def restore_all(self, account_id: UUID) -> int:
        return await asyncio.to_thread(
            partial(
                self._execute_sync,
                f"UPDATE {self.table} SET deleted_at = NULL "  # noqa: S608
                "WHERE owner_id = :account_id AND deleted_at IS NOT NULL",
                account_id,
            )
        )

    async def delete_all(self, account_id: UUID) -> int:
        return await asyncio.to_thread(
            partial(
                self._execute_sync,
                f"DELETE FROM {self.table} WHERE owner_id = :account_id",  # noqa: S608
                account_id,
            )
        )

    def _execute_sync(self, statement: str, account_id: UUID) -> int:
        with self._session_factory() as session:
            result = session.execute(text(statement), {"account_id": str(account_id)})
            session.commit()
            return int(result.rowcount or 0)

    @classmethod
    def ensure_table_exists(cls, session_factory: Callable[[], Session]) -> None:
        """Create the owned table if it does not exist. Requires ``accounts``."""
        with session_factory() as session:
            session.execute(text(_CREATE_OWNED_TABLE_SQL.format(table=cls.table)))
            session.commit()


class SqlAlbumRepository(_AccountScopedRepository):
    """Album cascades over the ``albums`` table."""

    table = "albums"


class SqlAssetRepository(_AccountScopedRepository):
    """Asset cascades over the ``assets`` table."""

    table = "assets"


def ensure_tables_exist(session_factory: Callable[[], Session]) -> None:
    """Create every account-related table, parents first."""
    SqlAccountRepository.ensure_table_exists(session_factory)
    SqlAlbumRepository.ensure_table_exists(session_factory)
    SqlAssetRepository.ensure_table_exists(session_factory)
    logger.info("account_tables_ensured")
