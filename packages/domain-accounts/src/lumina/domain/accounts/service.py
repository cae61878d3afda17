"""Account Service façade.

Account CRUD, restore, profile images and administrator password reset
for external callers, plus the two entry points of the deferred deletion
pipeline. The façade only ever soft-deletes; permanent removal is the
job of ``AccountDeletionExecutor``.
"""

from __future__ import annotations

import base64
import logging
import re
import secrets
from typing import TYPE_CHECKING

from lumina.domain.accounts.schemas import AccountView, AdminPasswordReset, ProfileImageView
from lumina.foundation.domain.exceptions import (
    AuthorizationError,
    InvariantViolationError,
    NotFoundError,
)

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable
    from uuid import UUID

    from lumina.domain.accounts.account import Account
    from lumina.domain.accounts.deletion import (
        AccountDeletionExecutor,
        AccountDeletionScheduler,
        DeletionResult,
    )
    from lumina.domain.accounts.management import AccountManager
    from lumina.domain.accounts.ports import AccountRepositoryPort, AccountScopedRepositoryPort
    from lumina.domain.accounts.schemas import CreateAccountCommand, UpdateAccountCommand
    from lumina.foundation.domain.ports import ReadStream, StoragePort
    from lumina.foundation.domain.principal import Principal

logger = logging.getLogger(__name__)

PROFILE_IMAGE_CONTENT_TYPE = "image/jpeg"

_NON_WORD = re.compile(r"\W")


def generate_password() -> str:
    """Random fallback password: 24 random bytes, base64 without symbols."""
    return _NON_WORD.sub("", base64.b64encode(secrets.token_bytes(24)).decode("ascii"))


def _require_admin(principal: Principal, action: str) -> None:
    if not principal.is_admin:
        raise AuthorizationError(
            f"Administrator role required to {action}",
            context={"account_id": str(principal.account_id)},
        )


class AccountService:
    """Entry point for account operations.

    Collaborators are passed in explicitly; see
    ``lumina.domain.accounts.infrastructure.composition`` for the wiring.

    Args:
        accounts: Account repository.
        albums: Album repository, for cascade soft-delete and restore.
        storage: Storage backend for profile images.
        manager: Creation and update rules.
        scheduler: Deletion sweep.
        executor: Deletion job handler.
    """

    def __init__(
        self,
        accounts: AccountRepositoryPort,
        albums: AccountScopedRepositoryPort,
        storage: StoragePort,
        manager: AccountManager,
        scheduler: AccountDeletionScheduler,
        executor: AccountDeletionExecutor,
    ) -> None:
        self._accounts = accounts
        self._albums = albums
        self._storage = storage
        self._manager = manager
        self._scheduler = scheduler
        self._executor = executor

    # -- Queries --

    async def list_accounts(self, *, include_deleted: bool = False) -> list[AccountView]:
        accounts = await self._accounts.list(include_deleted=include_deleted)
        return [AccountView.from_account(a) for a in accounts]

    async def get_account(self, account_id: UUID) -> AccountView:
        """Get an active account.

        Raises:
            NotFoundError: If the account is absent or soft-deleted.
        """
        return AccountView.from_account(await self._find(account_id))

    async def get_me(self, principal: Principal) -> AccountView:
        return await self.get_account(principal.account_id)

    # -- Commands --

    async def create_account(self, cmd: CreateAccountCommand) -> AccountView:
        return AccountView.from_account(await self._manager.create_account(cmd))

    async def update_account(
        self, principal: Principal, cmd: UpdateAccountCommand
    ) -> AccountView:
        """Update an active account.

        Raises:
            NotFoundError: If the target is absent or soft-deleted.
            AuthorizationError: See ``AccountManager.update_account``.
            ConflictError: See ``AccountManager.update_account``.
        """
        await self._find(cmd.id)
        updated = await self._manager.update_account(principal, cmd.id, cmd)
        return AccountView.from_account(updated)

    async def delete_account(self, principal: Principal, account_id: UUID) -> AccountView:
        """Soft-delete an account and its albums.

        The account stays recoverable for the grace period, after which
        the deletion sweep picks it up.

        Returns:
            The account as it was before deletion.

        Raises:
            AuthorizationError: If the caller is not an administrator.
            NotFoundError: If the account is absent or already soft-deleted.
            InvariantViolationError: If the target is an administrator.
        """
        _require_admin(principal, "delete an account")
        account = await self._find(account_id)
        if account.is_admin:
            raise InvariantViolationError(
                "Cannot delete admin account",
                invariant="admin_not_deletable",
                account_id=str(account_id),
            )

        before = AccountView.from_account(account)
        albums = await self._albums.soft_delete_all(account.id)
        await self._accounts.soft_delete(account)
        logger.info(
            "account_soft_deleted",
            extra={
                "account_id": str(account_id),
                "albums_soft_deleted": albums,
                "actor_id": str(principal.account_id),
            },
        )
        return before

    async def restore_account(self, principal: Principal, account_id: UUID) -> AccountView:
        """Restore a soft-deleted account and its albums.

        Raises:
            AuthorizationError: If the caller is not an administrator.
            NotFoundError: If no record exists for ``account_id``.
        """
        _require_admin(principal, "restore an account")
        account = await self._find(account_id, include_deleted=True)
        restored = await self._accounts.restore(account)
        albums = await self._albums.restore_all(account.id)
        logger.info(
            "account_restored",
            extra={"account_id": str(account_id), "albums_restored": albums},
        )
        return AccountView.from_account(restored)

    async def create_profile_image(self, principal: Principal, path: str) -> ProfileImageView:
        """Point the caller's profile image at an already stored file."""
        updated = await self._accounts.update(
            principal.account_id, {"profile_image_path": path}
        )
        return ProfileImageView(account_id=updated.id, profile_image_path=path)

    async def get_profile_image(self, account_id: UUID) -> ReadStream:
        """Open the account's profile image.

        Raises:
            NotFoundError: If the account is absent or has no profile image.
        """
        account = await self._find(account_id)
        if not account.profile_image_path:
            raise NotFoundError("ProfileImage", account_id)
        return await self._storage.create_read_stream(
            account.profile_image_path, PROFILE_IMAGE_CONTENT_TYPE
        )

    async def reset_admin_password(
        self, ask: Callable[[AccountView], Awaitable[str | None]]
    ) -> AdminPasswordReset:
        """Reset the administrator password.

        Args:
            ask: Called with the administrator; returns the new password, or
                None (or empty) to have one generated.

        Raises:
            NotFoundError: If there is no administrator account.
        """
        admin = await self._accounts.get_admin()
        if admin is None:
            raise NotFoundError("Account", "admin")

        admin_view = AccountView.from_account(admin)
        provided = await ask(admin_view)
        password = provided or generate_password()
        await self._manager.reset_password(admin, password)
        logger.info(
            "admin_password_reset",
            extra={"account_id": str(admin.id), "provided": bool(provided)},
        )
        return AdminPasswordReset(admin=admin_view, password=password, provided=bool(provided))

    # -- Deletion pipeline --

    async def handle_deletion_check(self) -> bool:
        """Run one deletion sweep; see ``AccountDeletionScheduler.sweep``."""
        return await self._scheduler.sweep()

    async def handle_deletion(self, account_id: UUID) -> DeletionResult:
        """Handle one deletion job; see ``AccountDeletionExecutor.execute``."""
        return await self._executor.execute(account_id)

    async def _find(self, account_id: UUID, *, include_deleted: bool = False) -> Account:
        account = await self._accounts.get(account_id, include_deleted=include_deleted)
        if account is None:
            raise NotFoundError("Account", account_id)
        return account
