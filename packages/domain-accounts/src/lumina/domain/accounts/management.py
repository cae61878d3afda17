"""Account creation and update rules.

Ownership, administrator and uniqueness checks shared by the account
service. Every check runs before the repository is touched, so a
rejected request never leaves a partial write behind.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from lumina.domain.accounts.account import Account
from lumina.domain.accounts.value_objects import StorageLabel
from lumina.foundation.domain.exceptions import (
    AuthorizationError,
    ConflictError,
    ValidationError,
)

if TYPE_CHECKING:
    from uuid import UUID

    from lumina.domain.accounts.ports import AccountRepositoryPort
    from lumina.domain.accounts.schemas import CreateAccountCommand, UpdateAccountCommand
    from lumina.foundation.domain.ports import PasswordHasherPort
    from lumina.foundation.domain.principal import Principal

logger = logging.getLogger(__name__)

_ADMIN_ONLY_FIELDS = ("is_admin", "should_change_password")


def normalize_storage_label(value: str) -> str:
    """Lowercase-slug form of a storage label.

    Raises:
        ValidationError: If the label has no usable characters or is too long.
    """
    try:
        return StorageLabel(value).value
    except ValueError as exc:
        raise ValidationError("storage_label", str(exc)) from exc


class AccountManager:
    """Validate and apply account creation and updates.

    Args:
        accounts: Account repository.
        hasher: Password hasher for new and changed passwords.
    """

    def __init__(self, accounts: AccountRepositoryPort, hasher: PasswordHasherPort) -> None:
        self._accounts = accounts
        self._hasher = hasher

    async def create_account(self, cmd: CreateAccountCommand) -> Account:
        """Create a new account.

        Raises:
            ConflictError: Email already in use (including by a soft-deleted
                account), a second administrator, or a taken storage label.
            ValidationError: Storage label has no usable characters.
        """
        if await self._accounts.get_by_email(cmd.email, include_deleted=True) is not None:
            raise ConflictError("Email already in use", email=cmd.email)

        if cmd.is_admin and await self._accounts.get_admin() is not None:
            raise ConflictError("An administrator account already exists")

        storage_label = None
        if cmd.storage_label:
            storage_label = normalize_storage_label(cmd.storage_label)
            await self._ensure_label_free(storage_label, owner_id=None)

        account = Account(
            email=cmd.email,
            name=cmd.name,
            password_hash=self._hasher.hash_password(cmd.password),
            is_admin=cmd.is_admin,
            storage_label=storage_label,
            should_change_password=cmd.should_change_password,
        )
        created = await self._accounts.create(account)
        logger.info(
            "account_created",
            extra={"account_id": str(created.id), "is_admin": created.is_admin},
        )
        return created

    async def update_account(
        self,
        principal: Principal,
        account_id: UUID,
        cmd: UpdateAccountCommand,
    ) -> Account:
        """Apply the fields set on ``cmd`` to ``account_id``.

        Raises:
            AuthorizationError: A standard account editing another account or
                an administrator-only field.
            ConflictError: Email or storage label used by another account, or
                a second administrator.
        """
        changes: dict[str, Any] = cmd.changes()
        is_self = principal.owns(account_id)

        if not principal.is_admin:
            if not is_self:
                raise AuthorizationError(
                    "Only an administrator can update another account",
                    context={"account_id": str(account_id)},
                )
            for name in _ADMIN_ONLY_FIELDS:
                if name in changes:
                    raise AuthorizationError(
                        f"Only an administrator can change '{name}'",
                        context={"account_id": str(account_id), "field": name},
                    )

        if changes.get("is_admin"):
            admin = await self._accounts.get_admin()
            if admin is not None and admin.id != account_id:
                raise ConflictError("An administrator account already exists")

        email = changes.get("email")
        if email is not None:
            duplicate = await self._accounts.get_by_email(email, include_deleted=True)
            if duplicate is not None and duplicate.id != account_id:
                raise ConflictError("Email already in use", email=email)

        if "storage_label" in changes:
            label = changes["storage_label"]
            if not label:
                changes["storage_label"] = None
            else:
                label = normalize_storage_label(label)
                await self._ensure_label_free(label, owner_id=account_id)
                changes["storage_label"] = label

        password = changes.pop("password", None)
        if password is not None:
            changes["password_hash"] = self._hasher.hash_password(password)
            if is_self:
                changes["should_change_password"] = False

        updated = await self._accounts.update(account_id, changes)
        logger.info(
            "account_updated",
            extra={"account_id": str(account_id), "fields": sorted(changes)},
        )
        return updated

    async def reset_password(self, account: Account, password: str) -> Account:
        """Replace the account password."""
        return await self._accounts.update(
            account.id, {"password_hash": self._hasher.hash_password(password)}
        )

    async def _ensure_label_free(self, label: str, owner_id: UUID | None) -> None:
        existing = await self._accounts.get_by_storage_label(label)
        if existing is not None and existing.id != owner_id:
            raise ConflictError("Storage label already in use", storage_label=label)
