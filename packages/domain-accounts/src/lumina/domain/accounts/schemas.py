"""Pydantic models crossing the account service boundary.

Commands validate caller input; views are the outward representation of
an account and never carry credentials.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import TYPE_CHECKING
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, field_validator

from lumina.domain.accounts.value_objects import Email

if TYPE_CHECKING:
    from lumina.domain.accounts.account import Account


def _validate_email(value: str | None) -> str | None:
    if value is None:
        return None
    return Email(value).value


class AccountView(BaseModel):
    """Read model of an account, safe to hand to any caller."""

    model_config = ConfigDict(from_attributes=True, frozen=True)

    id: UUID
    email: str
    name: str
    is_admin: bool
    storage_label: str | None
    profile_image_path: str | None
    oauth_id: str
    should_change_password: bool
    created_at: datetime
    updated_at: datetime
    deleted_at: datetime | None

    @classmethod
    def from_account(cls, account: Account) -> AccountView:
        return cls.model_validate(account)


class ProfileImageView(BaseModel):
    """Result of storing a new profile image."""

    model_config = ConfigDict(frozen=True)

    account_id: UUID
    profile_image_path: str


class CreateAccountCommand(BaseModel):
    """Input for account creation."""

    email: str
    name: str = Field(min_length=1, max_length=255)
    password: str = Field(min_length=1, repr=False)
    is_admin: bool = False
    storage_label: str | None = None
    should_change_password: bool = True

    @field_validator("email")
    @classmethod
    def normalize_email(cls, v: str | None) -> str | None:
        return _validate_email(v)


class UpdateAccountCommand(BaseModel):
    """Partial update of an account.

    Only fields explicitly provided by the caller are applied; use
    ``changes()`` to read them. An empty ``storage_label`` clears the label.
    """

    id: UUID
    email: str | None = None
    name: str | None = Field(default=None, min_length=1, max_length=255)
    password: str | None = Field(default=None, min_length=1, repr=False)
    is_admin: bool | None = None
    storage_label: str | None = None
    should_change_password: bool | None = None

    @field_validator("email")
    @classmethod
    def normalize_email(cls, v: str | None) -> str | None:
        return _validate_email(v)

    def changes(self) -> dict[str, object]:
        """Fields the caller set to a value, excluding the target id.

        An explicit ``None`` means "leave unchanged", except for
        ``storage_label`` where it clears the label.
        """
        changes = self.model_dump(exclude_unset=True, exclude_none=True, exclude={"id"})
        if "storage_label" in self.model_fields_set:
            changes["storage_label"] = self.storage_label
        return changes


@dataclass(frozen=True, slots=True)
class AdminPasswordReset:
    """Outcome of an administrator password reset.

    Attributes:
        admin: The administrator account that was reset.
        password: The new plaintext password, shown to the operator once.
        provided: True if the operator supplied the password, False if generated.
    """

    admin: AccountView
    password: str
    provided: bool
