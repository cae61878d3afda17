"""Account record for the media platform.

An account is either active (``deleted_at`` is None) or soft-deleted.
Soft-deleted accounts keep all of their data until the deletion
pipeline purges them after the grace period.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import StrEnum
from uuid import UUID, uuid4


def utc_now() -> datetime:
    """Current time as an aware UTC datetime."""
    return datetime.now(UTC)


class AccountRole(StrEnum):
    """Role flag carried by every account."""

    ADMIN = "admin"
    STANDARD = "standard"


@dataclass
class Account:
    """Account record as stored by the account repository.

    Attributes:
        email: Login email (unique across active and soft-deleted accounts).
        name: Display name.
        id: Opaque, immutable identifier.
        password_hash: Hashed password; never exposed outside the domain.
        is_admin: Administrator role flag.
        storage_label: Optional folder name for the library folder.
        profile_image_path: Path of the stored profile image, if any.
        oauth_id: External identity-provider subject, empty if none.
        should_change_password: Prompt the user to change password on login.
        created_at: Creation timestamp (UTC).
        updated_at: Last modification timestamp (UTC).
        deleted_at: Soft-delete timestamp; None while the account is active.
    """

    email: str
    name: str
    id: UUID = field(default_factory=uuid4)
    password_hash: str = field(default="", repr=False)
    is_admin: bool = False
    storage_label: str | None = None
    profile_image_path: str | None = None
    oauth_id: str = ""
    should_change_password: bool = True
    created_at: datetime = field(default_factory=utc_now)
    updated_at: datetime = field(default_factory=utc_now)
    deleted_at: datetime | None = None

    @property
    def is_deleted(self) -> bool:
        """True while the account is soft-deleted."""
        return self.deleted_at is not None

    @property
    def role(self) -> AccountRole:
        return AccountRole.ADMIN if self.is_admin else AccountRole.STANDARD
