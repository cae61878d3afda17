"""Deterministic storage locations for per-account media.

Every account owns one folder in each of five categories. Paths are
computed on demand from the media root, the category and the account
identifier; nothing here touches the filesystem.
"""

from __future__ import annotations

import os
from enum import StrEnum
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from uuid import UUID

    from lumina.domain.accounts.account import Account


class StorageFolder(StrEnum):
    """Storage categories; values are the folder names under the media root."""

    LIBRARY = "library"
    UPLOAD = "upload"
    PROFILE = "profile"
    THUMBNAILS = "thumbs"
    ENCODED_VIDEO = "encoded-video"


class StorageLocator:
    """Map (account, category) to a folder path.

    Args:
        media_location: Root folder of all media.

    Example:
        >>> locator = StorageLocator("/data")
        >>> locator.get_folder(StorageFolder.UPLOAD, "abc")
        '/data/upload/abc'
    """

    def __init__(self, media_location: str) -> None:
        self._media_location = media_location

    @property
    def media_location(self) -> str:
        return self._media_location

    def get_folder(self, folder: StorageFolder, account_id: UUID | str) -> str:
        return os.path.join(self._media_location, folder.value, str(account_id))

    def get_library_folder(self, account: Account) -> str:
        """Library folder, keyed by storage label when the account has one."""
        return os.path.join(
            self._media_location,
            StorageFolder.LIBRARY.value,
            account.storage_label or str(account.id),
        )

    def get_account_folders(self, account: Account) -> list[str]:
        """All five folders of an account, library first."""
        return [
            self.get_library_folder(account),
            self.get_folder(StorageFolder.UPLOAD, account.id),
            self.get_folder(StorageFolder.PROFILE, account.id),
            self.get_folder(StorageFolder.THUMBNAILS, account.id),
            self.get_folder(StorageFolder.ENCODED_VIDEO, account.id),
        ]
