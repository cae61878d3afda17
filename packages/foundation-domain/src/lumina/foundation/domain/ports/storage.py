"""Port interface for binary storage.

Defines the StoragePort protocol the account pipeline uses to remove
per-account folders and stream stored files, without coupling to a
specific filesystem or object store.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import IO, Protocol, runtime_checkable


@dataclass(frozen=True, slots=True)
class ReadStream:
    """Open binary stream plus the metadata needed to serve it.

    Attributes:
        stream: Binary file-like object positioned at the start.
        content_type: MIME type of the content.
        length: Size in bytes, or None if unknown.
    """

    stream: IO[bytes]
    content_type: str
    length: int | None = None


@runtime_checkable
class StoragePort(Protocol):
    """Port for binary storage operations.

    Implementations must make ``remove_dir`` idempotent: removing a path
    that does not exist succeeds silently. Genuine I/O failures
    (permission denied, device errors) must propagate.
    """

    async def remove_dir(self, path: str) -> None:
        """Remove ``path`` recursively, ignoring a missing path.

        Args:
            path: Directory (or object prefix) to remove.

        Raises:
            OSError: On any failure other than the path being absent.
        """
        ...

    async def create_read_stream(self, path: str, content_type: str) -> ReadStream:
        """Open ``path`` for reading.

        Args:
            path: File to open.
            content_type: MIME type to report to the caller.

        Returns:
            ReadStream wrapping the open file.
        """
        ...
