"""Local filesystem implementation of ``StoragePort``."""

from __future__ import annotations

import asyncio
import logging
import os
import shutil
from functools import partial

from lumina.foundation.domain.exceptions import NotFoundError
from lumina.foundation.domain.ports import ReadStream

logger = logging.getLogger(__name__)


class LocalStorageAdapter:
    """Media storage on a local or mounted filesystem.

    Blocking filesystem calls run in a worker thread.
    """

    async def remove_dir(self, path: str) -> None:
        """Remove ``path`` and everything below it.

        A missing path is ignored. Any other ``OSError`` propagates.
        """
        await asyncio.to_thread(partial(self._remove_sync, path))

    async def create_read_stream(self, path: str, content_type: str) -> ReadStream:
        """Open ``path`` for binary reading.

        Raises:
            NotFoundError: If the file does not exist.
        """
        return await asyncio.to_thread(partial(self._open_sync, path, content_type))

    def _remove_sync(self, path: str) -> None:
        try:
            if os.path.isdir(path) and not os.path.islink(path):
                shutil.rmtree(path)
            else:
                os.remove(path)
        except FileNotFoundError:
            logger.debug("storage_path_missing", extra={"path": path})

    def _open_sync(self, path: str, content_type: str) -> ReadStream:
        try:
            stream = open(path, "rb")  # noqa: SIM115
        except FileNotFoundError as exc:
            raise NotFoundError("File", path) from exc
        length = os.fstat(stream.fileno()).st_size
        return ReadStream(stream=stream, content_type=content_type, length=length)
