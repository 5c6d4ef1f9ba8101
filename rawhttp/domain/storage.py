"""File storage collaborator used by the ``/files`` route."""

import logging
from pathlib import Path
from typing import Optional

from rawhttp.domain.connection_id import get_logger
from rawhttp.domain.errors import (
    FileCreateError,
    FileOpenError,
    FileReadError,
    FileWriteError,
)
from rawhttp.domain.sandbox import ForbiddenPath, resolve_storage_path

STORAGE_LOGGER = get_logger("domain.storage")


class FileStorage:
    """Whole-file read and write access to a directory tree.

    Every failure is reported as one of the ``FileStorageError`` subclasses so
    callers can map the failing step to a status code without inspecting
    ``OSError`` details. Concurrent readers and writers of the same name are
    not coordinated.
    """

    def __init__(self, root: Optional[str]) -> None:
        self.root = root

    def _resolve(self, name: str) -> Path:
        if self.root is None:
            raise ForbiddenPath(name)
        return resolve_storage_path(self.root, name)

    def read(self, name: str) -> bytes:
        """Return the full contents of ``name``."""
        try:
            path = self._resolve(name)
        except ForbiddenPath as exc:
            STORAGE_LOGGER.warning(
                "Rejected file name",
                extra={"event": "forbidden_path", "route": name},
            )
            raise FileOpenError(name) from exc

        try:
            handle = open(path, "rb")
        except OSError as exc:
            raise FileOpenError(name) from exc
        with handle:
            try:
                data = handle.read()
            except OSError as exc:
                raise FileReadError(name) from exc

        if STORAGE_LOGGER.logger.isEnabledFor(logging.DEBUG):
            STORAGE_LOGGER.debug(
                "File read complete",
                extra={"event": "file_read_complete", "bytes_out": len(data)},
            )
        return data

    def write(self, name: str, payload: bytes) -> None:
        """Create or truncate ``name`` and write ``payload`` to it."""
        try:
            path = self._resolve(name)
        except ForbiddenPath as exc:
            STORAGE_LOGGER.warning(
                "Rejected file name",
                extra={"event": "forbidden_path", "route": name},
            )
            raise FileCreateError(name) from exc

        try:
            handle = open(path, "wb")
        except OSError as exc:
            raise FileCreateError(name) from exc
        try:
            with handle:
                handle.write(payload)
        except OSError as exc:
            raise FileWriteError(name) from exc

        if STORAGE_LOGGER.logger.isEnabledFor(logging.DEBUG):
            STORAGE_LOGGER.debug(
                "File write complete",
                extra={"event": "file_write_complete", "bytes_in": len(payload)},
            )
