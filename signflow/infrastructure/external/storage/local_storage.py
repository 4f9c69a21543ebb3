"""Local filesystem storage with path validation and atomic writes."""

from __future__ import annotations

import os
import tempfile
from pathlib import Path

import aiofiles
import aiofiles.os

from signflow.infrastructure.exceptions import (
    StorageDeleteError,
    StorageDownloadError,
    StorageNotFoundError,
    StoragePermissionError,
    StorageUploadError,
)


class LocalStorageService:
    """Local filesystem storage with atomic writes and path traversal protection.

    Paths are validated against storage_root. Writes use temp file + rename,
    so a reader never sees a partially written PDF and an overwrite either
    fully happens or leaves the previous file in place.
    """

    def __init__(self, storage_root: str) -> None:
        self.storage_root = Path(storage_root).resolve()
        self.storage_root.mkdir(parents=True, exist_ok=True, mode=0o750)

    def _get_full_path(self, storage_ref: str) -> Path:
        """Resolve and validate path under storage_root. Raises StoragePermissionError if traversal."""
        full_path = (self.storage_root / storage_ref).resolve()
        try:
            full_path.relative_to(self.storage_root)
        except ValueError as e:
            raise StoragePermissionError(storage_ref, "path_validation") from e
        return full_path

    async def read(self, storage_ref: str) -> bytes:
        """Return the full file content."""
        file_path = self._get_full_path(storage_ref)
        if not file_path.exists():
            raise StorageNotFoundError(storage_ref)
        try:
            async with aiofiles.open(file_path, "rb") as f:
                return await f.read()
        except OSError as e:
            raise StorageDownloadError(storage_ref, str(e)) from e

    async def write(self, storage_ref: str, data: bytes) -> None:
        """Create or replace the file atomically (temp file in the same dir + rename)."""
        target_path = self._get_full_path(storage_ref)
        try:
            target_path.parent.mkdir(parents=True, exist_ok=True, mode=0o750)
            temp_fd, temp_path = tempfile.mkstemp(
                dir=target_path.parent,
                prefix=".tmp_",
                suffix=target_path.suffix,
            )
            os.close(temp_fd)
            try:
                async with aiofiles.open(temp_path, "wb") as f:
                    await f.write(data)
                os.chmod(temp_path, 0o640)
                os.replace(temp_path, target_path)
            finally:
                if Path(temp_path).exists():
                    os.unlink(temp_path)
        except OSError as e:
            raise StorageUploadError(storage_ref, str(e)) from e

    async def delete(self, storage_ref: str) -> bool:
        """Delete the file and any now-empty parent directories. True if deleted."""
        file_path = self._get_full_path(storage_ref)
        if not file_path.exists():
            return False
        try:
            await aiofiles.os.remove(file_path)
        except OSError as e:
            raise StorageDeleteError(storage_ref, str(e)) from e
        parent = file_path.parent
        while parent != self.storage_root:
            try:
                if any(parent.iterdir()):
                    break
                parent.rmdir()
                parent = parent.parent
            except OSError:
                break
        return True

    async def exists(self, storage_ref: str) -> bool:
        """Return True if file exists."""
        try:
            return self._get_full_path(storage_ref).exists()
        except StoragePermissionError:
            return False
