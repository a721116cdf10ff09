"""Date-partitioned local disk storage for uploaded file bytes."""

from __future__ import annotations

import asyncio
import logging
import uuid
from datetime import datetime
from pathlib import Path, PurePosixPath
from typing import Optional, Tuple

from ftms.core.config import Settings, settings as default_settings
from ftms.core.exceptions import FileNotFoundInStoreError, StorageError

logger = logging.getLogger(__name__)

FALLBACK_EXTENSION = "bin"


class FileStorage:
    """Persist raw upload bytes under `<base>/<YYYY>/<MM>/<DD>/<uuid>.<ext>`."""

    def __init__(self, base_dir: str | Path) -> None:
        self.base_dir = Path(base_dir).expanduser()

    @classmethod
    def from_settings(cls, settings: Optional[Settings] = None) -> "FileStorage":
        return cls((settings or default_settings).STORAGE_DIR)

    async def store(self, filename: str, content: bytes) -> Tuple[str, Path]:
        """Write `content` to a fresh path and return `(relative_path, absolute_path)`."""

        partition = datetime.now().strftime("%Y/%m/%d")
        stored_name = f"{uuid.uuid4()}.{self._extension(filename)}"
        relative_path = f"{partition}/{stored_name}"
        destination = self.base_dir / partition / stored_name

        def write() -> None:
            try:
                destination.parent.mkdir(parents=True, exist_ok=True)
            except OSError as exc:
                raise StorageError(
                    "storage_mkdir_failed",
                    "Failed to create date directory",
                    {"path": str(destination.parent), "reason": str(exc)},
                ) from exc
            try:
                # "x" refuses to replace an existing file
                with open(destination, "xb") as handle:
                    handle.write(content)
            except (OSError, ValueError) as exc:
                raise StorageError(
                    "storage_write_failed",
                    "Failed to write file",
                    {"path": relative_path, "reason": str(exc)},
                ) from exc

        await asyncio.to_thread(write)
        logger.debug("Stored %d bytes at %s", len(content), relative_path)
        return relative_path, destination

    async def read(self, relative_path: str) -> bytes:
        path = self.absolute_path(relative_path)

        def load() -> bytes:
            try:
                return path.read_bytes()
            except FileNotFoundError as exc:
                raise FileNotFoundInStoreError(
                    "storage_not_found", "Stored file not found", {"path": relative_path}
                ) from exc
            except OSError as exc:
                raise StorageError(
                    "storage_read_failed",
                    "Failed to read file",
                    {"path": relative_path, "reason": str(exc)},
                ) from exc

        return await asyncio.to_thread(load)

    async def delete(self, relative_path: str) -> None:
        """Remove a stored file; a missing file is not an error."""

        path = self.absolute_path(relative_path)

        def remove() -> None:
            try:
                path.unlink(missing_ok=True)
            except OSError as exc:
                raise StorageError(
                    "storage_delete_failed",
                    "Failed to delete file",
                    {"path": relative_path, "reason": str(exc)},
                ) from exc

        await asyncio.to_thread(remove)

    def absolute_path(self, relative_path: str) -> Path:
        """Join a stored relative path onto the base directory without touching disk."""

        parts = PurePosixPath(relative_path)
        if parts.is_absolute() or ".." in parts.parts:
            raise StorageError(
                "storage_invalid_path",
                "Stored paths must be relative to the storage directory",
                {"path": relative_path},
            )
        return self.base_dir.joinpath(*parts.parts)

    @staticmethod
    def _extension(filename: str) -> str:
        suffix = Path(filename).suffix.lstrip(".")
        return suffix or FALLBACK_EXTENSION
