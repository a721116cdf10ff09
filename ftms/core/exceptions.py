"""Custom exception hierarchy for FTMS."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Optional


@dataclass(eq=False)
class FtmsError(Exception):
    """Base class for FTMS errors with structured payloads."""

    error_code: str
    message: str
    details: Optional[Dict[str, Any]] = None

    def __str__(self) -> str:
        base = f"[{self.error_code}] {self.message}"
        if self.details:
            return f"{base} :: {self.details}"
        return base


class StorageError(FtmsError):
    """Raised when file bytes cannot be written, read, or removed."""


class FileNotFoundInStoreError(StorageError):
    """Raised when a relative path does not resolve to a stored file."""


class FileIndexError(FtmsError):
    """Raised when the SQLite index fails to serve a request."""


class DuplicateRecordError(FileIndexError):
    """Raised when a record id already exists in the index."""


class SearchQueryError(FileIndexError):
    """Raised when the full-text engine rejects a query."""


class IngestError(FtmsError):
    """Raised when an upload fails; `details["step"]` names the failing step."""


__all__ = [
    "DuplicateRecordError",
    "FileIndexError",
    "FileNotFoundInStoreError",
    "FtmsError",
    "IngestError",
    "SearchQueryError",
    "StorageError",
]
