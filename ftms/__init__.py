"""FTMS: file storage, content extraction, and full-text search indexing."""

from ftms.index.file_index import FileIndex
from ftms.ingestion.pipeline import FtmsService
from ftms.ingestion.storage import FileStorage
from ftms.models import FileListResponse, FileMetadata, FileRecord, FileSearchResult, ListFilter

__version__ = "0.1.0"

__all__ = [
    "FileIndex",
    "FileListResponse",
    "FileMetadata",
    "FileRecord",
    "FileSearchResult",
    "FileStorage",
    "FtmsService",
    "ListFilter",
]
