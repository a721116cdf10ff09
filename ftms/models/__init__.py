
from .file import FileListResponse, FileMetadata, FileRecord, FileSearchResult, ListFilter

__all__ = [
    "FileListResponse",
    "FileMetadata",
    "FileRecord",
    "FileSearchResult",
    "ListFilter",
]
