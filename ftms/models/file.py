from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel, Field


class FileRecord(BaseModel):
    """A stored file with its metadata and derived content."""

    id: str
    filename: str
    mime_type: str
    file_path: str = Field(..., description="Path relative to the storage base directory")
    file_size: int = Field(..., ge=0)
    extracted_text: Optional[str] = None
    ai_description: Optional[str] = None
    session_id: Optional[str] = None
    channel: Optional[str] = None
    uploaded_at: str = Field(..., description="ISO 8601 timestamp with offset")
    tags: Optional[str] = None


class FileMetadata(BaseModel):
    """Caller-supplied tags carried into the created record."""

    session_id: Optional[str] = None
    channel: Optional[str] = None
    tags: Optional[str] = None


class FileSearchResult(BaseModel):
    file: FileRecord
    rank: float


class FileListResponse(BaseModel):
    files: List[FileRecord] = Field(default_factory=list)
    total: int
    offset: int
    limit: int


class ListFilter(BaseModel):
    """Optional list predicates; set fields are combined with AND."""

    session_id: Optional[str] = None
    mime_prefix: Optional[str] = None

    @property
    def is_empty(self) -> bool:
        return self.session_id is None and not self.mime_prefix
