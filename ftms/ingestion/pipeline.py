"""Upload pipeline: store bytes, derive content, index the record."""

from __future__ import annotations

import asyncio
import logging
import uuid
from datetime import datetime, timezone
from typing import List, Optional, Tuple

from ftms.core.config import Settings, settings as default_settings
from ftms.core.exceptions import FtmsError, IngestError
from ftms.index.file_index import FileIndex
from ftms.ingestion.describe import Captioner, describe_media
from ftms.ingestion.mime import guess_mime_type
from ftms.ingestion.parsers import TextExtractor
from ftms.ingestion.storage import FileStorage
from ftms.models.file import FileListResponse, FileMetadata, FileRecord, FileSearchResult, ListFilter

logger = logging.getLogger(__name__)


class FtmsService:
    """Coordinates storage, content derivation, and indexing for uploads.

    The index owns its own lock; storage writes and derivation run outside
    it, so concurrent uploads only serialize on the index calls.
    """

    def __init__(
        self,
        storage: FileStorage,
        index: FileIndex,
        extractor: Optional[TextExtractor] = None,
        settings: Optional[Settings] = None,
    ) -> None:
        self.settings = settings or default_settings
        self.storage = storage
        self.index = index
        self.extractor = extractor or TextExtractor(
            max_bytes=self.settings.MAX_TEXT_BYTES,
            enable_pdf=self.settings.ENABLE_PDF_EXTRACTION,
        )

    @classmethod
    def from_settings(cls, settings: Optional[Settings] = None) -> "FtmsService":
        settings = settings or default_settings
        return cls(
            storage=FileStorage.from_settings(settings),
            index=FileIndex.from_settings(settings),
            settings=settings,
        )

    async def upload(self, filename: str, content: bytes, metadata: Optional[FileMetadata] = None) -> FileRecord:
        metadata = metadata or FileMetadata()
        file_id = str(uuid.uuid4())
        mime_type = guess_mime_type(filename)

        # 1. Persist raw bytes
        try:
            relative_path, _ = await self.storage.store(filename, content)
        except FtmsError as exc:
            logger.error("Unable to store upload %s: %s", filename, exc)
            raise IngestError(
                "ingest_failed", "Upload failed while storing file", {"step": "store", "filename": filename}
            ) from exc

        # 2. Derive searchable content
        extracted_text, ai_description = await asyncio.to_thread(self._derive, content, mime_type, filename)

        record = FileRecord(
            id=file_id,
            filename=filename,
            mime_type=mime_type,
            file_path=relative_path,
            file_size=len(content),
            extracted_text=extracted_text,
            ai_description=ai_description,
            session_id=metadata.session_id,
            channel=metadata.channel,
            uploaded_at=datetime.now(timezone.utc).isoformat(),
            tags=metadata.tags,
        )

        # 3. Index
        try:
            await asyncio.to_thread(self.index.insert, record)
        except FtmsError as exc:
            logger.error("Unable to index upload %s (%s): %s", filename, file_id, exc)
            if self.settings.CLEANUP_ON_INDEX_FAILURE:
                await self._discard_orphan(relative_path)
            raise IngestError(
                "ingest_failed",
                "Upload failed while indexing file",
                {"step": "index", "filename": filename, "id": file_id},
            ) from exc

        logger.info(
            "Ingested %s as %s",
            filename,
            file_id,
            extra={"file_id": file_id, "mime_type": mime_type, "file_size": record.file_size},
        )
        return record

    async def get(self, file_id: str) -> Optional[FileRecord]:
        return await asyncio.to_thread(self.index.get, file_id)

    async def list(
        self,
        offset: int = 0,
        limit: Optional[int] = None,
        session_id: Optional[str] = None,
        mime_prefix: Optional[str] = None,
    ) -> FileListResponse:
        limit = self._clamp_limit(limit, self.settings.DEFAULT_LIST_LIMIT)
        list_filter = ListFilter(session_id=session_id, mime_prefix=mime_prefix)
        return await asyncio.to_thread(self.index.list, offset, limit, list_filter)

    async def search(self, query: str, limit: Optional[int] = None) -> List[FileSearchResult]:
        if not query.strip():
            return []
        limit = self._clamp_limit(limit, self.settings.DEFAULT_SEARCH_LIMIT)
        return await asyncio.to_thread(self.index.search, query, limit)

    async def read_bytes(self, relative_path: str) -> bytes:
        return await self.storage.read(relative_path)

    async def update_content(self, file_id: str, text: Optional[str], description: Optional[str]) -> bool:
        return await asyncio.to_thread(self.index.update_content, file_id, text, description)

    async def delete(self, file_id: str) -> bool:
        """Drop the index row first, then the stored bytes."""

        record = await asyncio.to_thread(self.index.delete, file_id)
        if record is None:
            return False
        await self.storage.delete(record.file_path)
        logger.info("Deleted %s (%s)", record.filename, file_id)
        return True

    async def enrich(self, file_id: str, captioner: Captioner) -> Optional[FileRecord]:
        """Replace a record's description with the captioner's output.

        Returns the refreshed record, or ``None`` when `file_id` is unknown.
        A failing or empty caption leaves the record untouched.
        """

        record = await self.get(file_id)
        if record is None:
            return None

        content = await self.read_bytes(record.file_path)
        try:
            description = await captioner(content, record.mime_type, record.filename)
        except Exception as exc:
            logger.warning("Captioning failed for %s: %s", file_id, exc, extra={"file_id": file_id})
            return record

        if not description or not description.strip():
            return record

        # only the description is written; text updated while captioning stays
        await asyncio.to_thread(self.index.update_description, file_id, description)
        return await self.get(file_id)

    def close(self) -> None:
        self.index.close()

    def _derive(self, content: bytes, mime_type: str, filename: str) -> Tuple[Optional[str], Optional[str]]:
        try:
            extracted_text = self.extractor.extract_text(content, mime_type, filename)
        except Exception as exc:
            logger.warning("Text extraction failed for %s: %s", filename, exc)
            extracted_text = None
        try:
            ai_description = describe_media(content, mime_type, filename)
        except Exception as exc:
            logger.warning("Media description failed for %s: %s", filename, exc)
            ai_description = None
        return extracted_text, ai_description

    async def _discard_orphan(self, relative_path: str) -> None:
        try:
            await self.storage.delete(relative_path)
        except FtmsError as exc:
            logger.error("Failed to remove orphaned file %s: %s", relative_path, exc)

    def _clamp_limit(self, limit: Optional[int], default: int) -> int:
        if limit is None:
            return default
        if limit < 0:
            raise ValueError("limit must be non-negative")
        return min(limit, self.settings.MAX_PAGE_SIZE)
