"""Text extraction for uploaded file bytes, keyed by MIME type."""

from __future__ import annotations

import io
import logging
from typing import Optional

from ftms.ingestion.mime import is_media_type, is_text_type

try:  # Optional dependency
    import pdfplumber
except ImportError:  # pragma: no cover - optional dependency
    pdfplumber = None

logger = logging.getLogger(__name__)

MAX_TEXT_BYTES = 100_000
PDF_PLACEHOLDER = "[PDF document: text extraction unavailable]"


class TextExtractor:
    """Turn raw bytes into plain text for the search index.

    Media types yield ``None`` (they get a description instead). Any other
    failure also degrades to ``None`` or, for PDFs, a placeholder note, so
    extraction never aborts an upload.
    """

    def __init__(self, max_bytes: int = MAX_TEXT_BYTES, enable_pdf: bool = True) -> None:
        self.max_bytes = max_bytes
        self.enable_pdf = enable_pdf

    def extract_text(self, content: bytes, mime_type: str, filename: str = "") -> Optional[str]:
        if is_text_type(mime_type):
            return self._normalize(content.decode("utf-8", errors="replace"))

        if mime_type == "application/pdf":
            return self._extract_pdf(content, filename)

        if is_media_type(mime_type):
            return None

        try:
            text = content.decode("utf-8")
        except UnicodeDecodeError:
            return None
        return self._normalize(text)

    def _extract_pdf(self, content: bytes, filename: str) -> Optional[str]:
        if not self.enable_pdf or pdfplumber is None:
            logger.warning("PDF extraction unavailable for %s; storing placeholder", filename)
            return PDF_PLACEHOLDER

        try:
            with pdfplumber.open(io.BytesIO(content)) as pdf:
                pages = [page.extract_text() or "" for page in pdf.pages]
        except Exception as exc:
            logger.warning("PDF text extraction failed for %s: %s", filename, exc)
            return PDF_PLACEHOLDER

        return self._normalize("\n\n".join(page.strip() for page in pages if page.strip()))

    def _normalize(self, text: str) -> Optional[str]:
        encoded = text.encode("utf-8", errors="replace")
        if len(encoded) > self.max_bytes:
            # a code point cut at the boundary is dropped
            text = encoded[: self.max_bytes].decode("utf-8", errors="ignore")
        if not text.strip():
            return None
        return text


_default_extractor = TextExtractor()


def extract_text(content: bytes, mime_type: str, filename: str = "") -> Optional[str]:
    return _default_extractor.extract_text(content, mime_type, filename)
