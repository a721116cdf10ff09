import logging

import pytest

from ftms.ingestion import parsers
from ftms.ingestion.parsers import MAX_TEXT_BYTES, PDF_PLACEHOLDER, TextExtractor, extract_text

TEXT_TYPES = [
    "text/plain",
    "text/markdown",
    "text/csv",
    "text/html",
    "text/xml",
    "application/json",
    "application/xml",
]


@pytest.mark.parametrize("mime_type", TEXT_TYPES)
def test_text_types_are_decoded_verbatim(mime_type):
    content = "<b>héllo</b>, {\"a\": 1}\n".encode("utf-8")
    assert extract_text(content, mime_type) == content.decode("utf-8")


@pytest.mark.parametrize("mime_type", TEXT_TYPES)
def test_text_over_cap_is_truncated_to_cap(mime_type):
    content = b"abcdefghij" * 20_001
    text = extract_text(content, mime_type)
    assert MAX_TEXT_BYTES == 100_000
    assert text == content[:MAX_TEXT_BYTES].decode("ascii")


def test_truncation_drops_split_code_point():
    extractor = TextExtractor(max_bytes=5)
    # "é" is two bytes; the cap falls inside the third one
    assert extractor.extract_text("ééé".encode("utf-8"), "text/plain") == "éé"


def test_invalid_utf8_in_text_type_is_replaced():
    assert extract_text(b"ok \xff\xfe done", "text/plain") == "ok \ufffd\ufffd done"


@pytest.mark.parametrize("content", [b"", b"   ", b"\n\t \r\n"])
@pytest.mark.parametrize("mime_type", ["text/plain", "application/octet-stream"])
def test_blank_content_is_no_text(content, mime_type):
    assert extract_text(content, mime_type) is None


@pytest.mark.parametrize("mime_type", ["image/png", "audio/mpeg", "video/mp4"])
def test_media_has_no_text(mime_type):
    assert extract_text(b"plain ascii bytes", mime_type) is None


def test_unknown_type_keeps_valid_utf8():
    assert extract_text(b"key = value\n", "application/octet-stream") == "key = value\n"


def test_unknown_type_rejects_binary():
    assert extract_text(b"\x00\x9f\x92\x96binary", "application/zip") is None


def test_pdf_placeholder_when_library_missing(monkeypatch):
    monkeypatch.setattr(parsers, "pdfplumber", None)
    assert TextExtractor().extract_text(b"%PDF-1.4", "application/pdf", "a.pdf") == PDF_PLACEHOLDER


def test_pdf_placeholder_when_disabled():
    extractor = TextExtractor(enable_pdf=False)
    assert extractor.extract_text(b"%PDF-1.4", "application/pdf", "a.pdf") == PDF_PLACEHOLDER


def test_pdf_placeholder_when_extraction_fails():
    pytest.importorskip("pdfplumber")
    assert TextExtractor().extract_text(b"not really a pdf", "application/pdf", "a.pdf") == PDF_PLACEHOLDER


def test_pdf_pages_are_joined(monkeypatch):
    class StubPage:
        def __init__(self, text):
            self.text = text

        def extract_text(self):
            return self.text

    class StubPdf:
        pages = [StubPage("first page "), StubPage(None), StubPage("second page")]

        def __enter__(self):
            return self

        def __exit__(self, *exc):
            return False

    class StubPdfplumber:
        @staticmethod
        def open(stream):
            return StubPdf()

    monkeypatch.setattr(parsers, "pdfplumber", StubPdfplumber)
    assert TextExtractor().extract_text(b"%PDF", "application/pdf") == "first page\n\nsecond page"


def test_pdf_placeholder_is_logged_as_warning(monkeypatch, caplog):
    monkeypatch.setattr(parsers, "pdfplumber", None)

    with caplog.at_level(logging.WARNING, logger="ftms.ingestion.parsers"):
        TextExtractor().extract_text(b"%PDF-1.4", "application/pdf", "scan.pdf")

    assert [r.levelno for r in caplog.records] == [logging.WARNING]
    assert "scan.pdf" in caplog.text
