import pytest

from ftms.ingestion.mime import file_extension, guess_mime_type, is_media_type, is_text_type


@pytest.mark.parametrize(
    "filename, expected",
    [
        ("notes.txt", "text/plain"),
        ("README.md", "text/markdown"),
        ("report.PDF", "application/pdf"),
        ("photo.JPeG", "image/jpeg"),
        ("index.htm", "text/html"),
        ("clip.mov", "video/quicktime"),
        ("song.mp3", "audio/mpeg"),
        ("backup.tar.gz", "application/gzip"),
        ("icon.svg", "image/svg+xml"),
    ],
)
def test_known_extensions(filename, expected):
    assert guess_mime_type(filename) == expected


@pytest.mark.parametrize("filename", ["Makefile", "", "weird.xyz", "trailing.", "data.docx"])
def test_unknown_extensions_fall_back_to_octet_stream(filename):
    assert guess_mime_type(filename) == "application/octet-stream"


def test_classification_is_deterministic():
    assert {guess_mime_type("pic.png") for _ in range(5)} == {"image/png"}


def test_extension_is_text_after_last_dot():
    assert file_extension("a.b.C") == "c"
    assert file_extension("noext") == ""


def test_type_helpers():
    assert is_text_type("application/json")
    assert not is_text_type("application/pdf")
    assert is_media_type("video/webm")
    assert not is_media_type("application/zip")
