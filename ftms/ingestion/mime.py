"""Extension-based MIME classification."""

from __future__ import annotations

DEFAULT_MIME_TYPE = "application/octet-stream"

EXTENSION_MIME_TYPES = {
    "txt": "text/plain",
    "md": "text/markdown",
    "markdown": "text/markdown",
    "csv": "text/csv",
    "json": "application/json",
    "xml": "application/xml",
    "html": "text/html",
    "htm": "text/html",
    "pdf": "application/pdf",
    "png": "image/png",
    "jpg": "image/jpeg",
    "jpeg": "image/jpeg",
    "gif": "image/gif",
    "webp": "image/webp",
    "bmp": "image/bmp",
    "svg": "image/svg+xml",
    "mp3": "audio/mpeg",
    "wav": "audio/wav",
    "ogg": "audio/ogg",
    "mp4": "video/mp4",
    "webm": "video/webm",
    "mov": "video/quicktime",
    "zip": "application/zip",
    "tar": "application/x-tar",
    "gz": "application/gzip",
}

TEXT_MIME_TYPES = frozenset(
    {
        "text/plain",
        "text/markdown",
        "text/csv",
        "text/html",
        "text/xml",
        "application/json",
        "application/xml",
    }
)

MEDIA_PREFIXES = ("image/", "audio/", "video/")


def file_extension(filename: str) -> str:
    """Lower-cased text after the final dot, or an empty string."""

    if "." not in filename:
        return ""
    return filename.rsplit(".", 1)[1].lower()


def guess_mime_type(filename: str) -> str:
    """Map a filename to a MIME type by extension alone; never fails."""

    return EXTENSION_MIME_TYPES.get(file_extension(filename), DEFAULT_MIME_TYPE)


def is_text_type(mime_type: str) -> bool:
    return mime_type in TEXT_MIME_TYPES


def is_media_type(mime_type: str) -> bool:
    return mime_type.startswith(MEDIA_PREFIXES)
