"""Descriptions for media uploads and the inline-image marker format.

Images are embedded as ``[IMAGE:data:<mime>;base64,<payload>]`` so a
downstream captioning consumer can read them without fetching the file again.
"""

from __future__ import annotations

import base64
import binascii
import re
from dataclasses import dataclass
from typing import Awaitable, List, Optional, Protocol

IMAGE_MARKER_PATTERN = re.compile(r"\[IMAGE:data:(?P<mime>[^;\]]+);base64,(?P<payload>[A-Za-z0-9+/=]*)\]")


class Captioner(Protocol):
    """Pluggable AI backend used for deferred description of stored files."""

    def __call__(self, content: bytes, mime_type: str, filename: str) -> Awaitable[Optional[str]]:
        ...


@dataclass
class InlineImage:
    mime_type: str
    content: bytes


def image_marker(content: bytes, mime_type: str) -> str:
    payload = base64.b64encode(content).decode("ascii")
    return f"[IMAGE:data:{mime_type};base64,{payload}]"


def describe_media(content: bytes, mime_type: str, filename: str) -> Optional[str]:
    if mime_type.startswith("image/"):
        return f"[Uploaded image: {filename}]\n{image_marker(content, mime_type)}"
    if mime_type.startswith("audio/"):
        return f"[Uploaded audio file: {filename}, size: {len(content)} bytes]"
    if mime_type.startswith("video/"):
        return f"[Uploaded video file: {filename}, size: {len(content)} bytes]"
    return None


def parse_inline_images(text: Optional[str]) -> List[InlineImage]:
    """Decode every inline-image marker in `text`; malformed payloads are skipped."""

    if not text:
        return []

    images: List[InlineImage] = []
    for match in IMAGE_MARKER_PATTERN.finditer(text):
        try:
            content = base64.b64decode(match.group("payload"), validate=True)
        except binascii.Error:
            continue
        images.append(InlineImage(mime_type=match.group("mime"), content=content))
    return images
