import base64

import pytest

from ftms.ingestion.describe import describe_media, image_marker, parse_inline_images

PNG_BYTES = b"\x89PNG\r\n\x1a\n\x00\x00"


def test_image_description_embeds_filename_and_bytes():
    description = describe_media(PNG_BYTES, "image/png", "pic.png")

    assert "pic.png" in description
    assert base64.b64encode(PNG_BYTES).decode("ascii") in description
    assert description.startswith("[Uploaded image: pic.png]\n[IMAGE:data:image/png;base64,")


def test_inline_image_marker_decodes_to_original_bytes():
    description = describe_media(PNG_BYTES, "image/png", "pic.png")

    images = parse_inline_images(description)

    assert len(images) == 1
    assert images[0].mime_type == "image/png"
    assert images[0].content == PNG_BYTES


def test_parse_skips_malformed_payloads():
    text = "[IMAGE:data:image/gif;base64,abc]" + image_marker(b"gif89a", "image/gif")
    images = parse_inline_images(text)
    assert [image.content for image in images] == [b"gif89a"]
    assert parse_inline_images(None) == []


@pytest.mark.parametrize("mime_type, kind", [("audio/mpeg", "audio"), ("video/mp4", "video")])
def test_audio_video_description_reports_size(mime_type, kind):
    content = b"\x00" * 1234
    description = describe_media(content, mime_type, "clip.bin")
    assert description == f"[Uploaded {kind} file: clip.bin, size: 1234 bytes]"


@pytest.mark.parametrize("mime_type", ["text/plain", "application/pdf", "application/octet-stream"])
def test_other_types_have_no_description(mime_type):
    assert describe_media(b"data", mime_type, "x") is None
