from __future__ import annotations

import base64

from image_server.services.images.errors import ImageErrorKind
from image_server.tools.types import ImageContent, TextContent, image, text, text_error


def test_text_envelope() -> None:
    result = text("hello")
    assert not result.is_error
    assert result.content == [TextContent(text="hello")]
    assert result.to_wire() == {"content": [{"type": "text", "text": "hello"}], "isError": False}


def test_error_envelope_has_single_text_block() -> None:
    result = text_error("Error reading image: nope", ImageErrorKind.FILE_NOT_FOUND)
    assert result.is_error
    assert result.error_kind is ImageErrorKind.FILE_NOT_FOUND
    assert len(result.content) == 1
    assert result.text == "Error reading image: nope"
    assert result.to_wire()["isError"] is True


def test_image_envelope_encodes_bytes() -> None:
    result = image(b"\x89PNG\r\n", "image/png")
    block = result.content[0]
    assert isinstance(block, ImageContent)
    assert base64.b64decode(block.data) == b"\x89PNG\r\n"
    assert result.to_wire()["content"][0] == {
        "type": "image",
        "data": block.data,
        "mimeType": "image/png",
    }


def test_image_envelope_accepts_preencoded_text() -> None:
    result = image("aGVsbG8=", "image/gif")
    assert result.content[0].data == "aGVsbG8="
    assert result.text == ""
