"""Shared types for the tool system — the response envelope and its builders."""

from __future__ import annotations

import base64
import enum
from typing import Any, Literal, Union

from pydantic import BaseModel, Field

from image_server.services.images.errors import ImageErrorKind


class ContentType(str, enum.Enum):
    TEXT = "text"
    IMAGE = "image"


class TextContent(BaseModel):
    type: Literal[ContentType.TEXT] = ContentType.TEXT
    text: str


class ImageContent(BaseModel):
    type: Literal[ContentType.IMAGE] = ContentType.IMAGE
    data: str = Field(description="Raw base64-encoded image bytes")
    mime_type: str = Field(description="MIME type, e.g. 'image/png'")


ContentBlock = Union[TextContent, ImageContent]


class ToolResult(BaseModel):
    content: list[ContentBlock] = Field(default_factory=list)
    is_error: bool = False
    error_kind: ImageErrorKind | None = None

    @property
    def text(self) -> str:
        return "\n".join(b.text for b in self.content if isinstance(b, TextContent))

    def to_wire(self) -> dict[str, Any]:
        blocks: list[dict[str, Any]] = []
        for block in self.content:
            if isinstance(block, ImageContent):
                blocks.append({"type": "image", "data": block.data, "mimeType": block.mime_type})
            else:
                blocks.append({"type": "text", "text": block.text})
        return {"content": blocks, "isError": self.is_error}


def text(message: str) -> ToolResult:
    return ToolResult(content=[TextContent(text=message)])


def text_error(message: str, kind: ImageErrorKind | None = None) -> ToolResult:
    return ToolResult(content=[TextContent(text=message)], is_error=True, error_kind=kind)


def image(data: bytes | str, mime_type: str) -> ToolResult:
    """Image envelope; bytes are base64 encoded, a str is taken as already encoded."""
    if isinstance(data, bytes):
        data = base64.b64encode(data).decode("ascii")
    return ToolResult(content=[ImageContent(data=data, mime_type=mime_type)])
