from image_server.tools.types import ImageContent, TextContent, ToolResult, image, text, text_error
from image_server.tools.dispatcher import dispatch, TOOL_HANDLERS
from image_server.tools.context import ToolContext

__all__ = [
    "ImageContent",
    "TextContent",
    "ToolResult",
    "ToolContext",
    "dispatch",
    "image",
    "text",
    "text_error",
    "TOOL_HANDLERS",
]
