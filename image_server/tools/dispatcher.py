"""Tool dispatcher — routes tool calls to the correct handler function."""

from __future__ import annotations

import logging
from typing import Any, Callable, Coroutine

from image_server.services.images.errors import ImageErrorKind
from image_server.tools.context import ToolContext
from image_server.tools.tools.images import (
    tool_convert_image,
    tool_create_thumbnail,
    tool_get_image,
    tool_get_image_info,
    tool_get_image_metadata,
    tool_list_images,
    tool_resize_image,
)
from image_server.tools.types import ToolResult, text_error

logger = logging.getLogger(__name__)

ToolHandler = Callable[..., Coroutine[Any, Any, ToolResult]]

TOOL_HANDLERS: dict[str, ToolHandler] = {
    "list_images": tool_list_images,
    "get_image": tool_get_image,
    "get_image_metadata": tool_get_image_metadata,
    "get_image_info": tool_get_image_info,
    "convert_image": tool_convert_image,
    "resize_image": tool_resize_image,
    "create_thumbnail": tool_create_thumbnail,
}

TOOL_NAMES: list[str] = sorted(TOOL_HANDLERS.keys())

# Wire argument name → handler parameter name
ARG_ALIASES: dict[str, str] = {
    "targetFormat": "target_format",
    "maxDimension": "max_dimension",
}
WIRE_NAMES: dict[str, str] = {v: k for k, v in ARG_ALIASES.items()}


def normalize_arguments(tool_input: dict[str, Any] | None) -> dict[str, Any]:
    """Map camelCase wire names onto handler keywords; ``None`` means "not given"."""
    return {
        ARG_ALIASES.get(key, key): value
        for key, value in (tool_input or {}).items()
        if value is not None
    }


async def dispatch(
    tool_name: str,
    tool_input: dict[str, Any] | None,
    context: ToolContext,
) -> ToolResult:
    handler = TOOL_HANDLERS.get(tool_name)
    if handler is None:
        return text_error(f"Unknown tool: {tool_name}. Available: {', '.join(TOOL_NAMES)}")
    try:
        return await handler(context=context, **normalize_arguments(tool_input))
    except TypeError as e:
        logger.warning("Invalid parameters for tool %s: %s", tool_name, e)
        return text_error(f"Invalid parameters for {tool_name}: {e}", ImageErrorKind.INVALID_ARGUMENT)
    except Exception as e:
        logger.exception("Tool %s failed", tool_name)
        return text_error(f"Tool {tool_name} failed: {type(e).__name__}: {e}")
