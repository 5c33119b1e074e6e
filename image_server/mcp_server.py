"""MCP stdio transport for the image tools.

Thin adapter: ``tools/list`` is served from the generated tool schemas and
``tools/call`` goes through the dispatcher. An error envelope is raised as
``ToolCallError`` so the SDK reports it with ``isError`` set.
"""

from __future__ import annotations

import logging
from typing import Any

import mcp.server.stdio
import mcp.types as types
from mcp.server import NotificationOptions, Server
from mcp.server.models import InitializationOptions

from image_server.config import APP_NAME, APP_VERSION
from image_server.tools.context import ToolContext
from image_server.tools.dispatcher import dispatch
from image_server.tools.tool_schemas import generate_all_tool_schemas
from image_server.tools.types import ImageContent, ToolResult

logger = logging.getLogger(__name__)


class ToolCallError(Exception):
    pass


def to_mcp_content(result: ToolResult) -> list[types.TextContent | types.ImageContent]:
    blocks: list[types.TextContent | types.ImageContent] = []
    for block in result.content:
        if isinstance(block, ImageContent):
            blocks.append(types.ImageContent(type="image", data=block.data, mimeType=block.mime_type))
        else:
            blocks.append(types.TextContent(type="text", text=block.text))
    return blocks


def build_server(context: ToolContext) -> Server:
    server = Server(APP_NAME)

    @server.list_tools()
    async def handle_list_tools() -> list[types.Tool]:
        return [
            types.Tool(
                name=schema["name"],
                description=schema["description"],
                inputSchema=schema["input_schema"],
            )
            for schema in generate_all_tool_schemas()
        ]

    @server.call_tool()
    async def handle_call_tool(
        name: str, arguments: dict[str, Any] | None
    ) -> list[types.TextContent | types.ImageContent]:
        result = await dispatch(name, arguments or {}, context)
        if result.is_error:
            raise ToolCallError(result.text)
        return to_mcp_content(result)

    return server


async def serve_stdio(context: ToolContext) -> None:
    server = build_server(context)
    async with mcp.server.stdio.stdio_server() as (read_stream, write_stream):
        await server.run(
            read_stream,
            write_stream,
            InitializationOptions(
                server_name=APP_NAME,
                server_version=APP_VERSION,
                capabilities=server.get_capabilities(
                    notification_options=NotificationOptions(),
                    experimental_capabilities={},
                ),
            ),
        )
