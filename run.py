"""Image MCP server — entry point.

Transport selection:
  1. PORT set → HTTP (FastAPI + uvicorn) on HOST:PORT
  2. otherwise → MCP over stdio

stdout is reserved for the protocol in stdio mode, so all logging goes to stderr.
"""

from __future__ import annotations

import asyncio
import sys

import uvicorn

from image_server.common.system_logger import configure_logging
from image_server.config import Settings, TransportMode, get_settings
from image_server.tools.context import ToolContext
from image_server.tools.dispatcher import TOOL_NAMES


def start_http(settings: Settings, context: ToolContext) -> None:
    from image_server.main import create_app

    uvicorn.run(
        create_app(settings, context),
        host=settings.HOST,
        port=settings.PORT,
        log_level=settings.LOG_LEVEL.lower(),
    )


def start_stdio(context: ToolContext) -> None:
    from image_server.mcp_server import serve_stdio

    asyncio.run(serve_stdio(context))


def main() -> None:
    settings = get_settings()
    logger = configure_logging(settings)
    context = ToolContext.for_directory(settings.IMAGES_DIR)

    mode = settings.transport_mode
    logger.info("Starting image server (%s transport)", mode.value)
    logger.info("Available tools: %s", ", ".join(TOOL_NAMES))
    logger.info("Images directory: %s", context.store.root)
    if not context.store.exists():
        logger.warning("Images directory does not exist yet: %s", context.store.root)

    try:
        if mode is TransportMode.HTTP:
            logger.info("HTTP endpoint: http://%s:%d/tools/invoke", settings.HOST, settings.PORT)
            start_http(settings, context)
        else:
            start_stdio(context)
    except KeyboardInterrupt:
        logger.info("Shutting down")
    except Exception as e:
        logger.error("Failed to start server: %s", e, exc_info=True)
        sys.exit(1)


if __name__ == "__main__":
    main()
