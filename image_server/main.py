from __future__ import annotations

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware

from image_server.api.routes import health
from image_server.api.tool_routes import router as tool_router
from image_server.common.system_logger import get_logger
from image_server.config import APP_NAME, APP_VERSION, Settings, get_settings
from image_server.tools.context import ToolContext


def create_app(settings: Settings | None = None, context: ToolContext | None = None) -> FastAPI:
    settings = settings or get_settings()
    logger = get_logger()

    app = FastAPI(title=APP_NAME, version=APP_VERSION)
    app.state.settings = settings
    app.state.tool_context = context or ToolContext.for_directory(settings.IMAGES_DIR)

    app.include_router(health.router)
    app.include_router(tool_router)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.allowed_origin_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        logger.info(f"Request: {request.method} {request.url.path}")
        response = await call_next(request)
        logger.info(f"Response: {response.status_code} for {request.method} {request.url.path}")
        return response

    return app
