from __future__ import annotations

from pathlib import Path
from typing import AsyncGenerator

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from PIL import Image

from image_server.config import Settings
from image_server.main import create_app
from image_server.services.images.file_store import FileStore
from image_server.services.images.codec import PillowCodec
from image_server.services.images.pipeline import TransformPipeline
from image_server.tools.context import ToolContext


def make_image(
    path: Path,
    size: tuple[int, int],
    *,
    mode: str = "RGB",
    color: object = (200, 30, 30),
    **save_kwargs: object,
) -> Path:
    img = Image.new(mode, size, color)
    img.save(path, **save_kwargs)
    return path


@pytest.fixture
def images_dir(tmp_path: Path) -> Path:
    """A managed directory with a mix of formats plus a non-image file."""
    root = tmp_path / "images"
    root.mkdir()
    make_image(root / "test.jpg", (120, 80), dpi=(300, 300))
    make_image(root / "wide.png", (400, 100), mode="RGBA", color=(0, 128, 255, 128))
    make_image(root / "small.gif", (50, 40), mode="P", color=3)
    make_image(root / "tiny.bmp", (16, 16))
    make_image(root / "photo.webp", (300, 300))
    (root / "notes.txt").write_text("not an image")
    return root


@pytest.fixture
def single_image_dir(tmp_path: Path) -> Path:
    root = tmp_path / "single"
    root.mkdir()
    make_image(root / "test.jpg", (64, 48))
    return root


@pytest.fixture
def store(images_dir: Path) -> FileStore:
    return FileStore(images_dir)


@pytest.fixture
def pipeline() -> TransformPipeline:
    return TransformPipeline(PillowCodec())


@pytest.fixture
def context(images_dir: Path) -> ToolContext:
    return ToolContext.for_directory(images_dir)


@pytest_asyncio.fixture
async def app_client(images_dir: Path, context: ToolContext) -> AsyncGenerator[AsyncClient, None]:
    app = create_app(Settings(IMAGES_DIR=images_dir), context)
    transport = ASGITransport(app=app, raise_app_exceptions=False)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client
