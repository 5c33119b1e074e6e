"""ToolContext — the collaborators every tool handler receives."""

from __future__ import annotations

import os
from dataclasses import dataclass

from image_server.services.images.codec import ImageCodec, PillowCodec
from image_server.services.images.file_store import FileStore
from image_server.services.images.pipeline import TransformPipeline


@dataclass(frozen=True)
class ToolContext:
    """Read-only dependencies shared by concurrent tool calls.

    Nothing here changes between calls, so one context can serve every
    transport connection at once.
    """

    store: FileStore
    pipeline: TransformPipeline

    @classmethod
    def for_directory(
        cls,
        images_dir: str | os.PathLike[str],
        codec: ImageCodec | None = None,
    ) -> ToolContext:
        return cls(
            store=FileStore(images_dir),
            pipeline=TransformPipeline(codec or PillowCodec()),
        )
