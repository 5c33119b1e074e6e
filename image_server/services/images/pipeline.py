"""TransformPipeline — format conversion, resizing, thumbnails and inspection.

Works on paths already confined by ``FileStore``. All pixel work goes through
an injected ``ImageCodec``; any exception it raises is reported as
``CODEC_FAILURE`` with the underlying message. Nothing is retried and nothing
is written to disk.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Callable, Literal, TypeVar, get_args

from image_server.services.images.codec import FIT_MODES, FitMode, ImageCodec, ImageInfo
from image_server.services.images.errors import ImageErrorKind, ImageToolError
from image_server.services.images.file_store import ImageFile
from image_server.services.images.formats import file_extension, mime_type_for

logger = logging.getLogger(__name__)

TargetFormat = Literal["jpg", "jpeg", "png", "webp", "gif"]
TARGET_FORMATS: tuple[str, ...] = get_args(TargetFormat)

DEFAULT_QUALITY = 90
DEFAULT_THUMBNAIL_SIZE = 200
DEFAULT_FIT: FitMode = "contain"

T = TypeVar("T")


@dataclass(frozen=True)
class TransformResult:
    data: bytes
    mime_type: str
    width: int
    height: int


@dataclass(frozen=True)
class BasicMetadata:
    filename: str
    format: str
    mime_type: str
    size_bytes: int
    created: datetime
    modified: datetime

    @property
    def size_kb(self) -> float:
        return round(self.size_bytes / 1024, 2)

    @property
    def size_mb(self) -> float:
        return round(self.size_bytes / (1024 * 1024), 2)


class TransformPipeline:
    def __init__(self, codec: ImageCodec) -> None:
        self.codec = codec

    def convert(
        self,
        path: Path,
        target_format: str,
        quality: int = DEFAULT_QUALITY,
    ) -> TransformResult:
        target = target_format.lower().lstrip(".")
        if target not in TARGET_FORMATS:
            raise ImageToolError(
                ImageErrorKind.INVALID_ARGUMENT,
                f"Unsupported target format: {target_format}. Choose one of: {', '.join(TARGET_FORMATS)}",
            )
        image = self._run("decode", lambda: self.codec.decode(path))
        data = self._run("encode", lambda: self.codec.encode(image, f".{target}", quality))
        logger.debug("Converted %s → %s (%d bytes)", path.name, target, len(data))
        return self._result(data, f".{target}", image.size)

    def resize(
        self,
        path: Path,
        width: int | None = None,
        height: int | None = None,
        fit: str = DEFAULT_FIT,
    ) -> TransformResult:
        if not width and not height:
            raise ImageToolError(
                ImageErrorKind.MISSING_DIMENSION,
                "Must specify at least width or height",
            )
        if fit not in FIT_MODES:
            raise ImageToolError(
                ImageErrorKind.INVALID_ARGUMENT,
                f"Unknown fit mode: {fit}. Choose one of: {', '.join(FIT_MODES)}",
            )

        # Resizing keeps the source container; only convert() changes it.
        ext = file_extension(path.name)
        image = self._run("decode", lambda: self.codec.decode(path))
        resized = self._run("resize", lambda: self.codec.resize(image, width, height, fit))
        data = self._run("encode", lambda: self.codec.encode(resized, ext, DEFAULT_QUALITY))
        logger.debug(
            "Resized %s %dx%d → %dx%d (fit=%s)",
            path.name, image.width, image.height, resized.width, resized.height, fit,
        )
        return self._result(data, ext, resized.size)

    def thumbnail(self, path: Path, max_dimension: int = DEFAULT_THUMBNAIL_SIZE) -> TransformResult:
        ext = file_extension(path.name)
        image = self._run("decode", lambda: self.codec.decode(path))

        if image.width > max_dimension or image.height > max_dimension:
            image = self._run(
                "resize",
                lambda: self.codec.resize(image, max_dimension, max_dimension, "inside"),
            )

        data = self._run("encode", lambda: self.codec.encode(image, ext, DEFAULT_QUALITY))
        return self._result(data, ext, image.size)

    def inspect_technical(self, path: Path) -> ImageInfo:
        return self._run("inspect", lambda: self.codec.inspect(path))

    def inspect_basic(self, image_file: ImageFile) -> BasicMetadata:
        """Filesystem-only metadata; the codec is never consulted."""
        return BasicMetadata(
            filename=image_file.filename,
            format=image_file.extension.lstrip(".").upper(),
            mime_type=mime_type_for(image_file.extension),
            size_bytes=image_file.size,
            created=image_file.created,
            modified=image_file.modified,
        )

    @staticmethod
    def _run(step: str, fn: Callable[[], T]) -> T:
        try:
            return fn()
        except ImageToolError:
            raise
        except Exception as e:
            logger.warning("Codec %s failed: %s", step, e)
            raise ImageToolError(ImageErrorKind.CODEC_FAILURE, f"{step} failed: {e}") from e

    @staticmethod
    def _result(data: bytes, ext: str, size: tuple[int, int]) -> TransformResult:
        if not data:
            raise ImageToolError(ImageErrorKind.CODEC_FAILURE, "encoder produced no data")
        return TransformResult(data=data, mime_type=mime_type_for(ext), width=size[0], height=size[1])
