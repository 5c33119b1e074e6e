"""Image tools — listing, retrieval, metadata, conversion, resizing, thumbnails.

Every handler confines its filename through the context's FileStore and turns
any ``ImageToolError`` into an error envelope. Blocking reads and codec work
run in a worker thread.
"""

from __future__ import annotations

import asyncio
import logging

from image_server.services.images.codec import FIT_MODES, FitMode
from image_server.services.images.errors import ImageErrorKind, ImageToolError
from image_server.services.images.pipeline import (
    DEFAULT_QUALITY,
    DEFAULT_THUMBNAIL_SIZE,
    TARGET_FORMATS,
    TargetFormat,
)
from image_server.tools.context import ToolContext
from image_server.tools.types import ToolResult, image, text, text_error

logger = logging.getLogger(__name__)


async def tool_list_images(
    context: ToolContext,
) -> ToolResult:
    """Lists all available images in the images directory."""
    try:
        files = await asyncio.to_thread(context.store.list_entries)
    except ImageToolError as e:
        if e.kind is ImageErrorKind.DIRECTORY_MISSING:
            return text("Images directory not found. No images available.")
        return _failure("Error listing images", e)
    except OSError as e:
        return text_error(f"Error listing images: {e}")

    if not files:
        return text("No images found in the images directory.")
    lines = [f"- {f.filename} ({f.size_kb:.2f} KB)" for f in files]
    return text("Available images:\n" + "\n".join(lines))


async def tool_get_image(
    context: ToolContext,
    filename: str,
) -> ToolResult:
    """Returns a specific image by filename from the images directory. Supports JPG, PNG, GIF, WebP, and BMP formats.

    Args:
        filename: The filename of the image to retrieve (e.g., 'test.jpg')
    """
    try:
        image_file = await asyncio.to_thread(context.store.resolve, filename)
        data = await asyncio.to_thread(image_file.path.read_bytes)
    except ImageToolError as e:
        return _failure("Error reading image", e)
    except OSError as e:
        return text_error(f"Error reading image: {e}")

    return image(data, context.pipeline.inspect_basic(image_file).mime_type)


async def tool_get_image_metadata(
    context: ToolContext,
    filename: str,
) -> ToolResult:
    """Returns metadata about an image (filename, size, format, timestamps) without loading the full image.

    Args:
        filename: The filename of the image to get metadata for (e.g., 'test.jpg')
    """
    try:
        image_file = await asyncio.to_thread(context.store.resolve, filename)
    except ImageToolError as e:
        return _failure("Error getting image metadata", e)

    meta = context.pipeline.inspect_basic(image_file)
    return text(
        "Image Metadata:\n"
        f"- Filename: {meta.filename}\n"
        f"- Format: {meta.format}\n"
        f"- MIME Type: {meta.mime_type}\n"
        f"- Size: {meta.size_kb:.2f} KB ({meta.size_bytes} bytes)\n"
        f"- Created: {meta.created.isoformat()}\n"
        f"- Modified: {meta.modified.isoformat()}"
    )


async def tool_get_image_info(
    context: ToolContext,
    filename: str,
) -> ToolResult:
    """Gets detailed technical information about an image including dimensions, format, color space, etc.

    Args:
        filename: The filename of the image
    """
    try:
        image_file = await asyncio.to_thread(context.store.resolve, filename)
        info = await asyncio.to_thread(context.pipeline.inspect_technical, image_file.path)
    except ImageToolError as e:
        return _failure("Error getting image info", e)

    density = f"{info.density:g} DPI" if info.density else "unknown"
    lines = [
        "Image Information:",
        f"- Filename: {image_file.filename}",
        f"- Format: {info.format.upper()}",
        f"- Dimensions: {info.width} x {info.height} pixels",
        f"- Channels: {info.channels}",
        f"- Color Space: {info.color_space}",
        f"- Bit Depth: {info.bit_depth}",
        f"- Has Alpha: {'Yes' if info.has_alpha else 'No'}",
        f"- File Size: {image_file.size_kb:.2f} KB",
        f"- Density: {density}",
    ]
    if info.has_exif:
        lines.append("- Has EXIF data: Yes")
    if info.has_icc_profile:
        lines.append("- Has ICC profile: Yes")
    return text("\n".join(lines))


async def tool_convert_image(
    context: ToolContext,
    filename: str,
    target_format: TargetFormat,
    quality: int = DEFAULT_QUALITY,
) -> ToolResult:
    """Converts an image to a different format (JPG, PNG, WebP, GIF). Returns the converted image.

    Args:
        filename: The filename of the source image
        target_format: The target format to convert to
        quality: Quality for lossy formats (1-100, default: 90)
    """
    try:
        _check_choice("targetFormat", target_format, TARGET_FORMATS)
        quality = _check_int("quality", quality, minimum=1, maximum=100)
        image_file = await asyncio.to_thread(context.store.resolve, filename)
        result = await asyncio.to_thread(
            context.pipeline.convert, image_file.path, target_format, quality
        )
    except ImageToolError as e:
        return _failure("Error converting image", e)

    return image(result.data, result.mime_type)


async def tool_resize_image(
    context: ToolContext,
    filename: str,
    width: int | None = None,
    height: int | None = None,
    fit: FitMode = "contain",
) -> ToolResult:
    """Resizes an image to specified dimensions. Can maintain aspect ratio or force exact dimensions.

    Args:
        filename: The filename of the image to resize
        width: Target width in pixels
        height: Target height in pixels
        fit: How to fit the image (default: contain)
    """
    try:
        if width is None and height is None:
            raise ImageToolError(
                ImageErrorKind.MISSING_DIMENSION,
                "Must specify at least width or height",
            )
        if width is not None:
            width = _check_int("width", width, minimum=1)
        if height is not None:
            height = _check_int("height", height, minimum=1)
        _check_choice("fit", fit, FIT_MODES)
        image_file = await asyncio.to_thread(context.store.resolve, filename)
        result = await asyncio.to_thread(
            context.pipeline.resize, image_file.path, width, height, fit
        )
    except ImageToolError as e:
        return _failure("Error resizing image", e)

    return image(result.data, result.mime_type)


async def tool_create_thumbnail(
    context: ToolContext,
    filename: str,
    max_dimension: int = DEFAULT_THUMBNAIL_SIZE,
) -> ToolResult:
    """Creates a thumbnail version of an image with specified maximum dimension.

    Args:
        filename: The filename of the image
        max_dimension: Maximum dimension in pixels (default: 200)
    """
    try:
        max_dimension = _check_int("maxDimension", max_dimension, minimum=1)
        image_file = await asyncio.to_thread(context.store.resolve, filename)
        result = await asyncio.to_thread(
            context.pipeline.thumbnail, image_file.path, max_dimension
        )
    except ImageToolError as e:
        return _failure("Error creating thumbnail", e)

    return image(result.data, result.mime_type)


def _failure(prefix: str, err: ImageToolError) -> ToolResult:
    logger.info("%s: [%s] %s", prefix, err.kind.value, err.detail)
    return text_error(f"{prefix}: {err.detail}", err.kind)


def _check_int(name: str, value: object, *, minimum: int, maximum: int | None = None) -> int:
    # JSON clients may send 50.0 for 50; bools are ints in Python but never valid here.
    if isinstance(value, float) and value.is_integer():
        value = int(value)
    if isinstance(value, bool) or not isinstance(value, int):
        raise ImageToolError(ImageErrorKind.INVALID_ARGUMENT, f"{name} must be an integer, got {value!r}")
    if value < minimum or (maximum is not None and value > maximum):
        bounds = f"between {minimum} and {maximum}" if maximum is not None else f"at least {minimum}"
        raise ImageToolError(ImageErrorKind.INVALID_ARGUMENT, f"{name} must be {bounds}, got {value}")
    return value


def _check_choice(name: str, value: object, choices: tuple[str, ...]) -> None:
    if value not in choices:
        raise ImageToolError(
            ImageErrorKind.INVALID_ARGUMENT,
            f"{name} must be one of: {', '.join(choices)}; got {value!r}",
        )
