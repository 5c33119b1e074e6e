"""Image codec capability and its Pillow implementation.

The pipeline only talks to ``ImageCodec``; ``PillowCodec`` is the one shipped
implementation. Codec methods may raise anything the underlying library
raises; wrapping into ``ImageToolError`` happens in the pipeline.
"""

from __future__ import annotations

import io
from dataclasses import dataclass
from pathlib import Path
from typing import Literal, Protocol, get_args

from PIL import Image, ImageOps

from image_server.services.images.formats import is_lossy, pillow_format_for

FitMode = Literal["contain", "cover", "fill", "inside", "outside"]
FIT_MODES: tuple[str, ...] = get_args(FitMode)


@dataclass(frozen=True)
class ImageInfo:
    format: str
    width: int
    height: int
    channels: int
    color_space: str
    bit_depth: int
    has_alpha: bool
    has_exif: bool
    has_icc_profile: bool
    density: float | None = None


class ImageCodec(Protocol):
    def decode(self, path: Path) -> Image.Image: ...

    def encode(self, image: Image.Image, extension: str, quality: int) -> bytes: ...

    def resize(
        self,
        image: Image.Image,
        width: int | None,
        height: int | None,
        fit: FitMode,
    ) -> Image.Image: ...

    def inspect(self, path: Path) -> ImageInfo: ...


# Pillow mode → (color space, bits per channel)
_MODE_INFO: dict[str, tuple[str, int]] = {
    "1": ("b-w", 1),
    "L": ("b-w", 8),
    "LA": ("b-w", 8),
    "I;16": ("grey16", 16),
    "I": ("b-w", 32),
    "F": ("b-w", 32),
    "P": ("srgb", 8),
    "PA": ("srgb", 8),
    "RGB": ("srgb", 8),
    "RGBA": ("srgb", 8),
    "RGBa": ("srgb", 8),
    "CMYK": ("cmyk", 8),
    "YCbCr": ("srgb", 8),
    "LAB": ("lab", 8),
    "HSV": ("hsv", 8),
}

# Modes each encoder accepts without conversion
_ENCODER_MODES: dict[str, frozenset[str]] = {
    "JPEG": frozenset({"L", "RGB", "CMYK"}),
    "PNG": frozenset({"1", "L", "LA", "I", "I;16", "P", "RGB", "RGBA"}),
    "GIF": frozenset({"L", "P"}),
    "WEBP": frozenset({"RGB", "RGBA"}),
    "BMP": frozenset({"1", "L", "P", "RGB", "RGBA"}),
}

_LETTERBOX = (0, 0, 0)


class PillowCodec:
    def decode(self, path: Path) -> Image.Image:
        with Image.open(path) as img:
            # Animated sources are reduced to their first frame
            img.seek(0)
            img.load()
            return img.copy()

    def encode(self, image: Image.Image, extension: str, quality: int) -> bytes:
        fmt = pillow_format_for(extension)
        prepared = _prepare_for(image, fmt)

        save_kwargs: dict[str, object] = {}
        if is_lossy(extension):
            save_kwargs["quality"] = quality
        icc = image.info.get("icc_profile")
        if icc and prepared.mode == image.mode and fmt in ("JPEG", "PNG", "WEBP"):
            save_kwargs["icc_profile"] = icc

        buf = io.BytesIO()
        prepared.save(buf, format=fmt, **save_kwargs)
        return buf.getvalue()

    def resize(
        self,
        image: Image.Image,
        width: int | None,
        height: int | None,
        fit: FitMode,
    ) -> Image.Image:
        box = target_box(image.size, width, height)

        if fit == "fill":
            return image.resize(box, Image.LANCZOS)
        if fit == "cover":
            return ImageOps.fit(image, box, Image.LANCZOS)
        if fit == "inside":
            return image.resize(scaled_size(image.size, box, grow=False), Image.LANCZOS)
        if fit == "outside":
            return image.resize(scaled_size(image.size, box, grow=True), Image.LANCZOS)
        if fit == "contain":
            scaled = image.resize(scaled_size(image.size, box, grow=False), Image.LANCZOS)
            return _letterbox(scaled, box)
        raise ValueError(f"Unknown fit mode: {fit}")

    def inspect(self, path: Path) -> ImageInfo:
        # Image.open only parses headers; pixel data is never decoded here.
        with Image.open(path) as img:
            mode = img.mode
            bands = img.getbands()
            color_space, depth = _MODE_INFO.get(mode, (mode.lower(), 8))
            has_alpha = "A" in bands or (mode == "P" and "transparency" in img.info)

            channels = len(bands)
            if mode in ("P", "PA"):
                channels = 4 if has_alpha else 3

            dpi = img.info.get("dpi")
            density = float(dpi[0]) if dpi else None

            return ImageInfo(
                format=(img.format or "unknown").lower(),
                width=img.width,
                height=img.height,
                channels=channels,
                color_space=color_space,
                bit_depth=depth,
                has_alpha=has_alpha,
                has_exif=bool(img.info.get("exif")) or len(img.getexif()) > 0,
                has_icc_profile=bool(img.info.get("icc_profile")),
                density=density,
            )


def target_box(size: tuple[int, int], width: int | None, height: int | None) -> tuple[int, int]:
    """Fill in a missing dimension from the source aspect ratio."""
    src_w, src_h = size
    if width and height:
        return width, height
    if width:
        return width, max(1, round(src_h * width / src_w))
    if height:
        return max(1, round(src_w * height / src_h)), height
    raise ValueError("Must specify at least width or height")


def scaled_size(size: tuple[int, int], box: tuple[int, int], *, grow: bool) -> tuple[int, int]:
    """Aspect-preserving size that fits inside ``box`` or, with ``grow``, covers it."""
    src_w, src_h = size
    box_w, box_h = box
    ratios = (box_w / src_w, box_h / src_h)
    scale = max(ratios) if grow else min(ratios)

    new_w = max(1, round(src_w * scale))
    new_h = max(1, round(src_h * scale))
    if not grow:
        new_w, new_h = min(new_w, box_w), min(new_h, box_h)
    return new_w, new_h


def _letterbox(image: Image.Image, box: tuple[int, int]) -> Image.Image:
    if image.size == box:
        return image
    if "A" in image.getbands():
        canvas = Image.new("RGBA", box, (0, 0, 0, 0))
        image = image.convert("RGBA")
    else:
        if image.mode not in ("RGB", "L"):
            image = image.convert("RGB")
        canvas = Image.new(image.mode, box, 0 if image.mode == "L" else _LETTERBOX)
    offset = ((box[0] - image.width) // 2, (box[1] - image.height) // 2)
    canvas.paste(image, offset)
    return canvas


def _prepare_for(image: Image.Image, fmt: str) -> Image.Image:
    if image.mode in _ENCODER_MODES[fmt]:
        return image

    has_alpha = "A" in image.getbands() or "transparency" in image.info
    if fmt == "JPEG":
        if has_alpha:
            rgba = image.convert("RGBA")
            flattened = Image.new("RGB", rgba.size, (255, 255, 255))
            flattened.paste(rgba, mask=rgba.getchannel("A"))
            return flattened
        return image.convert("RGB")
    if fmt == "GIF":
        if not has_alpha:
            return image.convert("RGB").quantize()
        # Index 255 is reserved for pixels that are mostly transparent.
        rgba = image.convert("RGBA")
        paletted = rgba.convert("RGB").quantize(colors=255)
        palette = paletted.getpalette()[: 255 * 3]
        paletted.putpalette(palette + [0] * (768 - len(palette)))
        paletted.paste(255, mask=rgba.getchannel("A").point(lambda a: 255 if a < 128 else 0))
        paletted.info["transparency"] = 255
        return paletted
    if fmt in ("PNG", "WEBP", "BMP"):
        return image.convert("RGBA" if has_alpha else "RGB")
    return image
