"""Supported image formats and their MIME types."""

from __future__ import annotations

import os

DEFAULT_MIME_TYPE = "application/octet-stream"

SUPPORTED_FORMATS: dict[str, str] = {
    ".jpg": "image/jpeg",
    ".jpeg": "image/jpeg",
    ".png": "image/png",
    ".gif": "image/gif",
    ".webp": "image/webp",
    ".bmp": "image/bmp",
}

# Extension → Pillow container name
_PILLOW_FORMATS: dict[str, str] = {
    ".jpg": "JPEG",
    ".jpeg": "JPEG",
    ".png": "PNG",
    ".gif": "GIF",
    ".webp": "WEBP",
    ".bmp": "BMP",
}

_LOSSY = frozenset({".jpg", ".jpeg", ".webp"})


def extension_of(name: str) -> str:
    """Normalize a filename, bare extension or dotted extension to ``.ext``.

    ``"photo.PNG"`` → ``".png"``, ``"png"`` → ``".png"``, ``".Png"`` → ``".png"``.
    """
    name = name.strip().lower()
    _, ext = os.path.splitext(name)
    if ext:
        return ext
    if not name or name.startswith("."):
        return name
    return f".{name}"


def file_extension(filename: str) -> str:
    """Lowercase suffix of a filename; empty when it has none."""
    return os.path.splitext(filename)[1].lower()


def is_supported(name: str) -> bool:
    return extension_of(name) in SUPPORTED_FORMATS


def mime_type_for(name: str) -> str:
    """MIME type for an extension or filename; never fails."""
    return SUPPORTED_FORMATS.get(extension_of(name), DEFAULT_MIME_TYPE)


def pillow_format_for(name: str) -> str:
    ext = extension_of(name)
    try:
        return _PILLOW_FORMATS[ext]
    except KeyError:
        raise ValueError(f"No encoder for extension {ext!r}") from None


def is_lossy(name: str) -> bool:
    return extension_of(name) in _LOSSY


def supported_formats_label() -> str:
    return ", ".join(ext.lstrip(".").upper() for ext in SUPPORTED_FORMATS)
