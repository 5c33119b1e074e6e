"""FileStore — confines filename arguments to the managed images directory.

Every lookup goes through ``resolve``, which rejects anything that could point
outside the directory before touching the filesystem. The store only ever
reads: it never creates, moves or deletes files.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path

from image_server.services.images.errors import ImageErrorKind, ImageToolError
from image_server.services.images.formats import (
    file_extension,
    is_supported,
    supported_formats_label,
)

logger = logging.getLogger(__name__)

_FORBIDDEN_FRAGMENTS = ("..", "/", "\\")


@dataclass(frozen=True)
class ImageFile:
    filename: str
    path: Path
    size: int
    created: datetime
    modified: datetime

    @property
    def extension(self) -> str:
        return file_extension(self.filename)

    @property
    def size_kb(self) -> float:
        return self.size / 1024


class FileStore:
    def __init__(self, root: str | os.PathLike[str]) -> None:
        self.root = Path(root).absolute()

    def exists(self) -> bool:
        return self.root.is_dir()

    def resolve(self, raw_filename: str) -> ImageFile:
        """Turn a caller-supplied filename into a confined, existing image file.

        Raises:
            ImageToolError: INVALID_FILENAME, UNSUPPORTED_FORMAT or FILE_NOT_FOUND.
        """
        filename = _check_filename(raw_filename)

        if not is_supported(file_extension(filename)):
            raise ImageToolError(
                ImageErrorKind.UNSUPPORTED_FORMAT,
                f"Unsupported image format. Supported formats: {supported_formats_label()}",
            )

        path = self.root / filename
        if not path.is_file():
            raise ImageToolError(
                ImageErrorKind.FILE_NOT_FOUND,
                f"Image file not found: {filename}. {self._availability_hint()}",
            )

        # Symlinks may point anywhere; the real target must still live in root.
        if not self._is_confined(path):
            logger.warning("Rejected %s: resolves outside %s", filename, self.root)
            raise ImageToolError(
                ImageErrorKind.INVALID_FILENAME,
                f"Invalid filename. {filename} resolves outside the images directory.",
            )

        return _image_file(filename, path, path.stat())

    def list_supported_files(self) -> list[str]:
        """Supported image files in directory enumeration order.

        Raises:
            ImageToolError: DIRECTORY_MISSING if the managed directory is absent.
        """
        if not self.exists():
            raise ImageToolError(
                ImageErrorKind.DIRECTORY_MISSING,
                f"Images directory not found: {self.root}",
            )
        return [
            name
            for name in os.listdir(self.root)
            if is_supported(file_extension(name)) and (self.root / name).is_file()
        ]

    def list_entries(self) -> list[ImageFile]:
        """Stat every listed image, skipping entries that vanish or escape the directory.

        Names come from the directory itself, so the caller-input checks in
        ``resolve`` do not apply.
        """
        entries = []
        for name in self.list_supported_files():
            path = self.root / name
            if not self._is_confined(path):
                logger.warning("Skipping %s: resolves outside %s", name, self.root)
                continue
            try:
                st = path.stat()
            except OSError as e:
                logger.debug("Skipping %s: %s", name, e)
                continue
            entries.append(_image_file(name, path, st))
        return entries

    def _is_confined(self, path: Path) -> bool:
        return Path(os.path.realpath(path)).parent == Path(os.path.realpath(self.root))

    def _availability_hint(self) -> str:
        try:
            files = self.list_supported_files()
        except ImageToolError:
            files = []
        if not files:
            return "No images available."
        return f"Available images: {', '.join(files)}"


def _check_filename(raw_filename: str) -> str:
    if not isinstance(raw_filename, str) or not raw_filename.strip():
        raise ImageToolError(ImageErrorKind.INVALID_FILENAME, "Invalid filename. Filename must not be empty.")
    if any(fragment in raw_filename for fragment in _FORBIDDEN_FRAGMENTS):
        raise ImageToolError(
            ImageErrorKind.INVALID_FILENAME,
            "Invalid filename. Filename must not contain path separators.",
        )
    return raw_filename


def _timestamp(value: float) -> datetime:
    return datetime.fromtimestamp(value, tz=timezone.utc)


def _image_file(filename: str, path: Path, st: os.stat_result) -> ImageFile:
    return ImageFile(
        filename=filename,
        path=path,
        size=st.st_size,
        created=_timestamp(getattr(st, "st_birthtime", st.st_ctime)),
        modified=_timestamp(st.st_mtime),
    )
