"""Error kinds raised by the image services."""

from __future__ import annotations

import enum


class ImageErrorKind(str, enum.Enum):
    INVALID_FILENAME = "invalid_filename"
    UNSUPPORTED_FORMAT = "unsupported_format"
    FILE_NOT_FOUND = "file_not_found"
    MISSING_DIMENSION = "missing_dimension"
    CODEC_FAILURE = "codec_failure"
    DIRECTORY_MISSING = "directory_missing"
    INVALID_ARGUMENT = "invalid_argument"


class ImageToolError(Exception):
    """A failure with a machine-checkable kind and a human-readable detail."""

    def __init__(self, kind: ImageErrorKind, detail: str) -> None:
        super().__init__(detail)
        self.kind = kind
        self.detail = detail

    def __repr__(self) -> str:
        return f"ImageToolError({self.kind.name}, {self.detail!r})"
