"""Error types for image acquisition and validation."""

from __future__ import annotations

import enum


class ErrorKind(str, enum.Enum):
    """Failure kinds surfaced to callers. Values are the stable error codes."""

    source_broken = "ERR_IMAGE_SOURCE_BROKEN"
    source_can_not_be_loaded = "ERR_IMAGE_CAN_NOT_BE_LOADED"
    format_unsupported = "ERR_IMAGE_FORMAT_UNSUPPORTED"


class ImageSaverError(Exception):
    """Base exception: a failure kind plus a human readable message."""

    kind: ErrorKind
    default_message = "Image processing failed"

    def __init__(self, message: str | None = None) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)

    @property
    def code(self) -> str:
        return self.kind.value


class SourceBrokenError(ImageSaverError):
    """Raised when the source is unparsable or does not decode as an image."""

    kind = ErrorKind.source_broken
    default_message = "Image source is broken"


class SourceCanNotBeLoadedError(ImageSaverError):
    """Raised when a download fails at the transport level."""

    kind = ErrorKind.source_can_not_be_loaded
    default_message = "Image can not be loaded"


class FormatUnsupportedError(ImageSaverError):
    """Raised when the source extension is not in the allow-list."""

    kind = ErrorKind.format_unsupported
    default_message = "Unsupported image format"


class OrientationError(Exception):
    """Raised when an EXIF orientation fix cannot be applied.

    Never escapes acquisition: callers fall back to the uncorrected file.
    """
