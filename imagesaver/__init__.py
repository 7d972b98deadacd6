"""ImageSaver — acquire, validate and post-process images on disk."""

__version__ = "0.1.0"

from imagesaver.errors import (
    ErrorKind,
    FormatUnsupportedError,
    ImageSaverError,
    SourceBrokenError,
    SourceCanNotBeLoadedError,
)
from imagesaver.saver import ImageSaver
from imagesaver.types import Target, TextOverlay, UploadRequest

__all__ = [
    "ErrorKind",
    "FormatUnsupportedError",
    "ImageSaver",
    "ImageSaverError",
    "SourceBrokenError",
    "SourceCanNotBeLoadedError",
    "Target",
    "TextOverlay",
    "UploadRequest",
    "__version__",
]
