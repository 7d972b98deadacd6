"""Core data types for ImageSaver.

Every stage consumes and produces these types:
- ``Target`` is the on-disk location of the image being worked on. It is
  immutable; stages return a new value instead of mutating the old one.
- ``UploadRequest`` is the inbound multipart source.
- ``TextOverlay`` describes one caption composited by the processor.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from pathlib import Path
from typing import BinaryIO, Mapping


# ---------------------------------------------------------------------------
# Target
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Target:
    """Where the acquired image lives.

    Both fields stay ``None`` until an acquisition has decided on a path.
    """

    path: Path | None = None
    file_name: str | None = None

    @property
    def is_empty(self) -> bool:
        return self.path is None

    @property
    def stem(self) -> str:
        """File name without the final extension."""
        if self.file_name is None:
            raise ValueError("Target has no file name")
        return self.file_name.rsplit(".", 1)[0]

    @property
    def extension(self) -> str:
        """Extension after the final dot, without the dot."""
        if self.file_name is None:
            raise ValueError("Target has no file name")
        parts = self.file_name.rsplit(".", 1)
        return parts[1] if len(parts) == 2 else ""

    @classmethod
    def build(cls, target_dir: Path, stem: str, extension: str) -> Target:
        """Create the target for ``{stem}.{extension}`` inside ``target_dir``."""
        file_name = f"{stem}.{extension}"
        return cls(path=Path(target_dir) / file_name, file_name=file_name)

    def with_extension(self, extension: str) -> Target:
        """Same directory and stem, different extension."""
        if self.path is None:
            raise ValueError("Target has no path")
        file_name = f"{self.stem}.{extension}"
        return replace(self, path=self.path.parent / file_name, file_name=file_name)


# ---------------------------------------------------------------------------
# Sources
# ---------------------------------------------------------------------------


@dataclass
class UploadRequest:
    """An inbound multipart/form-data request body.

    ``headers`` must contain ``Content-Type`` (with the multipart boundary);
    ``Content-Length`` is honoured when present. ``body`` is read until EOF
    or until ``Content-Length`` bytes have been consumed.
    """

    headers: Mapping[str, str]
    body: BinaryIO

    def header(self, name: str) -> str | None:
        """Case-insensitive header lookup."""
        lowered = name.lower()
        for key, value in self.headers.items():
            if key.lower() == lowered:
                return value
        return None

    @property
    def content_type(self) -> str | None:
        return self.header("Content-Type")

    @property
    def content_length(self) -> int | None:
        value = self.header("Content-Length")
        if value is None or not value.strip():
            return None
        return int(value)

    @classmethod
    def from_wsgi(cls, environ: Mapping[str, object]) -> UploadRequest:
        """Build a request from a WSGI environ dict."""
        headers: dict[str, str] = {}
        if environ.get("CONTENT_TYPE"):
            headers["Content-Type"] = str(environ["CONTENT_TYPE"])
        if environ.get("CONTENT_LENGTH"):
            headers["Content-Length"] = str(environ["CONTENT_LENGTH"])
        return cls(headers=headers, body=environ["wsgi.input"])  # type: ignore[arg-type]


# ---------------------------------------------------------------------------
# Processing inputs
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class TextOverlay:
    """A text caption rendered to an image and composited onto the target.

    ``color`` and ``background`` accept any Pillow color spec. A ``None``
    background renders on a transparent canvas. When ``left``/``top`` are
    ``None`` the caption is centred on the image.
    """

    text: str
    size: int = 32
    color: str | tuple[int, ...] = "black"
    background: str | tuple[int, ...] | None = None
    font_path: Path | None = None
    padding: int = 0
    left: int | None = None
    top: int | None = None
