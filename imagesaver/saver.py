"""ImageSaver: one acquisition/processing session for a single image file."""

from __future__ import annotations

import logging
import uuid
from collections.abc import Sequence
from pathlib import Path
from typing import Any

import requests

from imagesaver.acquire.base import SourceAcquirer
from imagesaver.acquire.download import EndCallback, ProgressCallback, StartCallback
from imagesaver.acquire.upload import UploadAcquirer
from imagesaver.acquire.url import UrlAcquirer
from imagesaver.config import ImageSaverConfig
from imagesaver.errors import SourceBrokenError
from imagesaver.process.pipeline import Transformer
from imagesaver.process.processor import process_target
from imagesaver.types import Target, TextOverlay, UploadRequest

logger = logging.getLogger(__name__)


class ImageSaver:
    """Download or receive an image, validate it, and optionally process it.

    Usage::

        saver = ImageSaver("/srv/media")
        saver.acquire("https://example.com/cat.jpg")
        saver.process(Pipeline().resize(width=640).to_format("png"))
        saver.target.path  # /srv/media/<uuid>.png

    One instance tracks one file. Calling ``acquire`` again replaces
    ``target`` without touching the previously stored file, and a session must
    not run two acquisitions at the same time.
    """

    def __init__(
        self,
        target_dir: str | Path,
        valid_extensions: Sequence[str] | None = None,
        config: ImageSaverConfig | None = None,
        session: requests.Session | None = None,
        on_start: StartCallback | None = None,
        on_progress: ProgressCallback | None = None,
        on_end: EndCallback | None = None,
    ) -> None:
        self.config = config or ImageSaverConfig.default()
        self.target_dir = Path(target_dir)
        self.valid_extensions: tuple[str, ...] = tuple(
            valid_extensions if valid_extensions is not None else self.config.valid_extensions
        )
        self.target = Target()
        self._session = session
        self._on_start = on_start
        self._on_progress = on_progress
        self._on_end = on_end

    def __repr__(self) -> str:
        return f"ImageSaver(target_dir={str(self.target_dir)!r}, target={self.target.file_name!r})"

    def _acquirer_for(self, source: Any) -> SourceAcquirer:
        if isinstance(source, str):
            return UrlAcquirer(
                self.target_dir,
                self.valid_extensions,
                self.config,
                session=self._session,
                on_start=self._on_start,
                on_progress=self._on_progress,
                on_end=self._on_end,
            )
        if isinstance(source, UploadRequest):
            return UploadAcquirer(self.target_dir, self.valid_extensions, self.config)
        raise SourceBrokenError()

    def acquire(self, source: str | UploadRequest, target_name: str | None = None) -> ImageSaver:
        """Store and validate an image from a URL or an upload request.

        Args:
            source: An absolute URL, or an ``UploadRequest`` whose first file
                part is stored.
            target_name: Output file name without extension; a random UUID
                when omitted.

        Returns:
            ``self``, with ``target`` pointing at the stored image.

        Raises:
            SourceBrokenError: Unparsable URL, empty or malformed upload, file
                that does not decode, or an unrecognized source type.
            SourceCanNotBeLoadedError: The download failed.
            FormatUnsupportedError: The extension is not allowed.
        """
        acquirer = self._acquirer_for(source)
        name = target_name or str(uuid.uuid4())
        self.target = acquirer.acquire(source, name)
        return self

    def process(
        self,
        transformer: Transformer,
        text_overlays: Sequence[TextOverlay] | None = None,
    ) -> ImageSaver:
        """Transform the stored image and composite text overlays onto it.

        Requires a successful ``acquire`` first. If the transform changes the
        encoded format the file is renamed to the matching extension and
        ``target`` follows it. Failures propagate unchanged and may leave the
        file partially processed.
        """
        self.target = process_target(
            self.target,
            transformer,
            text_overlays,
            config=self.config.processing,
        )
        return self
