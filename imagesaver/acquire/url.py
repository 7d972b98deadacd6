"""Acquire an image by URL."""

from __future__ import annotations

import logging
from collections.abc import Sequence
from pathlib import Path

import requests

from imagesaver.acquire.base import plan_target
from imagesaver.acquire.download import EndCallback, ProgressCallback, StartCallback, download, parse_url
from imagesaver.config import ImageSaverConfig
from imagesaver.types import Target
from imagesaver.utils.fs import removed_on_error
from imagesaver.utils.image import validate_image_file

logger = logging.getLogger(__name__)


class UrlAcquirer:
    """Downloads a URL into the target directory and validates it.

    The target is decided from the URL path before the first byte is written,
    so a failed download or validation can always remove what it left behind.

    Satisfies the ``SourceAcquirer`` protocol.
    """

    def __init__(
        self,
        target_dir: Path,
        valid_extensions: Sequence[str],
        config: ImageSaverConfig | None = None,
        session: requests.Session | None = None,
        on_start: StartCallback | None = None,
        on_progress: ProgressCallback | None = None,
        on_end: EndCallback | None = None,
    ) -> None:
        self.target_dir = Path(target_dir)
        self.valid_extensions = tuple(valid_extensions)
        self.config = config or ImageSaverConfig.default()
        self._session = session
        self._on_start = on_start
        self._on_progress = on_progress
        self._on_end = on_end

    def acquire(self, source: str, target_name: str) -> Target:
        parts = parse_url(source)
        source_name = parts.path.rsplit("/", 1)[-1]
        target = plan_target(self.target_dir, self.valid_extensions, source_name, target_name)

        with removed_on_error(target.path):
            download(
                source,
                target.path,
                on_start=self._on_start,
                on_progress=self._on_progress,
                on_end=self._on_end,
                config=self.config.download,
                session=self._session,
            )
            validate_image_file(target.path, quality=self.config.validation.quality)

        logger.info("Saved %s as %s", source, target.file_name)
        return target
