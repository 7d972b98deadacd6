"""Transform an acquired image, keep its extension honest, add overlays."""

from __future__ import annotations

import logging
import os
from collections.abc import Sequence

from imagesaver.config import ProcessingConfig
from imagesaver.formats import extension_for_format, formats_match
from imagesaver.process.overlay import composite_overlays, render_all
from imagesaver.process.pipeline import Transformer
from imagesaver.types import Target, TextOverlay
from imagesaver.utils.image import probe_format

logger = logging.getLogger(__name__)


def apply_transform(target: Target, transformer: Transformer) -> None:
    """Run ``transformer`` over the file's bytes and write the result back."""
    data = target.path.read_bytes()
    target.path.write_bytes(transformer(data))


def sync_extension(target: Target) -> Target:
    """Rename the file if its encoded format no longer matches its extension.

    Returns the target unchanged when they agree, otherwise the renamed one.
    """
    actual = probe_format(target.path)
    if formats_match(target.extension, actual):
        return target

    renamed = target.with_extension(extension_for_format(actual))
    os.replace(target.path, renamed.path)
    logger.info("Format changed to %s, renamed %s -> %s", actual, target.file_name, renamed.file_name)
    return renamed


def apply_overlays(
    target: Target,
    overlays: Sequence[TextOverlay],
    config: ProcessingConfig | None = None,
) -> None:
    """Render ``overlays`` and composite them onto the file in order."""
    config = config or ProcessingConfig()
    buffers = render_all(overlays, max_workers=config.overlay_workers)
    data = composite_overlays(target.path, overlays, buffers, quality=config.quality)
    target.path.write_bytes(data)
    logger.debug("Composited %d overlays onto %s", len(overlays), target.file_name)


def process_target(
    target: Target,
    transformer: Transformer,
    text_overlays: Sequence[TextOverlay] | None = None,
    config: ProcessingConfig | None = None,
) -> Target:
    """Transform, re-extension and overlay the image at ``target``.

    ``target`` must point at an existing, validated image. Errors from
    reading, writing, renaming or decoding propagate as they are; the file
    may be left half-processed.

    Returns:
        The target after processing (renamed if the format changed).
    """
    apply_transform(target, transformer)
    target = sync_extension(target)
    if text_overlays:
        apply_overlays(target, text_overlays, config)
    return target
