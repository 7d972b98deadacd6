"""Acquire an image from a multipart/form-data upload."""

from __future__ import annotations

import logging
import os
from collections.abc import Iterator, Sequence
from pathlib import Path
from typing import TYPE_CHECKING

from python_multipart import create_form_parser

from imagesaver.acquire.base import plan_target
from imagesaver.config import ImageSaverConfig
from imagesaver.errors import OrientationError, SourceBrokenError
from imagesaver.types import Target, UploadRequest
from imagesaver.utils.fs import remove_quietly, removed_on_error
from imagesaver.utils.image import autorotate, validate_image_file

if TYPE_CHECKING:
    from python_multipart.multipart import File

logger = logging.getLogger(__name__)


def _decode_name(value: bytes | str | None) -> str:
    if value is None:
        return ""
    if isinstance(value, bytes):
        return value.decode("utf-8", errors="replace")
    return value


def _iter_body(request: UploadRequest, chunk_size: int) -> Iterator[bytes]:
    """Read the request body, stopping at Content-Length when it is given."""
    remaining = request.content_length
    while remaining is None or remaining > 0:
        size = chunk_size if remaining is None else min(chunk_size, remaining)
        chunk = request.body.read(size)
        if not chunk:
            break
        if remaining is not None:
            remaining -= len(chunk)
        yield chunk


def _discard(file: File) -> None:
    """Close a file part and delete its spooled temp file, if any."""
    path = None if file.in_memory else file.actual_file_name
    file.close()
    if path is not None:
        remove_quietly(os.fsdecode(path))


class _FirstFile:
    """Single-assignment slot for the first file part of a form.

    The parser may report any number of file parts; only the first is kept.
    Later ones are held until parsing ends, since the parser may still flush
    the last part it reported, and are then discarded by ``release_extras``.
    """

    def __init__(self) -> None:
        self.file: File | None = None
        self.extras: list[File] = []
        self.discarded = 0

    def offer(self, file: File) -> None:
        if self.file is None:
            self.file = file
            return
        logger.debug("Ignoring extra file part %r", _decode_name(file.file_name))
        self.extras.append(file)

    def release_extras(self) -> None:
        for file in self.extras:
            _discard(file)
        self.discarded += len(self.extras)
        self.extras = []

    def clear(self) -> None:
        self.release_extras()
        if self.file is not None:
            _discard(self.file)
            self.file = None


def _ignore_field(field: object) -> None:
    pass


class UploadAcquirer:
    """Stores the first file of a multipart upload in the target directory.

    File parts are spooled by ``python-multipart`` as temp files inside the
    target directory (extension kept). The first one is checked against the
    allowed extensions, orientation-corrected when it is a rotated JPEG,
    moved to its target path and validated.

    Satisfies the ``SourceAcquirer`` protocol.
    """

    def __init__(
        self,
        target_dir: Path,
        valid_extensions: Sequence[str],
        config: ImageSaverConfig | None = None,
    ) -> None:
        self.target_dir = Path(target_dir)
        self.valid_extensions = tuple(valid_extensions)
        self.config = config or ImageSaverConfig.default()

    def acquire(self, source: UploadRequest, target_name: str) -> Target:
        source_name, temp_path = self._receive(source)

        with removed_on_error(temp_path):
            target = plan_target(self.target_dir, self.valid_extensions, source_name, target_name)

        with removed_on_error(temp_path), removed_on_error(target.path):
            self._store(temp_path, target.path)
            validate_image_file(target.path, quality=self.config.validation.quality)

        logger.info("Saved upload %r as %s", source_name, target.file_name)
        return target

    # ------------------------------------------------------------------

    def _parser_config(self) -> dict[str, object]:
        return {
            "UPLOAD_DIR": str(self.target_dir),
            "UPLOAD_KEEP_EXTENSIONS": True,
            "UPLOAD_DELETE_TMP": False,
            "MAX_MEMORY_FILE_SIZE": self.config.upload.max_memory_file_size,
        }

    def _receive(self, request: UploadRequest) -> tuple[str, Path]:
        """Parse the form and spool its first file part to disk.

        Returns:
            (original file name, temp file path)

        Raises:
            SourceBrokenError: Missing or non-multipart Content-Type, malformed body,
                read error, or no file part at all.
        """
        content_type = request.content_type
        if not content_type:
            raise SourceBrokenError("Missing Content-Type header")
        if content_type.split(";", 1)[0].strip().lower() != "multipart/form-data":
            raise SourceBrokenError(f"Not a multipart/form-data upload: {content_type}")

        first = _FirstFile()
        try:
            parser = create_form_parser(
                {"Content-Type": content_type},
                _ignore_field,
                first.offer,
                config=self._parser_config(),
            )
            for chunk in _iter_body(request, self.config.upload.chunk_size):
                parser.write(chunk)
            parser.finalize()
            first.release_extras()

            if first.file is None:
                raise SourceBrokenError("No file found in the upload")

            file = first.file
            if file.in_memory:
                file.flush_to_disk()
            file.close()
        except (ValueError, OSError) as e:
            first.clear()
            logger.debug("Upload parsing failed: %r", e)
            raise SourceBrokenError(str(e)) from None
        except SourceBrokenError:
            first.clear()
            raise

        if first.discarded:
            logger.warning("Upload had %d extra file part(s); only the first is stored", first.discarded)
        return _decode_name(file.file_name), Path(os.fsdecode(file.actual_file_name))

    def _store(self, temp_path: Path, target_path: Path) -> None:
        """Write the orientation-corrected image, or move the original as-is."""
        try:
            data = autorotate(temp_path, quality=self.config.upload.autorotate_quality)
            target_path.write_bytes(data)
        except (OrientationError, OSError) as e:
            logger.debug("No orientation fix for %s: %s", temp_path.name, e)
            try:
                os.replace(temp_path, target_path)
            except OSError as move_error:
                # Validation of the missing target reports the failure.
                logger.warning("Could not move %s to %s: %s", temp_path, target_path, move_error)
        else:
            remove_quietly(temp_path)
