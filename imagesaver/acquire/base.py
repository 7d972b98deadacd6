"""Protocol for image acquisition from external sources."""

from __future__ import annotations

from collections.abc import Sequence
from pathlib import Path
from typing import Any, Protocol, runtime_checkable

from imagesaver.errors import FormatUnsupportedError
from imagesaver.types import Target


@runtime_checkable
class SourceAcquirer(Protocol):
    """Protocol for turning a source into a validated file on disk.

    Implementations: UrlAcquirer, UploadAcquirer.
    """

    def acquire(self, source: Any, target_name: str) -> Target:
        """Acquire one image.

        Args:
            source: The source handled by this acquirer (URL, upload request).
            target_name: Output file name without extension.

        Returns:
            The target holding the validated image.
        """
        ...


def extension_of(file_name: str) -> str:
    """Substring after the final dot; the whole name if there is no dot."""
    return file_name.rsplit(".", 1)[-1]


def plan_target(
    target_dir: Path,
    valid_extensions: Sequence[str],
    source_name: str,
    target_name: str,
) -> Target:
    """Check the source extension and compute where the image will be stored.

    Raises:
        FormatUnsupportedError: The extension is not in ``valid_extensions``.
    """
    extension = extension_of(source_name)
    if extension not in valid_extensions:
        raise FormatUnsupportedError()
    return Target.build(target_dir, target_name, extension)
