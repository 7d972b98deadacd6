"""Best-effort filesystem cleanup.

Cleanup on an error path must never replace the error being propagated, so
every helper here swallows its own ``OSError`` and nothing else.
"""

from __future__ import annotations

import contextlib
import logging
import os
from collections.abc import Iterator
from pathlib import Path

logger = logging.getLogger(__name__)


def remove_quietly(path: str | os.PathLike[str] | None) -> bool:
    """Delete ``path`` if it exists. Returns True if a file was removed."""
    if path is None:
        return False
    try:
        os.unlink(path)
    except FileNotFoundError:
        return False
    except OSError as e:
        logger.debug("Could not remove %s: %s", path, e)
        return False
    return True


@contextlib.contextmanager
def removed_on_error(path: Path | None) -> Iterator[None]:
    """Remove ``path`` if the block raises, then re-raise the original error."""
    try:
        yield
    except BaseException:
        if remove_quietly(path):
            logger.debug("Removed partial file %s", path)
        raise
