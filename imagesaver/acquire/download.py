"""Streaming URL download with start/progress/end callbacks."""

from __future__ import annotations

import logging
from collections.abc import Callable
from pathlib import Path
from urllib.parse import SplitResult, urlsplit

import requests

from imagesaver.config import DownloadConfig
from imagesaver.errors import SourceBrokenError, SourceCanNotBeLoadedError

logger = logging.getLogger(__name__)

StartCallback = Callable[[int | None], object]
ProgressCallback = Callable[[int, int | None], object]
EndCallback = Callable[[Path], object]


def parse_url(url: str) -> SplitResult:
    """Parse an absolute URL.

    A host is required, so host-less URLs such as ``file:///x.jpg`` are
    rejected here rather than failing later as a load error.

    Raises:
        SourceBrokenError: The value is not a URL with a scheme and a host.
    """
    try:
        parts = urlsplit(url.strip())
    except (AttributeError, ValueError) as e:
        raise SourceBrokenError(str(e)) from None
    if not parts.scheme or not parts.netloc:
        raise SourceBrokenError(f"Invalid URL: {url!r}")
    return parts


def _content_length(response: requests.Response) -> int | None:
    value = response.headers.get("Content-Length")
    if value is None:
        return None
    try:
        return int(value)
    except ValueError:
        return None


def download(
    url: str,
    to: Path,
    *,
    on_start: StartCallback | None = None,
    on_progress: ProgressCallback | None = None,
    on_end: EndCallback | None = None,
    config: DownloadConfig | None = None,
    session: requests.Session | None = None,
) -> Path:
    """Stream ``url`` into the file ``to``.

    Args:
        url: Absolute http(s) URL.
        to: Destination file; created or truncated.
        on_start: Called once with the announced size (None if unknown).
        on_progress: Called after each chunk with (bytes received, total).
        on_end: Called with ``to`` once the body is fully written.
        config: Timeout, chunk size, size limit and extra headers.
        session: Optional ``requests.Session``; module-level ``requests`` otherwise.

    Returns:
        The destination path.

    Raises:
        SourceBrokenError: ``url`` does not parse.
        SourceCanNotBeLoadedError: Network error, non-2xx status, timeout,
            size limit exceeded, or the destination could not be written.
    """
    config = config or DownloadConfig()
    parts = parse_url(url)
    http = session if session is not None else requests
    to = Path(to)

    try:
        with http.get(
            parts.geturl(),
            stream=True,
            timeout=config.timeout,
            headers=config.headers or None,
        ) as response:
            response.raise_for_status()
            total = _content_length(response)
            if config.max_bytes is not None and total is not None and total > config.max_bytes:
                raise SourceCanNotBeLoadedError(
                    f"Image is too large: {total} bytes (limit {config.max_bytes})"
                )
            if on_start is not None:
                on_start(total)

            received = 0
            with open(to, "wb") as f:
                for chunk in response.iter_content(chunk_size=config.chunk_size):
                    if not chunk:
                        continue
                    received += len(chunk)
                    if config.max_bytes is not None and received > config.max_bytes:
                        raise SourceCanNotBeLoadedError(
                            f"Image is too large: more than {config.max_bytes} bytes"
                        )
                    f.write(chunk)
                    if on_progress is not None:
                        on_progress(received, total)
    except (requests.RequestException, OSError) as e:
        logger.debug("Download of %s failed: %r", url, e)
        raise SourceCanNotBeLoadedError(str(e)) from None

    logger.debug("Downloaded %s -> %s (%d bytes)", url, to, received)
    if on_end is not None:
        on_end(to)
    return to
