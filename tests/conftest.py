"""Shared test fixtures for ImageSaver."""

from __future__ import annotations

import io
from collections.abc import Callable, Iterator
from unittest.mock import MagicMock

import pytest
import requests
from PIL import ExifTags, Image

from imagesaver.types import UploadRequest

BOUNDARY = "imagesaver-test-boundary"


def _encode(img: Image.Image, fmt: str, orientation: int | None = None) -> bytes:
    kwargs: dict[str, object] = {}
    if orientation is not None:
        exif = Image.Exif()
        exif[ExifTags.Base.Orientation] = orientation
        kwargs["exif"] = exif.tobytes()
    buf = io.BytesIO()
    img.save(buf, format=fmt, **kwargs)
    return buf.getvalue()


@pytest.fixture
def image_bytes() -> Callable[..., bytes]:
    """Factory for a solid-color encoded image."""

    def make(
        fmt: str = "PNG",
        size: tuple[int, int] = (50, 40),
        color: tuple[int, int, int] = (200, 30, 30),
        orientation: int | None = None,
    ) -> bytes:
        return _encode(Image.new("RGB", size, color), fmt, orientation)

    return make


@pytest.fixture
def split_jpeg() -> Callable[[int | None], bytes]:
    """Factory for a 60x30 JPEG: left half red, right half blue."""

    def make(orientation: int | None = None) -> bytes:
        img = Image.new("RGB", (60, 30), (255, 0, 0))
        img.paste((0, 0, 255), (30, 0, 60, 30))
        return _encode(img, "JPEG", orientation)

    return make


# ---------------------------------------------------------------------------
# HTTP
# ---------------------------------------------------------------------------


class FakeResponse:
    """Minimal stand-in for a streamed ``requests.Response``."""

    def __init__(
        self,
        body: bytes = b"",
        status_code: int = 200,
        headers: dict[str, str] | None = None,
        chunk_size: int = 16,
    ) -> None:
        self.body = body
        self.status_code = status_code
        self.headers = headers if headers is not None else {"Content-Length": str(len(body))}
        self._chunk_size = chunk_size
        self.closed = False

    def __enter__(self) -> FakeResponse:
        return self

    def __exit__(self, *exc: object) -> None:
        self.closed = True

    def raise_for_status(self) -> None:
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} Client Error")

    def iter_content(self, chunk_size: int = 1) -> Iterator[bytes]:
        for i in range(0, len(self.body), self._chunk_size):
            yield self.body[i:i + self._chunk_size]


@pytest.fixture
def http_session() -> Callable[..., MagicMock]:
    """Factory for a mocked ``requests.Session``.

    Pass ``body`` (and optionally ``status_code``/``headers``) for a response,
    or ``error`` for an exception raised by ``get``.
    """

    def make(
        body: bytes = b"",
        status_code: int = 200,
        headers: dict[str, str] | None = None,
        error: Exception | None = None,
    ) -> MagicMock:
        session = MagicMock(spec=requests.Session)
        if error is not None:
            session.get.side_effect = error
        else:
            session.get.return_value = FakeResponse(body, status_code, headers)
        return session

    return make


# ---------------------------------------------------------------------------
# Uploads
# ---------------------------------------------------------------------------


def build_multipart(parts: list[tuple[str, str | None, bytes]], boundary: str = BOUNDARY) -> bytes:
    """Encode (field name, file name or None, payload) parts as multipart/form-data."""
    body = b""
    for field, file_name, payload in parts:
        header = f'--{boundary}\r\nContent-Disposition: form-data; name="{field}"'
        if file_name is not None:
            header += f'; filename="{file_name}"\r\nContent-Type: application/octet-stream'
        header += "\r\n\r\n"
        body += header.encode() + payload + b"\r\n"
    body += f"--{boundary}--\r\n".encode()
    return body


@pytest.fixture
def upload_request() -> Callable[..., UploadRequest]:
    """Factory for an ``UploadRequest`` carrying the given parts."""

    def make(parts: list[tuple[str, str | None, bytes]], with_length: bool = True) -> UploadRequest:
        body = build_multipart(parts)
        headers = {"Content-Type": f"multipart/form-data; boundary={BOUNDARY}"}
        if with_length:
            headers["Content-Length"] = str(len(body))
        return UploadRequest(headers=headers, body=io.BytesIO(body))

    return make


@pytest.fixture
def target_dir(tmp_path):
    """An empty directory images are stored in."""
    path = tmp_path / "images"
    path.mkdir()
    return path


@pytest.fixture
def fake_response() -> type[FakeResponse]:
    """The ``FakeResponse`` class, for patching ``requests.get`` directly."""
    return FakeResponse


@pytest.fixture
def multipart_file(tmp_path) -> Callable[..., tuple[str, str]]:
    """Factory writing a multipart body to disk; returns (path, Content-Type)."""

    def make(parts: list[tuple[str, str | None, bytes]]) -> tuple[str, str]:
        path = tmp_path / "body.bin"
        path.write_bytes(build_multipart(parts))
        return str(path), f"multipart/form-data; boundary={BOUNDARY}"

    return make
