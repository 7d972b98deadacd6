"""Tests for imagesaver.formats."""

from __future__ import annotations

import pytest

from imagesaver.formats import (
    extension_for_format,
    format_for_extension,
    formats_match,
    normalize_format,
)


class TestFormatForExtension:
    def test_jpg_is_jpeg(self):
        assert format_for_extension("jpg") == "jpeg"

    def test_identity(self):
        assert format_for_extension("png") == "png"
        assert format_for_extension("jpeg") == "jpeg"

    def test_dot_and_case(self):
        assert format_for_extension(".JPG") == "jpeg"


class TestExtensionForFormat:
    def test_jpeg_is_jpg(self):
        assert extension_for_format("jpeg") == "jpg"
        assert extension_for_format("JPEG") == "jpg"

    def test_identity(self):
        assert extension_for_format("png") == "png"
        assert extension_for_format("webp") == "webp"

    def test_mpo_stored_as_jpg(self):
        assert extension_for_format("MPO") == "jpg"


class TestFormatsMatch:
    @pytest.mark.parametrize(
        ("extension", "fmt"),
        [("jpg", "jpeg"), ("jpeg", "jpeg"), ("png", "png"), ("jpg", "mpo"), ("jpg", "JPEG")],
    )
    def test_match(self, extension, fmt):
        assert formats_match(extension, fmt)

    @pytest.mark.parametrize(("extension", "fmt"), [("jpg", "png"), ("png", "jpeg"), ("png", "webp")])
    def test_mismatch(self, extension, fmt):
        assert not formats_match(extension, fmt)

    def test_normalize(self):
        assert normalize_format("PNG") == "png"
        assert normalize_format("Mpo") == "jpeg"
