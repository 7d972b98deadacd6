"""ImageSaver settings: download, upload, validation and processing.

Every field has a default, so a YAML file only lists what it overrides.
"""

from __future__ import annotations

from pathlib import Path

import yaml
from pydantic import BaseModel, Field


class DownloadConfig(BaseModel):
    """Configuration for streaming URL downloads."""

    timeout: float | None = Field(30.0, description="Connect/read timeout in seconds (None = no timeout)")
    chunk_size: int = Field(64 * 1024, description="Bytes per streamed chunk")
    max_bytes: int | None = Field(None, description="Abort downloads larger than this (None = unlimited)")
    headers: dict[str, str] = Field(default_factory=dict, description="Extra request headers")


class UploadConfig(BaseModel):
    """Configuration for multipart upload parsing."""

    chunk_size: int = Field(64 * 1024, description="Bytes read from the request body per parser write")
    max_memory_file_size: int = Field(
        1024 * 1024, description="File parts larger than this are spooled to disk while parsing"
    )
    autorotate_quality: int = Field(100, description="JPEG quality for the EXIF orientation re-encode")


class ValidationConfig(BaseModel):
    """Configuration for the decode-and-normalize pass."""

    quality: int = Field(95, description="WebP/MPO quality used when re-encoding (1-100); JPEGs keep their own tables")


class ProcessingConfig(BaseModel):
    """Configuration for transform and text overlay processing."""

    overlay_workers: int = Field(4, description="Threads used to render text overlays")
    quality: int = Field(95, description="JPEG/WebP quality for composited output (1-100)")


class ImageSaverConfig(BaseModel):
    """Top-level configuration for ImageSaver."""

    valid_extensions: list[str] = Field(
        default_factory=lambda: ["jpg", "png"],
        description="Accepted source extensions, compared case-sensitively",
    )
    download: DownloadConfig = Field(default_factory=DownloadConfig)
    upload: UploadConfig = Field(default_factory=UploadConfig)
    validation: ValidationConfig = Field(default_factory=ValidationConfig)
    processing: ProcessingConfig = Field(default_factory=ProcessingConfig)

    @classmethod
    def from_yaml(cls, path: Path) -> ImageSaverConfig:
        """Load configuration from a YAML file."""
        with open(path) as f:
            data = yaml.safe_load(f) or {}
        return cls.model_validate(data)

    @classmethod
    def default(cls) -> ImageSaverConfig:
        """Return configuration with all defaults."""
        return cls()
