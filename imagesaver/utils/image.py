"""Image I/O helpers: probing, re-encoding, validation and orientation."""

from __future__ import annotations

import io
import logging
from pathlib import Path

from PIL import ExifTags, Image, ImageOps

from imagesaver.errors import OrientationError, SourceBrokenError
from imagesaver.formats import normalize_format

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Probing
# ---------------------------------------------------------------------------

IMAGE_EXTENSIONS = {".jpg", ".jpeg", ".png", ".bmp", ".tiff", ".tif", ".webp", ".gif"}

# Formats that take a quality setting on save
_QUALITY_FORMATS = {"JPEG", "WEBP"}

# Modes the JPEG encoder accepts as-is
_JPEG_MODES = {"1", "L", "RGB", "CMYK"}


def get_image_dimensions(path: Path) -> tuple[int, int]:
    """Get (width, height) of an image without fully loading it (header-only)."""
    with Image.open(path) as img:
        return img.size  # (width, height)


def probe_format(path: Path) -> str:
    """Return the normalized encoded format of an image file (e.g. ``"jpeg"``)."""
    with Image.open(path) as img:
        if img.format is None:
            raise ValueError(f"Cannot determine image format: {path}")
        return normalize_format(img.format)


def find_image_files(directory: str | Path) -> list[Path]:
    """Files directly inside ``directory`` with an image extension, by name.

    Subdirectories are not searched. A missing directory yields ``[]``.
    """
    root = Path(directory)
    if not root.is_dir():
        return []
    found = [entry for entry in root.iterdir() if entry.suffix.lower() in IMAGE_EXTENSIONS and entry.is_file()]
    return sorted(found, key=lambda p: p.name)


# ---------------------------------------------------------------------------
# Encoding
# ---------------------------------------------------------------------------


def flatten_alpha(image: Image.Image, background: tuple[int, int, int] = (255, 255, 255)) -> Image.Image:
    """Composite an image with transparency onto a solid RGB background."""
    if image.mode in ("RGBA", "LA", "PA") or (image.mode == "P" and "transparency" in image.info):
        rgba = image.convert("RGBA")
        flat = Image.new("RGB", rgba.size, background)
        flat.paste(rgba, mask=rgba.getchannel("A"))
        return flat
    return image.convert("RGB")


def encode_image(image: Image.Image, fmt: str, quality: int | str = 95) -> bytes:
    """Encode ``image`` into ``fmt`` and return the bytes.

    ``fmt`` is a format name in any case (``"jpeg"``, ``"PNG"``). Images with
    an alpha channel are flattened onto white when the format has none.
    ``quality="keep"`` re-encodes a decoded JPEG with its own quantization
    tables and chroma subsampling.
    """
    pil_format = normalize_format(fmt).upper()
    if pil_format == "JPEG" and image.mode not in _JPEG_MODES:
        image = flatten_alpha(image)
    elif pil_format != "JPEG" and image.mode == "CMYK":
        image = image.convert("RGB")

    kwargs: dict[str, object] = {}
    if pil_format in _QUALITY_FORMATS:
        kwargs["quality"] = quality
        if quality == "keep":
            kwargs["subsampling"] = "keep"

    buf = io.BytesIO()
    image.save(buf, format=pil_format, **kwargs)
    return buf.getvalue()


# ---------------------------------------------------------------------------
# Validation
# ---------------------------------------------------------------------------


def validate_image_file(path: Path, quality: int = 95) -> None:
    """Decode an image file and overwrite it with a clean re-encode.

    This is a normalization pass, not a check only: trailing garbage and
    metadata are dropped. JPEGs are re-encoded with their own quantization
    tables, other lossy formats with ``quality``. Any failure to decode, encode
    or write raises ``SourceBrokenError``.
    """
    path = Path(path)
    try:
        with Image.open(path) as img:
            img.load()
            # JPEG sources keep their quantization so revalidation is stable
            data = encode_image(img, img.format or "", "keep" if img.format == "JPEG" else quality)
        path.write_bytes(data)
    except Exception as e:
        logger.debug("Validation failed for %s: %s", path, e)
        raise SourceBrokenError() from None
    logger.debug("Validated %s (%d bytes)", path.name, len(data))


# ---------------------------------------------------------------------------
# Orientation
# ---------------------------------------------------------------------------


def autorotate(path: Path, quality: int = 100) -> bytes:
    """Apply a JPEG's EXIF orientation to its pixels and return the new bytes.

    Raises:
        OrientationError: The file is not a JPEG, has no orientation tag,
            is already upright, or could not be decoded.
    """
    try:
        with Image.open(path) as img:
            if img.format is None or normalize_format(img.format) != "jpeg":
                raise OrientationError(f"Not a JPEG image: {img.format}")
            orientation = img.getexif().get(ExifTags.Base.Orientation)
            if orientation is None:
                raise OrientationError("No EXIF orientation tag")
            if orientation == 1:
                raise OrientationError("Image is already upright")
            rotated = ImageOps.exif_transpose(img)
            return encode_image(rotated, "jpeg", quality)
    except OrientationError:
        raise
    except Exception as e:
        raise OrientationError(str(e)) from e
