"""Text overlay rendering and compositing."""

from __future__ import annotations

import io
import logging
from collections.abc import Sequence
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path

from PIL import Image, ImageDraw, ImageFont

from imagesaver.types import TextOverlay
from imagesaver.utils.image import encode_image

logger = logging.getLogger(__name__)


class RenderedText:
    """A rendered overlay. ``get_buffer()`` returns it as PNG bytes."""

    def __init__(self, image: Image.Image) -> None:
        self.image = image

    @property
    def size(self) -> tuple[int, int]:
        return self.image.size

    def get_buffer(self) -> bytes:
        buf = io.BytesIO()
        self.image.save(buf, format="PNG")
        return buf.getvalue()


def _load_font(overlay: TextOverlay) -> ImageFont.FreeTypeFont | ImageFont.ImageFont:
    if overlay.font_path is not None:
        return ImageFont.truetype(str(overlay.font_path), overlay.size)
    return ImageFont.load_default(size=overlay.size)


def render_text(overlay: TextOverlay) -> RenderedText:
    """Render one overlay onto a canvas sized to fit the text plus padding."""
    font = _load_font(overlay)
    probe = ImageDraw.Draw(Image.new("RGBA", (1, 1)))
    left, top, right, bottom = probe.multiline_textbbox((0, 0), overlay.text, font=font)

    width = max(1, right - left + 2 * overlay.padding)
    height = max(1, bottom - top + 2 * overlay.padding)
    background = overlay.background if overlay.background is not None else (0, 0, 0, 0)

    canvas = Image.new("RGBA", (width, height), background)
    draw = ImageDraw.Draw(canvas)
    draw.multiline_text(
        (overlay.padding - left, overlay.padding - top),
        overlay.text,
        font=font,
        fill=overlay.color,
    )
    return RenderedText(canvas)


def render_all(overlays: Sequence[TextOverlay], max_workers: int = 4) -> list[bytes]:
    """Render overlays concurrently; buffers come back in input order."""
    if not overlays:
        return []
    with ThreadPoolExecutor(max_workers=max(1, min(max_workers, len(overlays)))) as pool:
        rendered = list(pool.map(render_text, overlays))
    logger.debug("Rendered %d text overlays", len(rendered))
    return [r.get_buffer() for r in rendered]


def _offset(base_size: tuple[int, int], layer_size: tuple[int, int], overlay: TextOverlay) -> tuple[int, int]:
    """Top-left corner of a layer; centred on any axis without an explicit offset."""
    left = overlay.left if overlay.left is not None else (base_size[0] - layer_size[0]) // 2
    top = overlay.top if overlay.top is not None else (base_size[1] - layer_size[1]) // 2
    return max(0, left), max(0, top)


def composite_overlays(
    path: Path,
    overlays: Sequence[TextOverlay],
    buffers: Sequence[bytes],
    quality: int = 95,
) -> bytes:
    """Layer rendered overlays onto the image at ``path`` in sequence order.

    Layers that extend past the image edge are clipped. The result is encoded
    in the image's own format and returned; the file is not modified.
    """
    if len(overlays) != len(buffers):
        raise ValueError(f"Got {len(buffers)} buffers for {len(overlays)} overlays")

    with Image.open(path) as base:
        base.load()
        fmt = base.format or "PNG"
        canvas = base.convert("RGBA")

    for overlay, buffer in zip(overlays, buffers):
        with Image.open(io.BytesIO(buffer)) as layer:
            layer_rgba = layer.convert("RGBA")
        canvas.alpha_composite(layer_rgba, dest=_offset(canvas.size, layer_rgba.size, overlay))

    return encode_image(canvas, fmt, quality)
